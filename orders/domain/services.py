"""
Order domain services.

Payment matching turns a bank-transfer notification into an order id and
checks the paid amount. Everything here is pure.
"""
import re
import secrets
from decimal import Decimal
from typing import Optional, Union

ORDER_ID_PREFIX = "TT"
ORDER_ID_PATTERN = re.compile(r"TT\d{4}", re.ASCII)

# Bank channels often upper-case or strip spaces from the transfer note,
# so the code may be glued to surrounding text.
_ORDER_ID_IN_TEXT = re.compile(r"TT\d{4}(?!\d)", re.IGNORECASE | re.ASCII)

Amount = Union[Decimal, int, str]


def generate_order_id() -> str:
    """Generate a random order id in TT#### format."""
    return f"{ORDER_ID_PREFIX}{1000 + secrets.randbelow(9000)}"


class PaymentMatcher:
    """Domain service for matching payment notifications to orders."""

    @staticmethod
    def extract_order_id(content: Optional[str]) -> Optional[str]:
        """
        Find the first order id in free-text transfer content.

        Matching is case-insensitive (``tt1234`` is order ``TT1234``) and
        only ASCII digits count. A code followed by a fifth digit, as in
        ``TT12345``, is not an order id and is skipped rather than truncated.

        Args:
            content: Transfer note as reported by the payment channel

        Returns:
            Upper-cased order id, or None if the content has none
        """
        if not content:
            return None
        match = _ORDER_ID_IN_TEXT.search(content)
        if not match:
            return None
        return match.group(0).upper()

    @staticmethod
    def amount_satisfies(paid: Amount, required: Amount) -> bool:
        """
        Check if a payment covers the order amount.

        Overpayment is accepted; underpayment by any amount is not.
        """
        return Decimal(str(paid)) >= Decimal(str(required))
