"""
Unit tests for payment matching and order id generation.
"""

from decimal import Decimal

import pytest

from orders.domain.services import ORDER_ID_PATTERN, PaymentMatcher, generate_order_id


class TestExtractOrderId:
    """Tests for PaymentMatcher.extract_order_id."""

    @pytest.mark.parametrize(
        "content,expected",
        [
            ("TT1234", "TT1234"),
            ("CHUYEN KHOAN TT1234 NOIDUNG", "TT1234"),
            ("MBVCB.123456.TT4821.CT tu 0123", "TT4821"),
            ("payment tt5678 thanks", "TT5678"),
            ("xxTT9999", "TT9999"),
            ("TT1234 TT5678", "TT1234"),
        ],
    )
    def test_finds_order_code(self, content, expected):
        """Test the first TT#### code is extracted and upper-cased."""
        assert PaymentMatcher.extract_order_id(content) == expected

    @pytest.mark.parametrize(
        "content",
        [None, "", "no code here", "TT123", "TT12345", "T T1234", "TX1234"],
    )
    def test_no_order_code(self, content):
        """Test content without exactly four digits after TT yields None."""
        assert PaymentMatcher.extract_order_id(content) is None

    def test_lower_case_code_is_accepted(self):
        """Test bank channels that lower-case the note still match."""
        assert PaymentMatcher.extract_order_id("ck tt1234") == "TT1234"

    def test_five_digit_code_is_skipped_not_truncated(self):
        """Test TT12345 never matches order TT1234, and a later code still does."""
        assert PaymentMatcher.extract_order_id("TT12345 then TT6789") == "TT6789"

    def test_only_ascii_digits_count(self):
        """Test codes written with other digit scripts are ignored."""
        assert PaymentMatcher.extract_order_id("note TT١٢٣٤") is None
        assert PaymentMatcher.extract_order_id("TT١٢٣٤ TT5678") == "TT5678"
        assert ORDER_ID_PATTERN.fullmatch("TT١٢٣٤") is None


class TestAmountSatisfies:
    """Tests for PaymentMatcher.amount_satisfies."""

    def test_exact_amount(self):
        """Test paying exactly the order amount is enough."""
        assert PaymentMatcher.amount_satisfies(Decimal("200000"), Decimal("200000")) is True

    def test_overpayment(self):
        """Test overpaying is accepted."""
        assert PaymentMatcher.amount_satisfies(Decimal("200001"), Decimal("200000")) is True

    def test_underpayment_by_smallest_unit(self):
        """Test any shortfall is rejected."""
        assert PaymentMatcher.amount_satisfies(Decimal("199999.99"), Decimal("200000")) is False

    def test_mixed_representations(self):
        """Test ints, strings and decimals compare numerically."""
        assert PaymentMatcher.amount_satisfies(200000, "200000.00") is True
        assert PaymentMatcher.amount_satisfies("0.1", Decimal("0.10")) is True


class TestGenerateOrderId:
    """Tests for generate_order_id."""

    def test_format(self):
        """Test ids are TT plus four digits in 1000-9999."""
        for _ in range(200):
            order_id = generate_order_id()
            assert ORDER_ID_PATTERN.fullmatch(order_id)
            assert 1000 <= int(order_id[2:]) <= 9999
