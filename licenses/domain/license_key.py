"""
LicenseKey value object.

A license key is not stored on its own; it is derived from an order and
delivered to the purchaser. Its visible fields are enough for a verifier
holding the public key to rebuild the signed payload.

Format: ``TYPE-MACHINEHASH-EXPIRY-SIGNATURE``
"""

import re
from dataclasses import dataclass

from core.domain.exceptions import InvalidLicenseKeyError
from core.domain.value_objects import MACHINE_HASH_LENGTH, LicenseType

PERPETUAL_EXPIRY = "FOREVER"

_EXPIRY_PATTERN = re.compile(r"^(\d{8}|FOREVER)$")


@dataclass(frozen=True)
class LicenseKey:
    """
    Signed license key.

    The machine hash may itself contain ``-``, so keys are parsed
    positionally rather than by splitting on the separator.
    """

    license_type: LicenseType
    machine_hash: str
    expiry: str
    signature: str

    def __post_init__(self):
        """Validate license key fields."""
        if len(self.machine_hash) != MACHINE_HASH_LENGTH:
            raise InvalidLicenseKeyError("Machine hash must be 8 characters")
        if not _EXPIRY_PATTERN.match(self.expiry):
            raise InvalidLicenseKeyError(f"Invalid expiry: {self.expiry}")
        if not self.signature:
            raise InvalidLicenseKeyError("Signature cannot be empty")

    @property
    def payload(self) -> str:
        """Return the exact string that was signed."""
        return build_payload(self.license_type, self.machine_hash, self.expiry)

    @property
    def is_perpetual(self) -> bool:
        """Check if the key never expires."""
        return self.expiry == PERPETUAL_EXPIRY

    def __str__(self) -> str:
        """Return the key as delivered to the purchaser."""
        return f"{self.payload}-{self.signature}"

    @classmethod
    def parse(cls, raw_key: str) -> "LicenseKey":
        """
        Parse a license key string.

        Args:
            raw_key: License key as delivered

        Returns:
            LicenseKey instance

        Raises:
            InvalidLicenseKeyError: If the string is not a license key
        """
        raw_key = (raw_key or "").strip()
        hash_end = 2 + MACHINE_HASH_LENGTH
        if len(raw_key) < hash_end + 3 or raw_key[1] != "-" or raw_key[hash_end] != "-":
            raise InvalidLicenseKeyError()

        try:
            license_type = LicenseType(raw_key[0])
        except ValueError as exc:
            raise InvalidLicenseKeyError(f"Unknown license type: {raw_key[0]}") from exc

        expiry, separator, signature = raw_key[hash_end + 1 :].partition("-")
        if not separator:
            raise InvalidLicenseKeyError()

        return cls(
            license_type=license_type,
            machine_hash=raw_key[2:hash_end],
            expiry=expiry,
            signature=signature,
        )


def build_payload(license_type: LicenseType, machine_hash: str, expiry: str) -> str:
    """Build the signed payload ``type-machineHash-expiry``."""
    return f"{license_type.value}-{machine_hash}-{expiry}"
