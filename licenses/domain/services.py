"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
import base64
import binascii
from datetime import date, datetime
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from dateutil.relativedelta import relativedelta

from core.domain.exceptions import (
    InvalidLicenseKeyError,
    InvalidLicenseTypeError,
    InvalidMachineIdError,
    SigningKeyNotConfiguredError,
)
from core.domain.value_objects import LicenseType, MachineId
from licenses.domain.license_key import PERPETUAL_EXPIRY, LicenseKey, build_payload

_DURATIONS = {
    LicenseType.MONTHLY: relativedelta(months=1),
    LicenseType.YEARLY: relativedelta(years=1),
}


def compute_expiry(license_type: LicenseType, today: date) -> str:
    """
    Compute the expiry field of a license key.

    Args:
        license_type: Entitlement type
        today: Issue date

    Returns:
        ``YYYYMMDD`` for time-limited licenses, ``FOREVER`` for perpetual ones
    """
    if license_type == LicenseType.PERPETUAL:
        return PERPETUAL_EXPIRY
    # relativedelta clamps to the end of month (Jan 31 + 1 month = Feb 28/29)
    return (today + _DURATIONS[license_type]).strftime("%Y%m%d")


def parse_license_type(value: Union[str, LicenseType]) -> LicenseType:
    """
    Coerce a raw entitlement type into a LicenseType.

    Raises:
        InvalidLicenseTypeError: If value is not M, Y or P
    """
    if isinstance(value, LicenseType):
        return value
    try:
        return LicenseType(value)
    except ValueError as exc:
        raise InvalidLicenseTypeError(f"Invalid license type: {value!r}") from exc


class LicenseGenerator:
    """
    Domain service that builds and signs license keys.

    Signing uses RSA PKCS#1 v1.5 over SHA-256. The private key is injected;
    when it is absent every call to ``generate`` fails, while the rest of the
    service keeps working.
    """

    def __init__(self, private_key: Optional[RSAPrivateKey]):
        """Initialize generator with an optional private key."""
        self._private_key = private_key

    @property
    def is_configured(self) -> bool:
        """Check if a signing key is available."""
        return self._private_key is not None

    def generate(
        self,
        machine_id: Union[str, MachineId],
        license_type: Union[str, LicenseType],
        now: datetime,
    ) -> LicenseKey:
        """
        Generate a signed license key.

        Args:
            machine_id: Target installation identifier (8+ characters)
            license_type: Entitlement type
            now: Issue time; the expiry is computed from its date

        Returns:
            LicenseKey

        Raises:
            SigningKeyNotConfiguredError: If no private key is loaded
            InvalidLicenseTypeError: If license_type is unknown
            InvalidMachineIdError: If machine_id is shorter than 8 characters
        """
        if self._private_key is None:
            raise SigningKeyNotConfiguredError()

        license_type = parse_license_type(license_type)
        if not isinstance(machine_id, MachineId):
            try:
                machine_id = MachineId(machine_id)
            except ValueError as exc:
                raise InvalidMachineIdError(str(exc)) from exc

        expiry = compute_expiry(license_type, now.date())
        payload = build_payload(license_type, machine_id.hash, expiry)
        signature = self._private_key.sign(
            payload.encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )

        return LicenseKey(
            license_type=license_type,
            machine_hash=machine_id.hash,
            expiry=expiry,
            signature=base64.b64encode(signature).decode("ascii"),
        )


def verify_license_key(
    license_key: Union[str, LicenseKey],
    public_key: RSAPublicKey,
) -> bool:
    """
    Verify a license key against the vendor's public key.

    Args:
        license_key: License key (string or parsed)
        public_key: Vendor's RSA public key

    Returns:
        True if the signature matches the visible fields, False otherwise
    """
    if not isinstance(license_key, LicenseKey):
        try:
            license_key = LicenseKey.parse(license_key)
        except InvalidLicenseKeyError:
            return False

    try:
        signature = base64.b64decode(license_key.signature, validate=True)
    except (binascii.Error, ValueError):
        return False

    try:
        public_key.verify(
            signature,
            license_key.payload.encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except InvalidSignature:
        return False
    return True
