"""
Unit tests for license generation and verification.
"""

import base64
from datetime import date, datetime, timezone

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from core.domain.exceptions import (
    InvalidLicenseTypeError,
    InvalidMachineIdError,
    SigningKeyNotConfiguredError,
)
from core.domain.value_objects import LicenseType
from licenses.domain.license_key import LicenseKey
from licenses.domain.services import (
    LicenseGenerator,
    compute_expiry,
    parse_license_type,
    verify_license_key,
)

ISSUED_AT = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


class TestComputeExpiry:
    """Tests for expiry computation."""

    def test_monthly_adds_one_calendar_month(self):
        """Test monthly licenses expire one month later."""
        assert compute_expiry(LicenseType.MONTHLY, date(2024, 1, 15)) == "20240215"

    def test_monthly_clamps_to_end_of_month(self):
        """Test Jan 31 + 1 month lands on the last day of February."""
        assert compute_expiry(LicenseType.MONTHLY, date(2024, 1, 31)) == "20240229"
        assert compute_expiry(LicenseType.MONTHLY, date(2023, 1, 31)) == "20230228"

    def test_yearly_adds_one_year(self):
        """Test yearly licenses expire one year later."""
        assert compute_expiry(LicenseType.YEARLY, date(2024, 1, 15)) == "20250115"

    def test_yearly_from_leap_day(self):
        """Test Feb 29 + 1 year clamps to Feb 28."""
        assert compute_expiry(LicenseType.YEARLY, date(2024, 2, 29)) == "20250228"

    def test_perpetual_never_expires(self):
        """Test perpetual licenses carry FOREVER."""
        assert compute_expiry(LicenseType.PERPETUAL, date(2024, 1, 15)) == "FOREVER"


class TestParseLicenseType:
    """Tests for license type parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [("M", LicenseType.MONTHLY), ("Y", LicenseType.YEARLY), ("P", LicenseType.PERPETUAL)],
    )
    def test_known_types(self, raw, expected):
        """Test M, Y and P are accepted."""
        assert parse_license_type(raw) == expected

    @pytest.mark.parametrize("raw", ["", "m", "W", "YEARLY", None])
    def test_unknown_types(self, raw):
        """Test anything else is rejected."""
        with pytest.raises(InvalidLicenseTypeError):
            parse_license_type(raw)


class TestLicenseGenerator:
    """Tests for LicenseGenerator."""

    def test_generate_yearly_key(self, rsa_private_key, rsa_public_key):
        """Test a yearly key has the expected shape and verifies."""
        generator = LicenseGenerator(rsa_private_key)

        key = generator.generate("abcdefghij", "Y", ISSUED_AT)

        assert str(key).startswith("Y-ABCDEFGH-20250115-")
        assert verify_license_key(str(key), rsa_public_key) is True

    def test_generate_perpetual_key(self, rsa_private_key, rsa_public_key):
        """Test a perpetual key verifies."""
        key = LicenseGenerator(rsa_private_key).generate("MACHINE-0001", "P", ISSUED_AT)

        assert key.payload == "P-MACHINE--FOREVER"
        assert verify_license_key(key, rsa_public_key) is True

    def test_signature_is_base64(self, rsa_private_key):
        """Test signatures are base64 of a 2048-bit RSA signature."""
        key = LicenseGenerator(rsa_private_key).generate("abcdefghij", "M", ISSUED_AT)

        assert len(base64.b64decode(key.signature, validate=True)) == 256

    def test_signing_is_deterministic(self, rsa_private_key):
        """Test the same inputs give the same key."""
        generator = LicenseGenerator(rsa_private_key)

        first = generator.generate("abcdefghij", "Y", ISSUED_AT)
        second = generator.generate("abcdefghij", "Y", ISSUED_AT)

        assert first == second

    def test_unconfigured_generator_fails_first(self, unconfigured_generator):
        """Test a missing key is reported before input validation."""
        assert unconfigured_generator.is_configured is False
        with pytest.raises(SigningKeyNotConfiguredError):
            unconfigured_generator.generate("short", "X", ISSUED_AT)

    def test_unknown_type_rejected(self, rsa_private_key):
        """Test unknown license types are rejected."""
        with pytest.raises(InvalidLicenseTypeError):
            LicenseGenerator(rsa_private_key).generate("abcdefghij", "W", ISSUED_AT)

    def test_short_machine_id_rejected(self, rsa_private_key):
        """Test machine ids shorter than 8 characters are rejected."""
        with pytest.raises(InvalidMachineIdError):
            LicenseGenerator(rsa_private_key).generate("abc", "Y", ISSUED_AT)


class TestVerifyLicenseKey:
    """Tests for license key verification."""

    @pytest.fixture
    def issued(self, rsa_private_key):
        return LicenseGenerator(rsa_private_key).generate("abcdefghij", "Y", ISSUED_AT)

    def test_tampered_expiry_fails(self, issued, rsa_public_key):
        """Test changing the expiry invalidates the signature."""
        tampered = str(issued).replace("-20250115-", "-20990115-")

        assert verify_license_key(tampered, rsa_public_key) is False

    def test_tampered_type_fails(self, issued, rsa_public_key):
        """Test upgrading the license type invalidates the signature."""
        tampered = "P" + str(issued)[1:]

        assert verify_license_key(tampered, rsa_public_key) is False

    def test_tampered_machine_hash_fails(self, issued, rsa_public_key):
        """Test moving the key to another machine invalidates it."""
        tampered = str(issued).replace("ABCDEFGH", "ZZZZZZZZ")

        assert verify_license_key(tampered, rsa_public_key) is False

    def test_other_public_key_fails(self, issued):
        """Test a key signed by another vendor does not verify."""
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048).public_key()

        assert verify_license_key(issued, other) is False

    def test_garbage_fails(self, rsa_public_key):
        """Test unparseable input is reported as invalid."""
        assert verify_license_key("not-a-key", rsa_public_key) is False
        assert verify_license_key("Y-ABCDEFGH-20250115-!!!", rsa_public_key) is False

    def test_parsed_key_verifies(self, issued, rsa_public_key):
        """Test verification accepts a parsed LicenseKey."""
        assert verify_license_key(LicenseKey.parse(str(issued)), rsa_public_key) is True
