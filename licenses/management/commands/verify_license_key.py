"""
Django management command to check a license key against a public key.
"""

from pathlib import Path

from cryptography.hazmat.primitives import serialization
from django.core.management.base import BaseCommand, CommandError

from core.domain.exceptions import InvalidLicenseKeyError
from licenses.domain.license_key import LicenseKey
from licenses.domain.services import verify_license_key


class Command(BaseCommand):
    """Command to verify a license key signature."""

    help = "Verify a license key with the vendor's public key"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("license_key", help="License key as delivered to the purchaser")
        parser.add_argument("--public-key", required=True, help="Path to public.pem")

    def handle(self, *args, **options):
        """Execute the command."""
        public_key_path = Path(options["public_key"])
        if not public_key_path.exists():
            raise CommandError(f"Public key not found: {public_key_path}")
        public_key = serialization.load_pem_public_key(public_key_path.read_bytes())

        try:
            license_key = LicenseKey.parse(options["license_key"])
        except InvalidLicenseKeyError as exc:
            raise CommandError(exc.message) from exc

        if not verify_license_key(license_key, public_key):
            raise CommandError("Signature does not match")

        self.stdout.write(
            self.style.SUCCESS(
                f"Valid {license_key.license_type.name.lower()} license for "
                f"{license_key.machine_hash} (expires {license_key.expiry})"
            )
        )
