"""
Django management command to generate the vendor's license signing key pair.

The private key stays on the server (LICENSE_PRIVATE_KEY_PATH or the
LICENSE_PRIVATE_KEY environment value); the public key is shipped to
verifying clients out of band.
"""

from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    """Command to generate an RSA key pair for license signing."""

    help = "Generate an RSA key pair for signing license keys"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--output-dir",
            default=None,
            help="Directory for private.pem and public.pem (defaults to the private key path's directory)",
        )
        parser.add_argument(
            "--key-size",
            type=int,
            default=2048,
            help="RSA key size in bits",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite existing key files",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        if options["output_dir"]:
            output_dir = Path(options["output_dir"])
        else:
            output_dir = Path(settings.LICENSE_PRIVATE_KEY_PATH).parent
        private_path = output_dir / "private.pem"
        public_path = output_dir / "public.pem"

        if not options["force"] and (private_path.exists() or public_path.exists()):
            raise CommandError(
                f"Key files already exist in {output_dir}. Use --force to overwrite."
            )

        if options["key_size"] < 2048:
            raise CommandError("Key size must be at least 2048 bits")

        private_key = rsa.generate_private_key(public_exponent=65537, key_size=options["key_size"])

        output_dir.mkdir(parents=True, exist_ok=True)
        private_path.write_bytes(
            private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
        private_path.chmod(0o600)
        public_path.write_bytes(
            private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        )

        self.stdout.write(self.style.SUCCESS(f"Private key written to {private_path}"))
        self.stdout.write(self.style.SUCCESS(f"Public key written to {public_path}"))
        self.stdout.write("Distribute public.pem to verifying clients; keep private.pem secret.")
