"""
Signing key loading.

The private key comes from configuration only: the LICENSE_PRIVATE_KEY
setting (PEM text, literal ``\\n`` sequences allowed) or the file named by
LICENSE_PRIVATE_KEY_PATH. A missing or unreadable key is logged and leaves
the generator unconfigured instead of stopping the process.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from django.conf import settings

from core.domain.exceptions import ConfigurationError
from licenses.domain.services import LicenseGenerator

logger = logging.getLogger(__name__)


def load_private_key(pem: bytes, password: Optional[bytes] = None) -> RSAPrivateKey:
    """
    Load an RSA private key from PEM data.

    Raises:
        ConfigurationError: If the data is not an RSA private key
    """
    try:
        key = serialization.load_pem_private_key(pem, password=password)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"Unreadable license signing key: {exc}") from exc
    if not isinstance(key, RSAPrivateKey):
        raise ConfigurationError("License signing key must be an RSA private key")
    return key


def load_private_key_from_settings() -> Optional[RSAPrivateKey]:
    """
    Load the vendor's private key from Django settings.

    Returns:
        RSAPrivateKey, or None when no usable key is configured
    """
    password = getattr(settings, "LICENSE_PRIVATE_KEY_PASSWORD", None)
    password = password.encode() if password else None

    pem_text = getattr(settings, "LICENSE_PRIVATE_KEY", None)
    if pem_text:
        source = "LICENSE_PRIVATE_KEY"
        pem = pem_text.replace("\\n", "\n").encode()
    else:
        key_path = getattr(settings, "LICENSE_PRIVATE_KEY_PATH", None)
        if not key_path or not Path(key_path).exists():
            logger.error("License private key not found in settings or at %s", key_path)
            return None
        source = str(key_path)
        pem = Path(key_path).read_bytes()

    try:
        key = load_private_key(pem, password=password)
    except ConfigurationError as exc:
        logger.error("Failed to load license private key from %s: %s", source, exc.message)
        return None

    logger.info("License private key loaded from %s", source)
    return key


@lru_cache(maxsize=1)
def get_license_generator() -> LicenseGenerator:
    """Return the process-wide license generator."""
    return LicenseGenerator(private_key=load_private_key_from_settings())
