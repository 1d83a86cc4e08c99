"""
App configuration for License Order Service.
"""

import logging
import os
import sys

from django.apps import AppConfig

logger = logging.getLogger(__name__)

# Commands that never serve traffic and need no exporters.
SKIP_OBSERVABILITY_COMMANDS = {
    "migrate",
    "makemigrations",
    "collectstatic",
    "shell",
    "test",
    "check",
    "createsuperuser",
    "generate_signing_keys",
    "verify_license_key",
}


class LicenseOrderServiceConfig(AppConfig):
    """App configuration for LicenseOrderService."""

    name = "LicenseOrderService"
    verbose_name = "License Order Service"

    def ready(self):
        """Set up tracing and metrics when the service starts."""
        if len(sys.argv) > 1 and sys.argv[1] in SKIP_OBSERVABILITY_COMMANDS:
            return
        if os.environ.get("OTEL_SDK_DISABLED", "").lower() == "true":
            return
        # Django's autoreloader runs the project twice; only the child serves.
        if os.environ.get("RUN_MAIN") == "false":
            return

        from core.instrumentation import setup_opentelemetry

        logger.info("Setting up observability...")
        setup_opentelemetry()
        logger.info("Observability setup complete")
