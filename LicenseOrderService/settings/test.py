"""
Test settings for LicenseOrderService.
"""

import os
import tempfile
import urllib.parse

from .base import *  # noqa: F403, F401

DEBUG = False

# Use PostgreSQL in CI (from DATABASE_URL), SQLite for local tests
DATABASE_URL = os.environ.get("DATABASE_URL")
if DATABASE_URL and DATABASE_URL.startswith("postgresql"):
    parsed = urllib.parse.urlparse(DATABASE_URL)
    db_name = parsed.path.lstrip("/")
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": db_name,
            "USER": parsed.username or "postgres",
            "PASSWORD": parsed.password or "",
            "HOST": parsed.hostname or "localhost",
            "PORT": parsed.port or 5432,
            "TEST": {"NAME": db_name + "_test"},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
            # File-backed so worker threads can share it
            "TEST": {"NAME": os.path.join(tempfile.gettempdir(), "license_orders_test.sqlite3")},
        }
    }

# Password hashers for faster tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
LICENSE_EMAIL_FROM = "licenses@example.com"

ADMIN_API_KEY = "test-admin-key"

# Tests load signing keys through fixtures
LICENSE_PRIVATE_KEY = ""
LICENSE_PRIVATE_KEY_PATH = ""

ORDER_STORE_BACKEND = "django"
ORDER_LOCK_TIMEOUT_SECONDS = 5.0
FULFILLMENT_TIMEOUT_SECONDS = 10.0

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"

# Disable logging during tests
LOGGING_CONFIG = None

# No exporters or metrics server under the test runner
os.environ.setdefault("OTEL_SDK_DISABLED", "true")
