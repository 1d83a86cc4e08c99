"""
Order repository adapters.

The backend is chosen with the ORDER_STORE_BACKEND setting:
``django`` (default) stores orders through the ORM, ``json`` keeps them in a
JSON document at ORDER_STORE_PATH.
"""
from functools import lru_cache

from django.conf import settings

from core.domain.exceptions import ConfigurationError
from orders.infrastructure.locks import KeyedLock
from orders.ports.order_repository import OrderRepository


@lru_cache(maxsize=1)
def get_order_repository() -> OrderRepository:
    """Return the process-wide order repository."""
    backend = getattr(settings, "ORDER_STORE_BACKEND", "django")
    locks = KeyedLock(timeout=getattr(settings, "ORDER_LOCK_TIMEOUT_SECONDS", 10.0))

    if backend == "django":
        from orders.infrastructure.repositories.django_order_repository import (
            DjangoOrderRepository,
        )

        return DjangoOrderRepository(locks=locks)

    if backend == "json":
        from orders.infrastructure.repositories.json_file_order_repository import (
            JsonFileOrderRepository,
        )

        return JsonFileOrderRepository(settings.ORDER_STORE_PATH, locks=locks)

    raise ConfigurationError(f"Unknown ORDER_STORE_BACKEND: {backend!r}")
