"""
Core views for health checks and system status.
"""

from asgiref.sync import async_to_sync
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from core.domain.exceptions import ConfigurationError, OrderStoreError
from core.metrics import order_store_degraded
from licenses.infrastructure.signing import get_license_generator
from orders.infrastructure.repositories import get_order_repository


def _check_database() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return True
    except DatabaseError:
        return False


def _check_store():
    """Return (healthy, details) for the configured order store."""
    try:
        repository = get_order_repository()
        orders = async_to_sync(repository.count)()
    except (OrderStoreError, ConfigurationError) as e:
        order_store_degraded.set(1)
        return False, {"error": e.message, "code": e.code}
    order_store_degraded.set(0)
    return True, {"backend": type(repository).__name__, "orders": orders}


@method_decorator(csrf_exempt, name="dispatch")
class HealthView(View):
    """Health check endpoint."""

    def get(self, _request):
        """Return service health status."""
        return JsonResponse({"status": "healthy", "service": "license-order-service"})


@method_decorator(csrf_exempt, name="dispatch")
class HealthDBView(View):
    """Database health check endpoint."""

    def get(self, _request):
        """Check database connectivity."""
        if _check_database():
            return JsonResponse({"status": "healthy", "database": "connected"})
        return JsonResponse(
            {"status": "unhealthy", "database": "disconnected"},
            status=503,
        )


@method_decorator(csrf_exempt, name="dispatch")
class HealthStoreView(View):
    """Order store health check endpoint."""

    def get(self, _request):
        """Check that the order store can be read."""
        healthy, details = _check_store()
        if healthy:
            return JsonResponse({"status": "healthy", "store": details})
        return JsonResponse({"status": "degraded", "store": details}, status=503)


@method_decorator(csrf_exempt, name="dispatch")
class ReadyView(View):
    """Readiness check endpoint."""

    def get(self, _request):
        """Check if service is ready to accept traffic."""
        store_healthy, _ = _check_store()
        checks = {
            "database": _check_database(),
            "store": store_healthy,
            "signing_key": get_license_generator().is_configured,
        }

        all_healthy = all(checks.values())
        return JsonResponse(
            {
                "status": "ready" if all_healthy else "not_ready",
                "checks": checks,
            },
            status=200 if all_healthy else 503,
        )
