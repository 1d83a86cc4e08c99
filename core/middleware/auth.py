"""
Administrator authentication middleware.

Guards the administrator API (/api/v1/admin/*) with a shared secret sent in
the X-Admin-Key header or as a Bearer token.
"""

import hashlib
import hmac
import logging
from typing import Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

ADMIN_PATH_PREFIX = "/api/v1/admin/"


def _error(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)


class AdminAuthenticationMiddleware(MiddlewareMixin):
    """
    Middleware for administrator authentication.

    This middleware:
    1. Leaves every path outside the administrator API alone
    2. Returns 503 if no ADMIN_API_KEY is configured
    3. Returns 401 if the credential is missing or wrong
    """

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Process request and validate authentication.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401/503 if authentication fails, None otherwise
        """
        if not request.path.startswith(ADMIN_PATH_PREFIX):
            return None

        configured = getattr(settings, "ADMIN_API_KEY", "") or ""
        if not configured:
            logger.error("ADMIN_API_KEY is not configured; administrator API disabled")
            return _error(
                "ADMIN_NOT_CONFIGURED", "Administrator access is not configured", 503
            )

        credential = self._credential(request)
        if not credential:
            return _error(
                "UNAUTHORIZED",
                "Missing credential. Provide X-Admin-Key header.",
                401,
            )

        expected = hashlib.sha256(configured.encode()).hexdigest()
        presented = hashlib.sha256(credential.encode()).hexdigest()
        if not hmac.compare_digest(expected, presented):
            logger.warning(
                "Invalid administrator credential attempted",
                extra={"path": request.path, "remote_addr": request.META.get("REMOTE_ADDR")},
            )
            return _error("UNAUTHORIZED", "Invalid credential", 401)

        request.is_admin = True  # type: ignore
        return None

    def _credential(self, request: HttpRequest) -> str:
        """Return the presented credential, or an empty string."""
        header = request.headers.get("X-Admin-Key")
        if header:
            return header.strip()
        authorization = request.headers.get("Authorization", "")
        if authorization.startswith("Bearer "):
            return authorization[len("Bearer "):].strip()
        return ""
