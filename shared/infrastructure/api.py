"""
HTTP envelope helpers

All endpoints answer with {"success": true, "data": ...} and all failures
with {"success": false, "error": ..., "code": ...}. Domain errors keep their
own status code so clients can tell not-found, forbidden, unauthenticated
and invalid-state apart.
"""

from __future__ import annotations

import logging

from rest_framework import exceptions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.application.repository import Page
from shared.domain.exceptions import DomainError, ValidationFailed

logger = logging.getLogger(__name__)


def success(data=None, message: str | None = None, status_code: int = status.HTTP_200_OK) -> Response:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return Response(body, status=status_code)


def paginated(page: Page, data: list) -> Response:
    return Response(
        {
            "success": True,
            "data": data,
            "pagination": {
                "page": page.page,
                "limit": page.limit,
                "total": page.total,
                "pages": page.pages,
            },
        }
    )


def error(message: str, code: str, status_code: int, details=None) -> Response:
    body = {"success": False, "error": message, "code": code}
    if details:
        body["details"] = details
    return Response(body, status=status_code)


def exception_handler(exc, context):
    """DRF exception handler that renders the error envelope"""

    if isinstance(exc, exceptions.ValidationError):
        # Shape validation failures pass through as ValidationFailed
        exc = ValidationFailed(details=exc.detail)

    if isinstance(exc, DomainError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code}: {exc.message}")
        return error(exc.message, exc.code, exc.status_code, getattr(exc, "details", None))

    if isinstance(exc, exceptions.NotAuthenticated | exceptions.AuthenticationFailed):
        return error(str(exc.detail), "unauthenticated", status.HTTP_401_UNAUTHORIZED)

    response = drf_exception_handler(exc, context)
    if response is not None:
        detail = response.data.get("detail", "Request failed") if isinstance(response.data, dict) else response.data
        response.data = {"success": False, "error": str(detail), "code": getattr(exc, "default_code", "error")}
    return response
