"""
Global error handling middleware.

Last line of defence for exceptions that escape the routers. Routers map
storage failures and malformed locations to HTTPException themselves, so
anything caught here means a route skipped that mapping.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Any, Callable, Dict

from farmproof.infrastructure.storage_client import StorageAPIError
from farmproof.utils.coordinates import MalformedLocation


logger = logging.getLogger(__name__)


def _request_context(request: Request, **extra: Any) -> Dict[str, Any]:
    return {"path": request.url.path, "method": request.method, **extra}


def _error_body(error: str, detail: str) -> Dict[str, str]:
    return {"error": error, "detail": detail}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Translates escaped exceptions into JSON error bodies.

    - StorageAPIError keeps its own status code
    - MalformedLocation is the caller's fault (400)
    - Anything else, other ValueErrors included, is a 500
    """

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)

        except StorageAPIError as e:
            logger.error(
                f"Storage API error on {request.url.path}: {e.message}",
                extra=_request_context(request, status_code=e.status_code),
            )
            return JSONResponse(
                status_code=e.status_code,
                content=_error_body("Storage API error", e.message),
            )

        except MalformedLocation as e:
            logger.warning(
                f"Unparsable location {e.raw!r} reached the error middleware",
                extra=_request_context(request),
            )
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=_error_body("Invalid location", str(e)),
            )

        except Exception as e:
            # A bare ValueError from the services is a server fault
            logger.exception(
                f"Unhandled {type(e).__name__}: {e}",
                extra=_request_context(request),
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=_error_body("Internal server error", "An unexpected error occurred"),
            )
