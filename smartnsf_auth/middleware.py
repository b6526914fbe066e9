"""Starlette middleware authenticating requests with a SmartNSF strategy."""

from collections.abc import Iterable
from typing import Any

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from .strategy import SmartNSFStrategy

logger = structlog.get_logger()


class SmartNSFAuthenticationMiddleware(BaseHTTPMiddleware):
    """Middleware to handle SmartNSF authentication for all requests."""

    def __init__(
        self,
        app: Any,
        strategy: SmartNSFStrategy,
        unprotected_paths: Iterable[str] = ("/health", "/metrics"),
    ):
        super().__init__(app)
        self.strategy = strategy
        self.unprotected_paths = frozenset(unprotected_paths)

    async def dispatch(self, request: Any, call_next: Any) -> Any:
        """Process request with authentication."""
        if request.url.path in self.unprotected_paths:
            return await call_next(request)

        result = await self.strategy.authenticate(request)

        if result.failed:
            logger.warning(
                "Authentication failed",
                path=request.url.path,
                status=result.status_code,
            )
            return JSONResponse(
                status_code=result.status_code or 401,
                content={"error": result.message},
            )

        if result.errored:
            logger.error(
                "Authentication error",
                path=request.url.path,
                error=result.message,
                error_type=type(result.error).__name__,
            )
            return JSONResponse(
                status_code=500, content={"error": "Authentication error"}
            )

        request.state.user = result.user
        logger.info("Authentication successful", path=request.url.path)

        return await call_next(request)
