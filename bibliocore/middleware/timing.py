"""
Request timing and trace logging middleware.

Measures the time taken to process each request, adds it to a response
header and logs one trace line per request.
"""

import logging
import time
from typing import List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from bibliocore.logging import ensure_logger


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for tracking request processing time.

    Args:
        app: The ASGI application
        header_name: Response header carrying the processing time; empty to skip
        exclude_paths: Path prefixes that are neither timed nor logged
        logger: Logger for the per-request trace lines
    """

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "X-Process-Time",
        exclude_paths: Optional[List[str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(app)
        self.header_name = header_name
        self.exclude_paths = exclude_paths or []
        self.logger = ensure_logger(logger, __name__)

    def should_process(self, request: Request) -> bool:
        path = request.url.path
        return not any(path.startswith(prefix) for prefix in self.exclude_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.should_process(request):
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = (time.perf_counter() - start_time) * 1000

        if self.header_name:
            response.headers[self.header_name] = f"{process_time:.2f}ms"

        self.logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {process_time:.2f}ms"
        )
        return response
