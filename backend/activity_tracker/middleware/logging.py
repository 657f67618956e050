from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import time
import logging
import uuid
from typing import Callable

logger = logging.getLogger("activity_tracker.middleware")


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)

        logger.info(
            f"Request started: {request.method} {request.url.path} "
            f"[{request_id}]"
        )

        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"[{request_id}] - Status: {response.status_code} "
                f"Time: {process_time:.2f}s"
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            process_time = time.time() - start_time

            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"[{request_id}] - Error: {str(e)} "
                f"Time: {process_time:.2f}s"
            )
            raise
