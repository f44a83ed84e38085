import logging
import time
from typing import Callable, Iterable

from fastapi import Request
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str:
    return f"{int(time.time() * 1000)}-{id(request)}"


def _generation(request: Request) -> int:
    holder = getattr(request.app.state, "holder", None)
    return holder.generation if holder is not None else 0


async def log_requests(request: Request, call_next: Callable):
    start_time = time.time()
    request_id = _request_id(request)

    try:
        response = await call_next(request)
        process_time = time.time() - start_time
        # Only log slow requests (>1s) or errors
        if process_time > 1.0 or response.status_code >= 400:
            logger.info(f"[{request_id}] {request.method} {request.url.path} - {response.status_code} - {process_time:.2f}s (config gen {_generation(request)})")
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"[{request_id}] {request.method} {request.url.path} - ERROR: {str(e)} - {process_time:.2f}s")
        raise


async def global_exception_handler(request: Request, exc: Exception, origins: Iterable[str] = ()):
    request_id = _request_id(request)
    logger.error(f"[{request_id}] Unhandled exception in {request.method} {request.url.path}: {str(exc)}", exc_info=True)

    origin = request.headers.get("origin")
    response = JSONResponse(status_code=500, content={"detail": "Internal server error"})
    if origin and origin in origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "*"

    return response
