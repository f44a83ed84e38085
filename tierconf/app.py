import logging
import time
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import allowed_origins
from .core.holder import ConfigHolder
from .core.middleware import global_exception_handler, log_requests


logger = logging.getLogger(__name__)


def create_app(holder: ConfigHolder) -> FastAPI:
    """Build the HTTP surface around an already loaded ConfigHolder.

    Only the client view is ever serialized into a response body.
    """
    app = FastAPI(title="Scoped Configuration API")
    app.state.holder = holder

    server = holder.current.server
    origins = allowed_origins(server) if "CORS_ALLOWED_ORIGINS" in server else []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _log_requests(request, call_next):
        return await log_requests(request, call_next)

    @app.exception_handler(Exception)
    async def _global_exception_handler(request, exc):
        return await global_exception_handler(request, exc, origins)

    @app.get("/config/client")
    async def client_config():
        """Client-exposed and shared values for browser bundles."""
        config = holder.current
        return JSONResponse(
            content=config.client.to_dict(),
            headers={"Cache-Control": "no-store", "X-Config-Generation": str(holder.generation)},
        )

    @app.get("/health")
    async def health_check():
        health_start_time = time.time()
        try:
            config = holder.current
            loaded_at = datetime.fromtimestamp(holder.loaded_at).isoformat() if holder.loaded_at else None
            health_duration = time.time() - health_start_time
            return {
                "status": "healthy",
                "service": "tierconf",
                "environment": config.server.get("ENVIRONMENT"),
                "generation": holder.generation,
                "loaded_at": loaded_at,
                "keys": {"server": len(config.server), "client": len(config.client)},
                "response_time_ms": round(health_duration * 1000, 2),
            }
        except RuntimeError as e:
            health_duration = time.time() - health_start_time
            logger.error(f"Health check failed: {str(e)} - Duration: {health_duration:.1f}s")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "service": "tierconf",
                    "error": str(e),
                    "response_time_ms": round(health_duration * 1000, 2),
                },
            )

    @app.get("/")
    async def root():
        """Return basic API information."""
        return {
            "service": "Scoped Configuration API",
            "version": "1.0",
            "endpoints": {
                "client_config": "/config/client",
                "health": "/health",
            },
            "timestamp": datetime.now().isoformat(),
            "description": "Serves the validated client-exposed configuration view",
        }

    return app
