from typing import List, Mapping

from .schema import define, enum, number, string, url


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
ENVIRONMENTS = ("development", "staging", "production")


SERVICE_SCHEMA = define(
    server={
        "HOST": string(default="0.0.0.0", description="Interface the HTTP server binds to"),
        "PORT": number(default=8080, minimum=1, maximum=65535, rule=lambda v: isinstance(v, int) or "must be an integer"),
        "CORS_ALLOWED_ORIGINS": string(default="http://localhost:3000", description="Comma separated browser origins"),
        "DATABASE_URL": url(required=False, secret=True, description="Primary database connection string"),
        "SESSION_SECRET": string(required=False, secret=True, description="Session signing secret"),
    },
    shared={
        "ENVIRONMENT": enum(*ENVIRONMENTS, default="production"),
        "LOG_LEVEL": enum(*LOG_LEVELS, default="WARNING"),
    },
    client={
        "PUBLIC_API_URL": url(default="http://localhost:8080", schemes=("http", "https"), description="Base URL the browser calls"),
        "PUBLIC_STORAGE_BUCKET": string(default="memory-photos"),
    },
)


def allowed_origins(server: Mapping, extra_origins: List[str] | None = None) -> List[str]:
    env_origins = [o.strip() for o in server["CORS_ALLOWED_ORIGINS"].split(",") if o.strip()]
    merged = list(env_origins)
    if extra_origins:
        merged.extend(extra_origins)
    # Deduplicate while preserving order
    seen = set()
    result: List[str] = []
    for origin in merged:
        if origin not in seen:
            seen.add(origin)
            result.append(origin)
    return result
