"""CORS for the GameLib web client."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gamelib.config import Settings

_ALLOWED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]
_ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-Id"]
_EXPOSED_HEADERS = ["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit", "Retry-After"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured client origins, plus preview deployments matching ``cors_origin_regex``."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=_ALLOWED_METHODS,
        allow_headers=_ALLOWED_HEADERS,
        expose_headers=_EXPOSED_HEADERS,
        max_age=settings.cors_max_age_seconds,
    )
