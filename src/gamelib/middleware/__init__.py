"""Middleware registration."""

from fastapi import FastAPI

from gamelib.config import Settings
from gamelib.middleware.cors import setup_cors
from gamelib.middleware.error_handler import setup_error_handlers
from gamelib.middleware.logging import setup_logging
from gamelib.middleware.rate_limit import RateLimitMiddleware
from gamelib.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register GameLib's middleware stack.

    Innermost first: the per-client rate limit (left out entirely when
    ``rate_limit_requests`` is 0), request id and request logging, then CORS
    outermost so 429 responses still carry CORS headers.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    if settings.rate_limit_requests > 0:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
