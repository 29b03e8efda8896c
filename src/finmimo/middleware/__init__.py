"""HTTP middleware stack for the finmimo API.

Starlette runs middleware in reverse-add order, so the stack below is, from
the outside in: CORS, request context, rate limiting, then the routers.
CORS sits outermost so browser clients can also read 429 responses, and the
request context wraps the limiter so throttled requests are logged with an id.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finmimo.config import Settings
from finmimo.middleware.error_handler import setup_error_handlers
from finmimo.middleware.logging import setup_logging
from finmimo.middleware.rate_limit import RateLimitMiddleware
from finmimo.middleware.request_id import RequestIdMiddleware

# Headers the web and mobile clients read from responses.
EXPOSED_HEADERS = ["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit", "Retry-After"]


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=EXPOSED_HEADERS,
    )
