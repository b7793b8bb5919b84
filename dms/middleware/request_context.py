"""Request context middleware: request id, timing, access log, rate limiting.

All four concerns run in one pass. The token bucket itself lives in
``TokenBucket`` so it can be exercised without an HTTP stack.
"""

import logging
import threading
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.config import settings
from ..core.logging_config import request_id_var
from ..core.token_factory import decode_token

logger = logging.getLogger(__name__)

# Probes and API docs are never throttled.
_EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})


class TokenBucket:
    """Per-key token bucket refilling at ``max_per_minute / 60`` tokens a second.

    Keys idle for more than ``evict_after`` seconds are dropped every
    ``evict_every`` calls.
    """

    def __init__(self, evict_every: int = 100, evict_after: float = 120.0):
        self._state: dict[str, tuple[float, float]] = {}
        self._lock = threading.Lock()
        self._calls = 0
        self.evict_every = evict_every
        self.evict_after = evict_after

    def __len__(self) -> int:
        return len(self._state)

    def reset(self) -> None:
        with self._lock:
            self._state.clear()

    def take(self, key: str, max_per_minute: int, now: Optional[float] = None) -> tuple[bool, float]:
        """Consume one token for *key*.

        Returns:
            ``(allowed, retry_after)``. *retry_after* is 0.0 when allowed,
            otherwise the seconds until the next token is available.
        """
        if max_per_minute <= 0:
            return True, 0.0
        if now is None:
            now = time.monotonic()

        with self._lock:
            self._calls += 1
            if self._calls % self.evict_every == 0:
                cutoff = now - self.evict_after
                for k in [k for k, (_, ts) in self._state.items() if ts < cutoff]:
                    del self._state[k]

            refill_rate = max_per_minute / 60.0
            if key in self._state:
                tokens, last = self._state[key]
                tokens = min(float(max_per_minute), tokens + (now - last) * refill_rate)
            else:
                tokens = float(max_per_minute)

            if tokens >= 1.0:
                self._state[key] = (tokens - 1.0, now)
                return True, 0.0

            self._state[key] = (tokens, now)
            return False, (1.0 - tokens) / refill_rate


rate_limiter = TokenBucket()


def client_key(request: Request) -> str:
    """Rate-limit key: the session's user when a valid token is present,
    otherwise the client address."""
    token = None
    auth_header = request.headers.get("authorization", "")
    if auth_header.lower().startswith("bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(settings.session_cookie_name)
    if token:
        payload = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
        if payload is not None:
            return f"user:{payload.sub}"

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    if request.client:
        return f"ip:{request.client.host}"
    return "ip:unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Sets X-Request-ID and X-Response-Time, logs each request, returns 429
    when a client exceeds RATE_LIMIT_PER_MINUTE."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        if request.url.path not in _EXEMPT_PATHS:
            key = client_key(request)
            allowed, retry_after = rate_limiter.take(key, settings.rate_limit_per_minute)
            if not allowed:
                logger.warning(
                    "Rate limit exceeded",
                    extra={"client": key, "path": request.url.path, "retry_after": round(retry_after, 1)},
                )
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": "RATE_LIMITED",
                        "message": "Too many requests",
                        "details": {"retry_after": round(retry_after, 1)},
                    },
                    headers={"Retry-After": str(int(retry_after) + 1), "X-Request-ID": rid},
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
