from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable

from starlette.requests import Request
from starlette.responses import Response

request_logger = logging.getLogger("ndawonga.requests")


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger (idempotent)."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def json_logger_middleware() -> Callable:
    """Return a Starlette middleware callable that logs a JSON line per request.

    It captures: method, path, status, latency_ms, and the chat intent from
    request.state.selected_intent when the chat route set it.
    """

    async def _middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
        start = time.perf_counter()
        status = 500
        try:
            response: Response = await call_next(request)
            status = response.status_code
        finally:
            latency_ms = round((time.perf_counter() - start) * 1000.0, 2)
            payload = {
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "latency_ms": latency_ms,
            }
            intent = getattr(request.state, "selected_intent", None)
            if intent is not None:
                payload["selected_intent"] = intent
            request_logger.info(json.dumps(payload))
        return response

    return _middleware
