import re
import time
import uuid

from app.core.logger import logger


# ids accepted from the caller; anything else is replaced
_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9._-]{8,64}$")


def generate_request_id() -> str:
    return str(uuid.uuid4())


def request_id_from_scope(scope) -> str:
    """Reuse the X-Request-ID the frontend sent, or mint a new one."""
    for name, value in scope.get("headers", []):
        if name == b"x-request-id":
            candidate = value.decode("latin-1")
            if _CLIENT_ID_RE.match(candidate):
                return candidate
            break
    return generate_request_id()


class RequestLoggingMiddleware:
    """
    ASGI middleware that tags each HTTP request with an X-Request-ID
    (the caller's own id when it sends a well-formed one),
    logs when it arrives and when the response completes (with duration).
    The request id is stored on the scope so later middleware / handlers
    can include it in their own log lines.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request_id = request_id_from_scope(scope)
        scope["request_id"] = request_id

        method = scope.get("method", "")
        path = scope.get("path", "")

        start = time.perf_counter()
        logger.info(
            "Incoming request",
            extra={"request_id": request_id, "method": method, "path": path},
        )

        status_holder = {"status": None}

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status_holder["status"] = message.get("status", 0)

                # headers are a list of (name, value) byte pairs
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("utf-8")))
                message["headers"] = headers

            await send(message)

        await self.app(scope, receive, send_wrapper)

        duration = time.perf_counter() - start
        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": status_holder["status"],
                "duration_ms": round(duration * 1000, 2),
            },
        )
