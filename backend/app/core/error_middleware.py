import json

from app.core.logger import logger


class ExceptionLoggingMiddleware:
    """
    ASGI middleware for failures nothing else handled.

    The exception is logged once with its stack trace and request context.
    If the response has not started yet, the client gets a JSON 500 in the
    same shape as the API's other errors (`{"detail": ...}`) plus the
    request id, so a farmer-facing error can be matched to the log line.
    Once the response has started the exception is re-raised.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        started = False

        async def send_wrapper(message):
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            request_id = scope.get("request_id")
            logger.exception(
                "Unhandled exception in request",
                extra={
                    "request_id": request_id,
                    "method": scope.get("method"),
                    "path": scope.get("path"),
                    "error_type": type(exc).__name__,
                },
            )
            if started:
                raise
            await _send_internal_error(send, request_id)


async def _send_internal_error(send, request_id):
    body = json.dumps({"detail": "internal_error", "requestId": request_id}).encode("utf-8")

    headers = [
        (b"content-type", b"application/json"),
        (b"content-length", str(len(body)).encode("ascii")),
    ]
    if request_id:
        headers.append((b"x-request-id", request_id.encode("utf-8")))

    await send({"type": "http.response.start", "status": 500, "headers": headers})
    await send({"type": "http.response.body", "body": body})
