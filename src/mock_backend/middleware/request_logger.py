import json
import time
from loguru import logger

NO_CACHE_HEADERS = [
    (b"cache-control", b"no-cache"),
    (b"pragma", b"no-cache"),
    (b"expires", b"-1"),
]

SERVER_ERROR_BODY = json.dumps({"message": "Internal Server Error"}).encode("utf-8")


class RequestLogger:
    """
    Access log line per request, plus no-cache headers on every response.

    Also the outermost catch-all: an exception that escapes the app is logged
    once here and answered with a JSON 500, instead of reaching Starlette's
    server-error middleware (which would re-raise it to the server).
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        method = scope["method"]
        path = scope["path"]
        state = {"status": 500, "started": False}

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                state["status"] = message["status"]
                state["started"] = True
                message = dict(message)
                message["headers"] = list(message.get("headers", [])) + NO_CACHE_HEADERS
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            logger.exception(f"Unhandled error on {method} {path}")
            if state["started"]:
                # Headers already sent; nothing valid left to answer with
                raise
            await send_wrapper({
                "type": "http.response.start",
                "status": 500,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"content-length", str(len(SERVER_ERROR_BODY)).encode("ascii")),
                ],
            })
            await send_wrapper({"type": "http.response.body", "body": SERVER_ERROR_BODY})
        finally:
            elapsed_ms = (time.time() - start_time) * 1000
            logger.info(f"{method} {path} {state['status']} {elapsed_ms:.3f} ms")
