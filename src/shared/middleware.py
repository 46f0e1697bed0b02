"""ASGI middleware for the HTTP ingress: CORS, body limits and API call logging.

Each middleware keeps its per-request state in local variables of the
``__call__`` invocation, so nothing leaks between concurrent requests.
"""

import time
import uuid

import structlog
from fastapi import HTTPException
from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shared.errors import INTERNAL_ERROR_MESSAGE, PayloadTooLarge
from shared.logging import add_context, clear_context

logger = structlog.get_logger("storefront.http")

ALLOWED_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"

LOG_LINE_LIMIT = 80
_PREVIEW_CAPTURE_BYTES = 1024


class OriginAllowlistMiddleware:
    """CORS for an explicit list of origins.

    Only listed origins get ``Access-Control-Allow-Origin``; every ``OPTIONS``
    request is answered here with 200 and no body.
    """

    def __init__(self, app: ASGIApp, allowed_origins: tuple[str, ...] | list[str]):
        self.app = app
        self.allowed_origins = frozenset(allowed_origins)

    def cors_headers(self, origin: str | None) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            "Access-Control-Allow-Credentials": "true",
        }
        if origin and origin in self.allowed_origins:
            headers["Access-Control-Allow-Origin"] = origin
            headers["Vary"] = "Origin"
        return headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        cors_headers = self.cors_headers(origin)

        if scope["method"] == "OPTIONS":
            response = Response(status_code=200, headers=cors_headers)
            await response(scope, receive, send)
            return

        response_started = False

        async def send_with_cors(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                headers = MutableHeaders(scope=message)
                for key, value in cors_headers.items():
                    if key == "Vary":
                        headers.add_vary_header(value)
                    else:
                        headers[key] = value
            await send(message)

        try:
            await self.app(scope, receive, send_with_cors)
        except Exception:
            # Answer the crash here so the 500 carries CORS headers, then let
            # ServerErrorMiddleware log it. It sends nothing once a response started.
            if not response_started:
                error = JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})
                await error(scope, receive, send_with_cors)
            raise


class BodySizeLimitMiddleware:
    """Reject bodies FastAPI would parse as JSON or a form when larger than ``max_bytes``.

    That covers ``application/json``, any ``application/*+json`` subtype, a
    missing content type (FastAPI reads those as JSON) and both form encodings.
    """

    FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    @classmethod
    def is_limited(cls, content_type: str) -> bool:
        media_type = content_type.split(";")[0].strip().lower()
        if not media_type or media_type in cls.FORM_TYPES:
            return True
        main_type, _, subtype = media_type.partition("/")
        return main_type == "application" and (subtype == "json" or subtype.endswith("+json"))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if not self.is_limited(headers.get("content-type", "")):
            await self.app(scope, receive, send)
            return

        content_length = headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            error = PayloadTooLarge()
            await JSONResponse(status_code=error.status_code, content=error.to_dict())(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # FastAPI only lets an HTTPException escape its body reader
                    raise HTTPException(status_code=PayloadTooLarge.status_code, detail=PayloadTooLarge.default_message)
            return message

        await self.app(scope, limited_receive, send)


def format_api_log_line(method: str, path: str, status: int, duration_ms: int, preview: str | None) -> str:
    line = f"{method} {path} {status} in {duration_ms}ms"
    if preview:
        line += f" :: {preview}"
    if len(line) > LOG_LINE_LIMIT:
        line = line[: LOG_LINE_LIMIT - 1] + "…"
    return line


class ApiRequestLogMiddleware:
    """Log one line per ``/api`` call with a truncated JSON response preview."""

    def __init__(self, app: ASGIApp, prefix: str = "/api"):
        self.app = app
        self.prefix = prefix

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not scope["path"].startswith(self.prefix):
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 500
        is_json = False
        captured = bytearray()

        clear_context()
        add_context(request_id=uuid.uuid4().hex[:12])

        async def capturing_send(message: Message) -> None:
            nonlocal status_code, is_json
            if message["type"] == "http.response.start":
                status_code = message["status"]
                content_type = Headers(raw=message.get("headers", [])).get("content-type", "")
                is_json = content_type.startswith("application/json")
            elif message["type"] == "http.response.body" and is_json:
                room = _PREVIEW_CAPTURE_BYTES - len(captured)
                if room > 0:
                    captured.extend(message.get("body", b"")[:room])
            await send(message)

        try:
            await self.app(scope, receive, capturing_send)
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            preview = captured.decode("utf-8", errors="replace") if captured else None
            logger.info(format_api_log_line(scope["method"], scope["path"], status_code, duration_ms, preview))
            clear_context()
