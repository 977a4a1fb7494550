from dataclasses import dataclass, field
from typing import Any

from fastapi import Response
from fastapi.responses import JSONResponse

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Max-Age": "86400",
    "Access-Control-Expose-Headers": "content-length, content-type",
}


@dataclass
class HttpResponse:
    """Framework-independent response produced by the function handlers."""

    status: int
    body: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def to_fastapi(self) -> Response:
        if self.body is None:
            return Response(status_code=self.status, headers=self.headers)
        headers = {key: value for key, value in self.headers.items() if key.lower() != "content-type"}
        return JSONResponse(content=self.body, status_code=self.status, headers=headers)


def preflight_response() -> HttpResponse:
    return HttpResponse(status=204, headers=dict(CORS_HEADERS))


def json_response(status: int, body: dict[str, Any], no_cache: bool = False) -> HttpResponse:
    headers = {**CORS_HEADERS, "Content-Type": "application/json"}
    if no_cache:
        headers["Cache-Control"] = "no-cache"
    return HttpResponse(status=status, body=body, headers=headers)


def error_response(status: int, message: str, no_cache: bool = False) -> HttpResponse:
    return json_response(status, {"error": message}, no_cache=no_cache)


def header_value(headers: Any, name: str) -> str | None:
    """Case-insensitive lookup over any mapping of header names."""
    if headers is None:
        return None
    target = name.lower()
    for key, value in headers.items():
        if str(key).lower() == target:
            return str(value)
    return None
