import json
from collections.abc import Mapping
from typing import Any

from nextwave_functions.api.responses import header_value
from nextwave_functions.blog.models import ErrorKind, Failure, GenerationRequest

BEARER_PREFIX = "Bearer "


def validate_request(method: str, headers: Mapping[str, str] | Any, body: bytes | str | None) -> GenerationRequest | Failure:
    """Check method, authorization and body of a blog generation request.

    Authorization is checked before the body, so a bad credential is
    reported as such even when the body is also invalid.
    """
    if method.upper() != "POST":
        return Failure(ErrorKind.METHOD_NOT_ALLOWED, "Method not allowed")

    if not _has_bearer_token(header_value(headers, "authorization")):
        return Failure(ErrorKind.UNAUTHORIZED, "Missing or invalid authorization header")

    try:
        payload = json.loads(body or b"")
    except (ValueError, UnicodeDecodeError):
        return _invalid("Invalid JSON in request body")
    if not isinstance(payload, dict):
        return _invalid("Request body must be a JSON object")

    topic = payload.get("topic")
    if not isinstance(topic, str) or not topic.strip():
        return _invalid("Topic is required")

    keywords = payload.get("keywords")
    if not isinstance(keywords, list) or not keywords:
        return _invalid("At least one keyword is required")
    if not all(isinstance(item, str) and item.strip() for item in keywords):
        return _invalid("Keywords must be non-empty strings")

    tone = payload.get("tone")
    if not isinstance(tone, str) or not tone.strip():
        return _invalid("Tone is required")

    return GenerationRequest(
        topic=topic.strip(),
        keywords=tuple(item.strip() for item in keywords),
        tone=tone.strip(),
    )


def _has_bearer_token(value: str | None) -> bool:
    if not value or not value.startswith(BEARER_PREFIX):
        return False
    return bool(value[len(BEARER_PREFIX):].strip())


def _invalid(message: str) -> Failure:
    return Failure(ErrorKind.VALIDATION_FAILED, message)
