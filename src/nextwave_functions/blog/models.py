from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    METHOD_NOT_ALLOWED = "method_not_allowed"
    UNAUTHORIZED = "unauthorized"
    VALIDATION_FAILED = "validation_failed"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class GenerationRequest:
    topic: str
    keywords: tuple[str, ...]
    tone: str


@dataclass(frozen=True)
class Success:
    content: str


@dataclass(frozen=True)
class Failure:
    """A failed step.

    ``message`` is safe to return to the caller; ``detail`` is operator
    context (e.g. the provider's own error text) that only goes to logs.
    """

    kind: ErrorKind
    message: str
    detail: str | None = None


GenerationResult = Success | Failure
