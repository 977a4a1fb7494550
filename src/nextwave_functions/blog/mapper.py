from nextwave_functions.api.responses import HttpResponse, error_response, json_response
from nextwave_functions.blog.models import ErrorKind, Failure, GenerationResult

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.METHOD_NOT_ALLOWED: 405,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.PROVIDER_UNAVAILABLE: 503,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.UNEXPECTED: 500,
}


def to_response(result: GenerationResult) -> HttpResponse:
    if isinstance(result, Failure):
        return error_response(STATUS_BY_KIND[result.kind], result.message, no_cache=True)
    return json_response(200, {"content": result.content}, no_cache=True)
