import logging
from collections.abc import Mapping
from typing import Any

from nextwave_functions.api.responses import HttpResponse, preflight_response
from nextwave_functions.blog.mapper import to_response
from nextwave_functions.blog.models import ErrorKind, Failure, GenerationResult
from nextwave_functions.blog.prompt import build_prompt
from nextwave_functions.blog.validator import validate_request
from nextwave_functions.config import Settings, get_settings
from nextwave_functions.providers.llm.openai_chat import UNEXPECTED_MESSAGE, OpenAIChatClient

logger = logging.getLogger(__name__)


class BlogService:
    """generate-blog: validate -> build prompt -> one provider call -> response."""

    def __init__(self, settings: Settings | None = None, client: OpenAIChatClient | None = None) -> None:
        self.settings = settings or get_settings()
        self.client = client or OpenAIChatClient(self.settings)

    async def handle(self, method: str, headers: Mapping[str, str] | Any, body: bytes | str | None) -> HttpResponse:
        if method.upper() == "OPTIONS":
            return preflight_response()
        try:
            result = await self._run(method, headers, body)
        except Exception as exc:
            logger.exception("blog.failed type=%s", exc.__class__.__name__)
            result = Failure(ErrorKind.UNEXPECTED, UNEXPECTED_MESSAGE, detail=str(exc))
        return to_response(result)

    async def _run(self, method: str, headers: Mapping[str, str] | Any, body: bytes | str | None) -> GenerationResult:
        validated = validate_request(method, headers, body)
        if isinstance(validated, Failure):
            logger.info("blog.rejected kind=%s reason=%s", validated.kind.value, validated.message)
            return validated

        logger.info(
            "blog.request topic=%s keywords=%d tone=%s",
            validated.topic[:80],
            len(validated.keywords),
            validated.tone,
        )
        prompt = build_prompt(validated)
        result = await self.client.generate(prompt, validated.tone)
        if isinstance(result, Failure):
            logger.warning("blog.failed kind=%s detail=%s", result.kind.value, result.detail)
        else:
            logger.info("blog.generated chars=%d topic=%s", len(result.content), validated.topic[:80])
        return result
