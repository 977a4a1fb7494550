import asyncio
import logging
from typing import Any

import openai
from langchain_core.messages import HumanMessage, SystemMessage

from nextwave_functions.blog.models import ErrorKind, Failure, GenerationResult, Success
from nextwave_functions.blog.prompt import SYSTEM_PROMPT
from nextwave_functions.config import Settings

logger = logging.getLogger(__name__)
ERROR_LOG_LIMIT = 1000

UNAVAILABLE_MESSAGE = "The blog generation service is temporarily unavailable. Please try again later."
RATE_LIMITED_MESSAGE = "Too many requests. Please wait a moment and try again."
TIMEOUT_MESSAGE = "The request took too long to complete. Please try again."
UNEXPECTED_MESSAGE = "An unexpected error occurred while generating the blog post"
NO_CONTENT_MESSAGE = "No content was generated. Please try again."


class OpenAIChatClient:
    """Single chat completion against an OpenAI-compatible provider.

    The call is raced against ``llm_timeout_seconds``; whichever settles
    first decides the result. Provider-side retries are disabled, so one
    invocation makes at most one request.
    """

    def __init__(self, settings: Settings, llm: Any | None = None) -> None:
        self.settings = settings
        self.model = settings.openai_model
        self.timeout_seconds = settings.llm_timeout_seconds
        self._llm = llm

    async def generate(self, prompt: str, tone: str) -> GenerationResult:
        if not self.settings.openai_api_key:
            logger.error("llm.unavailable reason=missing_api_key")
            return Failure(ErrorKind.PROVIDER_UNAVAILABLE, UNAVAILABLE_MESSAGE, detail="OPENAI_API_KEY is not configured")

        logger.info(
            "llm.call model=%s timeout=%.1fs tone=%s prompt_chars=%d",
            self.model,
            self.timeout_seconds,
            self._clip(tone, 40),
            len(prompt),
        )
        call = asyncio.create_task(self._complete(prompt))
        call.add_done_callback(self._discard_result)
        try:
            done, _ = await asyncio.wait({call}, timeout=self.timeout_seconds)
        except asyncio.CancelledError:
            call.cancel()
            raise

        if call not in done:
            call.cancel()
            logger.warning("llm.timeout model=%s timeout=%.1fs", self.model, self.timeout_seconds)
            return Failure(
                ErrorKind.TIMEOUT,
                TIMEOUT_MESSAGE,
                detail=f"provider call exceeded {self.timeout_seconds:.1f}s",
            )

        exc = call.exception()
        if exc is not None:
            failure = self._classify_error(exc)
            logger.error(
                "llm.error model=%s kind=%s type=%s detail=%s",
                self.model,
                failure.kind.value,
                exc.__class__.__name__,
                failure.detail,
            )
            return failure

        content = call.result()
        if not content:
            logger.warning("llm.empty_response model=%s", self.model)
            return Failure(ErrorKind.UNEXPECTED, NO_CONTENT_MESSAGE, detail="provider returned no content")
        logger.info("llm.response model=%s chars=%d", self.model, len(content))
        return Success(content=content)

    async def _complete(self, prompt: str) -> str:
        llm = self._get_llm()
        response = await llm.ainvoke([SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)])
        return self._message_text(getattr(response, "content", response))

    def _get_llm(self):
        if self._llm is None:
            from langchain_openai import ChatOpenAI

            self._llm = ChatOpenAI(
                model=self.model,
                api_key=self.settings.openai_api_key,
                base_url=self.settings.openai_base_url,
                temperature=self.settings.blog_temperature,
                max_tokens=self.settings.blog_max_tokens,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
        return self._llm

    def _classify_error(self, exc: BaseException) -> Failure:
        detail = self._extract_error_detail(exc)
        if isinstance(exc, openai.AuthenticationError):
            return Failure(ErrorKind.PROVIDER_UNAVAILABLE, UNAVAILABLE_MESSAGE, detail=detail)
        if isinstance(exc, openai.RateLimitError):
            return Failure(ErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE, detail=detail)
        if isinstance(exc, (openai.APITimeoutError, asyncio.TimeoutError)):
            return Failure(ErrorKind.TIMEOUT, TIMEOUT_MESSAGE, detail=detail)
        if isinstance(exc, openai.APIStatusError):
            if exc.status_code == 401:
                return Failure(ErrorKind.PROVIDER_UNAVAILABLE, UNAVAILABLE_MESSAGE, detail=detail)
            if exc.status_code == 429:
                return Failure(ErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE, detail=detail)
        if isinstance(exc, openai.APIError):
            return Failure(ErrorKind.UNEXPECTED, UNEXPECTED_MESSAGE, detail=detail)

        # Untyped errors (e.g. from a wrapping library) only expose free text.
        message = str(exc).lower()
        if "rate limit" in message:
            return Failure(ErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE, detail=detail)
        if "timed out" in message:
            return Failure(ErrorKind.TIMEOUT, TIMEOUT_MESSAGE, detail=detail)
        return Failure(ErrorKind.UNEXPECTED, UNEXPECTED_MESSAGE, detail=detail)

    @staticmethod
    def _discard_result(task: "asyncio.Task[str]") -> None:
        # Marks an abandoned call's exception as retrieved.
        if not task.cancelled():
            task.exception()

    @staticmethod
    def _message_text(content: Any) -> str:
        if isinstance(content, str):
            return content if content.strip() else ""
        if isinstance(content, list):
            parts: list[str] = []
            for item in content:
                if isinstance(item, dict):
                    parts.append(str(item.get("text", "")))
                else:
                    parts.append(str(item))
            return "\n".join(parts).strip()
        if content is None:
            return ""
        return str(content).strip()

    @staticmethod
    def _clip(text: str, limit: int) -> str:
        normalized = " ".join(text.split()).strip()
        if len(normalized) <= limit:
            return normalized
        return f"{normalized[:limit]}...(truncated)"

    def _extract_error_detail(self, exc: BaseException) -> str:
        status_code = getattr(exc, "status_code", None)
        message = getattr(exc, "message", None) or str(exc)
        body = getattr(exc, "body", None)
        details = [f"status_code={status_code}" if status_code is not None else ""]
        if body is not None:
            details.append(f"body={body}")
        details.append(f"message={message}")
        return self._clip(" ".join([part for part in details if part]).strip(), ERROR_LOG_LIMIT)
