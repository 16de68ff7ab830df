"""Thin async chat-completion wrapper used by the enrichment stage."""

from __future__ import annotations

from typing import Any, Protocol

import litellm
import structlog

from ..core.settings import settings

logger = structlog.get_logger(__name__)


class LLMClient(Protocol):
    async def complete(self, system: str, user: str) -> str: ...


class LiteLLMClient:
    """Wrapper around litellm.acompletion; model/limits default to settings."""

    def __init__(
        self,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> None:
        self.model = model or settings.llm_model
        self.max_tokens = max_tokens or settings.llm_max_tokens
        self.temperature = temperature

    async def complete(self, system: str, user: str) -> str:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "max_tokens": self.max_tokens,
        }
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature

        resp = await litellm.acompletion(**kwargs)

        text = ""
        try:
            text = resp.choices[0].message.content or ""
        except (IndexError, AttributeError):
            pass
        logger.debug("llm_completion", model=self.model, chars=len(text))
        return text.strip()
