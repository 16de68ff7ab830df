"""
Ask a generative-text provider to turn form candidates + page context into
ToolDefinitions. Best-effort: failures of any kind yield an empty list.
"""
# @file purpose: LLM-assisted tool synthesis with tolerant JSON extraction.

from __future__ import annotations

import json
from textwrap import dedent
from typing import Any

import structlog
from pydantic import ValidationError

from ..core.settings import settings
from ..core.types import FormCandidate, ToolDefinition
from ..llm.client import LiteLLMClient, LLMClient

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT = dedent("""
    You are an expert at analyzing websites and generating MCP tool definitions.
    Given a website URL, its HTML content and detected form candidates, produce a
    JSON array of ToolDefinition objects. Each ToolDefinition must have:
    name (snake_case), description, inputSchema ({type: "object", properties, required}),
    transport ("http" or "browser"), and httpConfig ({url, method, paramMapping}) or
    browserConfig ({steps: [{action, selector?, value?, paramRef?}]}) matching the transport.
    Browser step actions are: navigate, fill, click, waitFor, extract.
    Also suggest additional tools based on site context.
    Return ONLY a valid JSON array, no explanation.
""").strip()


def extract_json_array(text: str) -> list[Any] | None:
    """
    Locate a JSON array inside free text. Starts at the first "[" and tries
    every "]" from the rightmost backwards, so prose after the payload and
    nested brackets inside it are both tolerated. A reply that is itself a
    complete non-array JSON value (e.g. an object wrapping a list) is rejected.
    """
    try:
        whole = json.loads(text)
    except ValueError:
        pass
    else:
        return whole if isinstance(whole, list) else None

    start = text.find("[")
    if start == -1:
        return None
    end = text.rfind("]")
    while end > start:
        try:
            parsed = json.loads(text[start : end + 1])
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return parsed
        end = text.rfind("]", start, end)
    return None


def build_user_message(candidates: list[FormCandidate], url: str, html: str) -> str:
    limit = settings.snippet_chars
    forms = json.dumps([c.to_dict() for c in candidates], indent=2)
    return (
        f"Website URL: {url}\n\n"
        f"Detected form candidates:\n{forms}\n\n"
        f"HTML snippet (first {limit} chars):\n{html[:limit]}\n\n"
        "Generate ToolDefinitions for this website."
    )


def _valid_tools(items: list[Any]) -> list[ToolDefinition]:
    tools: list[ToolDefinition] = []
    for i, item in enumerate(items):
        try:
            tools.append(ToolDefinition.model_validate(item))
        except ValidationError as e:
            logger.warning("llm_tool_dropped", index=i, errors=e.error_count())
    return tools


async def enrich_with_llm(
    candidates: list[FormCandidate],
    url: str,
    html: str,
    llm: LLMClient | None = None,
) -> list[ToolDefinition]:
    try:
        client = llm or LiteLLMClient()
        text = await client.complete(SYSTEM_PROMPT, build_user_message(candidates, url, html))
    except Exception as e:  # noqa: BLE001
        logger.warning("llm_enrichment_failed", url=url, error=str(e))
        return []

    items = extract_json_array(text)
    if items is None:
        logger.warning("llm_no_json_array", url=url, chars=len(text))
        return []
    return _valid_tools(items)
