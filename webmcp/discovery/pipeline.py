"""
Discovery pipeline: URL -> DiscoveryResult.

Stages, in fixed order, first success wins:
  1) API description (OpenAPI/Swagger) at well-known paths -> "api-spec"
  2) fetch the page and extract forms
  3) skip_llm: deterministic form -> tool conversion      -> "html"
     otherwise: LLM enrichment of the forms               -> "hybrid"

Stage 1 never fetches the page itself.
"""

from __future__ import annotations

import asyncio
from typing import Callable
from urllib.parse import urlparse

import httpx
import structlog

from ..core.errors import DiscoveryTimeoutError
from ..core.settings import settings
from ..core.types import (
    DiscoveredVia,
    DiscoveryResult,
    FormCandidate,
    HttpConfig,
    InputSchema,
    PropertySchema,
    ToolDefinition,
)
from ..llm.client import LLMClient
from .html_analyzer import analyze_html
from .llm_enricher import enrich_with_llm
from .spec_detector import detect_api_spec
from .spec_parser import parse_openapi_spec, to_snake_case

logger = structlog.get_logger(__name__)

ProgressFn = Callable[[int, str], None]


def _tool_name_for(action: str) -> str:
    segments = [s for s in urlparse(action).path.split("/") if s]
    name = to_snake_case(segments[-1]) if segments else ""
    return name or "form"


def candidate_to_tool(candidate: FormCandidate) -> ToolDefinition:
    """Deterministic conversion used when enrichment is skipped."""
    # radio groups repeat a name; keep first occurrence
    names = list(dict.fromkeys(f.name for f in candidate.fields))
    return ToolDefinition(
        name=_tool_name_for(candidate.form_action),
        description=f"Submit {candidate.submit_label or 'form'} at {candidate.form_action}",
        input_schema=InputSchema(
            properties={n: PropertySchema(type="string") for n in names},
            required=names,
        ),
        transport="http",
        http_config=HttpConfig(
            url=candidate.form_action,
            method=candidate.method,
            param_mapping={n: n for n in names},
        ),
    )


def _unique_names(tools: list[ToolDefinition]) -> list[ToolDefinition]:
    # a suffixed name may itself appear later in the list
    taken = {t.name for t in tools}
    emitted: set[str] = set()
    out: list[ToolDefinition] = []
    for tool in tools:
        name = tool.name
        if name in emitted:
            n = 2
            while f"{tool.name}_{n}" in taken or f"{tool.name}_{n}" in emitted:
                n += 1
            name = f"{tool.name}_{n}"
            tool = tool.model_copy(update={"name": name})
        emitted.add(name)
        out.append(tool)
    return out


async def _fetch_page(client: httpx.AsyncClient, url: str) -> str | None:
    try:
        res = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("page_fetch_failed", url=url, error=str(e))
        return None
    if not res.is_success:
        logger.warning("page_fetch_failed", url=url, status=res.status_code)
        return None
    return res.text


async def discover(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    skip_llm: bool = False,
    llm: LLMClient | None = None,
    on_progress: ProgressFn | None = None,
) -> DiscoveryResult:
    """
    Run the three-stage discovery for url. `client` carries every network
    call (inject one built on httpx.MockTransport in tests); `llm` replaces
    the default LiteLLM-backed client.
    """

    def progress(stage: int, message: str) -> None:
        logger.debug("discovery_stage", stage=stage, message=message, url=url)
        if on_progress is not None:
            on_progress(stage, message)

    def done(tools: list[ToolDefinition], via: DiscoveredVia) -> DiscoveryResult:
        logger.info("discovery_complete", url=url, via=via, tools=len(tools))
        return DiscoveryResult(tools=tools, source_url=url, discovered_via=via)

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(
            timeout=settings.request_timeout_seconds, follow_redirects=True
        )
    assert client is not None
    try:
        progress(1, "looking for an API description")
        spec = await detect_api_spec(url, client)
        if spec is not None:
            tools = parse_openapi_spec(spec, url)
            if tools:
                return done(_unique_names(tools), "api-spec")

        progress(2, "analyzing page forms")
        html = await _fetch_page(client, url)
        if html is None:
            return done([], "html")
        candidates = analyze_html(html, url)

        if skip_llm:
            return done(_unique_names([candidate_to_tool(c) for c in candidates]), "html")

        progress(3, f"enriching {len(candidates)} form(s) with LLM")
        tools = await enrich_with_llm(candidates, url, html, llm)
        return done(_unique_names(tools), "hybrid")
    finally:
        if own_client:
            await client.aclose()


async def discover_with_timeout(url: str, timeout_s: float, **kwargs) -> DiscoveryResult:
    """discover() bounded by a wall-clock budget; raises DiscoveryTimeoutError."""
    try:
        return await asyncio.wait_for(discover(url, **kwargs), timeout=timeout_s)
    except asyncio.TimeoutError as e:
        raise DiscoveryTimeoutError(url, timeout_s) from e
