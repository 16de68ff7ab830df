"""
IntegrationHub: an explicitly constructed registry of connected sites.

There is no module-level instance; whoever builds a hub owns it and passes
it along. Entries live until disconnect() or until the hub is dropped.
"""
# @file purpose: Registry of discovered integrations + tool dispatch.

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Literal, Mapping

import httpx
import structlog
from pydantic import BaseModel, Field

from ..discovery.pipeline import ProgressFn, discover
from ..executor.browser import execute_browser_tool
from ..executor.http import execute_http_tool
from ..io.driver import BrowserDriver
from ..llm.client import LLMClient
from .errors import IntegrationNotFoundError, ToolNotFoundError
from .types import ToolDefinition

logger = structlog.get_logger(__name__)


class IntegrationConfig(BaseModel):
    name: str = Field(..., min_length=1)
    url: str
    description: str | None = None
    skip_llm: bool = False


class IntegrationEntry(BaseModel):
    config: IntegrationConfig
    tools: list[ToolDefinition] = Field(default_factory=list)
    connected_at: str
    status: Literal["connected", "error"]
    error: str | None = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def execute_tool(
    tool: ToolDefinition,
    args: Mapping[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
    driver: BrowserDriver | None = None,
) -> Any:
    """Route a tool to the executor matching its transport."""
    if tool.transport == "http":
        return await execute_http_tool(tool, args, client=client)
    return await execute_browser_tool(tool, args, driver=driver)


class IntegrationHub:
    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        llm: LLMClient | None = None,
    ) -> None:
        self._client = client
        self._llm = llm
        self._integrations: dict[str, IntegrationEntry] = {}

    async def connect(
        self, config: IntegrationConfig, *, on_progress: ProgressFn | None = None
    ) -> IntegrationEntry:
        """Discover tools for config.url; failures are recorded, not raised."""
        try:
            result = await discover(
                config.url,
                client=self._client,
                skip_llm=config.skip_llm,
                llm=self._llm,
                on_progress=on_progress,
            )
            entry = IntegrationEntry(
                config=config, tools=result.tools, connected_at=_now_iso(), status="connected"
            )
        except Exception as e:  # noqa: BLE001
            logger.warning("integration_connect_failed", name=config.name, error=str(e))
            entry = IntegrationEntry(
                config=config, connected_at=_now_iso(), status="error", error=str(e)
            )
        self._integrations[config.name] = entry
        return entry

    async def connect_all(self, configs: list[IntegrationConfig]) -> list[IntegrationEntry]:
        """Connect several sites concurrently; no ordering between them."""
        return list(await asyncio.gather(*(self.connect(c) for c in configs)))

    async def call(
        self,
        integration: str,
        tool_name: str,
        params: Mapping[str, Any] | None = None,
        *,
        driver: BrowserDriver | None = None,
    ) -> Any:
        entry = self._integrations.get(integration)
        if entry is None:
            names = ", ".join(self._integrations) or "none"
            raise IntegrationNotFoundError(
                f'No integration named "{integration}". Connected: {names}'
            )
        tool = next((t for t in entry.tools if t.name == tool_name), None)
        if tool is None:
            names = ", ".join(t.name for t in entry.tools) or "none"
            raise ToolNotFoundError(
                f'Tool "{tool_name}" not found in "{integration}". Available: {names}'
            )
        return await execute_tool(tool, params or {}, client=self._client, driver=driver)

    def disconnect(self, name: str) -> bool:
        return self._integrations.pop(name, None) is not None

    def get(self, name: str) -> IntegrationEntry | None:
        return self._integrations.get(name)

    def get_all(self) -> list[IntegrationEntry]:
        return list(self._integrations.values())

    def get_tools(self, name: str) -> list[ToolDefinition]:
        entry = self._integrations.get(name)
        return list(entry.tools) if entry else []
