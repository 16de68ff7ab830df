"""
Execute an http-transport ToolDefinition against the live endpoint.

GET   -> mapped arguments become query parameters (merged into any query
         string already on the configured URL; same key: last write wins)
other -> mapped arguments become a JSON body, values kept as-is
"""
# @file purpose: HTTP tool executor built on httpx.

from __future__ import annotations

import json
from typing import Any, Mapping

import httpx
import structlog

from ..core.errors import HttpStatusError, InvalidUrlError, ToolConfigError
from ..core.settings import settings
from ..core.types import ToolDefinition, is_absolute_url

logger = structlog.get_logger(__name__)


def _mapped(args: Mapping[str, Any], mapping: Mapping[str, str]) -> dict[str, Any]:
    """tool arg name -> API name; missing and None arguments are left out."""
    return {
        api_name: args[tool_name]
        for tool_name, api_name in mapping.items()
        if args.get(tool_name) is not None
    }


def _query_value(value: Any) -> Any:
    # httpx renders scalars itself (True -> "true") and repeats keys for lists
    if isinstance(value, dict):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return [json.dumps(v) if isinstance(v, dict) else v for v in value]
    return value


def is_json_content_type(content_type: str) -> bool:
    media = content_type.split(";", 1)[0].strip().lower()
    return media == "application/json" or media.endswith("+json")


async def execute_http_tool(
    tool: ToolDefinition,
    args: Mapping[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """
    Returns the parsed JSON body when the response declares a JSON content
    type, otherwise the raw text. Non-2xx raises HttpStatusError.
    """
    cfg = tool.http_config
    if cfg is None:
        raise ToolConfigError(tool.name, "has no httpConfig")
    if not is_absolute_url(cfg.url):
        raise InvalidUrlError(f'httpConfig.url of tool "{tool.name}"', cfg.url)

    params = _mapped(args, cfg.param_mapping)
    url = httpx.URL(cfg.url)
    headers: dict[str, str] = {}
    body: bytes | None = None

    if cfg.method == "GET":
        if params:
            url = url.copy_merge_params({k: _query_value(v) for k, v in params.items()})
    else:
        headers["Content-Type"] = "application/json"
        body = json.dumps(params).encode("utf-8")

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(
            timeout=settings.request_timeout_seconds, follow_redirects=True
        )
    assert client is not None
    try:
        logger.debug("http_tool_request", tool=tool.name, method=cfg.method, url=str(url))
        res = await client.request(cfg.method, url, headers=headers, content=body)
    finally:
        if own_client:
            await client.aclose()

    if not res.is_success:
        raise HttpStatusError(res.status_code, str(url))

    if is_json_content_type(res.headers.get("content-type", "")):
        return res.json()
    return res.text
