"""
Probe well-known paths for a machine-readable API description
(OpenAPI / Swagger). Detection never raises: every failure just moves on to
the next path.
"""
# @file purpose: Detect OpenAPI/Swagger documents on a site.

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

import httpx
import structlog

from ..core.settings import settings

logger = structlog.get_logger(__name__)

SPEC_PATHS: tuple[str, ...] = (
    "/openapi.json",
    "/swagger.json",
    "/api-docs",
    "/api-docs.json",
    "/.well-known/openapi.json",
)


def origin_of(url: str) -> str:
    """scheme://host[:port] of url, or raise ValueError when it has none."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"not an absolute url: {url!r}")
    return f"{parsed.scheme}://{parsed.netloc}"


def _looks_like_spec(data: Any) -> bool:
    return isinstance(data, dict) and ("openapi" in data or "swagger" in data)


async def detect_api_spec(
    base_url: str, client: httpx.AsyncClient | None = None
) -> dict[str, Any] | None:
    """
    GET each of SPEC_PATHS against the origin of base_url, in order, and
    return the first JSON document carrying an `openapi` or `swagger` key.
    Returns None when no path yields one.
    """
    try:
        origin = origin_of(base_url)
    except ValueError:
        logger.debug("spec_detect_skipped", url=base_url, reason="not absolute")
        return None

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(
            timeout=settings.request_timeout_seconds, follow_redirects=True
        )
    assert client is not None
    try:
        for path in SPEC_PATHS:
            probe = f"{origin}{path}"
            try:
                res = await client.get(probe)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.debug("spec_probe_failed", url=probe, error=str(e))
                continue
            if not res.is_success:
                continue
            try:
                data = res.json()
            except ValueError:
                continue
            if _looks_like_spec(data):
                logger.info("spec_detected", url=probe)
                return data
        return None
    finally:
        if own_client:
            await client.aclose()
