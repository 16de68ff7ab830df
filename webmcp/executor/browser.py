"""
Sequential runner for browser-transport ToolDefinitions.

Responsibilities:
- Refuse tools without browserConfig / steps before launching anything
- Launch one isolated browser + page per invocation, never shared
- Run steps strictly in order through the handler table in steps.py
- On failure: save a screenshot artifact (if artifacts_dir is set)
- Close the browser on every exit path
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import structlog

from ..core.errors import ToolConfigError
from ..core.settings import settings
from ..core.types import ToolDefinition
from ..io.driver import BrowserDriver
from .steps import StepContext, get_handler

logger = structlog.get_logger(__name__)


def _default_driver() -> BrowserDriver:
    from ..io.playwright_driver import PlaywrightDriver  # lazy: playwright is heavy

    return PlaywrightDriver(
        headless=settings.headless, default_timeout_ms=settings.browser_timeout_ms
    )


async def _on_failure(
    driver: BrowserDriver, page: Any, artifacts_dir: Path | None, tool: str, index: int
) -> str | None:
    """Best-effort failure artifact (screenshot)."""
    if artifacts_dir is None or page is None:
        return None
    png = artifacts_dir / f"fail-{tool}-{index:02d}.png"
    try:
        await driver.screenshot(page, str(png), full_page=True)
        return str(png)
    except Exception:  # noqa: BLE001
        return None


async def execute_browser_tool(
    tool: ToolDefinition,
    args: Mapping[str, Any],
    *,
    driver: BrowserDriver | None = None,
    artifacts_dir: Path | None = None,
) -> Any:
    """
    Returns the text of the last extract step, or
    {"success": True, "url": <final page url>} when no step extracted.
    """
    cfg = tool.browser_config
    if cfg is None:
        raise ToolConfigError(tool.name, "has no browserConfig")
    if not cfg.steps:
        raise ToolConfigError(tool.name, "has no steps")

    driver = driver or _default_driver()
    page: Any = None
    index = 0
    try:
        await driver.start()
        page = await driver.new_context()
        ctx = StepContext(tool=tool.name, args=args, driver=driver, page=page)

        extracted: str | None = None
        for index, s in enumerate(cfg.steps, start=1):
            logger.debug("browser_step", tool=tool.name, index=index, action=s.action)
            result = await get_handler(s.action)(ctx, index, s)
            if s.action == "extract":
                extracted = result

        if extracted is not None:
            return extracted
        return {"success": True, "url": driver.current_url(page)}
    except Exception as e:
        artifact = await _on_failure(driver, page, artifacts_dir, tool.name, index)
        logger.warning(
            "browser_tool_failed", tool=tool.name, step=index, error=str(e), artifact=artifact
        )
        raise
    finally:
        await driver.stop()
