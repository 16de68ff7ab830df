"""
Playwright-based BrowserDriver implementation.

Conforms to io/driver.py's BrowserDriver Protocol:
- start() / stop()
- new_context() -> Page
- goto / wait_for / click / fill / text_content / current_url
- screenshot(ctx, path)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    TimeoutError as PwTimeoutError,
    async_playwright,
)


class PlaywrightDriver:
    """
    A concrete BrowserDriver based on Playwright Chromium.
    - `ctx` in this implementation is a Playwright `Page`.
    - Each driver owns one browser; `new_context()` opens an incognito
      BrowserContext + Page inside it, and `stop()` tears everything down.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        slow_mo_ms: int = 0,
        default_timeout_ms: int = 30_000,
    ) -> None:
        self.headless = headless
        self.slow_mo_ms = slow_mo_ms
        self.default_timeout_ms = default_timeout_ms

        self._pw: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: list[BrowserContext] = []

    # ---------------- lifecycle ----------------

    async def start(self) -> None:
        """Launch Playwright and a Chromium browser once."""
        if self._browser is not None:
            return
        self._pw = await async_playwright().start()
        self._browser = await self._pw.chromium.launch(
            headless=self.headless, slow_mo=self.slow_mo_ms
        )

    async def stop(self) -> None:
        """Close contexts and the browser, then stop Playwright. Idempotent."""
        try:
            for ctx in self._contexts:
                try:
                    await ctx.close()
                except Exception:  # noqa: BLE001
                    pass
            self._contexts.clear()
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._pw is not None:
                await self._pw.stop()
            self._pw = None
            self._browser = None

    async def new_context(self) -> Page:
        if self._browser is None:
            raise RuntimeError("Browser not started. Call start() first.")
        ctx = await self._browser.new_context()
        ctx.set_default_timeout(self.default_timeout_ms)
        self._contexts.append(ctx)
        return await ctx.new_page()

    # ---------------- primitives ----------------

    async def goto(self, ctx: Any, url: str, *, timeout_ms: Optional[int] = None) -> None:
        page = self._as_page(ctx)
        await page.goto(url, timeout=timeout_ms or self.default_timeout_ms, wait_until="load")

    async def wait_for(self, ctx: Any, selector: str, *, timeout_ms: Optional[int] = None) -> None:
        page = self._as_page(ctx)
        await page.locator(selector).first.wait_for(
            state="visible", timeout=timeout_ms or self.default_timeout_ms
        )

    def current_url(self, ctx: Any) -> str:
        return self._as_page(ctx).url

    async def click(self, ctx: Any, selector: str, *, timeout_ms: Optional[int] = None) -> None:
        locator = self._as_page(ctx).locator(selector).first
        to = timeout_ms or self.default_timeout_ms
        await locator.wait_for(state="visible", timeout=to)
        await locator.scroll_into_view_if_needed()
        await locator.click(timeout=to)

    async def fill(
        self, ctx: Any, selector: str, text: str, *, timeout_ms: Optional[int] = None
    ) -> None:
        """
        Prefer fill() for determinism; fall back to click+type for widgets
        that reject programmatic fill.
        """
        locator = self._as_page(ctx).locator(selector).first
        to = timeout_ms or self.default_timeout_ms
        await locator.wait_for(state="visible", timeout=to)
        try:
            await locator.fill(text, timeout=to)
            return
        except PwTimeoutError:
            pass
        await locator.click(timeout=to)
        await locator.press_sequentially(text, timeout=to)

    async def text_content(self, ctx: Any, selector: str) -> Optional[str]:
        el = await self._as_page(ctx).query_selector(selector)
        if el is None:
            return None
        text = await el.text_content()
        return text.strip() if text is not None else ""

    async def screenshot(self, ctx: Any, path: str, *, full_page: bool = True) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        await self._as_page(ctx).screenshot(path=path, full_page=full_page)

    # ---------------- internals ----------------

    @staticmethod
    def _as_page(ctx: Any) -> Page:
        if not isinstance(ctx, Page):
            raise TypeError("ctx must be a Playwright Page (returned by new_context()).")
        return ctx
