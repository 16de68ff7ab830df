"""Shared fixtures: fake browser driver, mock HTTP client factory, fake LLM."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest


class FakeDriver:
    """In-memory BrowserDriver; records every call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.start_count = 0
        self.stop_count = 0
        self.texts: dict[str, str | None] = {"body": "page content"}
        self.fail_on: dict[str, BaseException] = {}
        self.url = "https://example.com/dashboard"

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise self.fail_on[name]

    async def start(self) -> None:
        self.start_count += 1
        self._maybe_fail("start")

    async def stop(self) -> None:
        self.stop_count += 1

    async def new_context(self) -> str:
        return "page"

    async def goto(self, ctx: Any, url: str, *, timeout_ms: int | None = None) -> None:
        self.calls.append(("goto", url))
        self._maybe_fail("goto")

    async def wait_for(self, ctx: Any, selector: str, *, timeout_ms: int | None = None) -> None:
        self.calls.append(("wait_for", selector))
        self._maybe_fail("wait_for")

    def current_url(self, ctx: Any) -> str:
        return self.url

    async def click(self, ctx: Any, selector: str, *, timeout_ms: int | None = None) -> None:
        self.calls.append(("click", selector))
        self._maybe_fail("click")

    async def fill(
        self, ctx: Any, selector: str, text: str, *, timeout_ms: int | None = None
    ) -> None:
        self.calls.append(("fill", selector, text))
        self._maybe_fail("fill")

    async def text_content(self, ctx: Any, selector: str) -> str | None:
        self.calls.append(("text_content", selector))
        self._maybe_fail("text_content")
        return self.texts.get(selector)

    async def screenshot(self, ctx: Any, path: str, *, full_page: bool = True) -> None:
        self.calls.append(("screenshot", path))


class FakeLLM:
    """LLMClient stand-in returning a canned reply (or raising)."""

    def __init__(self, reply: str = "[]", error: BaseException | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[tuple[str, str]] = []

    async def complete(self, system: str, user: str) -> str:
        self.prompts.append((system, user))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fake_llm() -> Callable[..., FakeLLM]:
    return FakeLLM


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory: handler(request) -> response becomes an httpx.AsyncClient."""

    def make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return make


SEARCH_PAGE = """
<html><body>
  <form action="/search" method="get">
    <input name="q" placeholder="Search..." />
    <button type="submit"> Go </button>
  </form>
</body></html>
"""


@pytest.fixture
def search_page() -> str:
    return SEARCH_PAGE
