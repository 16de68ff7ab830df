"""
Browser driver protocol (abstraction).

The browser executor only talks to this surface, so tests can substitute a
fake and other backends can be plugged in without touching step handling.

Notes:
- `ctx` is the page handle returned by `new_context()`.
- One driver instance drives exactly one browser for one tool invocation;
  `stop()` must be safe to call even when `start()` failed halfway.
"""

from __future__ import annotations

from typing import Any, Protocol


class BrowserDriver(Protocol):
    # -------- lifecycle --------
    async def start(self) -> None: ...
    async def stop(self) -> None: ...
    async def new_context(self) -> Any: ...

    # -------- navigation & waits --------
    async def goto(self, ctx: Any, url: str, *, timeout_ms: int | None = None) -> None: ...
    async def wait_for(self, ctx: Any, selector: str, *, timeout_ms: int | None = None) -> None: ...
    def current_url(self, ctx: Any) -> str: ...

    # -------- interactions --------
    async def click(self, ctx: Any, selector: str, *, timeout_ms: int | None = None) -> None: ...
    async def fill(
        self, ctx: Any, selector: str, text: str, *, timeout_ms: int | None = None
    ) -> None: ...
    async def text_content(self, ctx: Any, selector: str) -> str | None:
        """Stripped text of the first match, or None when nothing matches."""
        ...

    # -------- utilities --------
    async def screenshot(self, ctx: Any, path: str, *, full_page: bool = True) -> None: ...
