"""
Browser step handlers and their dispatch table.

Each handler:
  1) validates the fields its action needs (StepValidationError otherwise)
  2) performs the page action through the BrowserDriver
  3) returns extracted text (extract) or None

The table is checked at import time against the StepAction literal, so an
action added to the model without a handler (or vice versa) fails loudly.
"""
# @file purpose: Register and implement browser step actions.

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, get_args

from ..core.errors import BrowserStepError, StepValidationError
from ..core.types import BrowserStep, StepAction
from ..io.driver import BrowserDriver


@dataclass(frozen=True)
class StepContext:
    """Everything a handler may touch during one tool invocation."""

    tool: str
    args: Mapping[str, Any]
    driver: BrowserDriver
    page: Any


StepFn = Callable[[StepContext, int, BrowserStep], Awaitable[str | None]]

_HANDLERS: dict[str, StepFn] = {}


def step(action: str) -> Callable[[StepFn], StepFn]:
    """Decorator: register the handler for one step action."""

    def deco(fn: StepFn) -> StepFn:
        _HANDLERS[action] = fn
        return fn

    return deco


def get_handler(action: str) -> StepFn:
    try:
        return _HANDLERS[action]
    except KeyError as e:
        raise KeyError(f"Step action not registered: {action}") from e


def _require(ctx: StepContext, index: int, s: BrowserStep, field: str, what: str) -> str:
    value = getattr(s, field)
    if not value:
        raise StepValidationError(ctx.tool, index, s.action, f'requires "{field}" ({what})')
    return value


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


@step("navigate")
async def navigate(ctx: StepContext, index: int, s: BrowserStep) -> None:
    url = _require(ctx, index, s, "value", "target URL")
    try:
        await ctx.driver.goto(ctx.page, url)
    except Exception as e:  # noqa: BLE001
        raise BrowserStepError("navigate", str(e) or "failed to open url", url=url, cause=e) from e


@step("fill")
async def fill(ctx: StepContext, index: int, s: BrowserStep) -> None:
    selector = _require(ctx, index, s, "selector", "input to fill")
    if s.param_ref:
        if ctx.args.get(s.param_ref) is None:
            raise StepValidationError(
                ctx.tool, index, s.action, f'argument "{s.param_ref}" was not supplied'
            )
        text = _as_text(ctx.args[s.param_ref])
    elif s.value is not None:
        text = s.value
    else:
        raise StepValidationError(ctx.tool, index, s.action, 'requires "paramRef" or "value"')
    try:
        await ctx.driver.fill(ctx.page, selector, text)
    except Exception as e:  # noqa: BLE001
        raise BrowserStepError(
            "fill", str(e) or "failed to input text", selector=selector, cause=e
        ) from e


@step("click")
async def click(ctx: StepContext, index: int, s: BrowserStep) -> None:
    selector = _require(ctx, index, s, "selector", "element to click")
    try:
        await ctx.driver.click(ctx.page, selector)
    except Exception as e:  # noqa: BLE001
        raise BrowserStepError(
            "click", str(e) or "failed to click element", selector=selector, cause=e
        ) from e


@step("waitFor")
async def wait_for(ctx: StepContext, index: int, s: BrowserStep) -> None:
    selector = _require(ctx, index, s, "selector", "element to wait for")
    try:
        await ctx.driver.wait_for(ctx.page, selector)
    except Exception as e:  # noqa: BLE001
        raise BrowserStepError(
            "waitFor", str(e) or "element did not appear in time", selector=selector, cause=e
        ) from e


@step("extract")
async def extract(ctx: StepContext, index: int, s: BrowserStep) -> str:
    selector = s.selector or "body"
    try:
        text = await ctx.driver.text_content(ctx.page, selector)
    except Exception as e:  # noqa: BLE001
        raise BrowserStepError(
            "extract", str(e) or "failed to extract text", selector=selector, cause=e
        ) from e
    if text is None:
        raise BrowserStepError(
            "extract", "element not found", selector=selector, details={"tool": ctx.tool}
        )
    if not text:
        raise BrowserStepError(
            "extract", "element has no text", selector=selector, details={"tool": ctx.tool}
        )
    return text


def _check_exhaustive() -> None:
    declared = set(get_args(StepAction))
    registered = set(_HANDLERS)
    if declared != registered:
        raise RuntimeError(
            f"step handlers out of sync: missing={sorted(declared - registered)} "
            f"unknown={sorted(registered - declared)}"
        )


_check_exhaustive()
