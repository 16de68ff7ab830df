from typing import get_args

import pytest

from webmcp.core.errors import BrowserStepError, StepValidationError, ToolConfigError
from webmcp.core.types import BrowserConfig, BrowserStep, StepAction, ToolDefinition
from webmcp.executor import steps
from webmcp.executor.browser import execute_browser_tool


def browser_tool(*step_dicts: dict) -> ToolDefinition:
    return ToolDefinition(
        name="login",
        description="Log in",
        transport="browser",
        browser_config=BrowserConfig(steps=[BrowserStep.model_validate(s) for s in step_dicts]),
    )


LOGIN = browser_tool(
    {"action": "navigate", "value": "https://example.com/login"},
    {"action": "fill", "selector": "input[name=email]", "paramRef": "email"},
    {"action": "fill", "selector": "input[name=password]", "paramRef": "password"},
    {"action": "click", "selector": "button[type=submit]"},
    {"action": "waitFor", "selector": ".dashboard"},
    {"action": "extract", "selector": "body"},
)


async def test_runs_steps_in_order_and_returns_extraction(fake_driver) -> None:
    result = await execute_browser_tool(
        LOGIN, {"email": "user@test.com", "password": "hunter2"}, driver=fake_driver
    )

    assert result == "page content"
    assert fake_driver.calls == [
        ("goto", "https://example.com/login"),
        ("fill", "input[name=email]", "user@test.com"),
        ("fill", "input[name=password]", "hunter2"),
        ("click", "button[type=submit]"),
        ("wait_for", ".dashboard"),
        ("text_content", "body"),
    ]
    assert (fake_driver.start_count, fake_driver.stop_count) == (1, 1)


async def test_without_extract_returns_success_marker(fake_driver) -> None:
    tool = browser_tool({"action": "navigate", "value": "https://example.com"})
    result = await execute_browser_tool(tool, {}, driver=fake_driver)
    assert result == {"success": True, "url": "https://example.com/dashboard"}


async def test_missing_browser_config(fake_driver) -> None:
    tool = LOGIN.model_copy(update={"browser_config": None})
    with pytest.raises(ToolConfigError, match='Tool "login" has no browserConfig'):
        await execute_browser_tool(tool, {}, driver=fake_driver)
    assert fake_driver.start_count == 0


async def test_empty_steps(fake_driver) -> None:
    tool = browser_tool()
    with pytest.raises(ToolConfigError, match='Tool "login" has no steps'):
        await execute_browser_tool(tool, {}, driver=fake_driver)
    assert fake_driver.start_count == 0


async def test_browser_closed_once_when_step_throws(fake_driver) -> None:
    fake_driver.fail_on["goto"] = RuntimeError("Navigation failed")

    with pytest.raises(BrowserStepError, match="Navigation failed") as exc:
        await execute_browser_tool(LOGIN, {"email": "a", "password": "b"}, driver=fake_driver)

    assert isinstance(exc.value.cause, RuntimeError)
    assert fake_driver.stop_count == 1
    assert fake_driver.calls == [("goto", "https://example.com/login")]


async def test_browser_closed_when_launch_fails(fake_driver) -> None:
    fake_driver.fail_on["start"] = OSError("no chromium")
    with pytest.raises(OSError):
        await execute_browser_tool(LOGIN, {}, driver=fake_driver)
    assert fake_driver.stop_count == 1


@pytest.mark.parametrize(
    ("step", "needle"),
    [
        ({"action": "navigate"}, '"value"'),
        ({"action": "fill", "value": "x"}, '"selector"'),
        ({"action": "fill", "selector": "#q"}, '"paramRef" or "value"'),
        ({"action": "click"}, '"selector"'),
        ({"action": "waitFor"}, '"selector"'),
    ],
)
async def test_step_validation_errors(fake_driver, step, needle) -> None:
    tool = browser_tool({"action": "navigate", "value": "https://example.com"}, step)

    with pytest.raises(StepValidationError) as exc:
        await execute_browser_tool(tool, {}, driver=fake_driver)

    message = str(exc.value)
    assert message.startswith('Tool "login" step 2')
    assert needle in message
    assert fake_driver.stop_count == 1
    assert len(fake_driver.calls) == 1


async def test_fill_requires_supplied_argument(fake_driver) -> None:
    with pytest.raises(StepValidationError, match='argument "password" was not supplied'):
        await execute_browser_tool(LOGIN, {"email": "a@b.c"}, driver=fake_driver)
    assert fake_driver.stop_count == 1


async def test_fill_literal_value_and_non_string_args(fake_driver) -> None:
    tool = browser_tool(
        {"action": "fill", "selector": "#search", "value": "default text"},
        {"action": "fill", "selector": "#qty", "paramRef": "qty"},
    )
    await execute_browser_tool(tool, {"qty": 42}, driver=fake_driver)
    assert fake_driver.calls == [("fill", "#search", "default text"), ("fill", "#qty", "42")]


async def test_extract_defaults_to_body_and_last_one_wins(fake_driver) -> None:
    fake_driver.texts["#price"] = "9.99"
    tool = browser_tool({"action": "extract"}, {"action": "extract", "selector": "#price"})

    assert await execute_browser_tool(tool, {}, driver=fake_driver) == "9.99"
    assert ("text_content", "body") in fake_driver.calls


async def test_extract_missing_element(fake_driver) -> None:
    tool = browser_tool({"action": "extract", "selector": "#nope"})
    with pytest.raises(BrowserStepError, match="element not found"):
        await execute_browser_tool(tool, {}, driver=fake_driver)
    assert fake_driver.stop_count == 1


async def test_extract_empty_text(fake_driver) -> None:
    fake_driver.texts["#empty"] = ""
    tool = browser_tool({"action": "extract", "selector": "#empty"})
    with pytest.raises(BrowserStepError, match="element has no text"):
        await execute_browser_tool(tool, {}, driver=fake_driver)


async def test_failure_screenshot_when_artifacts_dir_set(fake_driver, tmp_path) -> None:
    fake_driver.fail_on["click"] = TimeoutError("not visible")
    tool = browser_tool(
        {"action": "navigate", "value": "https://example.com"},
        {"action": "click", "selector": "#go"},
    )

    with pytest.raises(BrowserStepError):
        await execute_browser_tool(tool, {}, driver=fake_driver, artifacts_dir=tmp_path)

    assert fake_driver.calls[-1] == ("screenshot", str(tmp_path / "fail-login-02.png"))


def test_handler_table_covers_every_action() -> None:
    for action in get_args(StepAction):
        assert callable(steps.get_handler(action))
    with pytest.raises(KeyError):
        steps.get_handler("hover")
