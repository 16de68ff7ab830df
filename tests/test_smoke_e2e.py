import functools
import http.server
import socketserver
import threading
from collections.abc import Iterator
from pathlib import Path

import pytest

from webmcp.core.types import ToolDefinition
from webmcp.executor.browser import execute_browser_tool

pytest.importorskip("playwright.async_api")
from webmcp.io.playwright_driver import PlaywrightDriver  # noqa: E402


@pytest.fixture(scope="session")
def web_server() -> Iterator[str]:
    root = Path(__file__).resolve().parent / "fixtures"
    Handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(root))
    httpd = socketserver.TCPServer(("127.0.0.1", 0), Handler)
    port = httpd.server_address[1]
    t = threading.Thread(target=httpd.serve_forever, daemon=True)
    t.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        httpd.shutdown()
        httpd.server_close()


async def test_smoke_end_to_end(web_server: str) -> None:
    tool = ToolDefinition.model_validate(
        {
            "name": "echo",
            "description": "Echo the query back",
            "inputSchema": {"properties": {"q": {"type": "string"}}, "required": ["q"]},
            "transport": "browser",
            "browserConfig": {
                "steps": [
                    {"action": "navigate", "value": f"{web_server}/smoke.html"},
                    {"action": "fill", "selector": "#q", "paramRef": "q"},
                    {"action": "click", "selector": "#go"},
                    {"action": "waitFor", "selector": "#result"},
                    {"action": "extract", "selector": "#result"},
                ]
            },
        }
    )
    driver = PlaywrightDriver(headless=True, default_timeout_ms=5000)
    try:
        await driver.start()
    except Exception as e:  # noqa: BLE001
        await driver.stop()
        pytest.skip(f"chromium not available: {e}")

    assert await execute_browser_tool(tool, {"q": "hello"}, driver=driver) == "hello"
