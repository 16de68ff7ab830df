"""
CLI entrypoint.

doctor   : print effective settings
analyze  : run discovery for a URL and print / save the tools
validate : offline check of a saved tools.json
call     : execute one tool from a saved tools.json
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..core.errors import WebMcpError
from ..core.hub import execute_tool
from ..core.log import init_logging
from ..core.settings import settings
from ..core.types import ToolDefinition
from ..discovery.pipeline import discover
from ..reporting.writer import read_discovery, write_discovery

app = typer.Typer(help="webmcp: turn a website into callable tools")
console = Console()


@app.callback()
def _main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override WEBMCP_LOG_LEVEL"),
    log_json: bool = typer.Option(False, "--log-json", help="Emit JSON log lines"),
) -> None:
    init_logging(log_level, json_output=log_json or None)


@app.command("doctor")
def doctor() -> None:
    """Environment check: print key settings to confirm the CLI is usable."""
    console.print("[bold green]webmcp[/] environment")
    console.print(f"- headless:      {settings.headless}")
    console.print(f"- http timeout:  {settings.request_timeout_seconds}s")
    console.print(f"- browser timeout: {settings.browser_timeout_ms}ms")
    console.print(f"- llm model:     {settings.llm_model}")
    console.print(f"- snippet chars: {settings.snippet_chars}")


def _tools_table(title: str, tools: list[ToolDefinition]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("name")
    table.add_column("transport")
    table.add_column("description")
    for i, tool in enumerate(tools, start=1):
        badge = "[cyan]HTTP[/]" if tool.transport == "http" else "[magenta]Browser[/]"
        table.add_row(str(i), tool.name, badge, tool.description)
    return table


@app.command("analyze")
def analyze(
    url: str = typer.Argument(..., help="Website to analyze"),
    skip_llm: bool = typer.Option(False, "--skip-llm", help="Skip LLM enrichment stage"),
    out_dir: Optional[Path] = typer.Option(
        None, "--out", help="Write tools.json / tools.csv into this directory"
    ),
) -> None:
    """Discover tools for URL and print them."""

    def on_progress(stage: int, message: str) -> None:
        console.print(f"[dim]  stage {stage}: {message}[/]")

    console.print(f"Analyzing {url}...")
    result = asyncio.run(discover(url, skip_llm=skip_llm, on_progress=on_progress))
    console.print(
        _tools_table(
            f"Discovered {len(result.tools)} tools (via {result.discovered_via})", result.tools
        )
    )
    if out_dir is not None:
        json_path, csv_path = write_discovery(result, out_dir)
        console.print(f"[bold green]Written[/]: {json_path}  |  {csv_path}")


def _check_tool(raw: Any) -> tuple[str, str | None]:
    """(name, problem) for one raw tool entry; problem is None when valid."""
    name = raw.get("name", "?") if isinstance(raw, dict) else "?"
    try:
        tool = ToolDefinition.model_validate(raw)
    except ValidationError as ve:
        return str(name), ve.errors()[0].get("msg", "invalid tool")
    if tool.browser_config is not None and not tool.browser_config.steps:
        return tool.name, "browserConfig has no steps"
    return tool.name, None


@app.command("validate")
def validate(
    tools_file: Path = typer.Argument(..., help="Path to a saved tools.json"),
) -> None:
    """
    Offline validation: check every tool of a saved discovery result against
    the ToolDefinition model. Exit non-zero if any tool is invalid.
    """
    if not tools_file.exists():
        typer.secho(f"[validate] file not found: {tools_file}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    try:
        data = json.loads(tools_file.read_text(encoding="utf-8"))
    except ValueError as e:
        typer.secho(f"[validate] not JSON: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    raw_tools = data.get("tools") if isinstance(data, dict) else data
    if not isinstance(raw_tools, list):
        typer.secho("[validate] expected a discovery result or a tool list", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    table = Table(title="Validation Results", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("name")
    table.add_column("result")
    table.add_column("detail")

    failures = 0
    seen: set[str] = set()
    for i, raw in enumerate(raw_tools, start=1):
        name, problem = _check_tool(raw)
        if problem is None and name in seen:
            problem = "duplicate tool name"
        seen.add(name)
        if problem:
            failures += 1
            table.add_row(str(i), name, "[red]Invalid[/]", problem)
        else:
            table.add_row(str(i), name, "[green]OK[/]", "-")

    console.print(table)
    if failures:
        raise typer.Exit(code=1)
    typer.secho("[validate] all tools passed", fg=typer.colors.GREEN)


@app.command("call")
def call(
    tools_file: Path = typer.Argument(..., help="Path to a saved tools.json"),
    tool_name: str = typer.Argument(..., help="Tool to execute"),
    args_json: str = typer.Option("{}", "--args", help='Arguments as JSON, e.g. \'{"q": "x"}\''),
    headless: bool = typer.Option(True, "--headless/--no-headless", help="Run browser headless"),
) -> None:
    """Execute one tool from a saved discovery result and print what it returns."""
    if not tools_file.exists():
        typer.secho(f"[call] file not found: {tools_file}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    try:
        result = read_discovery(tools_file)
        args = json.loads(args_json)
    except (ValidationError, ValueError) as e:
        typer.secho(f"[call] invalid input: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    if not isinstance(args, dict):
        typer.secho("[call] --args must be a JSON object", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    tool = next((t for t in result.tools if t.name == tool_name), None)
    if tool is None:
        names = ", ".join(t.name for t in result.tools) or "none"
        typer.secho(f"[call] no tool {tool_name!r}. Available: {names}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    driver = None
    if tool.transport == "browser":
        from ..io.playwright_driver import PlaywrightDriver

        driver = PlaywrightDriver(headless=headless, default_timeout_ms=settings.browser_timeout_ms)

    try:
        value = asyncio.run(execute_tool(tool, args, driver=driver))
    except (WebMcpError, httpx.HTTPError) as e:
        typer.secho(f"[call] {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if isinstance(value, str):
        console.print(value, markup=False, highlight=False)
    else:
        console.print_json(data=value)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
