"""
Project-level exception types, one hierarchy for discovery and execution.
- WebMcpError: base class for every custom error
- ToolConfigError: a tool definition cannot be executed as configured
- InvalidUrlError: a URL is not absolute / parseable
- ToolExecutionError: the live call failed (HTTP status, browser step)
"""
# @file purpose: Define error taxonomy for webmcp.

from __future__ import annotations

from typing import Any


class WebMcpError(Exception):
    """Base class for all custom errors in webmcp."""


class ToolConfigError(WebMcpError):
    """Raised when a tool definition is missing configuration it needs."""

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(f'Tool "{tool}" {message}')
        self.tool = tool


class StepValidationError(ToolConfigError):
    """A browser step is missing a field its action requires."""

    def __init__(self, tool: str, index: int, action: str, requirement: str) -> None:
        super().__init__(tool, f"step {index} ({action}): {requirement}")
        self.index = index
        self.action = action
        self.requirement = requirement


class InvalidUrlError(WebMcpError, ValueError):
    """Raised when a URL is not absolute."""

    def __init__(self, label: str, value: str) -> None:
        super().__init__(f"invalid {label}: {value!r}")
        self.label = label
        self.value = value


class ToolExecutionError(WebMcpError):
    """Base for failures of the live call itself."""


class HttpStatusError(ToolExecutionError):
    """Non-2xx response from the target endpoint."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"HTTP {status_code} from {url}")
        self.status_code = status_code
        self.url = url


class BrowserStepError(ToolExecutionError):
    """
    Raised when a browser step fails to execute (element missing, timeout,
    empty extraction, navigation error...). Carries enough context for the
    CLI to print a one-line diagnosis.
    """

    def __init__(
        self,
        action: str,
        message: str,
        *,
        selector: str | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.action: str = action
        self.selector: str | None = selector
        self.url: str | None = url
        self.details: dict[str, Any] = details or {}
        self.cause: BaseException | None = cause

    def __str__(self) -> str:
        parts = [f"[{self.action}] {super().__str__()}"]
        if self.selector:
            parts.append(f"selector={self.selector}")
        if self.url:
            parts.append(f"url={self.url}")
        if self.details:
            kv = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"details={{ {kv} }}")
        return " | ".join(parts)


class DiscoveryTimeoutError(WebMcpError):
    """Discovery did not finish within the caller's time budget."""

    def __init__(self, url: str, timeout_s: float) -> None:
        super().__init__(f"discovery of {url} timed out after {timeout_s:g}s")
        self.url = url
        self.timeout_s = timeout_s


class IntegrationNotFoundError(WebMcpError, KeyError):
    """No integration registered under the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ToolNotFoundError(WebMcpError, KeyError):
    """The integration has no tool with the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
