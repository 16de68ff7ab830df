"""
Data contracts shared by discovery and execution.
- ToolDefinition: a callable, schema-described tool (http or browser transport)
- FormCandidate: intermediate form description produced by the HTML analyzer
- DiscoveryResult: the output of one discover() call

Field names are snake_case in Python; the JSON boundary is camelCase
(inputSchema, httpConfig, paramRef, ...), so dump with by_alias=True.
"""
# @file purpose: Define tool/discovery data models using Pydantic v2.

from __future__ import annotations

from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]
FormMethod = Literal["GET", "POST"]
Transport = Literal["http", "browser"]
StepAction = Literal["navigate", "fill", "click", "waitFor", "extract"]
DiscoveredVia = Literal["api-spec", "html", "hybrid"]


def is_absolute_url(value: object) -> bool:
    """True for strings such as https://host/path (scheme + host)."""
    if not isinstance(value, str) or not value:
        return False
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict in the camelCase boundary shape."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class PropertySchema(_Model):
    """One input property; unknown JSON-schema keys (enum, items...) are kept."""

    model_config = ConfigDict(extra="allow")

    type: str = "string"
    description: str | None = None


class InputSchema(_Model):
    type: Literal["object"] = "object"
    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    required: list[str] | None = None

    @field_validator("required")
    @classmethod
    def _empty_required_is_absent(cls, v: list[str] | None) -> list[str] | None:
        return v or None

    @model_validator(mode="after")
    def _required_are_properties(self) -> "InputSchema":
        missing = [r for r in self.required or [] if r not in self.properties]
        if missing:
            raise ValueError(f"required fields not in properties: {missing}")
        return self


class HttpConfig(_Model):
    url: str = Field(..., description="Absolute endpoint URL.")
    method: HttpMethod = "GET"
    param_mapping: dict[str, str] = Field(
        default_factory=dict, description="tool argument name -> query key / body field"
    )

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, v: str) -> str:
        if not is_absolute_url(v):
            raise ValueError(f"invalid url: {v!r}")
        return v


class BrowserStep(_Model):
    action: StepAction
    selector: str | None = None
    value: str | None = None
    param_ref: str | None = Field(default=None, description="Argument substituted at run time.")


class BrowserConfig(_Model):
    steps: list[BrowserStep] = Field(default_factory=list)


class ToolDefinition(_Model):
    name: str = Field(..., min_length=1)
    description: str = ""
    input_schema: InputSchema = Field(default_factory=InputSchema)
    transport: Transport
    http_config: HttpConfig | None = None
    browser_config: BrowserConfig | None = None

    @model_validator(mode="after")
    def _config_matches_transport(self) -> "ToolDefinition":
        if self.transport == "http":
            if self.http_config is None:
                raise ValueError("http transport requires httpConfig")
            if self.browser_config is not None:
                raise ValueError("http transport must not carry browserConfig")
        else:
            if self.browser_config is None:
                raise ValueError("browser transport requires browserConfig")
            if self.http_config is not None:
                raise ValueError("browser transport must not carry httpConfig")
        return self


class FormField(_Model):
    name: str
    type: str = "text"
    placeholder: str | None = None


class FormCandidate(_Model):
    form_action: str
    method: FormMethod = "GET"
    fields: list[FormField] = Field(default_factory=list)
    submit_label: str | None = None


class DiscoveryResult(_Model):
    model_config = ConfigDict(frozen=True)

    tools: list[ToolDefinition] = Field(default_factory=list)
    source_url: str
    discovered_via: DiscoveredVia
