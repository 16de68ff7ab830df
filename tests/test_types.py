import pytest
from pydantic import ValidationError

from webmcp.core.types import (
    DiscoveryResult,
    HttpConfig,
    InputSchema,
    ToolDefinition,
    is_absolute_url,
)


def _http_tool(**schema) -> ToolDefinition:
    return ToolDefinition(
        name="search",
        description="Search",
        input_schema=InputSchema(**schema),
        transport="http",
        http_config=HttpConfig(url="https://example.com/search", param_mapping={"q": "q"}),
    )


def test_empty_required_is_omitted_from_json() -> None:
    tool = _http_tool(properties={"q": {"type": "string"}}, required=[])
    dumped = tool.to_dict()
    assert "required" not in dumped["inputSchema"]
    assert "browserConfig" not in dumped
    assert dumped["httpConfig"]["paramMapping"] == {"q": "q"}


def test_required_must_name_properties() -> None:
    with pytest.raises(ValidationError):
        InputSchema(properties={"q": {"type": "string"}}, required=["nope"])


def test_transport_needs_matching_config() -> None:
    with pytest.raises(ValidationError):
        ToolDefinition(name="x", transport="http")
    with pytest.raises(ValidationError):
        ToolDefinition(name="x", transport="browser", http_config={"url": "https://a.b/"})


@pytest.mark.parametrize("url", ["", "not-a-valid-url", "/relative/path", "mailto:a@b.c"])
def test_http_config_rejects_non_absolute_url(url: str) -> None:
    assert not is_absolute_url(url)
    with pytest.raises(ValidationError, match="invalid url"):
        HttpConfig(url=url)


def test_loads_camel_case_boundary_shape() -> None:
    tool = ToolDefinition.model_validate(
        {
            "name": "login",
            "description": "Log in",
            "inputSchema": {
                "type": "object",
                "properties": {"email": {"type": "string", "format": "email"}},
                "required": ["email"],
            },
            "transport": "browser",
            "browserConfig": {
                "steps": [
                    {"action": "navigate", "value": "https://example.com/login"},
                    {"action": "fill", "selector": "#email", "paramRef": "email"},
                ]
            },
        }
    )
    assert tool.browser_config is not None
    assert tool.browser_config.steps[1].param_ref == "email"
    # unknown JSON-schema keys survive
    assert tool.to_dict()["inputSchema"]["properties"]["email"]["format"] == "email"


def test_http_method_is_upper_cased() -> None:
    assert HttpConfig(url="https://a.b/x", method="patch").method == "PATCH"


def test_unknown_step_action_rejected() -> None:
    with pytest.raises(ValidationError):
        ToolDefinition.model_validate(
            {
                "name": "x",
                "transport": "browser",
                "browserConfig": {"steps": [{"action": "hover", "selector": "a"}]},
            }
        )


def test_discovery_result_is_frozen() -> None:
    result = DiscoveryResult(tools=[], source_url="https://a.b", discovered_via="html")
    with pytest.raises(ValidationError):
        result.discovered_via = "hybrid"  # type: ignore[misc]
    assert result.to_dict() == {"tools": [], "sourceUrl": "https://a.b", "discoveredVia": "html"}
