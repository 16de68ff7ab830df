"""
Convert an OpenAPI / Swagger document into http ToolDefinitions.

The document is arbitrary JSON, so every structural access is guarded:
anything that is not the expected shape is skipped rather than trusted.
"""
# @file purpose: Turn API description documents into tool definitions.

from __future__ import annotations

import re
from typing import Any

import structlog
from pydantic import ValidationError

from ..core.errors import InvalidUrlError
from ..core.types import (
    HttpConfig,
    InputSchema,
    PropertySchema,
    ToolDefinition,
    is_absolute_url,
)
from .spec_detector import origin_of

logger = structlog.get_logger(__name__)

SUPPORTED_METHODS: tuple[str, ...] = ("get", "post", "put", "delete", "patch")

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_IDENT = re.compile(r"[^a-z0-9_]")


def to_snake_case(value: str) -> str:
    """
    parseHTTPRequest -> parse_http_request, fetchAPIResponse -> fetch_api_response.
    Output only holds [a-z0-9_] and never starts with "_", so a second pass is a no-op.
    """
    s = _ACRONYM_BOUNDARY.sub(r"\1_\2", value)
    s = _CAMEL_BOUNDARY.sub(r"\1_\2", s)
    s = _NON_IDENT.sub("_", s.lower())
    return s.lstrip("_")


def _param_schema(param: dict[str, Any]) -> dict[str, Any]:
    schema = param.get("schema")
    if isinstance(schema, dict):
        return dict(schema)
    # Swagger 2 puts the type on the parameter itself
    if isinstance(param.get("type"), str):
        return {"type": param["type"]}
    return {"type": "string"}


def _property(schema: dict[str, Any]) -> PropertySchema:
    try:
        return PropertySchema.model_validate(schema)
    except ValidationError:
        desc = schema.get("description")
        return PropertySchema(description=desc if isinstance(desc, str) else None)


def _named_params(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    return [p for p in raw if isinstance(p, dict) and isinstance(p.get("name"), str)]


def _merge_params(path_level: Any, op_level: Any) -> list[dict[str, Any]]:
    """Operation parameters override path parameters with the same name."""
    merged: dict[str, dict[str, Any]] = {p["name"]: p for p in _named_params(path_level)}
    for p in _named_params(op_level):
        merged[p["name"]] = p
    return list(merged.values())


def _json_body_schema(op: dict[str, Any]) -> dict[str, Any] | None:
    body = op.get("requestBody")
    if not isinstance(body, dict):
        return None
    content = body.get("content")
    if not isinstance(content, dict):
        return None
    media = content.get("application/json")
    if not isinstance(media, dict):
        return None
    schema = media.get("schema")
    if isinstance(schema, dict) and isinstance(schema.get("properties"), dict):
        return schema
    return None


def _build_tool(
    method: str, path: str, op: dict[str, Any], path_params: Any, origin: str
) -> ToolDefinition:
    operation_id = op.get("operationId")
    if not isinstance(operation_id, str) or not operation_id:
        operation_id = f"{method}_{path.replace('/', '_')}"
    name = to_snake_case(operation_id) or method

    description = next(
        (v for v in (op.get("summary"), op.get("description")) if isinstance(v, str) and v),
        path,
    )

    properties: dict[str, PropertySchema] = {}
    required: list[str] = []
    for param in _merge_params(path_params, op.get("parameters")):
        pname = param["name"]
        desc = param.get("description")
        properties[pname] = _property(
            {**_param_schema(param), "description": desc if isinstance(desc, str) else ""}
        )
        if param.get("required") is True:
            required.append(pname)

    body = _json_body_schema(op)
    if body is not None:
        body_required = body.get("required") if isinstance(body.get("required"), list) else []
        for fname, fschema in body["properties"].items():
            if fname in properties or not isinstance(fschema, dict):
                continue
            properties[fname] = _property(fschema)
            if fname in body_required:
                required.append(fname)

    return ToolDefinition(
        name=name,
        description=description,
        input_schema=InputSchema(properties=properties, required=required or None),
        transport="http",
        http_config=HttpConfig(
            url=f"{origin}{path}",
            method=method.upper(),
            param_mapping={p: p for p in properties},
        ),
    )


def parse_openapi_spec(spec: dict[str, Any], base_url: str) -> list[ToolDefinition]:
    """
    One ToolDefinition per (path, method) for get/post/put/delete/patch.
    The endpoint URL is the origin of base_url plus the raw path; a path
    component in base_url is ignored.
    """
    if not is_absolute_url(base_url):
        raise InvalidUrlError("baseUrl", base_url)
    origin = origin_of(base_url)

    paths = spec.get("paths") if isinstance(spec, dict) else None
    if not isinstance(paths, dict):
        return []

    tools: list[ToolDefinition] = []
    for path, item in paths.items():
        if not isinstance(path, str) or not isinstance(item, dict):
            continue
        for method, op in item.items():
            if method not in SUPPORTED_METHODS or not isinstance(op, dict):
                continue
            tools.append(_build_tool(method, path, op, item.get("parameters"), origin))

    logger.debug("spec_parsed", tools=len(tools), origin=origin)
    return tools
