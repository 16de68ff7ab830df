"""
Writers to persist a DiscoveryResult as JSON and CSV, and to load it back.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Tuple

from ..core.types import DiscoveryResult


def write_discovery(result: DiscoveryResult, out_dir: Path) -> Tuple[Path, Path]:
    """
    Write a DiscoveryResult into out_dir as tools.json and tools.csv.
    Returns (json_path, csv_path).
    """
    out_dir.mkdir(parents=True, exist_ok=True)

    json_path = out_dir / "tools.json"
    csv_path = out_dir / "tools.csv"

    # JSON: the camelCase boundary shape, optional keys left out
    json_path.write_text(
        result.model_dump_json(indent=2, by_alias=True, exclude_none=True), encoding="utf-8"
    )

    # CSV: one row per tool
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["source", "via", "name", "transport", "method", "url", "description"])
        for tool in result.tools:
            http = tool.http_config
            writer.writerow(
                [
                    result.source_url,
                    result.discovered_via,
                    tool.name,
                    tool.transport,
                    http.method if http else "",
                    http.url if http else "",
                    tool.description,
                ]
            )

    return json_path, csv_path


def read_discovery(path: Path) -> DiscoveryResult:
    return DiscoveryResult.model_validate_json(path.read_text(encoding="utf-8"))
