"""File-based persistence helpers for optimization outputs and scenario snapshots."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import settings

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileStorage:
    """Thin wrapper around the data root for storing JSON and CSV outputs."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.output_root = self.root / "outputs"
        self.scenario_root = self.root / "scenarios"
        self.output_root.mkdir(parents=True, exist_ok=True)

    def make_run_directory(self, prefix: str = "gfa") -> Path:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        path = self.output_root / f"{prefix}_{timestamp}"
        path.mkdir(parents=True, exist_ok=False)
        return path

    def scenario_directory(self, scenario_id: str) -> Path:
        safe_id = _UNSAFE_CHARS.sub("_", scenario_id) or "scenario"
        path = self.scenario_root / safe_id
        path.mkdir(parents=True, exist_ok=True)
        return path

    def write_json(self, path: Path, data: Any, *, indent: int = 2) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=indent)

    def read_json(self, path: Path) -> Any | None:
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def write_csv(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            handle.write(content)
