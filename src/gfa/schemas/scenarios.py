"""Scenario snapshot schemas."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

ScenarioStatus = Literal["pending", "running", "completed", "failed"]


class ScenarioSnapshot(BaseModel):
    scenario_id: str
    kind: Literal["input", "output"]
    data: dict[str, Any] | None = None
    source: Literal["database", "filesystem", "none"] = "none"


class ScenarioInputPayload(BaseModel):
    customers: list[dict[str, Any]] = Field(default_factory=list)
    products: list[dict[str, Any]] = Field(default_factory=list)
    settings: Optional[dict[str, Any]] = None
