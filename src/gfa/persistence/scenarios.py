"""Scenario input/output snapshots, database-first with a filesystem fallback."""

from __future__ import annotations

import logging
from typing import Any

from ..db.supabase import get_supabase_client
from .filesystem import FileStorage

logger = logging.getLogger(__name__)

SCENARIO_STATUSES = ("pending", "running", "completed", "failed")

_TABLES = {"input": ("scenario_inputs", "input_data"), "output": ("scenario_outputs", "output_data")}


def _save_snapshot(kind: str, scenario_id: str, data: dict[str, Any]) -> str:
    table, column = _TABLES[kind]
    supabase = get_supabase_client()
    if supabase:
        try:
            supabase.table(table).insert([{"scenario_id": scenario_id, column: data}]).execute()
            return "database"
        except Exception as exc:
            logger.warning(f"Failed to save scenario {kind} to database, writing file instead: {exc}")

    storage = FileStorage()
    storage.write_json(storage.scenario_directory(scenario_id) / f"{kind}.json", data)
    return "filesystem"


def _load_snapshot(kind: str, scenario_id: str) -> tuple[dict[str, Any] | None, str]:
    table, column = _TABLES[kind]
    supabase = get_supabase_client()
    if supabase:
        try:
            response = (
                supabase.table(table)
                .select(column)
                .eq("scenario_id", scenario_id)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
            if response.data:
                return response.data[0].get(column), "database"
        except Exception as exc:
            logger.warning(f"Failed to load scenario {kind} from database, trying file: {exc}")

    storage = FileStorage()
    data = storage.read_json(storage.scenario_directory(scenario_id) / f"{kind}.json")
    if data is None:
        return None, "none"
    return data, "filesystem"


def save_scenario_input(scenario_id: str, data: dict[str, Any]) -> str:
    """Store the latest input snapshot; returns where it was written."""
    return _save_snapshot("input", scenario_id, data)


def save_scenario_output(scenario_id: str, data: dict[str, Any]) -> str:
    return _save_snapshot("output", scenario_id, data)


def load_scenario_input(scenario_id: str) -> tuple[dict[str, Any] | None, str]:
    return _load_snapshot("input", scenario_id)


def load_scenario_output(scenario_id: str) -> tuple[dict[str, Any] | None, str]:
    return _load_snapshot("output", scenario_id)


def update_scenario_status(scenario_id: str, status: str) -> bool:
    """Record a scenario's run status. Returns False when nothing was stored."""
    if status not in SCENARIO_STATUSES:
        raise ValueError(f"Invalid scenario status '{status}'.")

    supabase = get_supabase_client()
    if not supabase:
        logger.debug(f"Supabase not configured - status '{status}' for scenario {scenario_id} not stored")
        return False
    try:
        supabase.table("scenarios").update({"status": status}).eq("id", scenario_id).execute()
        return True
    except Exception as exc:
        logger.warning(f"Failed to update status of scenario {scenario_id}: {exc}")
        return False
