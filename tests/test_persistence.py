from pathlib import Path
from types import SimpleNamespace

import pytest

from src.gfa.persistence import scenarios
from src.gfa.persistence.filesystem import FileStorage


def test_file_storage_creates_run_directory(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="gfa_test")

    assert run_dir.exists()
    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path / "outputs"


def test_file_storage_writes_and_reads_json(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="gfa_test")

    summary_path = run_dir / "summary.json"
    assignments_path = run_dir / "assignments.csv"

    storage.write_json(summary_path, {"hello": "world"})
    storage.write_csv(assignments_path, "a,b\n1,2\n")

    assert summary_path.read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert storage.read_json(summary_path) == {"hello": "world"}
    assert storage.read_json(run_dir / "missing.json") is None
    assert assignments_path.read_text(encoding="utf-8") == "a,b\n1,2\n"


def test_scenario_directory_sanitizes_identifier(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)

    path = storage.scenario_directory("../abc/def")

    assert path.parent == tmp_path / "scenarios"
    assert path.name == ".._abc_def"


@pytest.fixture
def file_only_scenarios(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(scenarios, "get_supabase_client", lambda: None)
    monkeypatch.setattr(scenarios, "FileStorage", lambda: FileStorage(root=tmp_path))
    return tmp_path


def test_scenario_snapshots_fall_back_to_files(file_only_scenarios: Path) -> None:
    assert scenarios.save_scenario_input("s-1", {"customers": []}) == "filesystem"
    assert scenarios.save_scenario_output("s-1", {"feasible": True}) == "filesystem"

    assert scenarios.load_scenario_input("s-1") == ({"customers": []}, "filesystem")
    assert scenarios.load_scenario_output("s-1") == ({"feasible": True}, "filesystem")
    assert (file_only_scenarios / "scenarios" / "s-1" / "output.json").exists()


def test_missing_scenario_snapshot(file_only_scenarios: Path) -> None:
    assert scenarios.load_scenario_output("unknown") == (None, "none")


def test_status_update_without_database(file_only_scenarios: Path) -> None:
    assert scenarios.update_scenario_status("s-1", "running") is False
    with pytest.raises(ValueError):
        scenarios.update_scenario_status("s-1", "paused")


class DummyQuery:
    def __init__(self, client, table):
        self.client = client
        self.table = table

    def insert(self, rows):
        self.client.calls.append(("insert", self.table, rows))
        return self

    def update(self, values):
        self.client.calls.append(("update", self.table, values))
        return self

    def select(self, *columns, **kwargs):
        return self

    def eq(self, column, value):
        self.client.calls.append(("eq", self.table, column, value))
        return self

    def order(self, column, desc=False):
        return self

    def limit(self, count):
        return self

    def execute(self):
        return SimpleNamespace(data=self.client.rows.get(self.table, []))


class DummySupabase:
    def __init__(self, rows=None):
        self.rows = rows or {}
        self.calls = []

    def table(self, name):
        return DummyQuery(self, name)


def test_scenario_snapshots_use_database_when_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    client = DummySupabase(rows={"scenario_outputs": [{"output_data": {"feasible": False}}]})
    monkeypatch.setattr(scenarios, "get_supabase_client", lambda: client)

    assert scenarios.save_scenario_input("s-9", {"customers": []}) == "database"
    assert scenarios.load_scenario_output("s-9") == ({"feasible": False}, "database")
    assert scenarios.update_scenario_status("s-9", "completed") is True

    assert ("insert", "scenario_inputs", [{"scenario_id": "s-9", "input_data": {"customers": []}}]) in client.calls
    assert ("update", "scenarios", {"status": "completed"}) in client.calls
