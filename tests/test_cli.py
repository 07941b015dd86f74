from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List

import pytest
from typer.testing import CliRunner

from app.schemas import TrafficRecord
from cli.app import app
from models.errors import AuthError, ConflictError, NotFoundError


def _record(record_id: str, day: str, visits: int) -> TrafficRecord:
    stamp = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return TrafficRecord(id=record_id, date=day, visits=visits, created_at=stamp, updated_at=stamp)


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.records: List[TrafficRecord] = [
            _record("rec-3", "2025-02-01", 7),
            _record("rec-2", "2025-01-20", 5),
            _record("rec-1", "2025-01-05", 10),
        ]
        self.created: List[tuple[str, int]] = []
        self.deleted: List[str] = []
        self.list_error: Exception | None = None
        self.closed = False

    def list_records(self) -> List[TrafficRecord]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.records)

    def create_record(self, date: str, visits: int) -> TrafficRecord:
        if any(record.date == date for record in self.records):
            raise ConflictError()
        record = _record(f"new-{len(self.created)}", date, visits)
        self.created.append((date, visits))
        self.records.append(record)
        return record

    def update_record(self, record_id: str, date=None, visits=None) -> TrafficRecord:
        raise NotFoundError()

    def delete_record(self, record_id: str) -> None:
        self.deleted.append(record_id)
        self.records = [record for record in self.records if record.id != record_id]

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    holder: dict = {}

    def factory(config):
        holder["stub"] = StubClient(config)
        return holder["stub"]

    monkeypatch.setattr("cli.app.ApiClient", factory)

    class Proxy:
        def __getattr__(self, name):
            return getattr(holder["stub"], name)

    return Proxy()  # type: ignore[return-value]


def test_list_command_filters_by_range(runner: CliRunner, stub) -> None:
    result = runner.invoke(app, ["list", "--from", "2025-01-10", "--to", "2025-01-31"])

    assert result.exit_code == 0, result.output
    assert "rec-2" in result.stdout
    assert "rec-1" not in result.stdout
    assert stub.closed is True


def test_stats_command_shows_both_summaries(runner: CliRunner, stub) -> None:
    result = runner.invoke(app, ["stats", "--from", "2025-02-01"])

    assert result.exit_code == 0, result.output
    assert "All Time" in result.stdout
    assert "total: 22" in result.stdout
    assert "Selected Range" in result.stdout
    assert "total: 7" in result.stdout


def test_chart_command_monthly(runner: CliRunner, stub) -> None:
    result = runner.invoke(app, ["chart", "--view", "monthly"])

    assert result.exit_code == 0, result.output
    assert "January 2025" in result.stdout
    assert "February 2025" in result.stdout


def test_add_command_reports_conflict(runner: CliRunner, stub) -> None:
    result = runner.invoke(app, ["add", "2025-01-05", "3"])

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_add_command_validates_before_sending(runner: CliRunner, stub) -> None:
    result = runner.invoke(app, ["add", "2025-02-30", "3"])

    assert result.exit_code == 1
    assert "Invalid date format" in result.output
    assert stub.created == []


def test_add_command_success(runner: CliRunner, stub) -> None:
    result = runner.invoke(app, ["add", "2025-03-01", "42"])

    assert result.exit_code == 0, result.output
    assert "Added 42 visits for 2025-03-01." in result.stdout
    assert stub.created == [("2025-03-01", 42)]


def test_update_command_reports_not_found(runner: CliRunner, stub) -> None:
    result = runner.invoke(app, ["update", "missing", "--visits", "3"])

    assert result.exit_code == 1
    assert "Traffic entry not found" in result.output


def test_list_command_reports_auth_failure(runner: CliRunner, stub, monkeypatch) -> None:
    original = StubClient.__init__

    def failing_init(self, config) -> None:
        original(self, config)
        self.list_error = AuthError("Token expired")

    monkeypatch.setattr(StubClient, "__init__", failing_init)

    result = runner.invoke(app, ["list"])

    assert result.exit_code == 1
    assert "Token expired" in result.output


def test_import_command_skips_invalid_and_duplicates(runner: CliRunner, stub, tmp_path) -> None:
    data = [
        {"date": "2025-03-01", "visits": 100},
        {"date": "2025-03-02", "visits": 200},
        {"date": "2025-01-05", "visits": 1},
        {"date": "2025-02-30", "visits": 1},
        "garbage",
    ]
    path = tmp_path / "data.json"
    path.write_text(json.dumps(data))

    result = runner.invoke(app, ["import", str(path)])

    assert result.exit_code == 0, result.output
    assert "Imported 2 entries." in result.stdout
    assert "Skipped 2 invalid and 1 duplicate entries." in result.stdout
    assert "Total visits: 300 (average 150)" in result.stdout


def test_import_command_replace_deletes_existing(runner: CliRunner, stub, tmp_path) -> None:
    path = tmp_path / "data.json"
    path.write_text(json.dumps([{"date": "2025-01-05", "visits": 1}]))

    result = runner.invoke(app, ["import", str(path), "--replace"])

    assert result.exit_code == 0, result.output
    assert sorted(stub.deleted) == ["rec-1", "rec-2", "rec-3"]
    assert "Imported 1 entries." in result.stdout
