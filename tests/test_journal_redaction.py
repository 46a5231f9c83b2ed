"""Tests for secret redaction and run journaling."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from windy_weather.exceptions import JournalError
from windy_weather.journal import ForecastEvent, JournalWriter, _json_default
from windy_weather.redaction import REDACTED, sanitize_for_logging, sanitize_text
from windy_weather.weather.models import Condition


def test_request_body_key_is_redacted() -> None:
    body = {"lat": 1.0, "lon": 2.0, "model": "gfs", "key": "windy-secret", "levels": ["surface"]}
    sanitized = sanitize_for_logging(body)
    assert sanitized["key"] == REDACTED
    assert sanitized["lat"] == 1.0
    assert sanitized["levels"] == ["surface"]


def test_nested_api_key_fields_are_redacted() -> None:
    sanitized = sanitize_for_logging({"settings": {"windy_api_key": "abc", "timeout": 5}})
    assert sanitized == {"settings": {"windy_api_key": REDACTED, "timeout": 5}}


@pytest.mark.parametrize(
    "text",
    [
        '{"lat": 1, "key": "windy-secret"}',
        "request failed: api_key=windy-secret",
        "url?key=windy-secret&lat=1",
        "Authorization: Bearer windy-secret",
    ],
)
def test_sanitize_text_hides_secret(text: str) -> None:
    assert "windy-secret" not in sanitize_text(text)


def test_sanitize_text_leaves_plain_messages_alone() -> None:
    message = "Forecast ready for Springfield: 9 hourly, 2 daily entries"
    assert sanitize_text(message) == message


def test_journal_writes_sanitized_jsonl(tmp_path: Path) -> None:
    journal = JournalWriter(
        journal_dir=tmp_path / "journal",
        raw_payload_dir=tmp_path / "raw",
        session_id="testsession",
    )
    journal.write_event(
        ForecastEvent.REQUEST_START,
        payload={"lat": 1.0, "key": "windy-secret", "condition": Condition.RAIN},
        metadata={"session_id": "testsession"},
    )

    lines = journal.events_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["event_type"] == "forecast_request_start"
    assert record["session_id"] == "testsession"
    assert record["payload"]["key"] == REDACTED
    assert record["payload"]["condition"] == "rain"


def test_raw_snapshot_written_to_disk(tmp_path: Path) -> None:
    journal = JournalWriter(
        journal_dir=tmp_path / "journal",
        raw_payload_dir=tmp_path / "raw",
        session_id="testsession",
    )
    path = journal.write_raw_snapshot("windy point/forecast", {"ts": [1], "temp-surface": [280.0]})
    assert path.exists()
    assert path.parent == tmp_path / "raw"
    assert path.name.endswith("_testsession_windy_windy_point_forecast.json")
    assert json.loads(path.read_text(encoding="utf-8")) == {"ts": [1], "temp-surface": [280.0]}


def test_unserializable_payload_raises_journal_error(tmp_path: Path) -> None:
    journal = JournalWriter(
        journal_dir=tmp_path / "journal",
        raw_payload_dir=tmp_path / "raw",
        session_id="testsession",
    )
    with pytest.raises(JournalError, match="Failed writing event journal"):
        journal.write_event(ForecastEvent.SUMMARY, payload={"value": object()})


def test_json_default_handles_paths() -> None:
    assert _json_default(Path("/tmp/x")) == "/tmp/x"


def _read_events(journal: JournalWriter) -> list[dict]:
    return [json.loads(line) for line in journal.events_path.read_text(encoding="utf-8").splitlines()]


def test_raw_snapshot_records_its_own_event(tmp_path: Path) -> None:
    journal = JournalWriter(
        journal_dir=tmp_path / "journal",
        raw_payload_dir=tmp_path / "raw",
        session_id="testsession",
    )
    path = journal.write_raw_snapshot("point_forecast", {"ts": [1]})

    assert path.name.endswith("_testsession_windy_point_forecast.json")
    [event] = _read_events(journal)
    assert event["event_type"] == "forecast_raw_snapshot"
    assert event["payload"] == {"name": "point_forecast", "path": str(path)}


def test_snapshot_provider_prefix_is_configurable(tmp_path: Path) -> None:
    journal = JournalWriter(
        journal_dir=tmp_path / "journal",
        raw_payload_dir=tmp_path / "raw",
        session_id="testsession",
        snapshot_provider="nominatim/reverse",
    )
    path = journal.write_raw_snapshot("lookup", {"address": {}})
    assert path.name.endswith("_testsession_nominatim_reverse_lookup.json")


def test_event_type_accepts_plain_string_names(tmp_path: Path) -> None:
    journal = JournalWriter(
        journal_dir=tmp_path / "journal",
        raw_payload_dir=tmp_path / "raw",
        session_id="testsession",
    )
    journal.write_event("forecast_shutdown", payload={"exit_code": 0})
    assert _read_events(journal)[0]["event_type"] == ForecastEvent.SHUTDOWN.value


def test_unknown_event_type_raises_journal_error(tmp_path: Path) -> None:
    journal = JournalWriter(
        journal_dir=tmp_path / "journal",
        raw_payload_dir=tmp_path / "raw",
        session_id="testsession",
    )
    with pytest.raises(JournalError, match="Unknown journal event type"):
        journal.write_event("weather_fetched", payload={})
    assert not journal.events_path.exists()


def test_write_failure_records_error_and_type(tmp_path: Path) -> None:
    journal = JournalWriter(
        journal_dir=tmp_path / "journal",
        raw_payload_dir=tmp_path / "raw",
        session_id="testsession",
    )
    journal.write_failure("HTTP 401: Unauthorized - invalid key")
    journal.write_failure(RuntimeError("boom"), unhandled=True)

    handled, unhandled = _read_events(journal)
    assert handled["event_type"] == "forecast_request_failure"
    assert handled["payload"] == {"error": "HTTP 401: Unauthorized - invalid key"}
    assert unhandled["event_type"] == "forecast_request_failure_unhandled"
    assert unhandled["payload"] == {"error": "boom", "type": "RuntimeError"}
