"""Append-only JSONL journaling for forecast runs."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from .exceptions import JournalError
from .redaction import sanitize_for_logging, sanitize_text


class ForecastEvent(str, Enum):
    """Event types recorded over the lifetime of one forecast run."""

    STARTUP = "forecast_startup"
    REQUEST_START = "forecast_request_start"
    RAW_SNAPSHOT = "forecast_raw_snapshot"
    SUMMARY = "forecast_summary"
    REQUEST_FAILURE = "forecast_request_failure"
    REQUEST_FAILURE_UNHANDLED = "forecast_request_failure_unhandled"
    SHUTDOWN = "forecast_shutdown"


# Raw snapshots are named <utc stamp>_<session>_<provider>_<name>.json.
DEFAULT_SNAPSHOT_PROVIDER = "windy"


def _json_default(value: Any) -> Any:
    """Fallback serializer for non-JSON native values."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC).isoformat()
        return value.astimezone(UTC).isoformat()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    # pydantic AnyUrl and friends render through __str__; anything else is schema drift.
    if hasattr(value, "__str__") and type(value).__str__ is not object.__str__:
        return sanitize_text(str(value))
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _safe_name(name: str) -> str:
    return "".join(ch if ch.isalnum() or ch in {"-", "_"} else "_" for ch in name)


class JournalWriter:
    """Writes forecast run events to JSONL and raw provider payloads to disk."""

    def __init__(
        self,
        journal_dir: Path,
        raw_payload_dir: Path,
        session_id: str,
        *,
        snapshot_provider: str = DEFAULT_SNAPSHOT_PROVIDER,
    ) -> None:
        self.journal_dir = journal_dir
        self.raw_payload_dir = raw_payload_dir
        self.session_id = session_id
        self.snapshot_provider = _safe_name(snapshot_provider)
        try:
            self.journal_dir.mkdir(parents=True, exist_ok=True)
            self.raw_payload_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise JournalError(f"Failed creating journal directories: {exc}") from exc
        self.events_path = self.journal_dir / f"{datetime.now(UTC):%Y%m%d}.jsonl"

    def write_event(
        self,
        event_type: ForecastEvent | str,
        payload: dict[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Append a single event record to the JSONL journal."""
        try:
            event = ForecastEvent(event_type)
        except ValueError as exc:
            raise JournalError(f"Unknown journal event type: {event_type!r}") from exc
        record: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "event_type": event.value,
            "session_id": self.session_id,
            "payload": sanitize_for_logging(payload),
            "metadata": sanitize_for_logging(metadata or {}),
        }
        try:
            with self.events_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(record, default=_json_default))
                fh.write("\n")
        except (OSError, TypeError, ValueError) as exc:
            raise JournalError(f"Failed writing event journal: {exc}") from exc

    def write_failure(self, error: BaseException | str, *, unhandled: bool = False) -> None:
        """Record why a run ended without a forecast."""
        payload: dict[str, Any] = {"error": str(error)}
        if isinstance(error, BaseException):
            payload["type"] = type(error).__name__
        event = ForecastEvent.REQUEST_FAILURE_UNHANDLED if unhandled else ForecastEvent.REQUEST_FAILURE
        self.write_event(event, payload=payload)

    def write_raw_snapshot(self, name: str, payload: Any) -> Path:
        """Write a full raw provider payload and record where it went."""
        timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
        output_path = (
            self.raw_payload_dir
            / f"{timestamp}_{self.session_id}_{self.snapshot_provider}_{_safe_name(name)}.json"
        )
        try:
            with output_path.open("w", encoding="utf-8") as fh:
                json.dump(
                    sanitize_for_logging(payload),
                    fh,
                    ensure_ascii=False,
                    indent=2,
                    default=_json_default,
                )
                fh.write("\n")
        except (OSError, TypeError, ValueError) as exc:
            raise JournalError(f"Failed writing raw payload snapshot: {exc}") from exc
        self.write_event(
            ForecastEvent.RAW_SNAPSHOT,
            payload={"name": name, "path": str(output_path)},
        )
        return output_path
