"""
In-memory event log for analysis and classification runs

Every run on a dataset gets its own RunLogger. Events carry the pipeline
stage, a message and optional data; stage timings and the latest progress
percentage are tracked alongside. Nothing is persisted.
"""
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class RunEventLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class RunEvent:
    """One event of a run"""
    at: str
    level: str
    stage: str
    message: str
    data: Optional[Dict[str, Any]] = None
    elapsed_ms: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RunLogger:
    """
    Event log of a single run.

    Written from the worker thread executing the run and read from API
    requests, so every access to the event list holds the lock.
    """

    def __init__(self, run_id: str, kind: str):
        """
        Args:
            run_id: Identifier of the run, e.g. "dataset-2-analysis-1"
            kind: "analysis" or "classification"
        """
        self.run_id = run_id
        self.kind = kind
        self.started_at = _utc_now()
        self.completed_at: Optional[str] = None
        self.success: Optional[bool] = None
        self.error_message: Optional[str] = None
        self.percent = 0

        self._started = time.monotonic()
        self._stage_started: Dict[str, float] = {}
        self._events: List[RunEvent] = []
        self._lock = threading.Lock()

    def record(
        self,
        level: RunEventLevel,
        stage: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        elapsed_ms: Optional[int] = None
    ) -> None:
        event = RunEvent(_utc_now(), level.value, stage, message, data, elapsed_ms)
        with self._lock:
            self._events.append(event)

    def info(self, stage: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.record(RunEventLevel.INFO, stage, message, data)

    def warning(self, stage: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.record(RunEventLevel.WARNING, stage, message, data)

    def error(self, stage: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.record(RunEventLevel.ERROR, stage, message, data)

    def begin_stage(self, stage: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Start timing a stage"""
        self._stage_started[stage] = time.monotonic()
        self.info(stage, f"{stage} started", data)

    def end_stage(self, stage: str, data: Optional[Dict[str, Any]] = None, ok: bool = True) -> None:
        """Close a stage; the event carries its elapsed time when begin_stage() was called"""
        started = self._stage_started.pop(stage, None)
        elapsed_ms = int((time.monotonic() - started) * 1000) if started is not None else None
        self.record(
            RunEventLevel.INFO if ok else RunEventLevel.ERROR,
            stage,
            f"{stage} {'finished' if ok else 'failed'}",
            data,
            elapsed_ms
        )

    def progress(self, stage: str, percent: int, message: str) -> None:
        """Pipeline progress callback: (stage, percent, message)"""
        self.percent = percent
        self.record(RunEventLevel.DEBUG, stage, message, {"percent": percent})

    def close(self, success: bool, error: Optional[str] = None) -> None:
        """Mark the run finished"""
        with self._lock:
            self.completed_at = _utc_now()
            self.success = success
            self.error_message = error
            if success:
                self.percent = 100

    @property
    def duration_seconds(self) -> float:
        return time.monotonic() - self._started

    def snapshot(self) -> Dict[str, Any]:
        """Run metadata plus all events so far"""
        with self._lock:
            snapshot: Dict[str, Any] = {
                "run_id": self.run_id,
                "kind": self.kind,
                "started_at": self.started_at,
                "percent": self.percent,
                "events": [event.as_dict() for event in self._events],
            }
            if self.completed_at:
                snapshot["completed_at"] = self.completed_at
                snapshot["success"] = self.success
            if self.error_message:
                snapshot["error"] = self.error_message
            return snapshot
