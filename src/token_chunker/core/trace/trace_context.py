"""Per-run trace of the chunking stages.

One trace is opened for every file the pipeline processes (``ingestion``)
or for a direct splitter call (``split``). Stages append entries in the
order they run; :class:`~token_chunker.core.trace.trace_collector.TraceCollector`
persists the finished trace as one JSON line.
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

TraceType = Literal["ingestion", "split"]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TraceContext:
    """Stages, timings and outcome of one chunking run.

    Attributes:
        trace_type: ``"ingestion"`` for a pipeline run over one file,
            ``"split"`` for a bare splitter call.
        trace_id: Random UUID4 string.
        started_at: ISO-8601 creation time (UTC).
        finished_at: ISO-8601 time of :meth:`finish`, None while running.
        stages: ``{"stage", "timestamp", "data"[, "elapsed_ms"]}`` entries in
            recording order. A stage name may repeat.
        metadata: Run attributes such as ``source_path``.
        error: Failure message when the run did not complete.
    """

    trace_type: TraceType = "ingestion"
    trace_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    started_at: str = field(default_factory=_utc_now)
    finished_at: Optional[str] = None
    stages: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    _clock_start: float = field(default_factory=time.monotonic, repr=False)
    _clock_end: Optional[float] = field(default=None, repr=False)

    @property
    def status(self) -> str:
        """``"running"``, ``"ok"`` or ``"failed"``."""
        if self.error is not None:
            return "failed"
        return "running" if self.finished_at is None else "ok"

    def record_stage(
        self,
        stage_name: str,
        data: Dict[str, Any],
        elapsed_ms: Optional[float] = None,
    ) -> None:
        """Append a stage entry. *elapsed_ms* is stored rounded to 0.01 ms."""
        entry: Dict[str, Any] = {"stage": stage_name, "timestamp": _utc_now(), "data": data}
        if elapsed_ms is not None:
            entry["elapsed_ms"] = round(elapsed_ms, 2)
        self.stages.append(entry)

    def fail(self, error: str) -> None:
        """Record *error* as the run's outcome and finish the trace."""
        self.error = error
        self.finish()

    def finish(self) -> None:
        """Stop the clock. Repeated calls keep the first end time."""
        if self._clock_end is None:
            self._clock_end = time.monotonic()
            self.finished_at = _utc_now()

    def elapsed_ms(self, stage_name: Optional[str] = None) -> float:
        """Milliseconds spent in *stage_name*, or in the whole run.

        The whole-run figure runs up to :meth:`finish`, or to now while the
        trace is still open. For a repeated stage the last timed entry wins.

        Raises:
            KeyError: If *stage_name* has no timed entry.
        """
        if stage_name is None:
            end = self._clock_end if self._clock_end is not None else time.monotonic()
            return (end - self._clock_start) * 1000.0

        for entry in reversed(self.stages):
            if entry["stage"] == stage_name and "elapsed_ms" in entry:
                return entry["elapsed_ms"]
        raise KeyError(f"Stage '{stage_name}' has no recorded timing")

    def get_stage_data(self, stage_name: str) -> Optional[Dict[str, Any]]:
        """Return the payload of the last *stage_name* entry, or None."""
        for entry in reversed(self.stages):
            if entry["stage"] == stage_name:
                return entry["data"]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trace_id": self.trace_id,
            "trace_type": self.trace_type,
            "status": self.status,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "total_elapsed_ms": round(self.elapsed_ms(), 2),
            "stages": [dict(entry) for entry in self.stages],
            "metadata": dict(self.metadata),
            "error": self.error,
        }
