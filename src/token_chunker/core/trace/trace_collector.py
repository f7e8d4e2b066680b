"""Appends finished traces to a JSON Lines file."""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from token_chunker.core.settings import resolve_path
from token_chunker.core.trace.trace_context import TraceContext

logger = logging.getLogger(__name__)

DEFAULT_TRACES_PATH = "logs/traces.jsonl"


class TraceCollector:
    """Writes each collected trace as one line of *traces_path*.

    Writes are serialised with a lock, so pipeline worker threads may share
    a collector. The parent directory is created on the first write.

    Args:
        traces_path: Output file; defaults to ``logs/traces.jsonl`` under
            the repository root.
    """

    def __init__(self, traces_path: Optional[str | Path] = None) -> None:
        self._path = Path(traces_path) if traces_path is not None else resolve_path(DEFAULT_TRACES_PATH)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def collect(self, trace: TraceContext) -> bool:
        """Finish *trace* and append it to the traces file.

        Returns:
            False if the file could not be written. The failure is logged;
            a chunking run never fails because of its trace.
        """
        trace.finish()
        line = json.dumps(trace.to_dict(), ensure_ascii=False)

        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
            except OSError:
                logger.exception("Failed to write trace %s to %s", trace.trace_id, self._path)
                return False
        return True

    def collect_all(self, traces: Iterable[TraceContext]) -> int:
        """Collect *traces* in order and return how many were written."""
        return sum(1 for trace in traces if self.collect(trace))

    def load(self) -> List[Dict[str, Any]]:
        """Read back every trace record; empty when nothing was written yet."""
        if not self._path.exists():
            return []
        with self._path.open("r", encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
