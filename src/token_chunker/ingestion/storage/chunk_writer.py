"""JSON Lines output for chunked documents."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Iterable

from token_chunker.core.types import Chunk

logger = logging.getLogger(__name__)


class ChunkWriter:
    """Writes each document's chunks to ``<output_dir>/<stem>.chunks.jsonl``.

    One JSON object per line, as produced by :meth:`Chunk.to_dict`. An
    existing file for the same source is overwritten. Sources whose stems
    clash (``a/readme.md`` and ``b/readme.md``) are written with
    ``disambiguate=True``, which inserts 8 hex chars of the SHA256 of the
    resolved source path: ``<stem>.<hash8>.chunks.jsonl``.
    """

    SUFFIX = ".chunks.jsonl"

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)

    def output_path(self, source_path: str | Path, disambiguate: bool = False) -> Path:
        source = Path(source_path)
        name = source.stem
        if disambiguate:
            name += "." + hashlib.sha256(str(source.resolve()).encode("utf-8")).hexdigest()[:8]
        return self.output_dir / f"{name}{self.SUFFIX}"

    def write(
        self,
        source_path: str | Path,
        chunks: Iterable[Chunk],
        disambiguate: bool = False,
    ) -> Path:
        """Write *chunks* for *source_path* and return the output file path."""
        path = self.output_path(source_path, disambiguate)
        path.parent.mkdir(parents=True, exist_ok=True)

        count = 0
        with path.open("w", encoding="utf-8") as fh:
            for chunk in chunks:
                fh.write(json.dumps(chunk.to_dict(), ensure_ascii=False) + "\n")
                count += 1

        logger.debug("Wrote %d chunks to %s", count, path)
        return path

    @staticmethod
    def read(path: str | Path) -> list[dict]:
        """Read back the records of a chunks file."""
        with Path(path).open("r", encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]
