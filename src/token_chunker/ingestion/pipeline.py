"""Chunking pipeline orchestrator.

Runs the document flow for one file:
    1. Document Loading (markdown/text/PDF -> Document)
    2. Chunking (Document -> token-bounded Chunks)
    3. Storage (Chunks -> JSON Lines file)

Independent files can be processed concurrently with :meth:`run_many`;
each run owns its own split state, only the tokenizer cache is shared.

Design Principles:
- Config-Driven: splitter, tokenizer and output configured via settings.yaml
- Observable: logs stage progress and records trace stages
- Per-file isolation: a failing file yields a failed result, not an exception
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from token_chunker.core.settings import Settings, load_settings, resolve_path
from token_chunker.core.trace.trace_collector import TraceCollector
from token_chunker.core.trace.trace_context import TraceContext
from token_chunker.ingestion.chunking.document_chunker import DocumentChunker
from token_chunker.ingestion.storage.chunk_writer import ChunkWriter
from token_chunker.libs.loader import BaseLoader, MarkdownLoader, PdfLoader

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of running the pipeline on one file.

    ``stages`` maps ``loading``/``chunking``/``storage`` to what each stage
    produced; on failure it holds the stages that completed.
    """

    success: bool
    file_path: str
    doc_id: Optional[str] = None
    chunk_count: int = 0
    token_count: int = 0
    overflow_count: int = 0
    output_path: Optional[str] = None
    error: Optional[str] = None
    stages: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ChunkingPipeline:
    """Main pipeline orchestrator for document chunking.

    Example:
        >>> settings = load_settings("config/settings.yaml")
        >>> pipeline = ChunkingPipeline(settings)
        >>> result = pipeline.run("docs/rules.md")
        >>> print(f"Wrote {result.chunk_count} chunks to {result.output_path}")
    """

    def __init__(
        self,
        settings: Settings,
        output_dir: Optional[str | Path] = None,
        limit: Optional[int] = None,
        chunker: Optional[DocumentChunker] = None,
        splitter_type: Optional[str] = None,
    ):
        """Initialize pipeline with all components.

        Args:
            settings: Application settings from settings.yaml
            output_dir: Override for ``ingestion.output_dir``
            limit: Override for ``splitter.chunk_tokens``
            chunker: Pre-built chunker, mainly for tests
            splitter_type: Override for ``splitter.type``
        """
        self.settings = settings
        ingestion_config = settings.ingestion

        logger.info("Initializing Chunking Pipeline components...")

        self.loaders: Dict[str, BaseLoader] = {}
        for loader in (MarkdownLoader(), PdfLoader()):
            for suffix in loader.suffixes:
                self.loaders[suffix] = loader
        logger.info("  ✓ Loaders initialized (%s)", ", ".join(sorted(self.loaders)))

        self.chunker = chunker or DocumentChunker(
            settings, limit=limit, splitter_type=splitter_type
        )
        logger.info("  ✓ DocumentChunker initialized (limit=%d tokens)", self.chunker.limit)

        if output_dir is None:
            output_dir = resolve_path(ingestion_config.get("output_dir", "data/chunks"))
        self.writer = ChunkWriter(output_dir)
        logger.info("  ✓ ChunkWriter initialized (output_dir=%s)", self.writer.output_dir)

        self.max_workers = int(ingestion_config.get("max_workers", 1))

    def supports(self, file_path: str | Path) -> bool:
        """Return True if a loader exists for the file's suffix."""
        return Path(file_path).suffix.lower() in self.loaders

    def run(
        self,
        file_path: str | Path,
        trace: Optional[TraceContext] = None,
        disambiguate: bool = False,
    ) -> PipelineResult:
        """Execute the pipeline on a single file.

        Args:
            file_path: Path to the file to process
            trace: Optional trace context for observability
            disambiguate: Add a source-path hash to the output file name

        Returns:
            PipelineResult with success status and statistics
        """
        file_path = Path(file_path)
        stages: Dict[str, Any] = {}
        document = None

        logger.info("Starting Chunking Pipeline for: %s", file_path)

        try:
            # Stage 1: Document Loading
            loader = self.loaders.get(file_path.suffix.lower())
            if loader is None:
                raise ValueError(
                    f"Unsupported file type: {file_path.suffix}. Supported: {sorted(self.loaders)}"
                )

            _t0 = time.monotonic()
            document = loader.load(file_path)
            _elapsed = (time.monotonic() - _t0) * 1000.0

            stages["loading"] = {
                "doc_id": document.id,
                "doc_type": document.metadata.get("doc_type"),
                "text_length": len(document.text),
            }
            logger.info("  Loaded %s (%d chars)", document.id, len(document.text))
            if trace is not None:
                trace.record_stage("load", dict(stages["loading"]), elapsed_ms=_elapsed)

            # Stage 2: Chunking (the splitter records its own "split" stage)
            chunks = self.chunker.split_document(document, trace=trace)
            limit = self.chunker.limit
            token_count = sum(c.token_count for c in chunks)
            overflow_count = sum(1 for c in chunks if c.token_count > limit)

            stages["chunking"] = {
                "chunk_count": len(chunks),
                "limit": limit,
                "token_count": token_count,
                "overflow_count": overflow_count,
            }
            logger.info("  Chunks generated: %d (%d tokens)", len(chunks), token_count)

            # Stage 3: Storage
            _t0 = time.monotonic()
            output_path = self.writer.write(file_path, chunks, disambiguate=disambiguate)
            _elapsed = (time.monotonic() - _t0) * 1000.0

            stages["storage"] = {"output_path": str(output_path)}
            if trace is not None:
                trace.record_stage("write", {
                    "method": "jsonl",
                    "output_path": str(output_path),
                    "chunk_count": len(chunks),
                }, elapsed_ms=_elapsed)

            logger.info("  ✓ Wrote %s", output_path)
            return PipelineResult(
                success=True,
                file_path=str(file_path),
                doc_id=document.id,
                chunk_count=len(chunks),
                token_count=token_count,
                overflow_count=overflow_count,
                output_path=str(output_path),
                stages=stages,
            )

        except Exception as e:
            logger.error("Pipeline failed for %s: %s", file_path, e, exc_info=True)
            if trace is not None:
                trace.fail(str(e))
            return PipelineResult(
                success=False,
                file_path=str(file_path),
                doc_id=document.id if document is not None else None,
                error=str(e),
                stages=stages,
            )

    def _stem_clashes(self, file_paths: Sequence[str | Path]) -> List[bool]:
        """Flag the files whose default output file would be shared with another."""
        targets = [self.writer.output_path(p) for p in file_paths]
        counts = Counter(targets)
        for target, count in counts.items():
            if count > 1:
                logger.warning("%d inputs map to %s; using hashed output names", count, target.name)
        return [counts[target] > 1 for target in targets]

    def run_many(
        self,
        file_paths: Sequence[str | Path],
        collector: Optional[TraceCollector] = None,
        max_workers: Optional[int] = None,
    ) -> List[PipelineResult]:
        """Process several files concurrently.

        Files sharing a stem get hashed output names so no output is
        overwritten. A path listed more than once is processed once; each
        repeat is a failed result pointing at the first occurrence.

        Args:
            file_paths: Files to process.
            collector: Optional collector receiving one ingestion trace per file.
            max_workers: Override for ``ingestion.max_workers``.

        Returns:
            Results in the same order as *file_paths*.
        """
        traces = []
        for file_path in file_paths:
            trace = TraceContext(trace_type="ingestion")
            trace.metadata["source_path"] = str(file_path)
            traces.append(trace)

        first_seen: Dict[Path, int] = {}
        results: List[Optional[PipelineResult]] = [None] * len(file_paths)
        for i, file_path in enumerate(file_paths):
            first = first_seen.setdefault(Path(file_path).resolve(), i)
            if first != i:
                error = f"Duplicate input: already processed as item {first + 1}"
                traces[i].fail(error)
                results[i] = PipelineResult(success=False, file_path=str(file_path), error=error)

        pending = sorted(first_seen.values())
        unique_paths = [file_paths[i] for i in pending]
        clashes = self._stem_clashes(unique_paths)

        workers = max(1, min(max_workers or self.max_workers, len(pending) or 1))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = executor.map(self.run, unique_paths, [traces[i] for i in pending], clashes)
            for i, result in zip(pending, outcomes):
                results[i] = result

        if collector is not None:
            written = collector.collect_all(traces)
            logger.debug("Collected %d of %d traces into %s", written, len(traces), collector.path)
        return results


def run_pipeline(
    file_path: str,
    settings_path: str = "config/settings.yaml",
    output_dir: Optional[str] = None,
) -> PipelineResult:
    """Convenience function to run the pipeline on one file.

    Args:
        file_path: Path to file to process
        settings_path: Path to settings.yaml
        output_dir: Optional output directory override

    Returns:
        PipelineResult with execution details
    """
    settings = load_settings(settings_path)
    pipeline = ChunkingPipeline(settings, output_dir=output_dir)
    return pipeline.run(file_path)
