#!/usr/bin/env python
"""Chunking script for token-chunker.

Splits markdown, text and PDF documents into token-bounded chunks and writes
one JSON Lines file per document.

Usage:
    # Chunk a single markdown file
    python scripts/chunk_documents.py --path docs/rules.md

    # Chunk every supported file in a directory with a 300-token limit
    python scripts/chunk_documents.py --path docs/ --limit 300

    # Keep every markdown section in chunks of its own
    python scripts/chunk_documents.py --path docs/ --splitter markdown

    # Write output somewhere else, using 8 worker threads
    python scripts/chunk_documents.py --path docs/ --output out/chunks --workers 8

Exit codes:
    0 - Success (all files processed)
    1 - Partial failure (some files failed)
    2 - Complete failure (all files failed or configuration error)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List

_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
_SRC_PATH = _REPO_ROOT / "src"
if str(_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(_SRC_PATH))

from token_chunker.core.settings import load_settings, resolve_path
from token_chunker.core.trace import TraceCollector
from token_chunker.ingestion.pipeline import ChunkingPipeline, PipelineResult
from token_chunker.libs.splitter import SplitterFactory
from token_chunker.observability.logger import get_logger

SUPPORTED_EXTENSIONS = [".md", ".markdown", ".txt", ".pdf"]


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Split documents into token-bounded chunks.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "--path", "-p",
        required=True,
        help="Path to file or directory to chunk. "
             "Directories are searched recursively for supported files."
    )

    parser.add_argument(
        "--limit", "-l",
        type=int,
        default=None,
        help="Token limit per chunk (default: splitter.chunk_tokens from config)"
    )

    parser.add_argument(
        "--splitter", "-s",
        choices=SplitterFactory.available(),
        default=None,
        help="Splitting strategy: token (plain) or markdown (section-bounded); "
             "default: splitter.type from config, shipped as token"
    )

    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory for .chunks.jsonl files (default: ingestion.output_dir)"
    )

    parser.add_argument(
        "--config",
        default=str(_REPO_ROOT / "config" / "settings.yaml"),
        help="Path to configuration file (default: config/settings.yaml)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Number of documents processed in parallel (default: ingestion.max_workers)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List files that would be processed without actually processing"
    )

    return parser.parse_args()


def discover_files(path: str, extensions: Iterable[str] = SUPPORTED_EXTENSIONS) -> List[Path]:
    """Discover files to process from a file or directory path.

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If a single file has an unsupported extension.
    """
    extensions = [ext.lower() for ext in extensions]
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Path does not exist: {path}")

    if path.is_file():
        if path.suffix.lower() in extensions:
            return [path]
        raise ValueError(f"Unsupported file type: {path.suffix}. Supported: {extensions}")

    return sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in extensions)


def summarize(results: List[PipelineResult]) -> Dict[str, int]:
    """Aggregate counts over *results*; token figures cover successful files only."""
    done = [r for r in results if r.success]
    return {
        "files": len(results),
        "succeeded": len(done),
        "failed": len(results) - len(done),
        "chunks": sum(r.chunk_count for r in done),
        "tokens": sum(r.token_count for r in done),
        "overflows": sum(r.overflow_count for r in done),
    }


def exit_code(results: List[PipelineResult]) -> int:
    """0 when every file succeeded, 2 when none did, 1 otherwise."""
    succeeded = sum(1 for r in results if r.success)
    if succeeded == len(results):
        return 0
    return 1 if succeeded else 2


def print_summary(results: List[PipelineResult], verbose: bool = False) -> None:
    totals = summarize(results)
    rule = "=" * 60

    print(f"\n{rule}\nCHUNKING SUMMARY\n{rule}")
    print(f"Files: {totals['files']} ({totals['succeeded']} ok, {totals['failed']} failed)")
    print(f"Chunks: {totals['chunks']}")
    print(f"Tokens: {totals['tokens']}")
    if totals["overflows"]:
        print(f"[WARN] {totals['overflows']} chunk(s) exceed the limit")

    if verbose:
        for r in results:
            if r.success:
                print(f"  [OK] {r.file_path} -> {r.output_path} ({r.chunk_count} chunks)")
            else:
                print(f"  [FAIL] {r.file_path}: {r.error}")

    print(rule)


def main() -> int:
    """Run the chunking script and return its exit code."""
    args = parse_args()

    print("[*] token-chunker")
    print("=" * 60)

    if args.limit is not None and args.limit <= 0:
        print(f"[FAIL] --limit must be a positive integer, got {args.limit}")
        return 2

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"[FAIL] Failed to load configuration: {e}")
        return 2
    print(f"[OK] Configuration loaded from: {args.config}")

    observability = settings.observability
    logger = get_logger(
        "token-chunker",
        log_level="DEBUG" if args.verbose else observability.get("log_level"),
        json_format=observability.get("log_format") == "json",
    )
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        files = discover_files(args.path)
    except (FileNotFoundError, ValueError) as e:
        print(f"[FAIL] {e}")
        return 2

    if not files:
        print(f"[WARN] No supported files under {args.path}")
        return 0
    print(f"[INFO] Found {len(files)} file(s) to process")
    print("\n".join(f"   - {f}" for f in files))

    if args.dry_run:
        print("\n[INFO] Dry run: nothing was chunked")
        return 0

    try:
        pipeline = ChunkingPipeline(
            settings,
            output_dir=args.output,
            limit=args.limit,
            splitter_type=args.splitter,
        )
    except Exception as e:
        print(f"[FAIL] Could not set up the pipeline: {e}")
        logger.exception("Pipeline initialization failed")
        return 2

    print(f"   Splitter: {args.splitter or settings.splitter['type']}")
    print(f"   Limit: {pipeline.chunker.limit} tokens")
    print(f"   Output: {pipeline.writer.output_dir}")

    collector = TraceCollector(resolve_path(observability.get("traces_path", "logs/traces.jsonl")))
    results = pipeline.run_many(files, collector=collector, max_workers=args.workers)

    width = len(str(len(results)))
    for i, result in enumerate(results, 1):
        outcome = f"[OK] {result.chunk_count} chunks" if result.success else f"[FAIL] {result.error}"
        print(f"[{i:>{width}}/{len(results)}] {result.file_path}: {outcome}")

    print_summary(results, args.verbose)
    return exit_code(results)


if __name__ == "__main__":
    sys.exit(main())
