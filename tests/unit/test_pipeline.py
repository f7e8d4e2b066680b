"""Tests for ChunkingPipeline single-file and concurrent runs."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from token_chunker.core.settings import Settings
from token_chunker.core.trace.trace_collector import TraceCollector
from token_chunker.core.trace.trace_context import TraceContext
from token_chunker.ingestion.pipeline import ChunkingPipeline
from token_chunker.ingestion.storage.chunk_writer import ChunkWriter
from token_chunker.libs.tokenizer import BaseTokenizer, TokenizerFactory


_GUIDE = (
    "# Guide\n"
    "\n"
    "Intro paragraph for the guide.\n"
    "\n"
    "## Setup\n"
    "Run [install](http://example.com/install) first.\n"
    "Then read the rest.\n"
    "\n"
    "## Usage\n"
    "![diagram](img/usage.png)\n"
    "Use it well.\n"
)


class _CharTokenizer(BaseTokenizer):
    def encode(self, text: str) -> list[int]:
        return [ord(ch) for ch in text]

    def format_for_tokenization(self, text: str) -> str:
        return f"[{text}]"


def _make_settings(splitter_type: str = "markdown", chunk_tokens: int = 80) -> Settings:
    raw = {
        "tokenizer": {"provider": "fake", "model": "fake-model"},
        "splitter": {"type": splitter_type, "chunk_tokens": chunk_tokens},
        "ingestion": {"max_workers": 2},
        "observability": {},
    }
    return Settings(
        tokenizer=raw["tokenizer"],
        splitter=raw["splitter"],
        ingestion=raw["ingestion"],
        observability=raw["observability"],
        raw=raw,
    )


@pytest.fixture(autouse=True)
def _fake_tokenizer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(TokenizerFactory, "_registry", {"fake": lambda model_name: _CharTokenizer()})


@pytest.fixture
def pipeline(tmp_path: Path) -> ChunkingPipeline:
    return ChunkingPipeline(_make_settings(), output_dir=tmp_path / "chunks")


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_run_writes_chunks_file(pipeline: ChunkingPipeline, tmp_path: Path) -> None:
    source = _write(tmp_path / "guide.md", _GUIDE)

    result = pipeline.run(source)

    assert result.success, result.error
    assert result.output_path == str(tmp_path / "chunks" / "guide.chunks.jsonl")
    records = ChunkWriter.read(result.output_path)
    assert len(records) == result.chunk_count > 1
    assert sum(r["metadata"]["tokens"] for r in records) == result.token_count
    assert all(r["metadata"]["tokens"] <= 80 for r in records)
    assert result.overflow_count == 0
    assert records[0]["metadata"]["source_path"] == str(source.resolve())
    assert records[0]["id"].startswith(f"{result.doc_id}_0000_")
    assert [r["metadata"]["chunk_index"] for r in records] == list(range(len(records)))


def test_run_keeps_heading_context_and_link_targets(
    pipeline: ChunkingPipeline, tmp_path: Path
) -> None:
    source = _write(tmp_path / "guide.md", _GUIDE)

    result = pipeline.run(source)
    records = ChunkWriter.read(result.output_path)

    setup = next(r for r in records if "http://example.com/install" in r["metadata"]["urls"])
    assert setup["metadata"]["headers"] == {"h1": "Guide", "h2": "Setup"}
    assert "{{$url0}}" in setup["text"]
    usage = next(r for r in records if r["metadata"]["images"])
    assert usage["metadata"]["headers"] == {"h1": "Guide", "h2": "Usage"}
    assert "".join(
        Path(source).read_text(encoding="utf-8")[r["metadata"]["start"]:r["metadata"]["end"]]
        for r in records
    ) == _GUIDE


def test_run_records_trace_stages(pipeline: ChunkingPipeline, tmp_path: Path) -> None:
    source = _write(tmp_path / "guide.md", _GUIDE)
    trace = TraceContext()

    result = pipeline.run(source, trace=trace)

    assert [s["stage"] for s in trace.stages] == ["load", "split", "write"]
    assert trace.get_stage_data("split")["chunk_count"] == result.chunk_count
    assert trace.get_stage_data("write")["output_path"] == result.output_path


def test_unsupported_suffix_is_a_failed_result(pipeline: ChunkingPipeline, tmp_path: Path) -> None:
    source = _write(tmp_path / "table.csv", "a,b\n")

    result = pipeline.run(source)

    assert not result.success
    assert "Unsupported file type" in result.error
    assert not pipeline.supports(source)
    assert pipeline.supports(tmp_path / "x.PDF")


def test_missing_and_empty_files_fail(pipeline: ChunkingPipeline, tmp_path: Path) -> None:
    missing = pipeline.run(tmp_path / "missing.md")
    empty = pipeline.run(_write(tmp_path / "empty.md", "  \n"))

    assert not missing.success and "File not found" in missing.error
    assert not empty.success and "no text" in empty.error
    assert empty.doc_id is not None


def test_limit_below_overhead_fails_per_file(tmp_path: Path) -> None:
    pipeline = ChunkingPipeline(_make_settings(), output_dir=tmp_path / "out", limit=2)

    result = pipeline.run(_write(tmp_path / "guide.md", _GUIDE))

    assert not result.success
    assert "formatting overhead" in result.error


def test_run_many_keeps_input_order_and_collects_traces(
    pipeline: ChunkingPipeline, tmp_path: Path
) -> None:
    paths = [
        _write(tmp_path / "a.md", "# A\n" + "alpha line\n" * 12),
        _write(tmp_path / "b.txt", "beta\n" * 3),
        tmp_path / "c.md",
        _write(tmp_path / "d.md", _GUIDE),
    ]
    collector = TraceCollector(tmp_path / "logs" / "traces.jsonl")

    results = pipeline.run_many(paths, collector=collector)

    assert [r.file_path for r in results] == [str(p) for p in paths]
    assert [r.success for r in results] == [True, True, False, True]
    traces = collector.load()
    assert [t["metadata"]["source_path"] for t in traces] == [str(p) for p in paths]
    assert all(t["trace_type"] == "ingestion" and t["finished_at"] for t in traces)
    assert [t["status"] for t in traces] == ["ok", "ok", "failed", "ok"]
    assert "File not found" in traces[2]["error"]


def test_run_many_matches_sequential_runs(tmp_path: Path) -> None:
    paths = [_write(tmp_path / f"doc{i}.md", _GUIDE * (i + 1)) for i in range(4)]
    sequential = ChunkingPipeline(_make_settings("token"), output_dir=tmp_path / "seq")
    concurrent = ChunkingPipeline(_make_settings("token"), output_dir=tmp_path / "par")

    expected = [ChunkWriter.read(sequential.run(p).output_path) for p in paths]
    results = concurrent.run_many(paths, max_workers=4)

    assert [ChunkWriter.read(r.output_path) for r in results] == expected


def test_result_to_dict_is_json_serialisable(pipeline: ChunkingPipeline, tmp_path: Path) -> None:
    result = pipeline.run(_write(tmp_path / "guide.md", _GUIDE))

    data = json.loads(json.dumps(result.to_dict()))

    assert data["success"] is True
    assert data["stages"]["chunking"]["limit"] == 80


def test_splitter_type_override_ignores_sections(tmp_path: Path) -> None:
    pipeline = ChunkingPipeline(
        _make_settings("markdown"), output_dir=tmp_path / "out", splitter_type="token"
    )

    assert pipeline.chunker.splitter.respect_sections is False
    assert pipeline.run(_write(tmp_path / "guide.md", _GUIDE)).success


def test_run_many_keeps_documents_that_share_a_stem(
    pipeline: ChunkingPipeline, tmp_path: Path
) -> None:
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    first = _write(tmp_path / "a" / "readme.md", "# A\nalpha text\n")
    second = _write(tmp_path / "b" / "readme.md", "# B\nbeta text\n")

    results = pipeline.run_many([first, second])

    assert all(r.success for r in results)
    assert results[0].output_path != results[1].output_path
    assert len(list((tmp_path / "chunks").glob("readme.*.chunks.jsonl"))) == 2
    for source, result in zip((first, second), results):
        records = ChunkWriter.read(result.output_path)
        assert {r["metadata"]["source_path"] for r in records} == {str(source.resolve())}


def test_run_many_processes_a_repeated_path_once(
    pipeline: ChunkingPipeline, tmp_path: Path
) -> None:
    source = _write(tmp_path / "guide.md", _GUIDE)
    collector = TraceCollector(tmp_path / "traces.jsonl")

    results = pipeline.run_many([source, source], collector=collector)

    assert results[0].success
    assert results[0].output_path == str(tmp_path / "chunks" / "guide.chunks.jsonl")
    assert not results[1].success
    assert "item 1" in results[1].error
    assert [t["status"] for t in collector.load()] == ["ok", "failed"]


def test_crlf_offsets_index_the_file_text(pipeline: ChunkingPipeline, tmp_path: Path) -> None:
    raw = _GUIDE.replace("\n", "\r\n")
    source = tmp_path / "windows.md"
    source.write_bytes(raw.encode("utf-8"))

    records = ChunkWriter.read(pipeline.run(source).output_path)

    assert "".join(raw[r["metadata"]["start"]:r["metadata"]["end"]] for r in records) == raw
    assert all("\r" not in title for r in records for title in r["metadata"]["headers"].values())
