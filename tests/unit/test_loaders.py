"""Tests for the markdown/text and PDF loaders."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from token_chunker.libs.loader import MarkdownLoader, PdfLoader


class _FakeMarkItDown:
    def __init__(self, text: str | None = None, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.converted: list[str] = []

    def convert(self, source: str) -> SimpleNamespace:
        self.converted.append(source)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text_content=self.text)


# ── MarkdownLoader ──────────────────────────────────────────────────


def test_markdown_loader_reads_text_and_metadata(tmp_path: Path) -> None:
    path = tmp_path / "guide.md"
    path.write_text("intro line\n# Guide Title\nbody\n", encoding="utf-8")

    document = MarkdownLoader().load(path)

    assert document.text == "intro line\n# Guide Title\nbody\n"
    assert document.id.startswith("doc_") and len(document.id) == 20
    assert document.metadata["source_path"] == str(path.resolve())
    assert document.metadata["doc_type"] == "markdown"
    assert document.metadata["title"] == "Guide Title"
    assert document.id == f"doc_{document.metadata['doc_hash'][:16]}"


def test_text_file_title_falls_back_to_first_line(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("\n  First words  \nmore\n", encoding="utf-8")

    document = MarkdownLoader().load(path)

    assert document.metadata["doc_type"] == "text"
    assert document.metadata["title"] == "First words"


def test_same_content_gives_same_document_id(tmp_path: Path) -> None:
    (tmp_path / "a.md").write_text("same", encoding="utf-8")
    (tmp_path / "b.md").write_text("same", encoding="utf-8")

    loader = MarkdownLoader()

    assert loader.load(tmp_path / "a.md").id == loader.load(tmp_path / "b.md").id


def test_markdown_loader_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        MarkdownLoader().load(tmp_path / "missing.md")


def test_markdown_loader_rejects_other_suffix(tmp_path: Path) -> None:
    path = tmp_path / "table.csv"
    path.write_text("a,b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported file type"):
        MarkdownLoader().load(path)


def test_markdown_loader_rejects_directory(tmp_path: Path) -> None:
    directory = tmp_path / "folder.md"
    directory.mkdir()

    with pytest.raises(ValueError, match="not a file"):
        MarkdownLoader().load(directory)


def test_markdown_loader_invalid_encoding_raises_value_error(tmp_path: Path) -> None:
    path = tmp_path / "latin.md"
    path.write_bytes("caf\xe9".encode("latin-1"))

    with pytest.raises(ValueError, match="utf-8"):
        MarkdownLoader().load(path)


# ── PdfLoader ───────────────────────────────────────────────────────


def test_pdf_loader_converts_to_markdown(tmp_path: Path) -> None:
    path = tmp_path / "rules.pdf"
    path.write_bytes(b"%PDF-1.4 fake")
    fake = _FakeMarkItDown(text="# Rules\nBe kind.")
    loader = PdfLoader(converter=fake)

    document = loader.load(path)

    assert document.text == "# Rules\nBe kind."
    assert document.metadata["doc_type"] == "pdf"
    assert document.metadata["title"] == "Rules"
    assert fake.converted == [str(path.resolve())]


def test_pdf_loader_empty_conversion_gives_empty_text(tmp_path: Path) -> None:
    path = tmp_path / "blank.pdf"
    path.write_bytes(b"%PDF-1.4 fake")
    fake = _FakeMarkItDown(text=None)
    loader = PdfLoader(converter=fake)

    assert loader.load(path).text == ""


def test_pdf_loader_wraps_conversion_failure(tmp_path: Path) -> None:
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"not a pdf")
    fake = _FakeMarkItDown(error=ValueError("corrupt xref"))
    loader = PdfLoader(converter=fake)

    with pytest.raises(RuntimeError, match="corrupt xref") as excinfo:
        loader.load(path)

    assert isinstance(excinfo.value.__cause__, ValueError)


def test_markdown_loader_keeps_crlf_line_endings(tmp_path: Path) -> None:
    raw = "# Title\r\n\r\nBody line\r\n"
    path = tmp_path / "windows.md"
    path.write_bytes(raw.encode("utf-8"))

    document = MarkdownLoader().load(path)

    assert document.text == raw
    assert document.metadata["title"] == "Title"
