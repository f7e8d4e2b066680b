"""Loader for markdown and plain-text files."""

from __future__ import annotations

import logging
from pathlib import Path

from token_chunker.core.types import Document
from token_chunker.libs.loader.base_loader import BaseLoader

logger = logging.getLogger(__name__)


class MarkdownLoader(BaseLoader):
    """Reads ``.md``, ``.markdown`` and ``.txt`` files as UTF-8 text.

    Newlines are not translated (CRLF stays CRLF), so chunk offsets index
    the decoded file text exactly.
    """

    suffixes = (".md", ".markdown", ".txt")

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def load(self, file_path: str | Path) -> Document:
        path = self._validate_file(file_path)
        try:
            with path.open("r", encoding=self.encoding, newline="") as fh:
                text = fh.read()
        except UnicodeDecodeError as e:
            raise ValueError(f"File is not valid {self.encoding} text: {path}") from e

        doc_type = "text" if path.suffix.lower() == ".txt" else "markdown"
        document = self._build_document(path, text, doc_type)
        logger.debug("Loaded %s (%d chars)", path, len(text))
        return document
