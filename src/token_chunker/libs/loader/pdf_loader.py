"""PDF documents, converted to markdown before chunking.

MarkItDown keeps the PDF's heading structure as ``#`` lines, so the
markdown splitter can still track section context.
"""

from __future__ import annotations

import logging
from pathlib import Path

from markitdown import MarkItDown

from token_chunker.core.types import Document
from token_chunker.libs.loader.base_loader import BaseLoader

logger = logging.getLogger(__name__)


class PdfLoader(BaseLoader):
    """Loads ``.pdf`` files as markdown text via MarkItDown."""

    suffixes = (".pdf",)

    def __init__(self, converter: MarkItDown | None = None) -> None:
        self._converter = converter or MarkItDown()

    def load(self, file_path: str | Path) -> Document:
        """Convert *file_path* and wrap the markdown in a Document.

        Raises:
            FileNotFoundError: If the file is missing.
            ValueError: If the suffix is not ``.pdf``.
            RuntimeError: If conversion fails; the library error is chained.
        """
        path = self._validate_file(file_path)

        try:
            converted = self._converter.convert(str(path))
        except Exception as exc:
            logger.error("MarkItDown could not convert %s: %s", path, exc)
            raise RuntimeError(f"PDF conversion failed for {path.name}: {exc}") from exc

        markdown = converted.text_content or ""
        logger.debug("Converted %s to %d chars of markdown", path, len(markdown))
        return self._build_document(path, markdown, "pdf")
