"""Common ground for document loaders.

A loader reads one file into a :class:`~token_chunker.core.types.Document`
whose text is markdown, ready for the token splitter. Loaders never split.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from itertools import islice
from pathlib import Path
from typing import Optional

from token_chunker.core.types import Document

_HASH_BLOCK = 1 << 16


class BaseLoader(ABC):
    """A file-to-Document converter for a fixed set of suffixes.

    Documents built through :meth:`_build_document` get the id ``doc_``
    plus 16 hex chars of the file's SHA256, and metadata with
    ``source_path``, ``doc_type``, ``doc_hash`` and, when one is found,
    ``title``.
    """

    #: File suffixes (lower-case, with dot) this loader accepts.
    suffixes: tuple[str, ...] = ()

    @abstractmethod
    def load(self, file_path: str | Path) -> Document:
        """Read *file_path* into a Document.

        Raises:
            FileNotFoundError: If the file is missing.
            ValueError: If the path is not a file or has the wrong suffix.
        """

    def _validate_file(self, file_path: str | Path) -> Path:
        """Resolve *file_path*, checking it is an existing file we accept."""
        resolved = Path(file_path).resolve()
        if not resolved.exists():
            raise FileNotFoundError(f"File not found: {resolved}")
        if not resolved.is_file():
            raise ValueError(f"Path is not a file: {resolved}")
        suffix = resolved.suffix.lower()
        if self.suffixes and suffix not in self.suffixes:
            raise ValueError(
                f"Unsupported file type for {type(self).__name__}: {resolved.suffix}. "
                f"Supported: {list(self.suffixes)}"
            )
        return resolved

    @staticmethod
    def _compute_file_hash(file_path: Path) -> str:
        digest = hashlib.sha256()
        with file_path.open("rb") as fh:
            for block in iter(lambda: fh.read(_HASH_BLOCK), b""):
                digest.update(block)
        return digest.hexdigest()

    @staticmethod
    def _extract_title(text: str) -> Optional[str]:
        """First ``# `` heading in the top 20 lines, else the first non-empty
        line in the top 10."""
        head = [line.strip() for line in islice(text.split("\n"), 20)]
        heading = next((line for line in head if line.startswith("# ")), None)
        if heading is not None:
            return heading[2:].strip()
        return next((line for line in head[:10] if line), None)

    def _build_document(self, path: Path, text: str, doc_type: str) -> Document:
        doc_hash = self._compute_file_hash(path)
        metadata = {"source_path": str(path), "doc_type": doc_type, "doc_hash": doc_hash}
        title = self._extract_title(text)
        if title:
            metadata["title"] = title
        return Document(id=f"doc_{doc_hash[:16]}", text=text, metadata=metadata)
