"""Document chunking module - adapts libs.splitter for the ingestion layer.

Turns a Document into Chunks carrying what downstream consumers need on top
of the raw split:
1. Chunk ID Generation: deterministic ``{doc_id}_{index:04d}_{hash8}``
2. Metadata Inheritance: document metadata copied onto every chunk
3. chunk_index / source_ref: position and parent traceability
"""

from __future__ import annotations

import dataclasses
import hashlib
from typing import TYPE_CHECKING, List, Optional

from token_chunker.core.types import Chunk, Document
from token_chunker.libs.splitter import BaseSplitter, SplitterFactory

if TYPE_CHECKING:
    from token_chunker.core.settings import Settings
    from token_chunker.core.trace.trace_context import TraceContext


class DocumentChunker:
    """Converts Documents into token-bounded Chunks with business enrichment.

    Attributes:
        limit: Token limit per chunk (``splitter.chunk_tokens``).

    Example:
        >>> settings = load_settings("config/settings.yaml")
        >>> chunker = DocumentChunker(settings)
        >>> chunks = chunker.split_document(document)
        >>> chunks[0].metadata["chunk_index"]
        0
    """

    def __init__(
        self,
        settings: Settings,
        splitter: Optional[BaseSplitter] = None,
        limit: Optional[int] = None,
        splitter_type: Optional[str] = None,
    ):
        """Initialize DocumentChunker with configuration.

        Args:
            settings: Settings with ``splitter.*`` and ``tokenizer.*``.
            splitter: Pre-built splitter; skips the factory entirely.
            limit: Token limit overriding ``splitter.chunk_tokens``.
            splitter_type: Registered type overriding ``splitter.type``.

        Raises:
            ValueError: If the splitter type is missing or unknown.
        """
        self._splitter = splitter or SplitterFactory.create(settings, splitter_type)
        self.limit = limit if limit is not None else int(settings.splitter["chunk_tokens"])

    @property
    def splitter(self) -> BaseSplitter:
        return self._splitter

    def split_document(self, document: Document, trace: Optional[TraceContext] = None) -> List[Chunk]:
        """Split a Document into enriched Chunks.

        Args:
            document: Source document to split into chunks.
            trace: Optional trace context, forwarded to the splitter.

        Returns:
            Chunks in document order with ids and inherited metadata.

        Raises:
            ValueError: If the document has no text, or the limit is below
                the tokenizer's formatting overhead.
            TokenizerInitError: If the configured tokenizer model is unknown.
        """
        if not document.text or not document.text.strip():
            raise ValueError(f"Document {document.id} has no text content to split")

        pieces = self._splitter.split(document.text, self.limit, trace=trace)

        return [
            dataclasses.replace(
                piece,
                id=self._generate_chunk_id(document.id, index, piece.text),
                metadata=self._inherit_metadata(document, index),
            )
            for index, piece in enumerate(pieces)
        ]

    def _generate_chunk_id(self, doc_id: str, index: int, text: str) -> str:
        content_hash = hashlib.sha256(text.encode("utf-8")).hexdigest()[:8]
        return f"{doc_id}_{index:04d}_{content_hash}"

    def _inherit_metadata(self, document: Document, chunk_index: int) -> dict:
        chunk_metadata = document.metadata.copy()
        chunk_metadata["chunk_index"] = chunk_index
        chunk_metadata["source_ref"] = document.id
        return chunk_metadata
