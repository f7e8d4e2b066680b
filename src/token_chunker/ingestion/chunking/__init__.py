"""Chunking module - document splitting adapter layer.

Transforms Document objects into Chunk objects with ids, inherited
metadata and traceability.
"""

from token_chunker.ingestion.chunking.document_chunker import DocumentChunker

__all__ = ["DocumentChunker"]
