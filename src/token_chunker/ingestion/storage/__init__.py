"""Storage module - persists chunks for downstream consumers."""

from token_chunker.ingestion.storage.chunk_writer import ChunkWriter

__all__ = ["ChunkWriter"]
