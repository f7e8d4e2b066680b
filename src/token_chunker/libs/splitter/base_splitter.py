"""Base abstraction for text splitter strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from token_chunker.core.trace.trace_context import TraceContext
    from token_chunker.core.types import Chunk


class BaseSplitter(ABC):
    """Abstract interface for splitter implementations."""

    @abstractmethod
    def split(self, text: str, limit: int, trace: TraceContext | None = None) -> list[Chunk]:
        """Split text into token-bounded chunks.

        Args:
            text: Source text to split.
            limit: Maximum tokens per chunk, formatting overhead included.
            trace: Optional trace context object.

        Returns:
            Chunks in source order; empty for empty text.
        """
