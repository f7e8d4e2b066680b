"""Shared data types passed between the libs and ingestion layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Document:
    """A source document submitted for chunking.

    Attributes:
        id: Stable document identifier (usually derived from the file hash).
        text: Full markdown-flavoured text content.
        metadata: Loader-provided metadata; contains at least ``source_path``
            when produced by a loader.
    """

    id: str
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Chunk:
    """One token-bounded piece of a document.

    ``text`` holds the chunk content with links and images replaced by
    ``{{$urlN}}`` / ``{{$imgN}}`` placeholders; ``urls`` and ``images`` keep
    the extracted targets in encounter order. ``start``/``end`` locate the
    original, pre-placeholder text in the source document.

    Attributes:
        text: Placeholder-substituted chunk content.
        token_count: Tokens consumed by the chunk formatted as a model message.
        headers: Snapshot of the heading outline (level -> heading text) at the
            end of this chunk.
        urls: Link targets extracted from this chunk.
        images: Image sources extracted from this chunk.
        start: Offset of the chunk's first character in the source text.
        end: Offset one past the chunk's last character in the source text.
        id: Chunk identifier assigned by the ingestion layer.
        metadata: Inherited document metadata plus chunk bookkeeping.
    """

    text: str
    token_count: int
    headers: Dict[int, str] = field(default_factory=dict)
    urls: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    start: int = 0
    end: int = 0
    id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to a JSON-friendly record."""
        metadata: Dict[str, Any] = dict(self.metadata)
        metadata.update(
            {
                "tokens": self.token_count,
                "headers": {f"h{level}": title for level, title in sorted(self.headers.items())},
                "urls": list(self.urls),
                "images": list(self.images),
                "start": self.start,
                "end": self.end,
            }
        )
        return {"id": self.id, "text": self.text, "metadata": metadata}
