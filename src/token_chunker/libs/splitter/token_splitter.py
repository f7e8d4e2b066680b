"""Token-aware splitter that keeps markdown outline context.

Each iteration of :meth:`TokenSplitter.split` cuts one chunk off the front
of the remaining text:

1. Estimate the end offset assuming uniform token density.
2. Shrink the slice by a tenth of its length until it fits the limit.
3. Snap the end to a nearby line break when the snapped chunk still fits
   and fills at least ``min_fill_ratio`` of the limit.
4. Fold the slice's headings into the outline and swap links/images for
   placeholders.

The outline and the cursor are local to one call, so a splitter instance
can serve concurrent calls on different documents.
"""

from __future__ import annotations

import bisect
import logging
import time
from typing import TYPE_CHECKING, Dict, List, Optional

from token_chunker.core.types import Chunk
from token_chunker.libs.splitter.base_splitter import BaseSplitter
from token_chunker.libs.splitter.markdown_syntax import (
    extract_headings,
    extract_links_and_images,
    section_starts,
    update_headers,
)
from token_chunker.libs.tokenizer.base_tokenizer import BaseTokenizer
from token_chunker.libs.tokenizer.tokenizer_cache import TokenizerCache

if TYPE_CHECKING:
    from token_chunker.core.settings import Settings
    from token_chunker.core.trace.trace_context import TraceContext

logger = logging.getLogger(__name__)


class TokenSplitter(BaseSplitter):
    """Splits markdown into chunks bounded by a model token limit.

    Attributes:
        model_name: Model whose tokenizer measures chunk sizes.
        respect_sections: Never let a chunk run past the start of a heading
            line, so every markdown section begins a new chunk.
        shrink_divisor: Fraction (1/n) of the slice dropped per shrink step.
        min_fill_ratio: Minimum share of the limit a line-snapped chunk must
            use for the snap to be taken.

    Example:
        >>> splitter = TokenSplitter(TokenizerCache(TiktokenTokenizer), "gpt-4o")
        >>> chunks = splitter.split(markdown_text, limit=200)
        >>> chunks[0].headers
        {1: 'Introduction'}
    """

    DEFAULT_SHRINK_DIVISOR = 10
    DEFAULT_MIN_FILL_RATIO = 0.8

    def __init__(
        self,
        tokenizers: TokenizerCache,
        model_name: str,
        respect_sections: bool = False,
        shrink_divisor: int = DEFAULT_SHRINK_DIVISOR,
        min_fill_ratio: float = DEFAULT_MIN_FILL_RATIO,
    ) -> None:
        if shrink_divisor < 2:
            raise ValueError(f"shrink_divisor must be at least 2, got {shrink_divisor}")
        if not 0.0 <= min_fill_ratio <= 1.0:
            raise ValueError(f"min_fill_ratio must be within [0, 1], got {min_fill_ratio}")

        self._tokenizers = tokenizers
        self.model_name = model_name
        self.respect_sections = respect_sections
        self.shrink_divisor = shrink_divisor
        self.min_fill_ratio = min_fill_ratio

    @classmethod
    def from_settings(cls, settings: Settings, respect_sections: bool = False) -> TokenSplitter:
        """Build a splitter from the ``tokenizer`` and ``splitter`` settings."""
        from token_chunker.libs.tokenizer.tokenizer_factory import TokenizerFactory, model_name_from

        splitter_config = settings.splitter
        return cls(
            tokenizers=TokenizerCache(TokenizerFactory.resolve(settings)),
            model_name=model_name_from(settings),
            respect_sections=respect_sections,
            shrink_divisor=int(splitter_config.get("shrink_divisor", cls.DEFAULT_SHRINK_DIVISOR)),
            min_fill_ratio=float(splitter_config.get("min_fill_ratio", cls.DEFAULT_MIN_FILL_RATIO)),
        )

    def split(self, text: str, limit: int, trace: Optional[TraceContext] = None) -> List[Chunk]:
        """Split *text* into chunks of at most *limit* tokens.

        A chunk may exceed the limit only when it is a single character that
        does not fit on its own.

        Raises:
            TokenizerInitError: If no tokenizer exists for ``model_name``.
            ValueError: If *limit* does not exceed the formatting overhead.
        """
        t0 = time.monotonic()
        tokenizer = self._tokenizers.get(self.model_name)
        if not text:
            return []

        overhead = tokenizer.overhead()
        if limit <= overhead:
            raise ValueError(
                f"Token limit {limit} must exceed the formatting overhead of {overhead} tokens"
            )

        logger.debug("Splitting %d chars with limit %d tokens", len(text), limit)
        boundaries = section_starts(text) if self.respect_sections else []
        headers: Dict[int, str] = {}
        chunks: List[Chunk] = []
        overflows = 0
        position = 0

        while position < len(text):
            stop = self._next_boundary(boundaries, position, len(text))
            end, tokens = self._find_chunk_end(tokenizer, text, position, stop, limit)
            if tokens > limit:
                overflows += 1
                logger.warning(
                    "Chunk at offset %d has %d tokens, over the limit of %d", position, tokens, limit
                )

            piece = text[position:end]
            headings = extract_headings(piece)
            if headings and headings[0].offset == 0 and position > 0 and text[position - 1] != "\n":
                headings = headings[1:]
            headers = update_headers(headers, headings)

            content, urls, images = extract_links_and_images(piece)
            chunks.append(
                Chunk(
                    text=content,
                    token_count=tokens,
                    headers=headers,
                    urls=urls,
                    images=images,
                    start=position,
                    end=end,
                )
            )
            position = end

        logger.debug("Split completed: %d chunks", len(chunks))
        if trace is not None:
            trace.record_stage(
                "split",
                {
                    "method": "markdown" if self.respect_sections else "token",
                    "model": self.model_name,
                    "limit": limit,
                    "chunk_count": len(chunks),
                    "overflow_count": overflows,
                },
                elapsed_ms=(time.monotonic() - t0) * 1000.0,
            )
        return chunks

    # ---- chunk boundary search -----------------------------------------

    @staticmethod
    def _next_boundary(boundaries: List[int], position: int, length: int) -> int:
        index = bisect.bisect_right(boundaries, position)
        return boundaries[index] if index < len(boundaries) else length

    def _find_chunk_end(
        self,
        tokenizer: BaseTokenizer,
        text: str,
        start: int,
        stop: int,
        limit: int,
    ) -> tuple[int, int]:
        """Return ``(end, token_count)`` for the chunk starting at *start*.

        *stop* is the furthest allowed end. ``end > start`` always holds.
        """
        remaining_tokens = tokenizer.count_tokens(text[start:stop])
        if remaining_tokens <= limit:
            return stop, remaining_tokens

        estimate = start + (stop - start) * limit // remaining_tokens
        end = min(max(estimate, start + 1), stop)
        tokens = tokenizer.count_tokens(text[start:end])

        while tokens > limit and end - start > 1:
            end -= max((end - start) // self.shrink_divisor, 1)
            tokens = tokenizer.count_tokens(text[start:end])

        if tokens > limit:
            return end, tokens

        return self._snap_to_line(tokenizer, text, start, end, stop, limit, tokens)

    def _snap_to_line(
        self,
        tokenizer: BaseTokenizer,
        text: str,
        start: int,
        end: int,
        stop: int,
        limit: int,
        tokens: int,
    ) -> tuple[int, int]:
        """Move *end* just past a neighbouring newline if the result stays in range.

        The next newline is tried first, then the previous one; each
        candidate must fit the limit and fill at least ``min_fill_ratio``
        of it. Otherwise *end* is returned unchanged.
        """
        min_tokens = limit * self.min_fill_ratio

        next_newline = text.find("\n", end, stop)
        if next_newline != -1:
            extended = next_newline + 1
            extended_tokens = tokenizer.count_tokens(text[start:extended])
            if min_tokens <= extended_tokens <= limit:
                return extended, extended_tokens

        prev_newline = text.rfind("\n", start + 1, end)
        if prev_newline != -1:
            reduced = prev_newline + 1
            reduced_tokens = tokenizer.count_tokens(text[start:reduced])
            if min_tokens <= reduced_tokens <= limit:
                return reduced, reduced_tokens

        return end, tokens
