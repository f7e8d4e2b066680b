"""Base abstraction for tokenizers used to measure chunk sizes."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TokenizerInitError(RuntimeError):
    """Raised when a tokenizer cannot be created for a model name."""


class BaseTokenizer(ABC):
    """Abstract interface for tokenizer implementations.

    Token counts are always measured on text wrapped as a single chat
    message, so a chunk's count matches what a model input would consume.
    """

    @abstractmethod
    def encode(self, text: str) -> list[int]:
        """Encode text into token ids.

        Chat boundary markers produced by :meth:`format_for_tokenization`
        must be encoded as single special tokens.

        Args:
            text: Text to encode.

        Returns:
            Token ids in order.
        """

    def format_for_tokenization(self, text: str) -> str:
        """Wrap *text* as a user message followed by an empty assistant turn."""
        return f"<|im_start|>user\n{text}<|im_end|>\n<|im_start|>assistant<|im_end|>"

    def count_tokens(self, text: str) -> int:
        """Count tokens of *text* formatted as a chat message."""
        return len(self.encode(self.format_for_tokenization(text)))

    def overhead(self) -> int:
        """Return the fixed formatting overhead (count for empty content)."""
        return self.count_tokens("")
