"""Lazy, per-model tokenizer cache owned by whoever constructs it."""

from __future__ import annotations

import threading
from collections.abc import Callable

from token_chunker.libs.tokenizer.base_tokenizer import BaseTokenizer


TokenizerCreator = Callable[[str], BaseTokenizer]


class TokenizerCache:
    """Creates each model's tokenizer on first use and reuses it afterwards.

    Safe to share between threads chunking different documents. A failed
    creation is not cached; the error propagates to the caller.

    Args:
        creator: Callable building a tokenizer from a model name.
    """

    def __init__(self, creator: TokenizerCreator) -> None:
        self._creator = creator
        self._tokenizers: dict[str, BaseTokenizer] = {}
        self._lock = threading.Lock()

    def get(self, model_name: str) -> BaseTokenizer:
        """Return the tokenizer for *model_name*, creating it if needed."""
        tokenizer = self._tokenizers.get(model_name)
        if tokenizer is not None:
            return tokenizer

        with self._lock:
            tokenizer = self._tokenizers.get(model_name)
            if tokenizer is None:
                tokenizer = self._creator(model_name)
                self._tokenizers[model_name] = tokenizer
        return tokenizer

    def __contains__(self, model_name: object) -> bool:
        return model_name in self._tokenizers

    def __len__(self) -> int:
        return len(self._tokenizers)
