"""tiktoken-backed tokenizer.

The model's base encoding is extended with the chat boundary markers
(``<|im_start|>``, ``<|im_end|>``, ``<|im_sep|>``) so that a formatted
message is counted the way the chat API accounts for it.
"""

from __future__ import annotations

import logging

import tiktoken

from token_chunker.libs.tokenizer.base_tokenizer import BaseTokenizer, TokenizerInitError

logger = logging.getLogger(__name__)


class TiktokenTokenizer(BaseTokenizer):
    """Tokenizer for OpenAI models using :mod:`tiktoken`.

    Attributes:
        model_name: Model the encoding was resolved for (e.g. ``gpt-4o``).
        encoding_name: Name of the underlying base encoding.

    Example:
        >>> tokenizer = TiktokenTokenizer("gpt-4o")
        >>> tokenizer.count_tokens("hello") > tokenizer.overhead()
        True
    """

    DEFAULT_MODEL = "gpt-4o"
    CHAT_MARKERS = ("<|im_start|>", "<|im_end|>", "<|im_sep|>")

    def __init__(self, model_name: str = DEFAULT_MODEL) -> None:
        """Resolve and extend the encoding for *model_name*.

        Raises:
            TokenizerInitError: If tiktoken has no encoding for the model.
        """
        self.model_name = model_name
        try:
            base = tiktoken.encoding_for_model(model_name)
        except KeyError as exc:
            raise TokenizerInitError(f"Unsupported tokenizer model: {model_name}") from exc

        special_tokens = dict(base._special_tokens)
        next_id = base.max_token_value + 1
        for marker in self.CHAT_MARKERS:
            if marker not in special_tokens:
                special_tokens[marker] = next_id
                next_id += 1

        self.encoding_name = base.name
        self._encoding = tiktoken.Encoding(
            name=f"{base.name}_chat",
            pat_str=base._pat_str,
            mergeable_ranks=base._mergeable_ranks,
            special_tokens=special_tokens,
        )
        self._allowed_special = frozenset(self.CHAT_MARKERS)
        logger.info("Tokenizer initialized: model=%s encoding=%s", model_name, base.name)

    def encode(self, text: str) -> list[int]:
        # The chat markers encode as one token each, also when they occur in
        # document text; any other special-token string counts as plain text.
        return self._encoding.encode(
            text,
            allowed_special=self._allowed_special,
            disallowed_special=(),
        )
