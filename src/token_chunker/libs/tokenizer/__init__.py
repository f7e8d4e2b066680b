"""
Tokenizer Module.

This package contains tokenizer abstractions and implementations:
- Base tokenizer class (chat-message token accounting)
- Per-model tokenizer cache
- Tokenizer factory
- tiktoken implementation
"""

from token_chunker.libs.tokenizer.base_tokenizer import BaseTokenizer, TokenizerInitError
from token_chunker.libs.tokenizer.tokenizer_cache import TokenizerCache
from token_chunker.libs.tokenizer.tokenizer_factory import TokenizerFactory
from token_chunker.libs.tokenizer.tiktoken_tokenizer import TiktokenTokenizer

TokenizerFactory.register("tiktoken", TiktokenTokenizer)

__all__ = [
    "BaseTokenizer",
    "TokenizerInitError",
    "TokenizerCache",
    "TokenizerFactory",
    "TiktokenTokenizer",
]
