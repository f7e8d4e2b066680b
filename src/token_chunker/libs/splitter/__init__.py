"""
Splitter Module.

This package contains text splitter abstractions and implementations:
- Base splitter class
- Splitter factory
- Token-aware splitter ("token", and "markdown" which keeps sections apart)
- Pure markdown heading/link helpers
"""

from token_chunker.libs.splitter.base_splitter import BaseSplitter
from token_chunker.libs.splitter.splitter_factory import SplitterFactory
from token_chunker.libs.splitter.token_splitter import TokenSplitter

SplitterFactory.register("token", TokenSplitter.from_settings)
SplitterFactory.register(
    "markdown", lambda settings: TokenSplitter.from_settings(settings, respect_sections=True)
)

__all__ = ["BaseSplitter", "SplitterFactory", "TokenSplitter"]
