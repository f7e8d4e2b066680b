"""
Loader Module.

This package contains document loaders that produce markdown Documents:
- Base loader class
- Markdown / plain-text loader
- PDF loader (MarkItDown)
"""

from token_chunker.libs.loader.base_loader import BaseLoader
from token_chunker.libs.loader.markdown_loader import MarkdownLoader
from token_chunker.libs.loader.pdf_loader import PdfLoader

__all__ = ["BaseLoader", "MarkdownLoader", "PdfLoader"]
