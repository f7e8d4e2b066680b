"""Token-aware markdown document chunker."""

__version__ = "0.1.0"

__all__ = ["__version__"]
