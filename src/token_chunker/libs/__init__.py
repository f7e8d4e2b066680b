"""
Libs Layer - Pluggable abstraction layer.

This package contains the factory pattern implementations for
pluggable components:
- Tokenizers
- Splitters
- Document loaders
"""

__all__ = []
