"""
Core Layer - Shared building blocks.

This package contains:
- Configuration management (settings.py)
- Data types shared across layers (types.py)
- Trace collection
"""

__all__ = []
