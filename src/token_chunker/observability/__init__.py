"""
Observability Layer - Logging and tracing output.

This package contains observability components:
- Logger setup (text or JSON Lines)
"""

__all__ = []
