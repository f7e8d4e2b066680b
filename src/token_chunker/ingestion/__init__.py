"""
Ingestion Pipeline - Offline document chunking.

This package contains the chunking pipeline:
- Document loading
- Token-aware chunking
- JSON Lines storage
"""

__all__ = []
