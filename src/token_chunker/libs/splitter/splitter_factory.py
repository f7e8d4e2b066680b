"""Registry of splitting strategies keyed by ``splitter.type``."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional

from token_chunker.core.settings import Settings
from token_chunker.libs.splitter.base_splitter import BaseSplitter

logger = logging.getLogger(__name__)

SplitterCreator = Callable[[Settings], BaseSplitter]


class SplitterFactory:
    """Builds the splitter named by ``splitter.type``.

    :mod:`token_chunker.libs.splitter` registers ``token`` (pure token
    budget) and ``markdown`` (token budget, never crossing a heading line).
    """

    _registry: dict[str, SplitterCreator] = {}

    @classmethod
    def register(cls, splitter_type: str, creator: SplitterCreator) -> None:
        key = splitter_type.strip().lower()
        if not key:
            raise ValueError("Splitter type cannot be empty")
        cls._registry[key] = creator

    @classmethod
    def available(cls) -> list[str]:
        """Registered splitter types, sorted."""
        return sorted(cls._registry)

    @classmethod
    def create(cls, settings: Settings, splitter_type: Optional[str] = None) -> BaseSplitter:
        """Create the configured splitter, or *splitter_type* when given.

        Raises:
            ValueError: If no type is configured or the type is not registered.
        """
        requested = splitter_type if splitter_type is not None else settings.splitter.get("type")
        if not isinstance(requested, str) or not requested.strip():
            raise ValueError("Missing required splitter type: splitter.type")

        key = requested.strip().lower()
        creator = cls._registry.get(key)
        if creator is None:
            raise ValueError(
                f"Unsupported splitter.type: {key}. "
                f"Registered splitters: {', '.join(cls.available()) or '<none>'}"
            )

        logger.debug("Creating '%s' splitter", key)
        return creator(settings)
