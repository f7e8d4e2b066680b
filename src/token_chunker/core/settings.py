"""Settings for the chunker, read from ``config/settings.yaml``.

Four sections are recognised: ``tokenizer`` (provider and model used to
count tokens), ``splitter`` (strategy, chunk size and boundary tunables),
``ingestion`` (output directory, worker count) and ``observability``
(log level/format, traces file). Missing sections load as empty dicts;
only the fields in :data:`REQUIRED_FIELDS` are mandatory.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml


# src/token_chunker/core/settings.py -> repository root
REPO_ROOT = Path(__file__).resolve().parents[3]

REQUIRED_FIELDS = (
    "tokenizer.provider",
    "tokenizer.model",
    "splitter.type",
    "splitter.chunk_tokens",
)

_MISSING = object()


@dataclass(slots=True)
class Settings:
    """Parsed chunker settings.

    Attributes:
        tokenizer: ``provider`` and ``model``.
        splitter: ``type``, ``chunk_tokens`` and optional ``shrink_divisor`` /
            ``min_fill_ratio``.
        ingestion: ``output_dir`` and ``max_workers``.
        observability: ``log_level``, ``log_format`` and ``traces_path``.
        raw: The whole parsed YAML mapping.
    """

    tokenizer: dict[str, Any]
    splitter: dict[str, Any]
    ingestion: dict[str, Any]
    observability: dict[str, Any]
    raw: dict[str, Any]

    @classmethod
    def from_mapping(cls, raw: dict[str, Any]) -> Settings:
        """Split a parsed YAML mapping into sections (not validated)."""
        return cls(
            tokenizer=raw.get("tokenizer") or {},
            splitter=raw.get("splitter") or {},
            ingestion=raw.get("ingestion") or {},
            observability=raw.get("observability") or {},
            raw=raw,
        )


def resolve_path(relative: str | Path) -> Path:
    """Resolve *relative* against the repository root; absolute paths pass through."""
    path = Path(relative)
    return path if path.is_absolute() else REPO_ROOT / path


def _lookup(data: Mapping[str, Any], dotted_path: str, default: Any = _MISSING) -> Any:
    current: Any = data
    for key in dotted_path.split("."):
        if not isinstance(current, Mapping) or key not in current:
            if default is _MISSING:
                raise ValueError(f"Missing required settings field: {dotted_path}")
            return default
        current = current[key]
    return current


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_settings(settings: Settings) -> None:
    """Check required fields and the types of the numeric tunables.

    Raises:
        ValueError: Naming the first offending field by its dotted path.
    """
    for dotted_path in REQUIRED_FIELDS:
        _lookup(settings.raw, dotted_path)

    chunk_tokens = settings.splitter["chunk_tokens"]
    if not _is_int(chunk_tokens) or chunk_tokens <= 0:
        raise ValueError(f"splitter.chunk_tokens must be a positive integer, got {chunk_tokens!r}")

    shrink_divisor = settings.splitter.get("shrink_divisor", 10)
    if not _is_int(shrink_divisor) or shrink_divisor < 2:
        raise ValueError(f"splitter.shrink_divisor must be an integer >= 2, got {shrink_divisor!r}")

    min_fill_ratio = settings.splitter.get("min_fill_ratio", 0.8)
    if isinstance(min_fill_ratio, bool) or not isinstance(min_fill_ratio, (int, float)) \
            or not 0 <= min_fill_ratio <= 1:
        raise ValueError(f"splitter.min_fill_ratio must be within [0, 1], got {min_fill_ratio!r}")

    max_workers = settings.ingestion.get("max_workers", 1)
    if not _is_int(max_workers) or max_workers <= 0:
        raise ValueError(f"ingestion.max_workers must be a positive integer, got {max_workers!r}")


def load_settings(path: str | Path) -> Settings:
    """Read, parse and validate a YAML settings file.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the YAML is malformed, is not a mapping, or fails
            :func:`validate_settings`.
    """
    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    try:
        parsed = yaml.safe_load(settings_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in settings file {settings_path}: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ValueError(f"Settings file {settings_path} must contain a YAML mapping at top level")

    settings = Settings.from_mapping(parsed)
    validate_settings(settings)
    return settings
