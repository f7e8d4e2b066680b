"""Factory for resolving tokenizer implementations from settings."""

from __future__ import annotations

from token_chunker.core.settings import Settings
from token_chunker.libs.tokenizer.base_tokenizer import BaseTokenizer
from token_chunker.libs.tokenizer.tokenizer_cache import TokenizerCreator


class TokenizerFactory:
    """Factory that resolves tokenizer implementations by provider name."""

    _registry: dict[str, TokenizerCreator] = {}

    @classmethod
    def register(cls, provider: str, creator: TokenizerCreator) -> None:
        """Register a tokenizer constructor.

        Args:
            provider: Provider key (e.g. "tiktoken").
            creator: Callable that builds a tokenizer from a model name.
        """

        normalized = provider.strip().lower()
        if not normalized:
            raise ValueError("Provider name cannot be empty")
        cls._registry[normalized] = creator

    @classmethod
    def resolve(cls, settings: Settings) -> TokenizerCreator:
        """Return the creator for the configured provider.

        Raises:
            ValueError: If provider is missing or not registered.
        """

        provider_raw = settings.tokenizer.get("provider")
        if not isinstance(provider_raw, str) or not provider_raw.strip():
            raise ValueError("Missing required tokenizer provider: tokenizer.provider")

        provider = provider_raw.strip().lower()
        creator = cls._registry.get(provider)
        if creator is None:
            available = ", ".join(sorted(cls._registry)) or "<none>"
            raise ValueError(
                f"Unsupported tokenizer.provider: {provider}. Registered providers: {available}"
            )
        return creator

    @classmethod
    def create(cls, settings: Settings) -> BaseTokenizer:
        """Create the tokenizer for ``tokenizer.provider`` and ``tokenizer.model``.

        Raises:
            ValueError: If provider or model is missing, or provider unknown.
            TokenizerInitError: If the provider does not support the model.
        """

        creator = cls.resolve(settings)
        return creator(model_name_from(settings))


def model_name_from(settings: Settings) -> str:
    """Return the configured tokenizer model name."""
    model = settings.tokenizer.get("model")
    if not isinstance(model, str) or not model.strip():
        raise ValueError("Missing required tokenizer model: tokenizer.model")
    return model.strip()
