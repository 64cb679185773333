"""Build provider instances from the models section of settings.yaml."""

import logging

from config.config_loader import AppConfig, ModelConfig
from decision_council.providers.anthropic import AnthropicProvider
from decision_council.providers.base import AIProvider, ProviderError
from decision_council.providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


def build_provider(model_cfg: ModelConfig) -> AIProvider:
    """Raises ProviderError for an unknown sdk or a missing API key."""
    try:
        cls = PROVIDER_CLASSES[model_cfg.sdk]
    except KeyError:
        raise ProviderError(model_cfg.name, f"Unknown sdk '{model_cfg.sdk}'") from None
    return cls(model_cfg)


def build_all_providers(config: AppConfig) -> dict[str, AIProvider]:
    """Build all available providers. Returns dict keyed by name."""
    providers: dict[str, AIProvider] = {}
    for name in sorted(config.available_providers):
        try:
            providers[name] = build_provider(config.models[name])
        except ProviderError as exc:
            logger.warning("Failed to instantiate provider '%s': %s", name, exc)
    return providers
