"""Build configured provider clients and validate credentials at startup."""

import logging

from config.config_loader import AppConfig, ConfigError
from trendfusion.providers.base import AIProvider, SDKProvider
from trendfusion.providers.gemini import GeminiProvider
from trendfusion.providers.openai_provider import OpenAIProvider
from trendfusion.providers.perplexity import PerplexityProvider

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[SDKProvider]] = {
    "openai": OpenAIProvider,
    "perplexity": PerplexityProvider,
    "gemini": GeminiProvider,
}


def missing_credentials(config: AppConfig) -> list[str]:
    """Return the API key variables that panel providers need but lack."""
    return [
        config.models[name].api_key_env
        for name in config.defaults.providers
        if name not in config.available_providers
    ]


def build_providers(config: AppConfig) -> dict[str, AIProvider]:
    """Instantiate every panel provider, in panel order.

    Raises:
        ConfigError: If any panel provider lacks credentials or names an
            unknown SDK. Every request needs the full panel, so a partial
            build is not served.
    """
    missing = missing_credentials(config)
    if missing:
        raise ConfigError(f"Missing API key(s): {', '.join(missing)}. Set them in the environment or .env.")

    providers: dict[str, AIProvider] = {}
    for name in config.defaults.providers:
        model_cfg = config.models[name]
        provider_cls = PROVIDER_CLASSES.get(model_cfg.sdk)
        if provider_cls is None:
            raise ConfigError(f"Provider '{name}' uses unknown sdk '{model_cfg.sdk}'")
        providers[name] = provider_cls(model_cfg)
        logger.debug("Built provider %s (%s)", name, model_cfg.model)
    return providers
