"""Load settings.yaml into typed dataclasses. Validates API keys at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

ROLE_NAMES = ("generation", "critique", "fusion")


class ConfigError(Exception):
    """Raised when settings are inconsistent or credentials are missing."""


@dataclass
class RoleConfig:
    temperature: float
    max_tokens: int


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    display_name: str = ""
    base_url: str | None = None
    roles: dict[str, RoleConfig] = field(default_factory=dict)

    def budget(self, role: str) -> RoleConfig:
        """Return the sampling budget for a call role."""
        try:
            return self.roles[role]
        except KeyError:
            raise ConfigError(f"Model '{self.name}' has no budget for role '{role}'") from None


@dataclass
class PromptsConfig:
    in_depth: str
    high_level: str
    critique: str
    fusion: str
    system_generation: str = ""
    system_critique: str = ""
    system_fusion: str = ""


@dataclass
class DefaultsConfig:
    referee: str
    output_dir: Path
    history_file: Path
    providers: list[str] = field(default_factory=list)
    detail_level: str = "low"
    max_topic_length: int = 80


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = field(default_factory=list)


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    prompts: PromptsConfig
    server: ServerConfig = field(default_factory=ServerConfig)
    available_providers: set[str] = field(default_factory=set)


def _load_roles(raw: dict, base: dict[str, RoleConfig] | None = None) -> dict[str, RoleConfig]:
    roles = dict(base or {})
    for role_name, role_raw in (raw or {}).items():
        if role_name not in ROLE_NAMES:
            raise ConfigError(f"Unknown role '{role_name}', expected one of {', '.join(ROLE_NAMES)}")
        roles[role_name] = RoleConfig(
            temperature=float(role_raw["temperature"]),
            max_tokens=int(role_raw["max_tokens"]),
        )
    return roles


def _warn_on_role_ordering(roles: dict[str, RoleConfig], owner: str) -> None:
    generation = roles.get("generation")
    if generation is None:
        return
    for role_name in ("critique", "fusion"):
        role = roles.get(role_name)
        if role is not None and role.temperature >= generation.temperature:
            logger.warning(
                "%s: %s temperature %.2f is not below generation temperature %.2f",
                owner,
                role_name,
                role.temperature,
                generation.temperature,
            )


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ConfigError if the
    referee or panel names a model that is not configured.
    Logs missing API keys but does not raise. The provider registry decides
    whether a missing key is fatal.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        referee=str(defaults_raw["referee"]),
        output_dir=Path(defaults_raw["output_dir"]),
        history_file=Path(defaults_raw["history_file"]),
        providers=list(defaults_raw.get("providers") or raw["models"].keys()),
        detail_level=str(defaults_raw.get("detail_level", "low")),
        max_topic_length=int(defaults_raw.get("max_topic_length", 80)),
    )

    server_raw = raw.get("server") or {}
    server = ServerConfig(
        host=str(server_raw.get("host", "0.0.0.0")),
        port=int(server_raw.get("port", 5000)),
        cors_origins=list(server_raw.get("cors_origins", [])),
    )

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        in_depth=prompts_raw["in_depth"],
        high_level=prompts_raw["high_level"],
        critique=prompts_raw["critique"],
        fusion=prompts_raw["fusion"],
        system_generation=prompts_raw.get("system_generation", ""),
        system_critique=prompts_raw.get("system_critique", ""),
        system_fusion=prompts_raw.get("system_fusion", ""),
    )

    shared_roles = _load_roles(raw.get("roles", {}))
    _warn_on_role_ordering(shared_roles, "roles")

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_roles = _load_roles(model_raw.get("roles", {}), base=shared_roles)
        missing_roles = [r for r in ROLE_NAMES if r not in model_roles]
        if missing_roles:
            raise ConfigError(f"Model '{provider_name}' has no budget for: {', '.join(missing_roles)}")
        if "roles" in model_raw:
            _warn_on_role_ordering(model_roles, provider_name)

        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            display_name=str(model_raw.get("display_name") or provider_name.title()),
            base_url=model_raw.get("base_url"),
            roles=model_roles,
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider has no API key: %s (set %s in .env)",
                provider_name,
                model_raw["api_key_env"],
            )

    unknown = [n for n in defaults.providers if n not in models]
    if unknown:
        raise ConfigError(f"Panel names unconfigured models: {', '.join(unknown)}")
    if defaults.referee not in defaults.providers:
        raise ConfigError(f"Referee '{defaults.referee}' is not one of the panel providers")

    return AppConfig(
        defaults=defaults,
        models=models,
        prompts=prompts,
        server=server,
        available_providers=available_providers,
    )
