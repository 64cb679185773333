"""Load settings.yaml into typed dataclasses. Validates API keys at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    base_url: str | None = None


@dataclass
class CriterionConfig:
    name: str
    weight: float
    is_benefit: bool = True


@dataclass
class MethodDefaults:
    """Options and criteria a matrix-scoring method seeds its state with."""

    options: list[str] = field(default_factory=list)
    criteria: list[CriterionConfig] = field(default_factory=list)


@dataclass
class PanelMemberConfig:
    name: str
    role: str
    provider: str          # key into models, or "echo"
    system_prompt: str | None = None


@dataclass
class DefaultsConfig:
    method: str
    tool: str
    output_dir: Path
    driver: str = "echo"
    agent_timeout_sec: int = 120
    max_concurrency: int | None = None


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    panel: list[PanelMemberConfig] = field(default_factory=list)
    method_defaults: MethodDefaults = field(default_factory=MethodDefaults)
    method_overrides: dict[str, MethodDefaults] = field(default_factory=dict)
    available_providers: set[str] = field(default_factory=set)

    def defaults_for(self, method: str) -> MethodDefaults:
        """Per-method override when configured, else the shared defaults."""
        return self.method_overrides.get(method, self.method_defaults)


def _parse_method_defaults(raw: dict | None) -> MethodDefaults:
    raw = raw or {}
    criteria = [
        CriterionConfig(
            name=str(c["name"]),
            weight=float(c.get("weight", 1.0)),
            is_benefit=bool(c.get("is_benefit", True)),
        )
        for c in raw.get("criteria", [])
    ]
    return MethodDefaults(
        options=[str(o) for o in raw.get("options", [])],
        criteria=criteria,
    )


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing.
    Logs missing API keys but does not raise; callers check
    available_providers before building LLM-backed drivers.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    defaults_raw = raw["defaults"]
    max_concurrency = defaults_raw.get("max_concurrency")
    defaults = DefaultsConfig(
        method=str(defaults_raw["method"]),
        tool=str(defaults_raw["tool"]),
        output_dir=Path(defaults_raw["output_dir"]),
        driver=str(defaults_raw.get("driver", "echo")),
        agent_timeout_sec=int(defaults_raw.get("agent_timeout_sec", 120)),
        max_concurrency=int(max_concurrency) if max_concurrency else None,
    )

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in (raw.get("models") or {}).items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s (set %s in .env)",
                provider_name,
                model_raw["api_key_env"],
            )

    panel = [
        PanelMemberConfig(
            name=str(m["name"]),
            role=str(m.get("role", "Expert")),
            provider=str(m.get("provider", "echo")),
            system_prompt=m.get("system_prompt"),
        )
        for m in raw.get("panel", [])
    ]

    method_raw = raw.get("method_defaults") or {}
    overrides = {
        str(name): _parse_method_defaults(body)
        for name, body in (method_raw.get("overrides") or {}).items()
    }

    return AppConfig(
        defaults=defaults,
        models=models,
        panel=panel,
        method_defaults=_parse_method_defaults(method_raw),
        method_overrides=overrides,
        available_providers=available_providers,
    )
