"""Load settings from defaults, an optional YAML file and the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobcraft.log import get_logger

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DATA_DIR: Path = PROJECT_ROOT / "data"
REPORTS_DIR: Path = PROJECT_ROOT / "reports"

STORE_BACKENDS: tuple[str, ...] = ("local", "supabase")


class ConfigError(ValueError):
    """Raised when a setting cannot be parsed or is out of range."""


@dataclass(frozen=True)
class Settings:
    groq_api_key: str = ""
    llm_model: str = "llama-3.3-70b-versatile"
    llm_base_url: str = "https://api.groq.com/openai/v1"
    temperature: float = 0.7
    max_tokens: int = 1024
    llm_timeout: float = 60.0
    retry_max_attempts: int = 3
    retry_base_delay: float = 2.0
    store_backend: str = "local"
    data_dir: Path = DATA_DIR
    reports_dir: Path = REPORTS_DIR
    supabase_url: str = ""
    supabase_key: str = ""


# env var -> (settings field, converter)
_ENV_MAP: dict[str, tuple[str, type]] = {
    "GROQ_API_KEY": ("groq_api_key", str),
    "GROQ_LLM_MODEL": ("llm_model", str),
    "GROQ_BASE_URL": ("llm_base_url", str),
    "AI_TEMPERATURE": ("temperature", float),
    "AI_MAX_TOKENS": ("max_tokens", int),
    "AI_TIMEOUT": ("llm_timeout", float),
    "AI_MAX_RETRIES": ("retry_max_attempts", int),
    "AI_RETRY_BASE_DELAY": ("retry_base_delay", float),
    "JOBCRAFT_STORE": ("store_backend", str),
    "JOBCRAFT_DATA_DIR": ("data_dir", Path),
    "JOBCRAFT_REPORTS_DIR": ("reports_dir", Path),
    "SUPABASE_URL": ("supabase_url", str),
    "SUPABASE_KEY": ("supabase_key", str),
}
_ENV_MAP_BY_FIELD: dict[str, type] = {field_name: conv for field_name, conv in _ENV_MAP.values()}


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _convert(name: str, value: Any, conv: type) -> Any:
    try:
        return conv(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from exc


def _load_yaml(path: Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping, got {type(data).__name__}")
    return data


def load_settings(path: Path | None = None) -> Settings:
    """Build Settings: defaults, then the YAML file (if any), then env vars."""
    settings = Settings()
    converters = {f.name: _ENV_MAP_BY_FIELD.get(f.name, str) for f in fields(Settings)}

    yaml_path = path or SETTINGS_PATH
    if yaml_path.exists():
        overrides: dict[str, Any] = {}
        for key, value in _load_yaml(yaml_path).items():
            if key not in converters:
                log.warning("Ignoring unknown setting %r in %s", key, yaml_path.name)
                continue
            overrides[key] = _convert(key, value, converters[key])
        settings = replace(settings, **overrides)
        log.debug("Loaded %d setting(s) from %s", len(overrides), yaml_path)

    env_overrides: dict[str, Any] = {}
    for env_key, (field_name, conv) in _ENV_MAP.items():
        raw = get_env(env_key)
        if raw:
            env_overrides[field_name] = _convert(env_key, raw, conv)
    if env_overrides:
        settings = replace(settings, **env_overrides)

    _validate(settings)
    return settings


def _validate(settings: Settings) -> None:
    if settings.store_backend not in STORE_BACKENDS:
        raise ConfigError(
            f"Unknown store backend {settings.store_backend!r} "
            f"(expected one of: {', '.join(STORE_BACKENDS)})"
        )
    if settings.retry_base_delay < 0:
        raise ConfigError("retry_base_delay must not be negative")
    if settings.max_tokens <= 0:
        raise ConfigError("max_tokens must be positive")
    if settings.llm_timeout <= 0:
        raise ConfigError("llm_timeout must be positive")


def ensure_dirs(settings: Settings) -> None:
    for d in (settings.data_dir, settings.reports_dir):
        Path(d).mkdir(parents=True, exist_ok=True)
