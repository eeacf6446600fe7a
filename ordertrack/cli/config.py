"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. --config <path> CLI flag (or ORDERTRACK_CONFIG_PATH)
2. ./ordertrack.yaml (working directory)
3. ~/.ordertrack/config.yaml (user home)

Environment variables override YAML: ORDERTRACK_<SECTION>_<KEY>.
Shortcuts SHOP, API_TOKEN, PORT and ALLOWED_ORIGINS are honoured too.
${VAR} references in YAML values resolve from environment at load time.

Credentials are not validated here; a missing token surfaces as an
upstream failure on the first request.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

# Plain env names accepted alongside the ORDERTRACK_ prefix.
_ENV_SHORTCUTS: dict[str, tuple[str, str]] = {
    "SHOP": ("upstream", "shop"),
    "API_TOKEN": ("upstream", "token"),
    "API_BASE_URL": ("upstream", "base_url"),
    "PORT": ("server", "port"),
    "ALLOWED_ORIGINS": ("server", "allowed_origins"),
}


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references; missing variables resolve to ''."""
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


def _split_origins(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [origin.strip() for origin in value.split(",") if origin.strip()]
    return [str(origin).strip() for origin in value if str(origin).strip()]


class ServerConfig(BaseModel):
    """HTTP server settings."""

    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "info"
    allowed_origins: list[str] = []

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_origins(cls, value: Any) -> list[str]:
        return _split_origins(value)


class UpstreamConfig(BaseModel):
    """Commerce API connection settings.

    ``base_url`` may contain a ``{shop}`` placeholder filled from ``shop``.
    """

    base_url: str = ""
    shop: str = ""
    token: str = ""
    timeout_seconds: float = 20.0
    max_pages: int = 500

    @property
    def api_base(self) -> str:
        if "{shop}" in self.base_url:
            return self.base_url.replace("{shop}", self.shop).rstrip("/")
        return self.base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_base and self.token)


class AuditConfig(BaseModel):
    """Tracking check settings."""

    shallow_timeout_seconds: float = 8.0
    deep_timeout_seconds: float = 12.0
    sample_size: int = 20
    user_agent: str = "Mozilla/5.0 (compatible; ordertrack/0.1; +tracking-audit)"


class OrderTrackConfig(BaseModel):
    """Top-level configuration."""

    server: ServerConfig = ServerConfig()
    upstream: UpstreamConfig = UpstreamConfig()
    audit: AuditConfig = AuditConfig()


def _find_config_file() -> Path | None:
    candidates = [
        Path.cwd() / "ordertrack.yaml",
        Path.cwd() / "ordertrack.yml",
        Path.home() / ".ordertrack" / "config.yaml",
        Path.home() / ".ordertrack" / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _coerce(value: str) -> Any:
    try:
        return int(value)
    except ValueError:
        pass
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


def _set(data: dict[str, Any], section: str, key: str, value: Any) -> None:
    if not isinstance(data.get(section), dict):
        data[section] = {}
    data[section][key] = value


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply shortcut and ORDERTRACK_<SECTION>_<KEY> env var overrides.

    Prefixed variables win over shortcuts. For example
    ``ORDERTRACK_UPSTREAM_MAX_PAGES`` maps to section ``upstream``, field
    ``max_pages``.
    """
    for env_name, (section, key) in _ENV_SHORTCUTS.items():
        value = os.environ.get(env_name)
        if value:
            _set(data, section, key, _coerce(value) if key == "port" else value)

    prefix = "ORDERTRACK_"
    known_sections = sorted(OrderTrackConfig.model_fields.keys(), key=len, reverse=True)
    for env_key, value in os.environ.items():
        if not env_key.startswith(prefix):
            continue
        suffix = env_key[len(prefix):].lower()
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix) and len(suffix) > len(section_prefix):
                field_name = suffix[len(section_prefix):]
                # Tokens and slugs stay strings even when they look numeric.
                coerced = value if field_name in ("token", "shop") else _coerce(value)
                _set(data, section, field_name, coerced)
                break
    return data


def load_config(config_path: str | None = None) -> OrderTrackConfig:
    """Load configuration from YAML (if any) plus environment overrides.

    Args:
        config_path: Explicit path to config file. If None, uses
            ORDERTRACK_CONFIG_PATH or searches standard locations.

    Returns:
        Validated OrderTrackConfig. Defaults apply when no file exists.

    Raises:
        FileNotFoundError: If an explicit config path does not exist.
    """
    config_path = config_path or os.environ.get("ORDERTRACK_CONFIG_PATH")
    raw_data: dict[str, Any] = {}
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        path = _find_config_file()

    if path is not None:
        logger.info("Loading config from %s", path)
        with open(path) as f:
            raw_data = yaml.safe_load(f) or {}

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data)
    return OrderTrackConfig(**data)
