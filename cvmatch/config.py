"""
Process-wide configuration.

Settings are resolved once at startup from, in increasing order of
precedence: built-in defaults, an optional YAML file and environment
variables (a local ``.env`` file is loaded first).  The Gemini API key
is mandatory; a missing key is a startup failure rather than something
each request discovers on its own.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_GATE_SECONDS = 15
DEFAULT_MAX_UPLOAD_MB = 5

# Environment variable -> settings key
_ENV_KEYS: Dict[str, str] = {
    "GEMINI_MODEL": "model",
    "CVMATCH_TEMPERATURE": "temperature",
    "CVMATCH_GATE_SECONDS": "gate_seconds",
    "CVMATCH_MAX_UPLOAD_MB": "max_upload_mb",
    "CVMATCH_LOG_LEVEL": "log_level",
}


@dataclass(frozen=True)
class Settings:
    """Validated runtime configuration."""

    api_key: str
    model: str = DEFAULT_MODEL
    temperature: float = 0.2
    gate_seconds: int = DEFAULT_GATE_SECONDS
    max_upload_mb: float = DEFAULT_MAX_UPLOAD_MB
    log_level: str = "INFO"

    def __repr__(self) -> str:
        # Keep the key out of logs.
        return (
            f"Settings(model={self.model!r}, temperature={self.temperature}, "
            f"gate_seconds={self.gate_seconds}, max_upload_mb={self.max_upload_mb}, "
            f"log_level={self.log_level!r})"
        )


def _load_yaml(config_path: str) -> Dict[str, object]:
    path = Path(config_path)
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {config_path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    return data


def _as_int(key: str, value: object) -> int:
    try:
        number = int(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from exc
    if number <= 0:
        raise ConfigurationError(f"{key} must be positive, got {number}")
    return number


def _as_float(key: str, value: object) -> float:
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from exc
    if number < 0:
        raise ConfigurationError(f"{key} must not be negative, got {number}")
    return number


def load_settings(
    config_path: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Resolve and validate settings.

    Args:
        config_path: Optional YAML file.  When omitted the
            ``CVMATCH_CONFIG`` environment variable is consulted.
        env: Mapping used instead of ``os.environ``.  When omitted,
            ``.env`` is loaded into the process environment first.

    Returns:
        A :class:`Settings` instance.

    Raises:
        ConfigurationError: If the API key is missing or a value is
            invalid.
    """
    if env is None:
        load_dotenv()
        env = os.environ
    raw: Dict[str, object] = {}
    config_path = config_path or env.get("CVMATCH_CONFIG")
    if config_path:
        raw.update(_load_yaml(config_path))
        logger.debug("Loaded configuration file %s", config_path)
    for env_name, key in _ENV_KEYS.items():
        value = env.get(env_name)
        if value:
            raw[key] = value
    api_key = env.get("GEMINI_API_KEY") or env.get("GOOGLE_API_KEY") or raw.get("api_key")
    if not api_key or not str(api_key).strip():
        raise ConfigurationError(
            "GEMINI_API_KEY/GOOGLE_API_KEY not provided; set it in the "
            "environment or in a .env file"
        )
    unknown = set(raw) - set(_ENV_KEYS.values()) - {"api_key"}
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(sorted(unknown)))
    return Settings(
        api_key=str(api_key).strip(),
        model=str(raw.get("model") or DEFAULT_MODEL),
        temperature=_as_float("temperature", raw.get("temperature", 0.2)),
        gate_seconds=_as_int("gate_seconds", raw.get("gate_seconds", DEFAULT_GATE_SECONDS)),
        max_upload_mb=_as_float("max_upload_mb", raw.get("max_upload_mb", DEFAULT_MAX_UPLOAD_MB)),
        log_level=str(raw.get("log_level") or "INFO").upper(),
    )


_settings: Optional[Settings] = None


def get_settings(config_path: Optional[str] = None) -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings(config_path)
        logger.debug("Configuration loaded: %r", _settings)
    return _settings


def reset_settings() -> None:
    """Forget cached settings (used by tests)."""
    global _settings
    _settings = None
