"""
Configuration management for Olive.

Uses XDG base directories:
- Config: ~/.config/olive/config.toml
- Data: ~/olive/ (notes and couple state)
"""

from pathlib import Path
from typing import Any
import os

# XDG defaults
DEFAULT_CONFIG_HOME = Path.home() / ".config"
DEFAULT_DATA_HOME = Path.home() / "olive"

DEFAULT_LLM_ENDPOINT = "https://toolkit.rork.com/text/llm/"
DEFAULT_LLM_TIMEOUT = 30.0


def get_config_dir() -> Path:
    """Get the config directory (XDG_CONFIG_HOME/olive)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME", DEFAULT_CONFIG_HOME))
    return base / "olive"


def get_olive_home() -> Path:
    """Get the olive data directory (~/olive or OLIVE_HOME)."""
    if env_home := os.environ.get("OLIVE_HOME"):
        return Path(env_home)
    return DEFAULT_DATA_HOME


def get_config_path() -> Path:
    """Get the path to config.toml."""
    return get_config_dir() / "config.toml"


def get_db_path() -> Path:
    """Get the path to olive.db."""
    return get_olive_home() / "olive.db"


def ensure_dirs() -> None:
    """Ensure all required directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_olive_home().mkdir(parents=True, exist_ok=True)


def load_config() -> dict[str, Any]:
    """
    Load configuration from config.toml.

    Values from the file are layered over the defaults, then environment
    overrides (OLIVE_LLM_ENDPOINT, OLIVE_LOG_LEVEL) are applied.
    """
    config = get_default_config()
    config_path = get_config_path()

    if config_path.exists():
        # Lazy import tomli only when needed
        import tomli

        with open(config_path, "rb") as f:
            user_config = tomli.load(f)
        for section, values in user_config.items():
            if isinstance(config.get(section), dict):
                # Known sections are tables; anything else is ignored
                if isinstance(values, dict):
                    config[section].update(values)
            else:
                config[section] = values

    if endpoint := os.environ.get("OLIVE_LLM_ENDPOINT"):
        config["llm"]["endpoint"] = endpoint
    if level := os.environ.get("OLIVE_LOG_LEVEL"):
        config["logging"]["level"] = level

    return config


def get_default_config() -> dict[str, Any]:
    """Return default configuration."""
    return {
        "olive": {
            "home": str(get_olive_home()),
        },
        "llm": {
            "endpoint": DEFAULT_LLM_ENDPOINT,
            "timeout": DEFAULT_LLM_TIMEOUT,  # seconds; the endpoint has no SLA
        },
        "logging": {
            "level": "WARNING",
        },
    }
