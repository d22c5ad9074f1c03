"""
Tool: Push Configuration
Purpose: Resolve runtime settings from args/push.yaml and the environment

Environment variables take precedence over the YAML file, which takes
precedence over the built-in defaults.

Usage:
    from alienfood.config import load_config, get_api_base_url
"""

import os
from typing import Any

import yaml

from alienfood import CONFIG_PATH
from alienfood.logging_config import get_logger


logger = get_logger(__name__)

CONFIG_FILE = CONFIG_PATH / "push.yaml"

DEFAULT_API_BASE_URL = "http://localhost:5000"
DEFAULT_ADMIN_SECRET = "change-me"

DEFAULTS: dict[str, Any] = {
    "api_base_url": DEFAULT_API_BASE_URL,
    "vapid_public_key": "",
    "admin_secret": DEFAULT_ADMIN_SECRET,
    "cors_origins": ["*"],
    "cleanup": {
        "max_attempts": 5,
        "cooldown_seconds": 1.0,
        "settle_seconds": 2.0,
    },
}

# (config key, environment variable)
ENV_OVERRIDES = [
    ("api_base_url", "ALIENFOOD_API_URL"),
    ("vapid_public_key", "ALIENFOOD_VAPID_PUBLIC_KEY"),
    ("admin_secret", "ADMIN_SECRET"),
]


def _load_file_config() -> dict:
    """Load the push section of the YAML config file, if present."""
    if not CONFIG_FILE.exists():
        return {}

    try:
        with open(CONFIG_FILE) as f:
            file_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("config_file_unreadable", path=str(CONFIG_FILE), error=str(e))
        return {}

    return file_config.get("push", {}) or {}


def load_config() -> dict:
    """
    Build the effective configuration.

    Returns:
        Dict with api_base_url, vapid_public_key, admin_secret,
        cors_origins and cleanup keys.
    """
    config = {**DEFAULTS, "cleanup": dict(DEFAULTS["cleanup"])}

    file_config = _load_file_config()
    for key, value in file_config.items():
        if key == "cleanup" and isinstance(value, dict):
            config["cleanup"].update(value)
        elif value is not None:
            config[key] = value

    for key, env_var in ENV_OVERRIDES:
        value = os.environ.get(env_var, "").strip()
        if value:
            config[key] = value

    origins = os.environ.get("ALIENFOOD_CORS_ORIGINS", "").strip()
    if origins:
        config["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

    return config


def get_api_base_url() -> str:
    """Backend base URL used by the client, without trailing slash."""
    return str(load_config()["api_base_url"]).rstrip("/")


def get_fallback_public_key() -> str:
    """Statically configured VAPID public key, or empty string."""
    return str(load_config().get("vapid_public_key") or "")


def get_admin_secret() -> str:
    return str(load_config()["admin_secret"])
