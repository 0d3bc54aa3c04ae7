"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
#   1. config/config.yaml  - Static defaults checked into the repo
#   2. .env file           - Local developer overrides (not committed)
#   3. Environment vars    - Set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the values
# resolved by Settings (.env + environment) on top.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Resolved settings; a fresh ``Settings()`` is built if omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    else:
        yaml_config = {}

    s = settings or Settings()
    env_overrides = {
        "app": {
            "host": s.app_host,
            "port": s.app_port,
            "env": s.app_env,
        },
        "metadata": {
            "base_url": s.jikan_base_url,
            "timeout": s.jikan_timeout,
        },
        "enrichment": {
            "fetch_min_interval": s.fetch_min_interval,
            "prefetch_window": s.prefetch_window,
        },
        "session": {
            "decision_cooldown": s.decision_cooldown,
            "shuffle_seed": s.shuffle_seed,
        },
        "list": {
            "default_path": s.default_list_path,
            "store_db_path": s.list_store_db_path,
            "max_upload_bytes": s.max_upload_bytes,
        },
        "logging": {
            "level": s.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
