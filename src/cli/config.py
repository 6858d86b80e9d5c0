"""Configuration loading and management."""

import re
from pathlib import Path
from typing import Optional

import yaml

from .config_models import StewardConfig

_USER_DIR_RE = re.compile(r"[^A-Za-z0-9_.@-]")


def find_config() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / "config.yaml",
        Path.home() / ".steward" / "config.yaml",
    ]
    for loc in locations:
        if loc.exists():
            return loc
    return None


def load_config_model(config_path: Optional[Path] = None) -> StewardConfig:
    """Load configuration as Pydantic model with validation."""
    base_config = {}

    path = config_path or find_config()
    if path and path.exists():
        try:
            with open(path) as f:
                base_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")

    try:
        return StewardConfig.from_dict(base_config)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}")


def get_user_paths(config: StewardConfig, user_id: str) -> dict:
    """Per-user data directory under {data_dir}/users/{user_id}/.

    Each user gets their own database file so writes for different users
    never share a lock.
    """
    safe_id = _USER_DIR_RE.sub("_", user_id)
    if not safe_id.strip("."):
        safe_id = "_"
    base = config.paths.data_dir / "users" / safe_id
    base.mkdir(parents=True, exist_ok=True)
    return {
        "base": base,
        "db": base / "steward.db",
    }
