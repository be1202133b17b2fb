"""Configuration management for hnfeed."""

import os
from pathlib import Path

from dotenv import load_dotenv
import yaml

# Load .env from multiple locations
_project_root = Path(__file__).parent.parent.parent
load_dotenv(_project_root / ".env")  # Project directory
load_dotenv(Path.home() / ".hnfeed" / ".env")  # Config directory


CONFIG_DIR = Path.home() / ".hnfeed"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
LOG_FILE = CONFIG_DIR / "hnfeed.log"

OPEN_ENV_VAR = "HNFEED_OPEN"

DEFAULT_CONFIG = {
    "default_count": 30,
    "concurrency": 20,  # Max item requests in flight at once
    "comment_limit": 50,  # Top-level comments fetched per story
    "submission_limit": 10,  # Stories shown on a user profile
    "request_timeout": 10.0,  # Seconds, per HTTP request
    "open_command": "",  # Shell template for opening URLs, {} is the URL
}


def ensure_config_dir() -> None:
    """Create config directory if it doesn't exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_config() -> dict:
    """Load configuration from file."""
    ensure_config_dir()

    if not CONFIG_FILE.exists():
        save_config(DEFAULT_CONFIG)
        return DEFAULT_CONFIG.copy()

    with open(CONFIG_FILE) as f:
        config = yaml.safe_load(f) or {}

    # Merge with defaults for any missing keys
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value

    return config


def save_config(config: dict) -> None:
    """Save configuration to file."""
    ensure_config_dir()

    with open(CONFIG_FILE, "w") as f:
        yaml.dump(config, f, default_flow_style=False)


def get_open_command(config: dict | None = None) -> str:
    """Shell template used to open URLs; the environment wins over the file."""
    env_cmd = os.environ.get(OPEN_ENV_VAR)
    if env_cmd:
        return env_cmd

    if config is None:
        config = load_config()
    return config.get("open_command") or ""
