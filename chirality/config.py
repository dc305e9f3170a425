"""Run configuration, read once at import time.

``config.yaml`` beside this module holds the defaults; ``CHIRALITY_CONFIG``
points at a replacement file. Provider API keys come from ``.env`` at the
project root.
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

CONFIG_PATH = Path(
    os.environ.get("CHIRALITY_CONFIG", Path(__file__).resolve().parent / "config.yaml")
)


def load_config(path: Path) -> dict:
    """Parse a YAML config file. An empty file yields an empty mapping."""
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}.")
    return data


_config = load_config(CONFIG_PATH)


def get_config() -> dict:
    """Return the loaded config dictionary."""
    return _config
