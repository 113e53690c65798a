"""Configuration file management for ascend.

Reads and writes ~/.ascend/config.json for settings that don't belong in the
progression document (display language, feed backend URL).
"""
from __future__ import annotations

import json
import os
from pathlib import Path

from ascend.i18n import DEFAULT_LANGUAGE, normalize_language

DEFAULT_CONFIG_PATH: Path = Path.home() / ".ascend" / "config.json"
DEFAULT_FEED_URL = "http://localhost:3000"
FEED_URL_ENV = "ASCEND_FEED_URL"


def load_config(config_path: Path | None = None) -> dict:
    """Load config from JSON file. Returns {} if file missing or invalid."""
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict, config_path: Path | None = None) -> None:
    """Write config dict to JSON file. Creates parent dirs if needed."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def get_language(config_path: Path | None = None) -> str:
    """Return the configured display language, or English."""
    raw = load_config(config_path).get("language")
    return normalize_language(raw) if isinstance(raw, str) else DEFAULT_LANGUAGE


def set_language(language: str, config_path: Path | None = None) -> str:
    """Persist the display language. Returns the normalized code that was stored."""
    config = load_config(config_path)
    config["language"] = normalize_language(language)
    save_config(config, config_path)
    return config["language"]


def get_feed_url(config_path: Path | None = None) -> str:
    """Feed backend URL: $ASCEND_FEED_URL, then config, then the local default."""
    env = os.environ.get(FEED_URL_ENV)
    if env:
        return env.rstrip("/")
    raw = load_config(config_path).get("feed_url")
    if isinstance(raw, str) and raw:
        return raw.rstrip("/")
    return DEFAULT_FEED_URL


def set_feed_url(url: str, config_path: Path | None = None) -> None:
    """Persist the feed backend URL to config."""
    config = load_config(config_path)
    config["feed_url"] = url.rstrip("/")
    save_config(config, config_path)


def get_feed_cookies(config_path: Path | None = None) -> dict[str, str]:
    """Session cookie for the feed backend ({'userId': ...}), or {} when logged out."""
    raw = load_config(config_path).get("feed_session")
    if isinstance(raw, str) and raw:
        return {"userId": raw}
    return {}


def set_feed_session(user_id: str | None, config_path: Path | None = None) -> None:
    """Store (or clear, with None) the feed session id obtained from the OAuth callback."""
    config = load_config(config_path)
    if user_id:
        config["feed_session"] = user_id
    else:
        config.pop("feed_session", None)
    save_config(config, config_path)
