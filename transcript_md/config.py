import json
import os
import shutil
from pathlib import Path
from typing import Any, Dict

from .openrouter_client import DEFAULT_BASE_URL, DEFAULT_MODEL

CONFIG_ROOT_DIR = Path.home() / ".transcript-md"

# Environment variables win over values stored in config.json.
ENV_OVERRIDES = {
    "api_key": "OPENROUTER_API_KEY",
    "base_url": "OPENROUTER_BASE_URL",
    "model": "OPENROUTER_MODEL",
}


def get_default_config_dir() -> Path:
    env_override = os.getenv("TRANSCRIPT_MD_CONFIG_DIR")
    if env_override:
        return Path(env_override).expanduser()
    return CONFIG_ROOT_DIR


def get_default_config_path() -> Path:
    return get_default_config_dir() / "config.json"


class AppConfig:
    """Settings for the completion service, read from config.json and the environment."""

    def __init__(self, config_path: Path):
        self.config_path = config_path
        self.load_warning: str | None = None
        self.defaults: Dict[str, Any] = {
            "base_url": DEFAULT_BASE_URL,
            "model": DEFAULT_MODEL,
            "api_key": "",
            "timeout": 300.0,
            "temperature": None,
            "prompt_file": "",
            "log_level": "INFO",
        }
        self.settings = self.load_config()

    def _preserve_corrupt_config(self) -> Path | None:
        """Keep a copy of the unreadable config so users can inspect what went wrong."""
        if not self.config_path.exists():
            return None
        suffix = self.config_path.suffix or ".json"
        backup = self.config_path.with_suffix(suffix + ".corrupt")
        counter = 1
        while backup.exists():
            backup = self.config_path.with_suffix(f"{suffix}.corrupt{counter}")
            counter += 1
        try:
            shutil.copy2(self.config_path, backup)
            return backup
        except OSError:
            return None

    def load_config(self) -> Dict[str, Any]:
        self.load_warning = None
        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    raw_settings = json.load(f)
                if isinstance(raw_settings, dict):
                    return {**self.defaults, **raw_settings}
                self.load_warning = f"Config at {self.config_path} is not a JSON object. Using defaults."
            except (json.JSONDecodeError, OSError) as exc:
                backup = self._preserve_corrupt_config()
                note = f"Failed to parse config at {self.config_path}: {exc}. Using defaults."
                if backup:
                    note += f" Saved unreadable copy as {backup.name}."
                self.load_warning = note
        return dict(self.defaults)

    def get(self, key: str) -> Any:
        env_name = ENV_OVERRIDES.get(key)
        if env_name:
            env_value = os.getenv(env_name, "").strip()
            if env_value:
                return env_value
        if key in {"timeout", "temperature"}:
            value = self.settings.get(key, self.defaults.get(key))
            if value is None:
                return self.defaults.get(key)
            try:
                return float(value)
            except (TypeError, ValueError):
                return self.defaults.get(key)
        if key in {"base_url", "model", "api_key", "prompt_file", "log_level"}:
            value = self.settings.get(key, self.defaults.get(key))
            return str(value).strip() if value is not None else ""
        return self.settings.get(key, self.defaults.get(key))
