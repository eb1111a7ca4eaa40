"""TOML configuration file handling."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import tomli_w

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "llmcli" / "config.toml"
DEFAULT_HISTORY_PATH = Path.home() / ".cache" / "llmcli_history.txt"


@dataclass
class Config:
    """Startup settings: which chatbot to use and how to reach it."""

    default_chatbot: str = "gemini"
    default_model: Optional[str] = None
    system_prompt: Optional[str] = None
    history_path: Optional[Path] = None
    default_models: Dict[str, str] = field(default_factory=dict)
    api_keys: Dict[str, str] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def api_key_for(self, chatbot: str) -> Optional[str]:
        return self.api_keys.get(chatbot)

    def model_for(self, chatbot: str) -> Optional[str]:
        """Return the configured model for *chatbot*, if any."""
        if chatbot in self.default_models:
            return self.default_models[chatbot]
        # None lets the chatbot pick its own default model.
        if chatbot == self.default_chatbot:
            return self.default_model
        return None

    @property
    def history_file(self) -> Path:
        return self.history_path or DEFAULT_HISTORY_PATH

    # ------------------------------------------------------------------
    # (De)serialisation
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        config = cls()
        for key in ("default_chatbot", "default_model", "system_prompt"):
            if key in data:
                value = data[key]
                if not isinstance(value, str):
                    raise ConfigError(f"'{key}' must be a string.")
                setattr(config, key, value)

        if "history_path" in data:
            if not isinstance(data["history_path"], str):
                raise ConfigError("'history_path' must be a string.")
            config.history_path = Path(data["history_path"]).expanduser()

        for key in ("default_models", "api_keys"):
            table = data.get(key, {})
            if not isinstance(table, dict) or not all(
                isinstance(v, str) for v in table.values()
            ):
                raise ConfigError(f"'{key}' must be a table of strings.")
            setattr(config, key, dict(table))
        return config

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"default_chatbot": self.default_chatbot}
        if self.default_model is not None:
            data["default_model"] = self.default_model
        if self.system_prompt is not None:
            data["system_prompt"] = self.system_prompt
        if self.history_path is not None:
            data["history_path"] = str(self.history_path)
        if self.default_models:
            data["default_models"] = dict(self.default_models)
        if self.api_keys:
            data["api_keys"] = dict(self.api_keys)
        return data

    # ------------------------------------------------------------------
    # File access
    # ------------------------------------------------------------------

    @staticmethod
    def resolve_path(path: Optional[Path] = None) -> Path:
        if path is not None:
            return path
        env_path = os.getenv("LLMCLI_CONFIG_PATH")
        if env_path:
            return Path(env_path)
        return DEFAULT_CONFIG_PATH

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Read the configuration file, falling back to defaults if absent."""
        config_path = cls.resolve_path(path)
        if not config_path.exists():
            logger.debug("No config file at %s, using defaults", config_path)
            return cls()
        try:
            with config_path.open("rb") as fh:
                data = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Failed to read {config_path}: {exc}") from exc
        logger.debug("Loaded config from %s", config_path)
        return cls.from_dict(data)

    def save(self, path: Optional[Path] = None) -> Path:
        config_path = self.resolve_path(path)
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with config_path.open("wb") as fh:
                tomli_w.dump(self.to_dict(), fh)
        except OSError as exc:
            raise ConfigError(f"Failed to write {config_path}: {exc}") from exc
        return config_path
