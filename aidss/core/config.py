"""
Configuration file loading for aidss.

Loads .aidss.yaml from project root or home directory.
Config values provide defaults that can be overridden by CLI options.

Example:
    defaults:
      adapter: openai
      model: gpt-4
    files:
      prompt: prompt.txt
      response: response.txt
    watch:
      debounce: 0.5
      polling: false
    metrics:
      enabled: true
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

CONFIG_FILENAME = ".aidss.yaml"


@dataclass
class ConfigDefaults:
    """Default backend selection."""
    adapter: str = "openai"
    model: str = "gpt-4"


@dataclass
class ConfigFiles:
    """Per-node artifact names."""
    prompt: str = "prompt.txt"
    response: str = "response.txt"


@dataclass
class ConfigWatch:
    """Directory watcher settings."""
    debounce: float = 0.5  # seconds
    polling: bool = False


@dataclass
class Config:
    """Loaded configuration."""
    defaults: ConfigDefaults = field(default_factory=ConfigDefaults)
    files: ConfigFiles = field(default_factory=ConfigFiles)
    watch: ConfigWatch = field(default_factory=ConfigWatch)
    metrics_enabled: bool = True
    source_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict, source_path: Optional[Path] = None) -> "Config":
        """Create Config from parsed YAML dict."""
        config = cls(source_path=source_path)

        if "defaults" in data and isinstance(data["defaults"], dict):
            defaults = data["defaults"]
            config.defaults.adapter = defaults.get("adapter", config.defaults.adapter)
            config.defaults.model = defaults.get("model", config.defaults.model)

        if "files" in data and isinstance(data["files"], dict):
            files = data["files"]
            config.files.prompt = files.get("prompt", config.files.prompt)
            config.files.response = files.get("response", config.files.response)

        if "watch" in data and isinstance(data["watch"], dict):
            watch = data["watch"]
            debounce = watch.get("debounce", config.watch.debounce)
            if isinstance(debounce, (int, float)) and debounce >= 0:
                config.watch.debounce = float(debounce)
            config.watch.polling = bool(watch.get("polling", config.watch.polling))

        if "metrics" in data and isinstance(data["metrics"], dict):
            config.metrics_enabled = bool(data["metrics"].get("enabled", config.metrics_enabled))

        return config


# Global cached config
_cached_config: Optional[Config] = None


def load_config(path: Optional[Path] = None, use_cache: bool = True) -> Config:
    """Load .aidss.yaml from project root or home.

    Search order:
    1. Explicit path if provided
    2. .aidss.yaml in current directory
    3. .aidss.yaml in parent directories (up to git root or /)
    4. ~/.aidss.yaml in home directory

    Returns:
        Loaded Config, or default Config if no file found
    """
    global _cached_config

    if use_cache and _cached_config is not None:
        return _cached_config

    config_path = None

    if path and path.exists():
        config_path = path
    else:
        search_dir = Path.cwd()
        while search_dir != search_dir.parent:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                config_path = candidate
                break
            # Stop at git root
            if (search_dir / ".git").exists():
                break
            search_dir = search_dir.parent

        if config_path is None:
            home_config = Path.home() / CONFIG_FILENAME
            if home_config.exists():
                config_path = home_config

    if config_path is None:
        config = Config()
    else:
        try:
            data = yaml.safe_load(config_path.read_text())
            config = Config.from_dict(data or {}, source_path=config_path)
        except (yaml.YAMLError, OSError) as e:
            logging.getLogger("aidss.core.config").warning(
                f"Failed to load config from {config_path}: {e}"
            )
            config = Config()

    if use_cache:
        _cached_config = config

    return config


def clear_config_cache() -> None:
    """Clear the cached config (useful for testing)."""
    global _cached_config
    _cached_config = None


def get_default_adapter() -> str:
    """Get default adapter from config."""
    return load_config().defaults.adapter


def get_default_model() -> str:
    """Get default model from config."""
    return load_config().defaults.model
