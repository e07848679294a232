"""Configuration management for Tiny-Memory-Graph."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

load_dotenv()

# The memory file lives beside the program unless configured otherwise.
DEFAULT_MEMORY_DIR = Path(__file__).resolve().parent
DEFAULT_MEMORY_FILE = "memory.json"


def _env_or_default(env_name: str, default_value: object) -> str:
    """Return environment value or fallback as string."""
    value = os.environ.get(env_name)
    if value is not None:
        return value
    return str(default_value)


def resolve_memory_path(configured: Optional[str] = None) -> Path:
    """Resolve the storage file location.

    Absolute paths are used as-is. Bare filenames and relative paths are
    resolved against the default directory, not the working directory.

    Args:
        configured: Configured path, or None for the default

    Returns:
        Absolute path of the memory file
    """
    if not configured:
        return DEFAULT_MEMORY_DIR / DEFAULT_MEMORY_FILE
    path = Path(configured)
    if path.is_absolute():
        return path
    return DEFAULT_MEMORY_DIR / path


@dataclass
class Config:
    """Configuration for the memory graph server."""

    memory_file_path: str = str(DEFAULT_MEMORY_DIR / DEFAULT_MEMORY_FILE)
    host: str = "0.0.0.0"
    port: int = 8081
    log_level: str = "INFO"

    @staticmethod
    def _resolve_yaml_path(config_path: Optional[str] = None) -> Optional[Path]:
        """Resolve config.yaml path from explicit path or default search paths."""
        if config_path:
            path = Path(config_path)
            return path if path.exists() else None

        search_paths = [
            Path.cwd() / "config.yaml",
            Path(__file__).parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                return path
        return None

    @classmethod
    def from_yaml(cls, config_path: Optional[str] = None) -> "Config":
        """Load configuration from YAML file and environment variables.

        Args:
            config_path: Path to config.yaml file. If None, searches in current
                        directory and next to the package.

        Returns:
            Config instance with merged settings.
        """
        # Default values
        config_data = {
            "storage": {
                "memory_file_path": None,
            },
            "server": {
                "host": "0.0.0.0",
                "port": 8081,
            },
            "logging": {
                "level": "INFO",
            },
        }

        yaml_path = cls._resolve_yaml_path(config_path)

        if yaml_path and yaml_path.exists():
            with open(yaml_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
                for section in config_data:
                    if section in loaded:
                        config_data[section].update(loaded[section] or {})

        # Environment variables override YAML
        storage_config = config_data["storage"]
        server_config = config_data["server"]
        memory_path = os.environ.get("MEMORY_FILE_PATH") or storage_config.get("memory_file_path")
        return cls(
            memory_file_path=str(resolve_memory_path(memory_path)),
            host=_env_or_default("HOST", server_config.get("host", "0.0.0.0")),
            port=int(_env_or_default("PORT", server_config.get("port", 8081))),
            log_level=_env_or_default("LOG_LEVEL", config_data["logging"].get("level", "INFO")),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from the environment and any config.yaml found."""
        return cls.from_yaml()
