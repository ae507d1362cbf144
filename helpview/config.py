"""
Configuration management for helpview

Handles loading from ~/.helpview/config.json and .env files
"""

import json
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from helpview.errors import ConfigError

# Load .env file from the working directory
load_dotenv()

DEFAULT_VIMRUNTIME = "/usr/share/nvim/runtime"
DEFAULT_USERS = {
    "system": "system@example.org",
    "admin": "admin@example.org",
}


class Config(BaseModel):
    """Configuration model for helpview"""

    vimruntime: str = Field(
        default=DEFAULT_VIMRUNTIME,
        description="Vim runtime directory holding doc/tags",
    )
    max_lines: int = Field(
        default=20, gt=0, description="Most lines of a help entry to display"
    )
    formatter: str | None = Field(
        default=None,
        description="Command to pipe output through (e.g. 'bat -l help -p')",
    )
    log_level: str = Field(
        default="WARNING", description="Logging level (DEBUG, INFO, WARNING)"
    )
    log_file: str | None = Field(
        default=None,
        description="Write log records to this file instead of stderr",
    )
    users: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_USERS),
        description="User e-mail map",
    )


class ConfigManager:
    """
    Black Box: Configuration Manager

    Interface:
    - get_config() -> Config: Returns current configuration
    - get_vimruntime() -> str: Returns the Vim runtime directory
    - get_formatter() -> str | None: Returns the output formatter command
    - get_log_file() -> str | None: Returns the log file path

    Raises ConfigError when the config file can't be created, read or
    validated.
    """

    CONFIG_DIR = Path.home() / ".helpview"
    CONFIG_FILE = CONFIG_DIR / "config.json"

    def __init__(self) -> None:
        self._ensure_config_exists()
        self.config = self._load_config()

    def _ensure_config_exists(self) -> None:
        """Create config directory and file if they don't exist"""
        try:
            if not self.CONFIG_DIR.exists():
                self.CONFIG_DIR.mkdir(parents=True)

            if not self.CONFIG_FILE.exists():
                default_config = Config()
                self._save_to_file(default_config)
        except OSError as e:
            raise ConfigError(self.CONFIG_FILE, e.strerror or str(e)) from e

    def _load_config(self) -> Config:
        """Load configuration from file"""
        try:
            with open(self.CONFIG_FILE) as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigError(self.CONFIG_FILE, e.strerror or str(e)) from e
        except json.JSONDecodeError as e:
            raise ConfigError(self.CONFIG_FILE, f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(self.CONFIG_FILE, "expected a JSON object")

        try:
            return Config(**data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigError(self.CONFIG_FILE, problems) from e

    def _save_to_file(self, config: Config) -> None:
        """Save configuration to file"""
        with open(self.CONFIG_FILE, "w") as f:
            json.dump(config.model_dump(), f, indent=2)

    def get_config(self) -> Config:
        """Get current configuration"""
        return self.config

    def get_vimruntime(self) -> str:
        """
        Get the Vim runtime directory

        Priority: HELPVIEW_VIMRUNTIME > VIMRUNTIME > config.json
        """
        return (
            os.getenv("HELPVIEW_VIMRUNTIME")
            or os.getenv("VIMRUNTIME")
            or self.config.vimruntime
        )

    def get_formatter(self) -> str | None:
        """
        Get the output formatter command

        Priority: HELPVIEW_FORMATTER > config.json
        Returns None when output goes straight to the terminal
        """
        return os.getenv("HELPVIEW_FORMATTER") or self.config.formatter

    def get_log_file(self) -> str | None:
        """Priority: HELPVIEW_LOG_FILE > config.json"""
        return os.getenv("HELPVIEW_LOG_FILE") or self.config.log_file


# Global instance
_config_manager: ConfigManager | None = None


def get_config_manager() -> ConfigManager:
    """Get the global config manager instance"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
