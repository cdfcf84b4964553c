"""
Global application settings and configuration management.

This module provides centralized configuration management using Pydantic Settings
with support for environment variables, YAML configuration files, and validation.
"""

from pathlib import Path
from typing import Optional, List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml
from dotenv import load_dotenv


class GoogleSettings(BaseSettings):
    """Google OAuth client and Drive API configuration."""

    client_id: Optional[str] = Field(
        default=None,
        description="OAuth client ID served to the page via /config"
    )
    api_key: Optional[str] = Field(
        default=None,
        description="Google API key served to the page via /config"
    )
    client_secret: Optional[str] = Field(
        default=None,
        description="OAuth client secret for the installed-app flow"
    )
    client_secrets_file: Optional[Path] = Field(
        default=None,
        description="Path to a downloaded OAuth client secrets JSON file"
    )
    token_file: Optional[Path] = Field(
        default=None,
        description="Where to cache the signed-in user's token (memory only if unset)"
    )
    scopes: List[str] = Field(
        default=["https://www.googleapis.com/auth/drive.file"],
        description="OAuth scopes requested at sign-in"
    )

    model_config = SettingsConfigDict(env_prefix="GOOGLE_")

    @field_validator("scopes", mode="before")
    @classmethod
    def parse_scopes(cls, v):
        """Parse comma-separated scopes from environment variable."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("client_secrets_file", "token_file")
    @classmethod
    def resolve_paths(cls, v: Optional[Path]) -> Optional[Path]:
        if v is None:
            return None
        return Path(v).resolve()


class UploadSettings(BaseSettings):
    """Upload workflow configuration."""

    folder_name: str = Field(
        default="uploads",
        description="Drive folder that receives uploaded files"
    )
    upload_url: str = Field(
        default="https://www.googleapis.com/upload/drive/v3/files?uploadType=resumable",
        description="Resumable upload session endpoint"
    )
    request_timeout: Optional[float] = Field(
        default=None,
        description="HTTP timeout in seconds for session and transfer calls (none by default)"
    )

    model_config = SettingsConfigDict(env_prefix="UPLOAD_")

    @field_validator("folder_name")
    @classmethod
    def validate_folder_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Upload folder name must not be empty")
        if "'" in v:
            raise ValueError("Upload folder name must not contain single quotes")
        return v


class ServerSettings(BaseSettings):
    """Web server configuration."""

    host: str = Field(default="127.0.0.1", description="Interface to bind")
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("SERVER_PORT", "PORT"),
        description="Port to listen on"
    )
    public_dir: Path = Field(
        default=Path("public"),
        description="Directory of static assets served under /static"
    )
    title: str = Field(default="Google Drive File Uploader", description="Page title")
    show: bool = Field(default=False, description="Open a browser tab on start")

    model_config = SettingsConfigDict(env_prefix="SERVER_", populate_by_name=True)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("Port must be between 1 and 65535")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    file: Optional[Path] = Field(
        default=Path("logs/app.log"),
        description="Log file path"
    )

    model_config = SettingsConfigDict(env_prefix="LOG_")

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v

    @field_validator("file")
    def validate_log_file(cls, v: Optional[Path]) -> Optional[Path]:
        """Resolve the log file path."""
        if v is None:
            return None
        if isinstance(v, str):
            v = Path(v)
        return v.resolve()


class AppSettings(BaseSettings):
    """Main application settings."""

    name: str = Field(default="DriveUploader", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Sub-configurations
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "AppSettings":
        """Load settings from YAML file."""
        if not yaml_path.exists():
            raise FileNotFoundError(f"Settings file not found: {yaml_path}")

        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        sections = {
            "google": GoogleSettings,
            "upload": UploadSettings,
            "server": ServerSettings,
            "logging": LoggingSettings,
        }

        settings_data = {}
        for key, value in data.items():
            if key in sections and isinstance(value, dict):
                settings_data[key] = sections[key](**value)
            elif key == "app" and isinstance(value, dict):
                settings_data.update(value)
            else:
                settings_data[key] = value

        return cls(**settings_data)


def load_settings(
    yaml_path: Optional[Path] = None,
    env_file: Optional[Path] = None
) -> AppSettings:
    """
    Load application settings from multiple sources.

    Priority order:
    1. YAML configuration file (when given and present)
    2. Environment variables and .env
    3. Default values

    Args:
        yaml_path: Path to YAML configuration file
        env_file: Path to environment file (.env)

    Returns:
        Configured AppSettings instance
    """
    if env_file and env_file.exists():
        load_dotenv(env_file)
    else:
        load_dotenv()

    if yaml_path and yaml_path.exists():
        # YAML values seed the sections; sub-settings still read the environment
        return AppSettings.from_yaml(yaml_path)

    return AppSettings()


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        yaml_path = Path("configs/settings.yaml")
        env_path = Path(".env")
        _settings = load_settings(
            yaml_path=yaml_path if yaml_path.exists() else None,
            env_file=env_path if env_path.exists() else None
        )
    return _settings


def reload_settings(
    yaml_path: Optional[Path] = None,
    env_file: Optional[Path] = None
) -> AppSettings:
    """Reload settings from files (useful for testing or runtime config changes)."""
    global _settings
    _settings = load_settings(yaml_path=yaml_path, env_file=env_file)
    return _settings
