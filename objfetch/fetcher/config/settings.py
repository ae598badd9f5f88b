"""
Configuration management for the object fetcher.

Uses pydantic-settings to load configuration from environment variables
and YAML files with proper validation.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, FilePath, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.types import RangeMode


class FetcherSettings(BaseSettings):
    """
    Static configuration of one fetcher instance.

    ``bucket``, ``key``, ``version_id``, ``range_start`` and ``range_end`` are
    attribute expressions, evaluated against each flow unit at fetch time.
    """

    model_config = SettingsConfigDict(
        env_prefix="FETCHER_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Object addressing (attribute expressions)
    bucket: str = Field(..., description="Bucket name expression")
    key: str = Field("${filename}", description="Object key expression")
    version_id: Optional[str] = Field(None, description="Version of the object to download")
    range_start: Optional[str] = Field(None, description="0-based index of the first byte to download")
    range_end: Optional[str] = Field(None, description="0-based index of the last byte to download")
    range_mode: RangeMode = Field(RangeMode.EXPLICIT, description="When to attach a byte range to the request")

    # AWS Configuration
    region: str = Field("us-west-2")
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    credentials_file: Optional[FilePath] = Field(None, description="Shared credentials file for the S3 client")
    endpoint_url: Optional[str] = Field(None, description="S3-compatible endpoint (LocalStack, MinIO)")
    timeout: int = Field(30, ge=1, le=300, description="Request timeout in seconds")

    # Content copy
    chunk_size: int = Field(64 * 1024, ge=1024)

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    json_logs: bool = Field(False, description="Whether to output JSON format logs")

    @field_validator("bucket", "key")
    @classmethod
    def validate_required_expression(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("version_id", "range_start", "range_end", "access_key", "secret_key")
    @classmethod
    def validate_optional_non_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("must not be empty when set")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @model_validator(mode="after")
    def validate_credentials(self) -> "FetcherSettings":
        """Static keys come in pairs and exclude a credentials file"""
        if (self.access_key is None) != (self.secret_key is None):
            raise ValueError("access_key and secret_key must be set together")
        if self.access_key is not None and self.credentials_file is not None:
            raise ValueError("credentials_file cannot be combined with access_key/secret_key")
        return self

    def masked(self) -> Dict[str, Any]:
        """Settings as a plain dict with secrets hidden"""
        data = self.model_dump(mode="json")
        for field in ("access_key", "secret_key"):
            if data.get(field):
                data[field] = "****"
        return data


def _expand_env_variables(obj: Any) -> Any:
    """Recursively expand ``${VAR}`` and ``${VAR:default}`` in configuration values.

    Unknown variables are left as-is so attribute expressions such as
    ``${filename}`` survive loading.
    """
    if isinstance(obj, str):

        def replace_env_var(match):
            var_with_default = match.group(1)
            if ":" in var_with_default:
                var_name, default_value = var_with_default.split(":", 1)
                return os.getenv(var_name, default_value)
            else:
                return os.getenv(var_with_default, match.group(0))

        return re.sub(r"\$\{([^}]+)\}", replace_env_var, obj)
    elif isinstance(obj, dict):
        return {key: _expand_env_variables(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_variables(item) for item in obj]
    else:
        return obj


def load_config_from_yaml(file_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML file with environment variable expansion.

    Args:
        file_path: Path to YAML configuration file

    Returns:
        Dictionary containing configuration values with env vars expanded

    Raises:
        FileNotFoundError: If configuration file doesn't exist
        yaml.YAMLError: If YAML file is malformed
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
        return _expand_env_variables(config)


def load_settings(config_file: Optional[Path] = None, **overrides: Any) -> FetcherSettings:
    """
    Load fetcher settings from environment variables and an optional YAML file.

    Args:
        config_file: Path to configuration file
        **overrides: Additional configuration overrides; None values are ignored

    Returns:
        Configured FetcherSettings instance

    Raises:
        pydantic.ValidationError: If configuration is invalid
        FileNotFoundError: If the configuration file is missing
    """
    config_data: Dict[str, Any] = {}

    if config_file:
        config_data = load_config_from_yaml(config_file)

    config_data.update({name: value for name, value in overrides.items() if value is not None})

    return FetcherSettings(**config_data)
