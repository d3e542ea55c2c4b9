"""
Configuration settings for the fact feed client.

This module handles environment variable loading and configuration management
using Pydantic for validation and type safety. An optional YAML file can be
layered on top of the environment.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Fact feed configuration settings.

    All settings can be overridden via environment variables prefixed with
    ``FACT_FEED_`` (e.g. ``FACT_FEED_SUPABASE_URL``).
    """

    # Remote store
    supabase_url: str = Field(
        default="",
        description="Base URL of the Supabase project"
    )
    supabase_key: str = Field(
        default="",
        description="Anon or service key sent as apikey and bearer token"
    )
    facts_table: str = Field(
        default="facts",
        description="Name of the facts table"
    )
    image_bucket: str = Field(
        default="fact-images",
        description="Storage bucket holding fact images"
    )
    request_timeout: int = Field(
        default=30,
        description="Timeout in seconds for remote requests"
    )

    # Feed behaviour
    read_limit: int = Field(
        default=1000,
        description="Maximum number of facts fetched per read"
    )
    image_cache_control: str = Field(
        default="3600",
        description="Cache-Control max-age (seconds) for uploaded images"
    )
    upload_chunk_size: int = Field(
        default=64 * 1024,
        description="Chunk size in bytes used to stream uploads and report progress"
    )

    # Theme preference
    theme_store_path: str = Field(
        default="~/.fact_feed/preferences.json",
        description="JSON file holding local UI preferences"
    )
    theme_key: str = Field(
        default="theme",
        description="Key under which the colour theme is stored"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="text",
        description="Logging format (json or text)"
    )
    log_file: str = Field(
        default="logs/fact_feed.log",
        description="Rotating log file written outside debug mode (empty to disable)"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    model_config = SettingsConfigDict(
        env_prefix="FACT_FEED_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> "Settings":
        """
        Load settings from a YAML file layered over environment variables.

        Keys present in the YAML file win over the environment; missing keys
        fall back to the environment and then to the defaults.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Settings instance with merged configuration
        """
        overrides = {}
        if os.path.exists(config_path):
            with open(config_path, "r", encoding="utf-8") as file:
                yaml_config = yaml.safe_load(file)

            if yaml_config:
                overrides = {
                    key: value
                    for key, value in yaml_config.items()
                    if key in cls.model_fields
                }

        return cls(**overrides)

    @property
    def theme_store_file(self) -> Path:
        return Path(self.theme_store_path).expanduser()

    def validate_config(self) -> List[str]:
        """
        Validate configuration and return a list of validation errors.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.supabase_url:
            errors.append("Missing FACT_FEED_SUPABASE_URL in environment")
        elif not self.supabase_url.startswith(("http://", "https://")):
            errors.append("FACT_FEED_SUPABASE_URL must be an http or https URL")
        if not self.supabase_key:
            errors.append("Missing FACT_FEED_SUPABASE_KEY in environment")

        if self.read_limit <= 0:
            errors.append("read_limit must be greater than 0")
        if self.request_timeout <= 0:
            errors.append("request_timeout must be greater than 0")
        if self.upload_chunk_size <= 0:
            errors.append("upload_chunk_size must be greater than 0")

        return errors


@lru_cache()
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Args:
        config_path: Optional YAML file layered over the environment

    Returns:
        Settings: Configured settings instance
    """
    if config_path:
        return Settings.from_yaml(config_path)
    return Settings()
