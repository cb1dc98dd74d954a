"""
Configuration management for Proxy Printer.

Uses Pydantic for type-safe, validated configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class ProxyPrinterSettings(BaseSettings):
    """Main configuration for Proxy Printer.

    Settings can be overridden via:
    1. Environment variables (prefixed with PP_)
    2. .env file in the working directory
    3. Programmatic overrides

    Example:
        export PP_MAX_LOOKUP_WORKERS=4
        export PP_LOG_LEVEL=DEBUG
    """

    # === Threading & Concurrency ===
    max_lookup_workers: int = Field(
        default=1,
        ge=1,
        le=8,
        description="Concurrent card lookups while resolving a deck (1 = sequential)",
    )
    max_download_workers: int = Field(
        default=8,
        ge=1,
        le=32,
        description="Number of concurrent image download threads",
    )

    # === HTTP ===
    http_timeout: int = Field(
        default=30, ge=5, le=300, description="HTTP request timeout in seconds"
    )
    max_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts for a request failing with 429/5xx",
    )
    retry_base_delay: float = Field(
        default=0.5,
        ge=0.0,
        le=10.0,
        description="Base delay for exponential backoff (seconds)",
    )
    retry_max_delay: float = Field(
        default=30.0,
        ge=0.0,
        le=300.0,
        description="Upper bound for a single backoff delay (seconds)",
    )
    api_request_interval: float = Field(
        default=0.1,
        ge=0.0,
        le=5.0,
        description="Minimum delay between Scryfall API requests (seconds)",
    )
    user_agent: str = Field(
        default="ProxyPrinter/1.0", description="User-Agent sent with every request"
    )
    scryfall_api_base: str = Field(
        default="https://api.scryfall.com", description="Scryfall API base URL"
    )
    archidekt_api_base: str = Field(
        default="https://archidekt.com", description="Archidekt base URL"
    )

    # === Output ===
    output_dir: Path = Field(
        default=Path("output"), description="Default folder for generated documents"
    )
    default_token_copies: int = Field(
        default=0, ge=0, le=100, description="Copies printed per related token"
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_rotation: str = Field(default="10 MB", description="Log file rotation size")
    log_retention: str = Field(
        default="10 days", description="Log file retention period"
    )
    log_to_file: bool = Field(default=False, description="Enable file logging")
    logs_dir: Path = Field(default=Path("logs"), description="Log files directory")

    @field_validator("scryfall_api_base", "archidekt_api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Base URLs are joined with paths that start with '/'."""
        return v.rstrip("/")

    model_config = {
        "env_prefix": "PP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance
settings = ProxyPrinterSettings()


def reload_settings() -> ProxyPrinterSettings:
    """Reload settings from environment and .env file.

    Useful for testing or runtime configuration changes.
    """
    global settings
    settings = ProxyPrinterSettings()
    return settings
