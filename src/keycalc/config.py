"""
Configuration management for keycalc.

Handles loading configuration from environment variables, YAML files,
and provides defaults matching a 12-character keypad display.
"""

import logging
from pathlib import Path

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""
    
    model_config = SettingsConfigDict(
        env_prefix="KEYCALC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # Application settings
    app_name: str = "keycalc"
    debug: bool = False
    log_level: str = "INFO"
    
    # Entry buffer
    max_entry_length: int = Field(12, ge=1)
    
    # Result formatting
    max_display_length: int = Field(12, ge=1)
    result_precision: int = Field(8, ge=0)  # fractional digits kept after rounding
    exponent_digits: int = Field(6, ge=0)  # mantissa digits in scientific notation
    scientific_lower_bound: float = 1e-7
    scientific_upper_bound: float = 1e11
    error_marker: str = "Error"


# Global settings instance
settings = Settings()


def load_yaml_config(path: Path) -> dict:
    """Load configuration from a YAML file."""
    import yaml
    
    if not path.exists():
        return {}
    
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_settings(path: Path | None = None) -> Settings:
    """Build settings from the environment, overridden by an optional YAML file."""
    overrides = load_yaml_config(path) if path is not None else {}
    return Settings(**overrides)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through a level filter."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
