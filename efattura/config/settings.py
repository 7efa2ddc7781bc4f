"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FormatSettings(BaseSettings):
    """Number formatting configuration."""

    model_config = SettingsConfigDict(env_prefix="FORMAT_")

    # "comma" -> 1.234,56 (Italian), "period" -> 1,234.56
    decimal_style: Literal["comma", "period"] = "comma"


class PdfSettings(BaseSettings):
    """Printable document configuration."""

    model_config = SettingsConfigDict(env_prefix="PDF_")

    title: str = "FATTURA ELETTRONICA"
    footer_text: str = "Copia di cortesia - documento non valido ai fini fiscali"
    font_size: float = 8.0

    # Line-items table row sizing, in points
    base_row_height: float = 16.0
    row_padding: float = 6.0
    max_row_height: float = 120.0


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "efattura.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "efattura"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    format: FormatSettings = Field(default_factory=FormatSettings)
    pdf: PdfSettings = Field(default_factory=PdfSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
