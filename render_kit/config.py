from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from render_kit.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


class Settings(BaseSettings):
    """Rendering settings with validation.

    Values come from keyword arguments, RENDER_KIT_* environment variables,
    or a .env file in the working directory.

    Uses Pydantic v2 API:
    - model_config with SettingsConfigDict
    - @field_validator decorator
    """

    views_dir: Path = Field(default=Path("views"), description="Base template root for all controllers")
    reload_templates: bool = Field(
        default=False,
        description="Bypass the template resolution cache and recompile changed templates",
    )
    default_format: str = Field(default="html", min_length=1, description="Content type used when none is negotiated")
    template_extensions: list[str] = Field(
        default_factory=lambda: ["j2", "jinja2", "jinja"],
        description="Registered template file extensions, in lookup order",
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path | None = Field(default=None, description="Directory for JSON log files (console only when unset)")

    model_config = SettingsConfigDict(
        env_prefix="RENDER_KIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,  # Validate defaults too
    )

    @field_validator("default_format", mode="after")
    @classmethod
    def validate_default_format(cls, v: str) -> str:
        """Normalize the default format token."""
        v = v.strip().lower().lstrip(".")
        if not v:
            raise ValueError("default_format cannot be empty")
        return v

    @field_validator("template_extensions", mode="after")
    @classmethod
    def validate_template_extensions(cls, v: list[str]) -> list[str]:
        """Strip leading dots and reject an empty extension list."""
        extensions = [ext.strip().lstrip(".") for ext in v if ext.strip().lstrip(".")]
        if not extensions:
            raise ValueError("template_extensions must name at least one extension")
        return extensions

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level names a standard logging level."""
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return v


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Use this with FastAPI's Depends() so the environment is read once
    per process rather than on every request.

    Returns:
        Cached Settings instance
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
        log_with_context(
            logger,
            "debug",
            "Settings loaded",
            views_dir=str(_settings_instance.views_dir),
            reload_templates=_settings_instance.reload_templates,
            event_type="config_loaded",
        )
    return _settings_instance
