"""Core configuration - centralized config for the askanything package.

All environment-based configuration should flow through this module.
This provides a single source of truth and consistent defaults.

Usage:
    from askanything.core.config import get_config
    config = get_config()

    # Access settings
    base_url = config.api_base_url
    log_level = config.log_level
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoreSettings(BaseSettings):
    """Core configuration settings for Ask Anything.

    Settings can be configured via environment variables with the VM_ prefix.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # DATA SERVICE SETTINGS
    # ==========================================================================

    api_base_url: str = Field(
        default="https://api-dev.villagemetrics.com",
        description="Base URL of the Village Metrics API (HTTPS only)",
        validation_alias="VM_API_BASE_URL",
    )
    api_token: str = Field(
        default="",
        description="Bearer token used for every API call",
        validation_alias="VM_API_TOKEN",
    )
    api_timeout: float = Field(
        default=30.0,
        description="HTTP timeout in seconds for API calls",
        validation_alias="VM_API_TIMEOUT",
    )
    docs_base_url: str = Field(
        default="https://docs.villagemetrics.com",
        description="Base URL of the product documentation site",
        validation_alias="VM_DOCS_BASE_URL",
    )

    # ==========================================================================
    # SESSION / TOOL SETTINGS
    # ==========================================================================

    allow_child_switching: bool = Field(
        default=True,
        description="Expose the select_child tool. Disable for embedded mode where the child is fixed.",
        validation_alias="VM_ALLOW_CHILD_SWITCHING",
    )
    preselected_child_id: str | None = Field(
        default=None,
        description="Child selected at session creation (embedded mode)",
        validation_alias="VM_PRESELECTED_CHILD_ID",
    )
    preselected_child_name: str | None = Field(
        default=None,
        description="Display name of the preselected child",
        validation_alias="VM_PRESELECTED_CHILD_NAME",
    )
    session_max_age_hours: float = Field(
        default=24.0,
        description="Idle age after which sessions are evicted by a sweep",
        validation_alias="VM_SESSION_MAX_AGE_HOURS",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="VM_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="VM_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="VM_LOG_FILE",
    )


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
