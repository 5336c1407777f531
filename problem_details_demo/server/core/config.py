"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constant import LOWEST_PRECEDENCE

DEFAULT_STATIC_DIRECTORY = str(Path(__file__).resolve().parent.parent / "static")

# =====================================================================
# Grouped Configuration Models
# =====================================================================
# Defaults live on Settings only; every group is built from a Settings dump.


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(alias="CORS_ORIGINS")
    allow_credentials: bool = Field(alias="CORS_ALLOW_CREDENTIALS")
    allow_methods: list[str] = Field(alias="CORS_ALLOW_METHODS")
    allow_headers: list[str] = Field(alias="CORS_ALLOW_HEADERS")

    model_config = {"populate_by_name": True}


class ProblemDetailsConfig(BaseModel):
    """Problem details (RFC 7807) configuration."""

    enabled: bool = Field(alias="PROBLEM_DETAILS_ENABLED")
    handler_order: int = Field(alias="PROBLEM_DETAILS_HANDLER_ORDER")
    catch_all_advice_enabled: bool = Field(alias="PROBLEM_DETAILS_CATCH_ALL_ADVICE_ENABLED")

    model_config = {"populate_by_name": True}


class StaticResourcesConfig(BaseModel):
    """Static resource handler configuration."""

    path_pattern: str = Field(alias="PROBLEM_DETAILS_STATIC_PATH_PATTERN")
    directory: str = Field(alias="PROBLEM_DETAILS_STATIC_DIRECTORY")

    model_config = {"populate_by_name": True}

    @property
    def mount_path(self) -> str:
        """Mount path derived from the pattern; the root pattern mounts on ``/``."""
        return self.path_pattern[: -len("/**")] or "/"


class ErrorRenderingConfig(BaseModel):
    """Default error response configuration."""

    include_message: bool = Field(alias="PROBLEM_DETAILS_ERROR_INCLUDE_MESSAGE")
    include_exception: bool = Field(alias="PROBLEM_DETAILS_ERROR_INCLUDE_EXCEPTION")

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="Server host address to bind to",
        alias="PROBLEM_DETAILS_SERVER_HOST",
    )
    server_port: int = Field(
        default=8080,
        description="Server port number",
        alias="PROBLEM_DETAILS_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="PROBLEM_DETAILS_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Logging format (simple, detailed, json)",
        alias="PROBLEM_DETAILS_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory the log file is written to when file logging is enabled",
        alias="PROBLEM_DETAILS_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Write DEBUG level logs to a file in log_file_dir",
        alias="PROBLEM_DETAILS_ENABLE_FILE_LOGGING",
    )
    slow_request_threshold_ms: float = Field(
        default=1000.0,
        description="Requests slower than this are logged as warnings",
        alias="PROBLEM_DETAILS_SLOW_REQUEST_THRESHOLD_MS",
    )
    example_endpoints_enabled: bool = Field(
        default=True,
        description="Expose the example endpoints (/, /throws-a-problem, /throws-an-exception)",
        alias="PROBLEM_DETAILS_EXAMPLE_ENDPOINTS_ENABLED",
    )

    # =====================================================================
    # Error Handling Configuration
    # =====================================================================
    problemdetails_enabled: bool = Field(
        default=False,
        description="Render framework errors as application/problem+json bodies",
        alias="PROBLEM_DETAILS_ENABLED",
    )
    problemdetails_handler_order: int = Field(
        default=LOWEST_PRECEDENCE - 1,
        description="Order of the built-in problem details advice (lower runs first)",
        alias="PROBLEM_DETAILS_HANDLER_ORDER",
    )
    catch_all_advice_enabled: bool = Field(
        default=False,
        description="Install the catch-all advice turning any exception into a 500 problem",
        alias="PROBLEM_DETAILS_CATCH_ALL_ADVICE_ENABLED",
    )
    static_path_pattern: str = Field(
        default="/**",
        description="Path pattern static files are served on",
        alias="PROBLEM_DETAILS_STATIC_PATH_PATTERN",
    )
    static_directory: str = Field(
        default=DEFAULT_STATIC_DIRECTORY,
        description="Directory static files are read from",
        alias="PROBLEM_DETAILS_STATIC_DIRECTORY",
    )
    error_include_message: bool = Field(
        default=False,
        description="Include the exception message in default error responses",
        alias="PROBLEM_DETAILS_ERROR_INCLUDE_MESSAGE",
    )
    error_include_exception: bool = Field(
        default=False,
        description="Include the exception class name in default error responses",
        alias="PROBLEM_DETAILS_ERROR_INCLUDE_EXCEPTION",
    )

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins (use * for all)", alias="CORS_ORIGINS"
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow credentials in CORS requests", alias="CORS_ALLOW_CREDENTIALS"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods (use * for all)", alias="CORS_ALLOW_METHODS"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers (use * for all)", alias="CORS_ALLOW_HEADERS"
    )

    @field_validator("static_path_pattern")
    @classmethod
    def _validate_static_path_pattern(cls, value: str) -> str:
        if not value.startswith("/") or not value.endswith("/**"):
            raise ValueError(f"static path pattern must start with '/' and end with '/**', got {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return level

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def problem_details(self) -> ProblemDetailsConfig:
        """Get problem details configuration from environment variables."""
        return ProblemDetailsConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def static_resources(self) -> StaticResourcesConfig:
        """Get static resource configuration from environment variables."""
        return StaticResourcesConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def error_rendering(self) -> ErrorRenderingConfig:
        """Get error rendering configuration from environment variables."""
        return ErrorRenderingConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
