"""Application settings and configuration.

This module defines all configuration options for the Agent Desk service and
client library. Settings are loaded from environment variables with sensible
defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Agent Desk", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Identity tokens are minted by the external identity provider; we only verify them.
    # Unset on agent devices; the HTTP service refuses every token without it.
    secret_key: str | None = Field(default=None, alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    # Database configuration
    database_url: str = Field(default="sqlite:///./agent_desk.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Time accounting
    break_limit_min: float = Field(default=45.0, gt=0, alias="BREAK_LIMIT_MIN")
    break_epsilon_min: float = Field(default=0.01, ge=0, alias="BREAK_EPSILON_MIN")
    work_target_min: float = Field(default=480.0, gt=0, alias="WORK_TARGET_MIN")
    tick_interval_seconds: float = Field(default=10.0, gt=0, alias="TICK_INTERVAL_SECONDS")
    desk_timezone: str = Field(default="UTC", alias="DESK_TIMEZONE")

    # Client-side snapshot store and device cache
    snapshot_api_base_url: str = Field(
        default="http://localhost:8000/api/v1",
        alias="SNAPSHOT_API_BASE_URL",
    )
    snapshot_http_timeout_seconds: float = Field(
        default=5.0,
        alias="SNAPSHOT_HTTP_TIMEOUT_SECONDS",
    )
    local_cache_path: str = Field(
        default=".agent_desk/day_state.json",
        alias="LOCAL_CACHE_PATH",
    )

    # Supervisor board polling
    board_refresh_seconds: float = Field(default=10.0, gt=0, alias="BOARD_REFRESH_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
