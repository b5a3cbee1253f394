#provisioning_engine\config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # PostgreSQL connection
    postgres_user: str = "panel"
    postgres_password: str = "panel"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "panel"

    # Full URL override (e.g. sqlite for local runs)
    database_url_override: str = ""

    # Connection pool
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 3600

    # SQLAlchemy
    echo_sql: bool = False

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


class DaemonSettings(BaseSettings):
    """Daemon HTTP client configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="daemon_",
        case_sensitive=False,
        extra="ignore"
    )

    connect_timeout: float = 5.0
    request_timeout: float = 30.0
    verify_tls: bool = True


class ProvisioningSettings(BaseSettings):
    """Server creation behaviour."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="provisioning_",
        case_sensitive=False,
        extra="ignore"
    )

    # Attempts for the create-with-variables transaction
    transaction_attempts: int = 5


settings = DatabaseSettings()
daemon_settings = DaemonSettings()
provisioning_settings = ProvisioningSettings()
