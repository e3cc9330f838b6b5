"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the recovery chat service.

    Args loaded from .env file and environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Postgres
    database_host: str = "127.0.0.1"
    database_port: int = 5432
    database_name: str = "new_freedom_dev"
    database_user: str = "postgres"
    database_password: str = ""
    database_ssl: str = "disable"
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_echo: bool = False

    # Session store backend: "postgres" or "memory"
    session_backend: str = "postgres"

    # Model inference
    openai_api_key: str = ""
    agent_model: str = "gpt-4.1"

    # Turn limits
    routing_turn_budget: int = 10
    crisis_turn_budget: int = 3
    history_cap: int = 50

    # CORS
    cors_allowed_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    @property
    def database_url(self) -> str:
        """Build async Postgres connection URL."""
        return (
            f"postgresql+asyncpg://{self.database_user}"
            f":{self.database_password}"
            f"@{self.database_host}:{self.database_port}"
            f"/{self.database_name}"
        )


def get_settings() -> Settings:
    """Return a Settings instance.

    Returns:
        Application settings loaded from env.
    """
    return Settings()
