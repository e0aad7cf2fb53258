"""Configuration management for the MySQL chat plugin."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    ENV: str = "local"
    SERVICE_NAME: str = "mysql-chat-plugin"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Plugin metadata
    PLUGIN_NAME: str = "mySQL"
    PLUGIN_DESCRIPTION: str = "Plugin to chat with a mySQL database"

    # LLM Configuration (credential is supplied per request)
    LLM_ENABLED: bool = True
    OPENAI_BASE_URL: str = ""  # Empty = OpenAI default endpoint
    OPENAI_MODEL: str = "gpt-4"
    OPENAI_MAX_TOKENS: int | None = None

    # Natural Language Query (NLQ) Configuration
    NLQ_DEFAULT_MAX_ROWS: int = 100  # Row cap when the request omits maxRows

    # MySQL Configuration (connection details are supplied per request)
    MYSQL_DEFAULT_PORT: int = 3306
    MYSQL_SSL_VERIFY_CERT: bool = False
    MYSQL_CONNECT_TIMEOUT_SECONDS: int | None = None  # None = driver default

    @property
    def openai_base_url(self) -> str | None:
        """Get the OpenAI base URL, None when the SDK default applies."""
        return self.OPENAI_BASE_URL or None


# Singleton settings instance
settings = Settings()
