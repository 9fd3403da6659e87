from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache

# Lambda function behind API Gateway serving learn_mcp resources
DEFAULT_ENDPOINT_URL = "https://dgtfn7jd9f.execute-api.us-east-1.amazonaws.com/dev/"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Centralized Configuration Management.
    Reads from environment variables (e.g., LAMBDA_MCP_ENDPOINT_URL overrides endpoint_url).
    Frozen once built: the same instance is handed to every component.
    """
    # Metadata
    app_name: str = "lambda-mcp-client"
    app_version: str = "1.0.0"
    protocol_version: str = "2024-11-05"
    log_level: str = "INFO"

    # Remote Lambda endpoint
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    # Seconds; a stalled endpoint would otherwise hang the tool call
    request_timeout: float = 5.0

    # When True a tools/call without "arguments" is rejected instead of using an empty topic
    require_arguments: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("request_timeout")
    @classmethod
    def check_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be positive")
        return v

    model_config = SettingsConfigDict(
        env_prefix="LAMBDA_MCP_",
        env_file=".env",
        env_file_encoding='utf-8',
        extra="ignore",
        frozen=True,
    )

@lru_cache()
def get_settings() -> Settings:
    """Singleton pattern for settings to avoid re-reading env vars."""
    return Settings()
