# src/mineai_core/config.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from mineai_core.errors import ConfigurationError


class Settings(BaseSettings):
    """
    MineAI configuration.
    Loads variables from .env file or environment variables.
    """

    # --- Minecraft world ---
    MC_HOST: str = "127.0.0.1"
    MC_PORT: int = 25565
    MC_USERNAME: str = "MineAI_Bot"
    MC_VERSION: str = "1.21.3"
    MC_AUTH: str = "offline"

    # mineflayer sidecar that owns the actual game connection
    MINEAI_BRIDGE_URL: str = "http://127.0.0.1:8765"
    BRIDGE_REQUEST_TIMEOUT: float = 10.0

    # --- Language model ---
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    LLM_MAX_TOKENS: int = 1000
    LLM_TEMPERATURE: float = 0.7
    LLM_TIMEOUT: float = 30.0

    # --- Task execution ---
    ACTION_GAP_SECONDS: float = 1.0
    MOVE_TIMEOUT: float = 30.0
    MINE_TIMEOUT: float = 15.0
    COLLECT_TIMEOUT: float = 60.0
    CHAT_TIMEOUT: float = 5.0
    SURFACE_HEIGHT: int = 64
    HISTORY_LIMIT: int = 100
    SUCCESS_POLICY: str = "any"

    # --- Observability ---
    MINEAI_LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_file_encoding="utf-8",
    )


def validate_settings(config: Settings) -> Settings:
    """Fail fast on settings the agent cannot start without."""
    if not (config.GEMINI_API_KEY or "").strip():
        raise ConfigurationError(
            "GEMINI_API_KEY is not set. Export it or add "
            "'GEMINI_API_KEY=your-api-key-here' to .env"
        )
    if config.SUCCESS_POLICY not in {"any", "all"}:
        raise ConfigurationError(
            f"SUCCESS_POLICY must be 'any' or 'all', got {config.SUCCESS_POLICY!r}"
        )
    return config


# Initialize a global settings instance
settings = Settings()
