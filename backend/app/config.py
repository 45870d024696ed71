"""
Pillgraph Backend – Configuration Loader
Loads all secrets and settings from .env via environment variables.
No secret may be hard-coded anywhere in the codebase.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)


class Config:
    """Base configuration – values sourced exclusively from environment."""

    # --- Secrets ---
    AI_API_KEY: str = os.environ.get("AI_API_KEY", "")
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")

    # --- AI provider (OpenAI-compatible, DeepSeek by default) ---
    AI_BASE_URL: str = os.environ.get("AI_BASE_URL", "https://api.deepseek.com/v1")
    AI_MODEL: str = os.environ.get("AI_MODEL", "deepseek-chat")
    AI_TIMEOUT_SECONDS: float = float(os.environ.get("AI_TIMEOUT_SECONDS", "30"))
    AI_TEMPERATURE: float = float(os.environ.get("AI_TEMPERATURE", "0.7"))

    # --- App ---
    APP_ENV: str = os.environ.get("APP_ENV", "development")
    DEBUG: bool = APP_ENV == "development"
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
    PORT: int = int(os.environ.get("PORT", "3000"))

    # --- Rate limiting ---
    RATE_LIMIT_DEFAULT: str = os.environ.get("RATE_LIMIT_DEFAULT", "60/minute")

    # --- Chat ---
    CHAT_HISTORY_LIMIT: int = int(os.environ.get("CHAT_HISTORY_LIMIT", "20"))
    CHAT_MAX_MESSAGE_LENGTH: int = int(os.environ.get("CHAT_MAX_MESSAGE_LENGTH", "2000"))

    # --- Validation ---
    @classmethod
    def validate(cls) -> None:
        """Raise on missing critical environment variables."""
        required = ["AI_API_KEY", "DATABASE_URL"]
        missing = [k for k in required if not getattr(cls, k)]
        if missing:
            raise EnvironmentError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Ensure a .env file exists with all required values."
            )
