"""
Configuration management for the Moses story companion.

This module centralizes all configuration settings and environment variables
for the application, following the 12-factor app methodology.
"""

import os
from functools import lru_cache
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

APP_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _env_bool(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    """
    Application settings configuration.

    Every value comes from an environment variable with a sensible default,
    except the provider credentials which have none.
    """

    # Text completion (study companion)
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TEMPERATURE: float = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
    # Number of previous exchanges sent with each question (0 = single turn)
    CHAT_HISTORY_TURNS: int = int(os.getenv("CHAT_HISTORY_TURNS", "6"))

    # Google Cloud Text-to-Speech
    GOOGLE_APPLICATION_CREDENTIALS: str = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "")
    GOOGLE_CLOUD_CREDENTIALS_JSON: str = os.getenv("GOOGLE_CLOUD_CREDENTIALS_JSON", "")
    TTS_VOICE_NAME: str = os.getenv("TTS_VOICE_NAME", "en-US-Neural2-D")
    TTS_LANGUAGE_CODE: str = os.getenv("TTS_LANGUAGE_CODE", "en-US")
    TTS_SPEAKING_RATE: float = float(os.getenv("TTS_SPEAKING_RATE", "0.95"))

    # Scene video generation (OpenAI videos endpoint)
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    VIDEO_MODEL: str = os.getenv("VIDEO_MODEL", "sora-2")
    VIDEO_SIZE: str = os.getenv("VIDEO_SIZE", "1280x720")
    VIDEO_SECONDS: str = os.getenv("VIDEO_SECONDS", "8")
    VIDEO_POLL_INTERVAL_SECONDS: float = float(os.getenv("VIDEO_POLL_INTERVAL_SECONDS", "10"))
    VIDEO_TIMEOUT_SECONDS: int = int(os.getenv("VIDEO_TIMEOUT_SECONDS", "600"))

    # Filesystem layout
    MEDIA_DIR: str = os.getenv("MEDIA_DIR", "media")
    TEMPLATES_DIR: str = os.getenv("TEMPLATES_DIR", os.path.join(APP_DIR, "templates"))
    STATIC_DIR: str = os.getenv("STATIC_DIR", os.path.join(APP_DIR, "static"))

    # Visit notification webhook (disabled when empty)
    NOTIFY_WEBHOOK_URL: str = os.getenv("NOTIFY_WEBHOOK_URL", "")

    # Server Configuration
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = _env_bool("DEBUG")
    RELOAD: bool = _env_bool("RELOAD")
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "companion_session")
    # Only enable behind TLS; browsers drop Secure cookies on plain HTTP
    SESSION_COOKIE_SECURE: bool = _env_bool("SESSION_COOKIE_SECURE")
    # Idle sessions are evicted after this many seconds
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "43200"))

    # Concurrency Configuration
    MAX_CONCURRENT_LLM_CALLS: int = int(os.getenv("MAX_CONCURRENT_LLM_CALLS", "5"))
    MAX_CONCURRENT_SPEECH_CALLS: int = int(os.getenv("MAX_CONCURRENT_SPEECH_CALLS", "4"))
    MAX_CONCURRENT_VIDEO_CALLS: int = int(os.getenv("MAX_CONCURRENT_VIDEO_CALLS", "2"))
    REQUEST_TIMEOUT_SECONDS: int = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "900"))
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

    # CORS Configuration
    ALLOWED_ORIGINS: list[str] = [o for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o]

    @property
    def cors_allow_all(self) -> bool:
        return len(self.ALLOWED_ORIGINS) == 0

    @property
    def videos_dir(self) -> str:
        return os.path.join(self.MEDIA_DIR, "videos")

    def validate_required_settings(self) -> None:
        """
        Validate that all required environment variables are set.

        Raises:
            ValueError: If any required environment variable is missing.
        """
        required_settings = [
            ("OPENAI_API_KEY", self.OPENAI_API_KEY),
        ]

        missing_settings = [
            name for name, value in required_settings if not value
        ]

        if missing_settings:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing_settings)}"
            )


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings instance (cached).

    Returns:
        Settings: The application settings instance.
    """
    return Settings()


# Global settings instance for easy import
settings = get_settings()
