"""Configuration management for TagScope."""
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the project root (where this package lives)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)


def _split_domains(raw: str) -> List[str]:
    return [d.strip().lower() for d in raw.split(",") if d.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Google Gemini Configuration
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    gemini_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_MODEL")
    # flash and the default model are the same for now
    gemini_flash_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_FLASH_MODEL")
    gemini_max_output_tokens: int = Field(default=1000, alias="GEMINI_MAX_OUTPUT_TOKENS")
    gemini_temperature: float = Field(default=1.0, alias="GEMINI_TEMPERATURE")

    # Page fetching
    fetch_timeout: float = Field(default=5.0, alias="FETCH_TIMEOUT")
    fetch_user_agent: str = Field(default=DEFAULT_USER_AGENT, alias="FETCH_USER_AGENT")

    # Security (comma-separated domain lists)
    blocked_domains: str = Field(default="", alias="BLOCKED_DOMAINS")
    allowed_domains: str = Field(default="", alias="ALLOWED_DOMAINS")

    # Application Settings
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: Path = Field(default=Path("./logs"), alias="LOG_DIR")
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8765, alias="PORT")

    @property
    def blocked_domain_set(self) -> set:
        return set(_split_domains(self.blocked_domains))

    @property
    def allowed_domain_set(self) -> set:
        return set(_split_domains(self.allowed_domains))


def load_config():
    """Load and return application configuration."""
    return Settings()
