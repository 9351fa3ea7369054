"""Application settings using Pydantic Settings."""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


def find_and_load_env_file():
    """Find and load .env file in current directory or parent directories."""
    search_paths = [
        Path.cwd(),
        Path(__file__).parent.parent.parent.parent,  # Project root
    ]

    for start_path in search_paths:
        current = start_path.resolve()
        # Check current directory and up to 3 levels up
        for _ in range(4):
            env_path = current / ".env"
            if env_path.exists():
                load_dotenv(env_path, override=False)
                return str(env_path)
            parent = current.parent
            if parent == current:  # Reached root
                break
            current = parent
    return None


# Load .env file before Settings class is defined
find_and_load_env_file()


class Settings(BaseSettings):
    """Application configuration settings."""

    # Storage
    data_path: Path = Path("static/data")
    fallback_to_first_file: bool = True

    # Response shaping
    preview_change_limit: int = 200  # Max sync changes echoed back
    preview_suggestion_limit: int = 100  # Max attribute->column suggestions echoed back
    mermaid_max_bytes: int = 45 * 1024  # Mermaid renderers choke around 50KB

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_file=None,  # We load it manually with dotenv
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        """Initialize settings and create the log directory if needed."""
        find_and_load_env_file()
        super().__init__(**kwargs)
        self.data_path = Path(self.data_path)
        if self.log_file:
            self.log_file = Path(self.log_file)
            self.log_file.parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
