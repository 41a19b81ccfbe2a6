"""Application configuration using pydantic-settings."""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ats_autofill.automation.human import Pacing


class PacingProfile(str, Enum):
    """Named interaction pacing presets."""

    REALISTIC = "realistic"
    FAST = "fast"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    log_level: str = "INFO"

    # Playwright Settings
    playwright_headless: bool = True
    playwright_slow_mo: int = Field(default=0, ge=0, le=1000)  # ms between actions
    viewport_width: int = Field(default=1280, ge=320)
    viewport_height: int = Field(default=720, ge=240)
    navigation_timeout_ms: int = Field(default=30000, ge=5000, le=120000)

    # Interaction pacing
    pacing_profile: PacingProfile = PacingProfile.REALISTIC

    # Application Automation
    screenshot_dir: str | None = None  # None disables screenshots
    resume_path: str = "./fixtures/sample-resume.pdf"
    base_url: str = "http://localhost:3939"

    def pacing(self) -> Pacing:
        """Return the pacing preset selected by ``pacing_profile``."""
        if self.pacing_profile == PacingProfile.FAST:
            return Pacing.fast()
        return Pacing.realistic()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
