"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application environment
    env: Literal["dev", "test", "staging", "prod"] = "dev"

    # Logging
    log_level: str = "INFO"

    # Organization policy (single rule set per deployment)
    org_site_code: str = "WRCMN"
    org_timezone: str = "America/Chicago"
    # Kept as a plain string: unknown values fall back to deflect at routing time
    org_after_hours_rule: str = "deflect"
    org_open_hour: int = Field(8, ge=0, le=23)
    org_close_hour: int = Field(20, ge=0, le=23)

    # Species lookups
    species_cache_ttl_seconds: float = 300.0
    species_levels_ruleset: str = "species-levels-v1.yaml"

    # Router strategy
    router_strategy: Literal["deterministic", "llm"] = "deterministic"

    # LLM tool-calling router
    llm_api_key: str = ""
    llm_api_base: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 8.0
    llm_max_tool_rounds: int = 3

    # Static content and directories
    content_dir: Path = PACKAGE_DIR / "content" / "instructions"
    data_dir: Path = PACKAGE_DIR / "data"

    @property
    def is_dev(self) -> bool:
        """Check if running in development mode."""
        return self.env == "dev"

    @property
    def is_prod(self) -> bool:
        """Check if running in production mode."""
        return self.env == "prod"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"

    @property
    def llm_enabled(self) -> bool:
        """LLM routing needs both the strategy flag and an API key."""
        return self.router_strategy == "llm" and bool(self.llm_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
