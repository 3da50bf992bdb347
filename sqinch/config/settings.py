"""
Catalog Space Efficiency Analytics
Centralized Configuration Management

Typed settings loaded from environment variables (and an optional .env
file) through pydantic-settings. Each subsystem owns a section with its own
environment prefix.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisSettings(BaseSettings):
    """Analytical pipeline configuration"""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    max_purchases_per_customer: int = Field(
        default=200,
        ge=2,
        description="Purchase rows per customer considered for affinity pairing",
    )
    high_efficiency_threshold: float = Field(
        default=150.0,
        description="Combined efficiency above which an affinity pair counts as high-efficiency",
    )
    segment_columns: List[str] = Field(
        default_factory=list,
        description=(
            "Customer columns used as the segment key "
            "(empty: income tier + location, [\"auto\"]: detected categorical columns)"
        ),
    )
    max_segment_cardinality: int = Field(
        default=12,
        description="Distinct-value limit for a column to be detected as categorical",
    )


class InsightSettings(BaseSettings):
    """Narrative generation (Anthropic Messages API) configuration"""

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_", populate_by_name=True)

    enabled: bool = Field(default=True, description="Enable narrative generation")
    anthropic_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("INSIGHTS_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY", "anthropic_api_key"),
        description="Anthropic API key",
    )
    model: str = Field(default="claude-sonnet-4-20250514", description="Model identifier")
    max_tokens: int = Field(default=2000, description="Max tokens per narrative")
    temperature: float = Field(default=0.3, ge=0.0, le=1.0, description="Sampling temperature")
    timeout_seconds: float = Field(default=60.0, description="Request timeout in seconds")

    @property
    def is_configured(self) -> bool:
        """Whether narratives can be requested at all"""
        return self.enabled and self.anthropic_api_key is not None


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format value"""
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="sqinch-analytics", description="Application name")
    app_env: str = Field(default="development", description="Environment")
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Subsystem configurations
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    insights: InsightSettings = Field(default_factory=InsightSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
