"""Configuration management for recording analysis."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisSettings(BaseSettings):
    """Analysis settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DAPP_INTENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field("INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(False, description="Render logs as JSON")

    # Clarification thresholds
    wait_gap_threshold_ms: int = Field(
        5000,
        description="Pause between steps after which a wait clarification is raised"
    )
    default_chain_id: int = Field(1, description="Chain the test wallet starts on")
    test_wallet: str = Field("MetaMask", description="Wallet the generated test drives")


def get_settings() -> AnalysisSettings:
    """Get analysis settings."""
    return AnalysisSettings()
