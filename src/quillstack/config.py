"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUILLSTACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Data storage (rate windows, cost ledger, classification log, preferences)
    data_path: Path = Path("data")

    # LLM settings
    llm_provider: str = "anthropic"  # "anthropic" or "openai"
    classifier_model: str = "claude-sonnet-4-5"
    openai_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 15.0

    # Pricing per million tokens (USD)
    input_cost_per_mtok: float = 3.00
    output_cost_per_mtok: float = 15.00

    # Network reachability probe
    reachability_url: str = "https://api.anthropic.com"
    reachability_ttl_seconds: float = 30.0

    # API keys (loaded from env or .env file)
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None

    @property
    def credential_configured(self) -> bool:
        """Whether the selected provider has an API key."""
        if self.llm_provider == "openai":
            return bool(self.openai_api_key)
        return bool(self.anthropic_api_key)


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
