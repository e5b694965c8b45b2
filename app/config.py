"""Configuration settings for the Investor Research service."""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = base_dir / "data"
    db_path: Path = data_dir / "investors.db"

    # Classification service (Exa contents API)
    exa_api_keys: str = ""  # comma-separated key pool
    exa_base_url: str = "https://api.exa.ai"
    exa_subpages: int = 5
    key_selection: str = "random"  # random | round_robin

    # Deep research service
    deep_search_url: str = ""
    deep_search_api_key: str = ""

    # Structured extraction (Anthropic)
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-20250514"
    extraction_max_tokens: int = 4000

    # HTTP Client Settings
    connect_timeout: float = 10.0
    request_timeout: float = 100.0

    # Pipeline behaviour
    skip_existing_values: bool = True

    @property
    def exa_key_pool(self) -> list[str]:
        """Classification API keys with blanks dropped."""
        return [k.strip() for k in self.exa_api_keys.split(",") if k.strip()]

    # Database URL
    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.db_path}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()

# Ensure data directory exists
settings.data_dir.mkdir(parents=True, exist_ok=True)
