"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_SNAPSHOT = PROJECT_ROOT / "data" / "stations.json"


class Settings(BaseSettings):
    """Settings loaded from RADIODIAL_* environment variables and .env."""

    # Build-time snapshot
    snapshot_path: Path = DEFAULT_SNAPSHOT

    # Remote blob tier (unset = in-memory tier, dev only)
    blob_api_url: str | None = None
    blob_public_url: str | None = None
    blob_token: str | None = None

    # Cache invalidation webhook (unset = log only)
    revalidate_url: str | None = None
    revalidate_secret: str | None = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="RADIODIAL_",
        env_file=str(PROJECT_ROOT / ".env"),
        extra="ignore",
    )

    @property
    def blob_configured(self) -> bool:
        return bool(self.blob_api_url and self.blob_public_url and self.blob_token)


def get_settings() -> Settings:
    return Settings()
