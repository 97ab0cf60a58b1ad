"""Application configuration via environment variables and .env file."""

from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode
from pydantic_settings.sources import DotEnvSettingsSource, PydanticBaseSettingsSource

# Path to .env file (patch in tests to use tmp_path / ".env")
_ENV_FILE: Path = Path(".env")


class Settings(BaseSettings):
    model_config = {
        "env_prefix": "AIRSCAN_",
        "env_file_encoding": "utf-8",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Load .env from _ENV_FILE (patchable in tests)
        return (
            init_settings,
            env_settings,
            DotEnvSettingsSource(
                settings_cls,
                env_file=_ENV_FILE,
                env_file_encoding="utf-8",
            ),
            file_secret_settings,
        )

    # Storage
    db_path: Path = Path("./data/airscan.db")
    csv_log_path: Path = Path("./data/scan_results.csv")
    persist_to_db: bool = True

    # Logging
    log_level: str = "info"

    # WiFi (NetworkManager)
    wifi_interface: str | None = None
    wifi_rescan: bool = True

    # Bluetooth
    bluetooth_adapter: str | None = None  # e.g. "hci0"
    bluetooth_window: float = 10.0  # seconds of discovery per scan

    # Mobile source: "mock" or "none"
    mobile_mode: str = "mock"

    # Env: AIRSCAN_CORS_ORIGINS="http://localhost:3000,http://localhost:5173"
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: object) -> list[str]:
        """Parse comma-separated string or list."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        if isinstance(v, list):
            return [s for s in v if s]
        return []

    # Server
    host: str = "0.0.0.0"
    port: int = 4800


def load_config() -> Settings:
    """Load configuration from .env and environment (env overrides .env)."""
    return Settings()


settings = Settings()
