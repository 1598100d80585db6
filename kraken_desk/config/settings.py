"""
Kraken Desk — Central Configuration
All settings are loaded from environment variables with sensible defaults.
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class KrakenSettings(BaseSettings):
    """Venue credentials, endpoint and HTTP timeouts."""
    kraken_api_key: str = Field(default="")
    kraken_api_secret: str = Field(default="")  # base64, as issued by Kraken
    kraken_base_url: str = Field(default="https://api.kraken.com")

    connect_timeout_seconds: float = Field(default=30.0)
    read_timeout_seconds: float = Field(default=30.0)

    ohlc_interval_minutes: int = Field(default=60)
    default_order_type: str = Field(default="market")

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def has_credentials(self) -> bool:
        return bool(self.kraken_api_key and self.kraken_api_secret)


class AppSettings(BaseSettings):
    """Top-level application settings."""
    app_name: str = "Kraken Desk"
    version: str = "1.0.0"
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Venue pair names for the two tracked assets
    btc_pair: str = Field(default="XBTUSD")
    eth_pair: str = Field(default="ETHUSD")

    kraken: KrakenSettings = KrakenSettings()

    class Config:
        env_file = ".env"
        extra = "ignore"


# Singleton
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings
