"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_NAME: str = "mftracker"
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ======================
    # Analysis
    # ======================
    DEFAULT_RISK_PROFILE: str = "Balanced"
    REBALANCE_QUANTUM: int = 10
    CURRENCY_SYMBOL: str = "₹"

    # ======================
    # Import
    # ======================
    MAX_IMPORT_ROWS: int = 500

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
