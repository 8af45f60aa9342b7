from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # App
    APP_NAME: str = "Shuk Marketplace"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev
    LOG_LEVEL: str = "INFO"

    # Breaks
    BREAK_AUTH_HOLD_DAYS: int = 7
    ENFORCE_MAX_ENTRIES_PER_USER: bool = True

    # Background sweep (break expiry, auction close-out)
    SWEEP_INTERVAL_SECONDS: float = 60.0

    # Card metadata enrichment (pokemontcg.io v2); empty key = anonymous rate limit
    POKEMONTCG_API_URL: str = "https://api.pokemontcg.io/v2"
    POKEMONTCG_API_KEY: str = ""
    CARD_CACHE_TTL_SECONDS: int = 3600
    CARD_LOOKUP_ENABLED: bool = True

    # Discovery filter sessions kept in memory; least recently used are dropped
    DISCOVERY_MAX_SESSIONS: int = 10_000


settings = Settings()
