"""Centralized configuration using pydantic-settings. All values are env-configurable."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    # Redis (durable queue)
    redis_url: str = "redis://127.0.0.1:6379/0"
    redis_pool_size: int = 20
    queue_key: str = "analytics:events"
    processing_key: str = "analytics:events:processing"
    dead_letter_key: str = "analytics:events:dead"
    dead_letter_max: int = 1000
    consumer_state_key: str = "analytics:consumer:state"
    queue_block_timeout: int = 0  # seconds, 0 blocks forever

    # MongoDB (document store)
    mongo_uri: str = "mongodb://127.0.0.1:27017"
    mongo_db: str = "analytics"
    mongo_collection: str = "events"

    # Consumer
    consumer_backoff_sec: float = 1.0
    consumer_max_attempts: int = 5

    # API
    api_host: str = "0.0.0.0"
    ingestion_port: int = 3000
    reporting_port: int = 3001
    cors_origins: str = "*"

    # Reporting
    top_paths_limit: int = 10

    # Monitoring
    log_level: str = "INFO"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
