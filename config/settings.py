from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
import os

from .kafka import TOPIC_FUNNEL_EVENTS

# Load .env file if it exists, for local development
# In production, environment variables should be set directly.
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv()

class AppSettings(BaseSettings):
    log_level: str = "INFO"
    maturity_config_path: Optional[str] = None  # YAML override of the built-in maturity model

    model_config = SettingsConfigDict(env_prefix='APP_')

class StorageSettings(BaseSettings):
    redis_url: Optional[str] = None  # in-memory storage when unset
    event_buffer_key: str = "conversion_events"
    event_buffer_capacity: int = 100

    model_config = SettingsConfigDict(env_prefix='STORAGE_')

class KafkaSettings(BaseSettings):
    enabled: bool = False
    bootstrap_servers: str = "kafka:9092"
    analytics_topic: str = TOPIC_FUNNEL_EVENTS
    client_id: str = "maturity-analytics"

    model_config = SettingsConfigDict(env_prefix='KAFKA_')

class TrackerSettings(BaseSettings):
    time_poll_interval_seconds: float = 10.0
    scroll_throttle_ms: int = 100

    model_config = SettingsConfigDict(env_prefix='TRACKER_')

# Instantiate settings
app_settings = AppSettings()
storage_settings = StorageSettings()
kafka_settings = KafkaSettings()
tracker_settings = TrackerSettings()
