import logging
from functools import lru_cache
from typing import Optional

from config.settings import app_settings, kafka_settings, storage_settings, tracker_settings
from services.funnel_tracker.tracker import ConversionTracker
from services.maturity_engine.engine import MaturityEngine
from src.messaging.kafka_client import KafkaAnalyticsSink
from src.storage import MemoryStorage, RedisStorage

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_maturity_engine() -> MaturityEngine:
    if app_settings.maturity_config_path:
        logger.info(f"Loading maturity model from {app_settings.maturity_config_path}")
        return MaturityEngine.from_file(app_settings.maturity_config_path)
    return MaturityEngine()


@lru_cache(maxsize=1)
def get_analytics_sink() -> Optional[KafkaAnalyticsSink]:
    if not kafka_settings.enabled:
        return None
    return KafkaAnalyticsSink(
        topic=kafka_settings.analytics_topic,
        bootstrap_servers=kafka_settings.bootstrap_servers,
        client_id=kafka_settings.client_id,
    )


@lru_cache(maxsize=1)
def get_event_storage():
    if storage_settings.redis_url:
        return RedisStorage(url=storage_settings.redis_url)
    return MemoryStorage()


def build_conversion_tracker(
    query_string: str = "",
    referrer: str = "",
    user_agent: str = "",
    sink=None,
    storage=None,
) -> ConversionTracker:
    """Tracker wired with the configured sink, storage and timing settings."""
    return ConversionTracker(
        sink=sink if sink is not None else get_analytics_sink(),
        storage=storage if storage is not None else get_event_storage(),
        query_string=query_string,
        referrer=referrer,
        user_agent=user_agent,
        buffer_key=storage_settings.event_buffer_key,
        buffer_capacity=storage_settings.event_buffer_capacity,
        time_poll_interval=tracker_settings.time_poll_interval_seconds,
        scroll_throttle_ms=tracker_settings.scroll_throttle_ms,
    )
