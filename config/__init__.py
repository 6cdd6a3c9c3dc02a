from .settings import app_settings, storage_settings, kafka_settings, tracker_settings
