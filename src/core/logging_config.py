import logging
import sys
from datetime import datetime, timezone

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "maturity-analytics"
LOG_FORMAT = '%(timestamp)s %(level)s %(name)s %(message)s'


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record, stamped with the service name and an ISO-8601 UTC time."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['service'] = SERVICE_NAME


def setup_logging(log_level_str: str = "INFO"):
    """Installs the JSON handler on the root logger once; later calls only change the level."""
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if any(isinstance(h.formatter, CustomJsonFormatter) for h in root_logger.handlers):
        return

    log_handler = logging.StreamHandler(sys.stdout)
    log_handler.setFormatter(CustomJsonFormatter(LOG_FORMAT))
    root_logger.addHandler(log_handler)
    root_logger.info(f"Structured JSON logging configured with level: {logging.getLevelName(log_level)}")
