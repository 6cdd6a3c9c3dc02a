# Core components: logging
from .logging_config import setup_logging
