from .config import bootstrap_logging, shutdown_logging
from .logger import StructuredLogger, get_logger

__all__ = ["bootstrap_logging", "shutdown_logging", "StructuredLogger", "get_logger"]
