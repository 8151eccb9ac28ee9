"""
Observability helpers: logging setup and structured logging utilities.
"""

from kb_retrieval.observability.log_utils import log_store_failure, safe_log_value
from kb_retrieval.observability.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "log_store_failure",
    "safe_log_value",
]
