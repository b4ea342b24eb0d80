"""Small shared utilities."""

from .logging import get_logger, set_log_level, get_log_level
