"""Utility modules"""
from .logger import get_logger, setup_logging, set_correlation_id, get_correlation_id
from .idgen import generate_correlation_id
from .time import utc_now, format_iso, parse_iso, split_date_time, combine_date_time

__all__ = [
    "get_logger",
    "setup_logging",
    "set_correlation_id",
    "get_correlation_id",
    "generate_correlation_id",
    "utc_now",
    "format_iso",
    "parse_iso",
    "split_date_time",
    "combine_date_time",
]
