"""Utility helpers for URL normalisation and logging."""

from od_crawler.utils.url import (
    UnsupportedSchemeError, clean_path, is_dir_url, normalise_cli_url,
    parse_root_url, tidy_path, url_key, url_path,
)
from od_crawler.utils.log import setup_logging, log

__all__ = [
    "UnsupportedSchemeError",
    "clean_path",
    "is_dir_url",
    "normalise_cli_url",
    "parse_root_url",
    "tidy_path",
    "url_key",
    "url_path",
    "setup_logging",
    "log",
]
