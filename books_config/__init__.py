"""
Configuration loading for the reporting core.

Usage:
    from books_config import load_reporting_config

    config = load_reporting_config("config/reporting.yaml")
"""

from books_config.loader import (
    compute_checksum,
    load_reporting_config,
    load_yaml_file,
    parse_reporting_config,
)

__all__ = [
    "compute_checksum",
    "load_reporting_config",
    "load_yaml_file",
    "parse_reporting_config",
]
