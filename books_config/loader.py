"""
Configuration Loader (``books_config.loader``).

Responsibility
--------------
Loads a YAML file and parses it into a ``ReportingConfig``.  The file may
hold the settings at top level or under a ``reporting:`` key, so the
reporting section can live inside a larger application config.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on
``books_modules.reporting.config`` for the schema; nothing in the kernel
or engines imports it.

Invariants enforced
-------------------
* Unknown keys are rejected (``TypeError`` from the dataclass), never
  silently ignored.
* ``compute_checksum`` is deterministic for identical settings.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Root or ``reporting`` section not a mapping  -> ``ValueError``.
* Invalid values  -> ``ValueError`` from ``ReportingConfig.__post_init__``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from books_kernel.logging_config import get_logger
from books_modules.reporting.config import ReportingConfig

logger = get_logger("config.loader")

SECTION_KEY = "reporting"

_LIST_KEYS = (
    "receivable_open_statuses",
    "payable_open_statuses",
    "operating_keywords",
    "financing_keywords",
    "investing_keywords",
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def parse_reporting_config(data: dict[str, Any]) -> ReportingConfig:
    """Build a ``ReportingConfig`` from parsed YAML (sequences become tuples)."""
    section = data.get(SECTION_KEY, data)
    if not isinstance(section, dict):
        raise ValueError(f"'{SECTION_KEY}' must be a mapping")

    settings = dict(section)
    for key in _LIST_KEYS:
        if key in settings and isinstance(settings[key], list):
            settings[key] = tuple(settings[key])
    classification = settings.get("classification")
    if isinstance(classification, dict):
        classification = dict(classification)
        prefixes = classification.get("bank_account_prefixes")
        if isinstance(prefixes, str):
            classification["bank_account_prefixes"] = (prefixes,)
        elif isinstance(prefixes, list):
            classification["bank_account_prefixes"] = tuple(str(p) for p in prefixes)
        for code_key in (
            "receivable_account_code", "payable_account_code", "retained_earnings_code",
        ):
            # YAML reads an unquoted 1300 as an int
            if code_key in classification:
                classification[code_key] = str(classification[code_key])
        settings["classification"] = classification
    return ReportingConfig.from_dict(settings)


def load_reporting_config(path: str | Path) -> ReportingConfig:
    """Load and validate a reporting config file."""
    path = Path(path)
    data = load_yaml_file(path)
    config = parse_reporting_config(data)
    logger.info(
        "reporting_config_loaded",
        extra={
            "path": str(path),
            "entity_name": config.entity_name,
            "checksum": compute_checksum(config.to_dict()),
        },
    )
    return config


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
