"""
Saved custom report persistence.

The reporting core does not own storage: it talks to a ``ReportStore``
that loads and saves the whole list of configs at once.
``JsonFileReportStore`` keeps them in one JSON document on disk;
``InMemoryReportStore`` backs tests and single-process use.
``SavedReports`` adds the add / get / delete bookkeeping on top of any
store.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from books_kernel.domain.clock import Clock, SystemClock
from books_kernel.exceptions import (
    BooksError,
    InvalidReportConfigError,
    ReportStoreError,
)
from books_kernel.logging_config import get_logger
from books_modules.custom_reports.models import CustomReportConfig

logger = get_logger("modules.custom_reports.store")


class ReportStore(Protocol):
    """Key-value persistence of saved report configs."""

    def load(self) -> list[CustomReportConfig]: ...

    def save(self, configs: Sequence[CustomReportConfig]) -> None: ...


class InMemoryReportStore:
    def __init__(self, configs: Sequence[CustomReportConfig] = ()):
        self._configs: list[CustomReportConfig] = list(configs)

    def load(self) -> list[CustomReportConfig]:
        return list(self._configs)

    def save(self, configs: Sequence[CustomReportConfig]) -> None:
        self._configs = list(configs)


class JsonFileReportStore:
    """
    All saved reports in one JSON array.

    A missing file is an empty store.  Writes go to a temporary file that
    replaces the target, so readers never see a half-written document.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[CustomReportConfig]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ReportStoreError(str(self._path), str(exc)) from exc
        if not isinstance(data, list):
            raise ReportStoreError(str(self._path), "expected a JSON array")

        try:
            configs = [CustomReportConfig.from_dict(item) for item in data]
        except BooksError as exc:
            raise ReportStoreError(str(self._path), str(exc)) from exc

        logger.debug(
            "saved_reports_loaded",
            extra={"path": str(self._path), "report_count": len(configs)},
        )
        return configs

    def save(self, configs: Sequence[CustomReportConfig]) -> None:
        payload = json.dumps([c.to_dict() for c in configs], indent=2)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise ReportStoreError(str(self._path), str(exc)) from exc

        logger.info(
            "saved_reports_written",
            extra={"path": str(self._path), "report_count": len(configs)},
        )


class SavedReports:
    """Add, look up and delete saved reports on top of a ``ReportStore``."""

    def __init__(self, store: ReportStore, clock: Clock | None = None):
        self._store = store
        self._clock = clock or SystemClock()

    def list_reports(self) -> list[CustomReportConfig]:
        return self._store.load()

    def get(self, report_id: str) -> CustomReportConfig | None:
        for config in self._store.load():
            if config.id == report_id:
                return config
        return None

    def add(self, config: CustomReportConfig) -> CustomReportConfig:
        """
        Save a new report, assigning its id and creation time.

        Raises:
            InvalidReportConfigError: If the report has no name.
        """
        if not config.name or not config.name.strip():
            raise InvalidReportConfigError("", "a saved report needs a name")
        saved = CustomReportConfig(
            name=config.name,
            source=config.source,
            fields=config.fields,
            filters=config.filters,
            id=uuid4().hex,
            created_at=self._clock.now(),
        )
        self._store.save([*self._store.load(), saved])
        logger.info(
            "saved_report_added",
            extra={"report_id": saved.id, "report_name": saved.name},
        )
        return saved

    def delete(self, report_id: str) -> bool:
        """Remove a report; False if no report has that id."""
        configs = self._store.load()
        remaining = [c for c in configs if c.id != report_id]
        if len(remaining) == len(configs):
            return False
        self._store.save(remaining)
        logger.info("saved_report_deleted", extra={"report_id": report_id})
        return True
