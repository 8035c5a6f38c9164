"""Tests for saved report persistence."""

import json
from datetime import datetime, timezone

import pytest

from books_kernel.domain.clock import DeterministicClock
from books_kernel.exceptions import InvalidReportConfigError, ReportStoreError
from books_modules.custom_reports.fields import FieldSpec, FieldType
from books_modules.custom_reports.models import CustomReportConfig, NumberFilter
from books_modules.custom_reports.store import (
    InMemoryReportStore,
    JsonFileReportStore,
    SavedReports,
)


def _config(name="Large invoices"):
    return CustomReportConfig(
        name=name,
        source="invoices",
        fields=(
            FieldSpec("invoice_number", "Invoice Number"),
            FieldSpec("total", "Total", FieldType.CURRENCY),
        ),
        filters=(NumberFilter("total", "greater_than", "1000", FieldType.CURRENCY),),
    )


class TestJsonFileReportStore:

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileReportStore(tmp_path / "reports.json").load() == []

    def test_save_then_load(self, tmp_path):
        store = JsonFileReportStore(tmp_path / "nested" / "reports.json")
        saved = CustomReportConfig(
            name="Large invoices",
            source="invoices",
            fields=_config().fields,
            filters=_config().filters,
            id="r1",
            created_at=datetime(2024, 6, 30, 12, tzinfo=timezone.utc),
        )

        store.save([saved])

        assert store.load() == [saved]
        on_disk = json.loads(store.path.read_text(encoding="utf-8"))
        assert on_disk[0]["filters"][0]["operator"] == "greater_than"
        assert [p.name for p in store.path.parent.iterdir()] == ["reports.json"]

    def test_reads_camel_case_created_at(self, tmp_path):
        path = tmp_path / "reports.json"
        path.write_text(json.dumps([{
            "id": "r9",
            "name": "Contacts",
            "source": "contacts",
            "fields": [{"key": "name", "label": "Name", "type": "text"}],
            "filters": [],
            "createdAt": "2024-02-01T00:00:00Z",
        }]), encoding="utf-8")

        [config] = JsonFileReportStore(path).load()

        assert config.created_at == datetime(2024, 2, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "content",
        ["{not json", '{"id": "r1"}', '[{"name": "No source"}]'],
    )
    def test_unreadable_document(self, tmp_path, content):
        path = tmp_path / "reports.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ReportStoreError) as exc_info:
            JsonFileReportStore(path).load()
        assert exc_info.value.location == str(path)


class TestSavedReports:

    @pytest.fixture
    def saved_reports(self):
        return SavedReports(InMemoryReportStore(), DeterministicClock())

    def test_add_assigns_id_and_timestamp(self, saved_reports):
        saved = saved_reports.add(_config())

        assert saved.id
        assert saved.created_at == datetime(2024, 6, 30, 12, tzinfo=timezone.utc)
        assert saved.filters == _config().filters
        assert saved_reports.list_reports() == [saved]
        assert saved_reports.get(saved.id) == saved

    def test_ids_are_unique(self, saved_reports):
        first = saved_reports.add(_config("One"))
        second = saved_reports.add(_config("Two"))

        assert first.id != second.id
        assert [c.name for c in saved_reports.list_reports()] == ["One", "Two"]

    @pytest.mark.parametrize("name", ["", "   "])
    def test_name_required(self, saved_reports, name):
        with pytest.raises(InvalidReportConfigError):
            saved_reports.add(_config(name))
        assert saved_reports.list_reports() == []

    def test_delete(self, saved_reports):
        keep = saved_reports.add(_config("Keep"))
        drop = saved_reports.add(_config("Drop"))

        assert saved_reports.delete(drop.id) is True
        assert saved_reports.delete(drop.id) is False
        assert saved_reports.get(drop.id) is None
        assert saved_reports.list_reports() == [keep]

    def test_over_json_file(self, tmp_path):
        path = tmp_path / "reports.json"
        saved = SavedReports(JsonFileReportStore(path), DeterministicClock()).add(_config())

        reopened = SavedReports(JsonFileReportStore(path))

        assert reopened.get(saved.id) == saved
