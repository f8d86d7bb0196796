"""Tests for audit log and report file stores."""

from datetime import datetime, timezone

import pytest

from factcheck_system.data_management.audit_log_store import (
    AuditLogStore,
    audit_filename,
    audit_slug,
)
from factcheck_system.data_management.report_store import ReportStore
from factcheck_system.data_management.schemas import (
    AppliedCorrection,
    AutoFixAuditLog,
    FactCheckReport,
)


@pytest.fixture
def audit_log() -> AutoFixAuditLog:
    return AutoFixAuditLog(
        file_path="drafts/2026-10-01 leeum museum.md",
        title="Leeum",
        fixed_at=datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc),
        before_hash="aaaaaaaaaaaaaaaa",
        after_hash="bbbbbbbbbbbbbbbb",
        corrections=[
            AppliedCorrection(
                claim_id="ct-2",
                original_text="운영시간: 10:00-18:00",
                suggested_text="운영시간: 10:00-17:00",
                reason="winter hours",
                applied=True,
            )
        ],
        factcheck_score=88,
    )


class TestAuditNaming:
    def test_slug_replaces_unsafe_characters(self) -> None:
        assert audit_slug("drafts/2026-10-01 국립 박물관.md") == "2026-10-01-국립-박물관"

    def test_filename_is_dated(self) -> None:
        when = datetime(2026, 10, 1, tzinfo=timezone.utc)
        assert audit_filename("posts/leeum.md", when) == "2026-10-01-leeum.json"


class TestAuditLogStore:
    def test_write_and_read(self, tmp_path, audit_log: AutoFixAuditLog) -> None:
        store = AuditLogStore(tmp_path / "fixes")

        path = store.write(audit_log)

        assert path.name == "2026-10-01-2026-10-01-leeum-museum.json"
        assert store.read(path) == audit_log

    def test_never_overwrites(self, tmp_path, audit_log: AutoFixAuditLog) -> None:
        store = AuditLogStore(tmp_path / "fixes")

        first = store.write(audit_log)
        second = store.write(audit_log)
        third = store.write(audit_log)

        assert second.name == first.name.replace(".json", "-2.json")
        assert third.name == first.name.replace(".json", "-3.json")
        assert len(store.list_logs()) == 3

    def test_list_logs_without_directory(self, tmp_path) -> None:
        assert AuditLogStore(tmp_path / "absent").list_logs() == []


class TestReportStore:
    def test_save_and_load(self, tmp_path) -> None:
        store = ReportStore(tmp_path / "reports")
        report = FactCheckReport(file_path="drafts/leeum.md", title="Leeum", overall_score=91)

        path = store.save(report)

        assert path.name == "leeum.factcheck.json"
        assert store.load_for("drafts/leeum.md") == report
