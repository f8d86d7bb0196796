"""Tests for the factcheck CLI."""

import json
import sys
import types

import pytest
from typer.testing import CliRunner

from factcheck_system import __version__
from factcheck_system.cli.main import app
from factcheck_system.config.settings import settings
from factcheck_system.data_management.schemas import Claim, ClaimType, VerificationStatus
from factcheck_system.verification.oracle import OracleVerdict

POST = """---
title: 리움미술관 가을 전시
venue: 리움미술관
---
# 리움미술관

운영시간: 10:00-18:00
"""

runner = CliRunner()


class AllVerified:
    async def verify(self, claim: Claim) -> OracleVerdict:
        return OracleVerdict(status=VerificationStatus.VERIFIED, confidence=95)


class WrongHours:
    async def verify(self, claim: Claim) -> OracleVerdict:
        if claim.type == ClaimType.HOURS:
            return OracleVerdict(status=VerificationStatus.FALSE, confidence=90, correct_value="10:00-17:00")
        return OracleVerdict(status=VerificationStatus.VERIFIED, confidence=95)


class WrongVenue:
    async def verify(self, claim: Claim) -> OracleVerdict:
        if claim.type == ClaimType.VENUE_EXISTS:
            return OracleVerdict(status=VerificationStatus.FALSE, confidence=90, correct_value="호암미술관")
        return OracleVerdict(status=VerificationStatus.VERIFIED, confidence=95)


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "quality_config_path", str(tmp_path / "quality-gates.json"))
    monkeypatch.setattr(settings, "review_queue_path", str(tmp_path / "human-review-queue.json"))
    monkeypatch.setattr(settings, "audit_log_dir", str(tmp_path / "fixes"))
    monkeypatch.setattr(settings, "verification_store_path", str(tmp_path / "verification-cache.json"))
    monkeypatch.setattr(settings, "report_dir", str(tmp_path / "reports"))
    monkeypatch.setattr(settings, "oracle", "")
    monkeypatch.setattr(settings, "request_interval_ms", 0)

    module = types.ModuleType("factcheck_cli_oracles")
    module.AllVerified = AllVerified
    module.WrongHours = WrongHours
    module.WrongVenue = WrongVenue
    monkeypatch.setitem(sys.modules, module.__name__, module)


@pytest.fixture
def post(tmp_path):
    path = tmp_path / "leeum.md"
    path.write_text(POST, encoding="utf-8")
    return path


# ── check ────────────────────────────────────────────────────────────────


class TestCheck:
    def test_requires_oracle(self, post) -> None:
        result = runner.invoke(app, ["check", str(post)])

        assert result.exit_code == 2
        assert "No verification oracle" in result.output

    def test_bad_oracle_path(self, post) -> None:
        result = runner.invoke(app, ["check", str(post), "--oracle", "factcheck_cli_oracles:Nope"])
        assert result.exit_code == 2

    def test_passing_post(self, post, tmp_path) -> None:
        result = runner.invoke(app, ["check", str(post), "--oracle", "factcheck_cli_oracles:AllVerified"])

        assert result.exit_code == 0, result.output
        assert "Overall score: 100%" in result.output
        assert (tmp_path / "reports" / "leeum.factcheck.json").exists()

    def test_oracle_from_settings(self, post, monkeypatch) -> None:
        monkeypatch.setattr(settings, "oracle", "factcheck_cli_oracles:AllVerified")

        assert runner.invoke(app, ["check", str(post)]).exit_code == 0

    def test_blocked_post_exits_1(self, post) -> None:
        result = runner.invoke(app, ["check", str(post), "--oracle", "factcheck_cli_oracles:WrongVenue"])

        assert result.exit_code == 1
        assert "BLOCKED" in result.output

    def test_no_block_flag(self, post) -> None:
        result = runner.invoke(
            app, ["check", str(post), "--oracle", "factcheck_cli_oracles:WrongVenue", "--no-block"]
        )
        assert result.exit_code == 0

    def test_json_output(self, post, tmp_path) -> None:
        result = runner.invoke(
            app,
            [
                "check",
                str(post),
                "--oracle",
                "factcheck_cli_oracles:WrongHours",
                "--json",
                "--output",
                str(tmp_path / "out"),
            ],
        )

        assert result.exit_code == 0, result.output
        reports = json.loads(result.stdout)
        assert reports[0]["file_path"] == str(post)
        assert reports[0]["corrections"][0]["suggested_text"] == "운영시간: 10:00-17:00"
        assert (tmp_path / "out" / "leeum.factcheck.json").exists()

    def test_unreadable_post_exits_2(self, tmp_path) -> None:
        result = runner.invoke(
            app, ["check", str(tmp_path / "missing.md"), "--oracle", "factcheck_cli_oracles:AllVerified"]
        )
        assert result.exit_code == 2


# ── fix ──────────────────────────────────────────────────────────────────


class TestFix:
    def test_check_then_fix(self, post, tmp_path) -> None:
        runner.invoke(app, ["check", str(post), "--oracle", "factcheck_cli_oracles:WrongHours"])
        report_path = tmp_path / "reports" / "leeum.factcheck.json"

        result = runner.invoke(app, ["fix", str(report_path)])

        assert result.exit_code == 0, result.output
        assert "Applied: 1" in result.output
        assert "운영시간: 10:00-17:00" in post.read_text(encoding="utf-8")
        assert len(list((tmp_path / "fixes").glob("*.json"))) == 1

    def test_dry_run(self, post, tmp_path) -> None:
        runner.invoke(app, ["check", str(post), "--oracle", "factcheck_cli_oracles:WrongHours"])
        original = post.read_text(encoding="utf-8")

        result = runner.invoke(app, ["fix", str(tmp_path / "reports" / "leeum.factcheck.json"), "--dry-run"])

        assert result.exit_code == 0
        assert "(DRY-RUN)" in result.output
        assert post.read_text(encoding="utf-8") == original

    def test_missing_report(self, tmp_path) -> None:
        result = runner.invoke(app, ["fix", str(tmp_path / "nope.json")])
        assert result.exit_code == 2


# ── review ───────────────────────────────────────────────────────────────


class TestReview:
    def test_empty_queue(self) -> None:
        result = runner.invoke(app, ["review", "list"])

        assert result.exit_code == 0
        assert "Review queue is empty" in result.output

    def test_flag_list_and_mark(self, post) -> None:
        flagged = runner.invoke(app, ["review", "flag", str(post), "--reason", "reader says closed", "--feedback"])
        assert flagged.exit_code == 0, flagged.output
        assert "negative_feedback" in flagged.output
        case_id = flagged.output.split()[1]

        listed = runner.invoke(app, ["review", "list"])
        assert "Human Review Queue" in listed.output

        skipped = runner.invoke(app, ["review", "mark", case_id, "approved"])
        assert skipped.exit_code == 2

        reviewed = runner.invoke(app, ["review", "mark", case_id, "reviewed", "--note", "checked"])
        assert reviewed.exit_code == 0
        assert "is now reviewed" in reviewed.output

    def test_mark_unknown_case(self) -> None:
        result = runner.invoke(app, ["review", "mark", "review-0-000000", "reviewed"])
        assert result.exit_code == 2

    def test_cleanup(self) -> None:
        result = runner.invoke(app, ["review", "cleanup", "--max-age-days", "7"])

        assert result.exit_code == 0
        assert "Removed 0 case(s) older than 7 days" in result.output


# ── config / version ─────────────────────────────────────────────────────


class TestInfo:
    def test_config(self) -> None:
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "Fact-check Settings" in result.output
        assert "block_on_critical_failure" in result.output

    def test_invalid_config_file(self, tmp_path) -> None:
        (tmp_path / "quality-gates.json").write_text("{oops", encoding="utf-8")

        result = runner.invoke(app, ["config"])

        assert result.exit_code == 2

    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output
