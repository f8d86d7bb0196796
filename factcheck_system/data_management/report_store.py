"""FactCheckReport JSON persistence.

Reports are written once and read back by the ``fix`` command. File names
mirror the document name: ``{stem}.factcheck.json``.
"""

import json
from pathlib import Path

import structlog

from factcheck_system.data_management.schemas.report_schema import FactCheckReport


class ReportStore:
    def __init__(self, report_dir: str | Path) -> None:
        self._dir = Path(report_dir)
        self._logger = structlog.get_logger().bind(component="ReportStore")

    def path_for(self, file_path: str) -> Path:
        return self._dir / f"{Path(file_path).stem}.factcheck.json"

    def save(self, report: FactCheckReport) -> Path:
        """Write a report; overwrites the previous report for the same document."""
        path = self.path_for(report.file_path)
        save_report(report, path)
        self._logger.info("report_saved", path=str(path), score=report.overall_score)
        return path

    def load_for(self, file_path: str) -> FactCheckReport:
        return load_report(self.path_for(file_path))


def save_report(report: FactCheckReport, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.model_dump(mode="json"), f, indent=2, ensure_ascii=False)


def load_report(path: str | Path) -> FactCheckReport:
    with open(path, "r", encoding="utf-8") as f:
        return FactCheckReport.model_validate(json.load(f))
