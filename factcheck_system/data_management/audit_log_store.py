"""Immutable dated audit logs for auto-fix runs.

One JSON file per run, named ``{YYYY-MM-DD}-{slug}.json`` where slug is the
document file name (extension dropped) with every character outside
``[A-Za-z0-9가-힣-]`` replaced by ``-``. Existing files are never
overwritten: a second run on the same day gets ``-2``, ``-3``, ...
"""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

from factcheck_system.data_management.schemas.autofix_schema import AutoFixAuditLog

_SLUG_UNSAFE = re.compile(r"[^a-zA-Z0-9가-힣-]")


def audit_slug(file_path: str) -> str:
    return _SLUG_UNSAFE.sub("-", Path(file_path).stem)


def audit_filename(file_path: str, when: Optional[datetime] = None) -> str:
    when = when or datetime.now(timezone.utc)
    return f"{when.strftime('%Y-%m-%d')}-{audit_slug(file_path)}.json"


class AuditLogStore:
    """Writes and reads auto-fix audit logs under one directory."""

    def __init__(self, log_dir: str | Path) -> None:
        self._dir = Path(log_dir)
        self._logger = structlog.get_logger().bind(component="AuditLogStore")

    @property
    def directory(self) -> Path:
        return self._dir

    def write(self, log: AutoFixAuditLog) -> Path:
        """Persist a log to a fresh file and return its path.

        Uses exclusive-create so a concurrent writer can never clobber an
        existing log. Write errors propagate.
        """
        self._dir.mkdir(parents=True, exist_ok=True)
        base = audit_filename(log.file_path, log.fixed_at)
        stem = base[: -len(".json")]
        payload = json.dumps(log.model_dump(mode="json"), indent=2, ensure_ascii=False)

        suffix = 1
        while True:
            name = base if suffix == 1 else f"{stem}-{suffix}.json"
            path = self._dir / name
            try:
                with open(path, "x", encoding="utf-8") as f:
                    f.write(payload)
            except FileExistsError:
                suffix += 1
                continue

            self._logger.info(
                "audit_log_written",
                path=str(path),
                file_path=log.file_path,
                corrections=len(log.corrections),
            )
            return path

    def read(self, path: str | Path) -> AutoFixAuditLog:
        with open(path, "r", encoding="utf-8") as f:
            return AutoFixAuditLog.model_validate(json.load(f))

    def list_logs(self) -> list[Path]:
        if not self._dir.exists():
            return []
        return sorted(self._dir.glob("*.json"))
