"""Auto-fix of non-critical corrections with an audit trail."""

from factcheck_system.autofix.auto_fixer import (
    NOT_FOUND_REASON,
    AutoFixer,
    compute_hash,
    count_occurrences,
    format_diff,
)

__all__ = [
    "AutoFixer",
    "NOT_FOUND_REASON",
    "compute_hash",
    "count_occurrences",
    "format_diff",
]
