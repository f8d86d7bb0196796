"""Pipeline orchestration for fact-checking posts end to end.

Provides:
- FactCheckPipeline: extract -> verify -> score -> escalate, per file or batch
- summarize_report: terminal summary of a FactCheckReport
"""

from factcheck_system.pipeline.factcheck_pipeline import (
    BatchResult,
    FactCheckPipeline,
    summarize_report,
)

__all__ = ["BatchResult", "FactCheckPipeline", "summarize_report"]
