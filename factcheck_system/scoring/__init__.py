"""Quality gate scoring and correction generation."""

from factcheck_system.scoring.correction_generator import (
    CorrectionGenerator,
    generate_corrections,
    suggest_text,
)
from factcheck_system.scoring.score_evaluator import (
    GateEvaluation,
    ScoreEvaluator,
    category_score,
    claim_counts,
    evaluate,
    round_half_up,
    severity_stats,
)

__all__ = [
    "CorrectionGenerator",
    "generate_corrections",
    "suggest_text",
    "GateEvaluation",
    "ScoreEvaluator",
    "category_score",
    "claim_counts",
    "evaluate",
    "round_half_up",
    "severity_stats",
]
