"""Corrections derived from FALSE verdicts.

One correction per FALSE result that carries a correct value. The suggested
text swaps the first occurrence of the claim value inside the matched text.
A normalised free-admission value swaps the written word ("무료", "FREE")
instead. When neither appears, the corrected value alone is suggested.

Critical claims never produce an auto-applicable correction.
"""

from typing import Iterable, Sequence

from factcheck_system.config.logging import get_logger
from factcheck_system.data_management.schemas.claim_schema import Claim, ClaimSeverity
from factcheck_system.data_management.schemas.report_schema import Correction
from factcheck_system.data_management.schemas.verification_schema import (
    VerificationResult,
    VerificationStatus,
)
from factcheck_system.extraction.matchers import FREE_VALUE, FREE_WORD

DEFAULT_REASON = "verification found the claim inaccurate"

logger = get_logger("CorrectionGenerator")


def suggest_text(claim: Claim, correct_value: str) -> str:
    if claim.value and claim.value in claim.text:
        return claim.text.replace(claim.value, correct_value, 1)
    if claim.value == FREE_VALUE and FREE_WORD.search(claim.text):
        return FREE_WORD.sub(lambda _: correct_value, claim.text, count=1)
    return correct_value


def generate_corrections(
    results: Iterable[VerificationResult],
    claims: Sequence[Claim],
) -> list[Correction]:
    """Build corrections for FALSE results, in result order."""
    claims_by_id = {claim.id: claim for claim in claims}
    corrections: list[Correction] = []

    for result in results:
        if result.status != VerificationStatus.FALSE or not result.correct_value:
            continue
        claim = claims_by_id.get(result.claim_id)
        if claim is None:
            logger.warning("False verdict for unknown claim", claim_id=result.claim_id)
            continue

        suggested = suggest_text(claim, result.correct_value)
        corrections.append(
            Correction(
                claim_id=claim.id,
                original_text=claim.text,
                suggested_text=suggested,
                reason=result.details or DEFAULT_REASON,
                auto_applicable=claim.severity != ClaimSeverity.CRITICAL,
            )
        )

    logger.debug(
        "Corrections generated",
        total=len(corrections),
        auto_applicable=sum(1 for c in corrections if c.auto_applicable),
    )
    return corrections


class CorrectionGenerator:
    """Object wrapper over generate_corrections for injection into the pipeline."""

    def generate(
        self,
        results: Iterable[VerificationResult],
        claims: Sequence[Claim],
    ) -> list[Correction]:
        return generate_corrections(results, claims)
