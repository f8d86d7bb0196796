"""Boundary to the external verification oracle.

The oracle (web search, grounding model, official API) is not part of this
package. Anything with an ``async verify(claim) -> OracleVerdict`` method can
be plugged in; the CLI loads one from an import path such as
``mypackage.oracles:GroundingOracle``.
"""

import importlib
from typing import Any, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, Field

from factcheck_system.data_management.schemas.claim_schema import Claim
from factcheck_system.data_management.schemas.verification_schema import (
    VerificationSource,
    VerificationStatus,
)


class OracleVerdict(BaseModel):
    """What the oracle says about one claim (type, value, context)."""

    status: VerificationStatus
    confidence: int = Field(..., ge=0, le=100)
    correct_value: Optional[str] = None
    source: VerificationSource = VerificationSource.WEB_SEARCH
    source_url: Optional[str] = None
    details: Optional[str] = None


@runtime_checkable
class VerificationOracle(Protocol):
    async def verify(self, claim: Claim) -> Union[OracleVerdict, dict[str, Any]]:
        ...


class OracleLoadError(Exception):
    """Import path does not resolve to a usable oracle."""


def load_oracle(import_path: str) -> VerificationOracle:
    """Resolve ``module:attr`` to an oracle instance.

    ``attr`` may be an oracle instance, or a class / zero-argument factory
    returning one.
    """
    module_name, sep, attr_name = import_path.partition(":")
    if not sep or not module_name or not attr_name:
        raise OracleLoadError(f"expected 'module:attr', got {import_path!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise OracleLoadError(f"cannot import {module_name}: {e}") from e

    try:
        target = getattr(module, attr_name)
    except AttributeError as e:
        raise OracleLoadError(f"{module_name} has no attribute {attr_name}") from e

    oracle = target
    # A class also passes the protocol check, so instantiate types and factories
    if isinstance(target, type) or not isinstance(target, VerificationOracle):
        if not callable(target):
            raise OracleLoadError(f"{import_path} is neither an oracle nor a factory")
        oracle = target()
    if not isinstance(oracle, VerificationOracle):
        raise OracleLoadError(f"{import_path} does not provide an async verify(claim) method")
    return oracle
