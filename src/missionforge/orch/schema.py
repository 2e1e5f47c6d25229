from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, TypedDict

from missionforge.schemas.work_order import CanonicalWorkOrder, ExtractedRequirements, WorkOrderDraft


# ----------------------------
# One provider attempt
# ----------------------------

FailureKind = Literal["unavailable", "rejected", "malformed", "empty"]


@dataclass(frozen=True)
class ProviderFailure:
    kind: FailureKind
    message: str


@dataclass
class ProviderResult:
    """
    Outcome of one generate() call: exactly one of draft / failure is set.
    - raw_output: generated text as received (useful for debugging)
    - repaired: whether the JSON had to be cut out of prose or patched
    """
    provider: str
    draft: Optional[WorkOrderDraft] = None
    failure: Optional[ProviderFailure] = None
    raw_output: str = ""
    repaired: bool = False

    @property
    def ok(self) -> bool:
        return self.draft is not None

    @classmethod
    def success(cls, provider: str, draft: WorkOrderDraft, raw_output: str = "", repaired: bool = False) -> "ProviderResult":
        return cls(provider=provider, draft=draft, raw_output=raw_output, repaired=repaired)

    @classmethod
    def failed(cls, provider: str, kind: FailureKind, message: str, raw_output: str = "") -> "ProviderResult":
        return cls(provider=provider, failure=ProviderFailure(kind=kind, message=message), raw_output=raw_output)


# ----------------------------
# LangGraph State
# ----------------------------

class PipelineState(TypedDict, total=False):
    # inputs
    text: str
    preferred_provider: Optional[str]

    # artifacts
    requirements: ExtractedRequirements
    prompt: str
    candidates: List[str]
    next_index: int
    draft: Optional[WorkOrderDraft]
    source_provider: Optional[str]
    work_order: CanonicalWorkOrder

    # trace
    failures: List[Dict[str, Any]]
