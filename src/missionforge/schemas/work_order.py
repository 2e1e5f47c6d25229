from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


WorkMode = Literal["REMOTE", "ONSITE", "HYBRID"]
DurationUnit = Literal["DAY", "WEEK", "MONTH", "YEAR"]
Currency = Literal["DH", "EUR", "USD"]
ContractType = Literal["FORFAIT", "REGIE"]
ExperienceBand = Literal["0-3", "3-7", "7-12", "12+"]

# fields a generation backend may never override
AUTHORITATIVE_FIELDS = (
    "city",
    "work_mode",
    "duration",
    "duration_unit",
    "daily_rate",
    "currency",
    "contract_type",
    "experience_band",
)


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_amount(value: float) -> str:
    """6000.0 -> "6000", 6500.5 -> "6500.50"."""
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


class ExtractedRequirements(BaseModel):
    """
    Working record produced by the field extractor for one request.
    Every field has a value; `title` is the only optional one.
    """

    model_config = ConfigDict(validate_assignment=True)

    title: Optional[str] = None
    country: str = "Morocco"
    city: str = "Rabat"
    work_mode: WorkMode = "REMOTE"
    duration: int = Field(default=3, gt=0)
    duration_unit: DurationUnit = "MONTH"
    daily_rate: float = Field(default=0.0, ge=0)
    currency: Currency = "DH"
    contract_type: ContractType = "REGIE"
    experience_band: ExperienceBand = "3-7"
    domain: str = "Backend"
    position: str = "Développeur Backend"
    expertises: List[str] = Field(default_factory=list)

    # which of title / position / domain the user named directly
    explicit_fields: Set[str] = Field(default_factory=set)


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class WorkOrderDraft(BaseModel):
    """
    Lenient mirror of the JSON a backend is asked to return.
    Never trusted as-is: finalize() turns it into a CanonicalWorkOrder.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utcnow)

    title: Optional[str] = None
    description: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    work_mode: Optional[str] = None
    duration: Optional[int] = None
    duration_type: Optional[str] = None
    start_immediately: Optional[bool] = None
    start_date: Optional[date] = None
    experience_year: Optional[str] = None
    contract_type: Optional[str] = None
    estimated_daily_rate: Optional[float] = None
    currency: Optional[str] = None
    domain: Optional[str] = None
    position: Optional[str] = None
    required_expertises: List[str] = Field(default_factory=list)

    @field_validator(
        "title", "description", "country", "city", "work_mode", "duration_type",
        "experience_year", "contract_type", "currency", "domain", "position",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return _blank_to_none(v)

    @field_validator("duration", "estimated_daily_rate", "start_date", "start_immediately", mode="before")
    @classmethod
    def _drop_unparseable(cls, v: Any, info) -> Any:
        # authoritative values are pinned later, so junk here just becomes None
        v = _blank_to_none(v)
        if v is None:
            return None
        name = info.field_name
        try:
            if name == "duration":
                return int(float(v))
            if name == "estimated_daily_rate":
                return float(str(v).replace(" ", "").replace(",", "."))
            if name == "start_date":
                return date.fromisoformat(str(v)[:10]) if not isinstance(v, date) else v
            if name == "start_immediately":
                if isinstance(v, str):
                    return v.strip().lower() in ("true", "yes", "oui", "1")
                return bool(v)
        except (TypeError, ValueError, OverflowError):
            return None
        return v

    @field_validator("required_expertises", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        if isinstance(v, list):
            return [str(p).strip() for p in v if p is not None and str(p).strip()]
        raise ValueError(f"requiredExpertises must be a list, got {type(v).__name__}")


class CanonicalWorkOrder(BaseModel):
    """
    Structurally complete work order handed back to the caller.
    Serializes with camelCase keys (model_dump(by_alias=True)).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)
    title: str
    description: str
    country: str
    city: str
    work_mode: WorkMode
    duration: int = Field(gt=0)
    duration_unit: DurationUnit
    start_immediately: bool = True
    start_date: Optional[date] = None
    experience_band: ExperienceBand
    contract_type: ContractType
    daily_rate: float = Field(ge=0)
    currency: Currency
    domain: str
    position: str
    expertises: List[str]
    created_at: datetime = Field(default_factory=utcnow)
    source_provider: str
