from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Tuple

from missionforge.extractors.domain_rules import get_profile
from missionforge.extractors.skill_rules import canonical_tech, merge_unique
from missionforge.orch.templates import GENERIC_TECHNOLOGIES, fallback_description, fallback_title
from missionforge.schemas.work_order import CanonicalWorkOrder, ExtractedRequirements, WorkOrderDraft
from missionforge.settings import Settings, settings as default_settings


def _explicit(req: ExtractedRequirements, name: str) -> bool:
    return name in req.explicit_fields and bool(getattr(req, name))


def _pick(req: ExtractedRequirements, name: str, drafted: Optional[str]) -> Optional[str]:
    """Explicit requirement > non-blank draft value > requirement."""
    if _explicit(req, name):
        return getattr(req, name)
    if drafted and drafted.strip():
        return drafted.strip()
    return getattr(req, name)


def pad_expertises(base: Iterable[str], req: ExtractedRequirements, cfg: Settings) -> List[str]:
    """
    Cleaned, case-insensitively unique technologies, capped at max_expertises,
    topped up to min_expertises from the request, the domain, then generic ones.
    """
    techs = merge_unique([], (canonical_tech(t) for t in base))[: cfg.max_expertises]
    if len(techs) >= cfg.min_expertises:
        return techs

    profile = get_profile(req.domain)
    pool: List[str] = []
    pool += req.expertises
    pool += profile.default_technologies
    pool += profile.complementary_technologies
    pool += GENERIC_TECHNOLOGIES
    return merge_unique(techs, pool, limit=min(cfg.min_expertises, cfg.max_expertises))


def resolve_start(start_immediately: Optional[bool], start_date: Optional[date]) -> Tuple[bool, Optional[date]]:
    # immediate start has no date; no date means immediate start
    if start_immediately or start_date is None:
        return True, None
    return False, start_date


def synthesize_fallback_draft(req: ExtractedRequirements, cfg: Optional[Settings] = None) -> WorkOrderDraft:
    """Deterministic draft built from extraction alone (no backend involved)."""
    cfg = cfg or default_settings
    stack = pad_expertises(req.expertises, req, cfg)
    return WorkOrderDraft(
        title=req.title or fallback_title(req),
        description=fallback_description(req, stack),
        country=req.country,
        city=req.city,
        work_mode=req.work_mode,
        duration=req.duration,
        duration_type=req.duration_unit,
        start_immediately=True,
        experience_year=req.experience_band,
        contract_type=req.contract_type,
        estimated_daily_rate=req.daily_rate,
        currency=req.currency,
        domain=req.domain,
        position=req.position,
        required_expertises=stack,
    )


def finalize(
    draft: WorkOrderDraft,
    requirements: ExtractedRequirements,
    provider: str,
    cfg: Optional[Settings] = None,
) -> CanonicalWorkOrder:
    """
    Draft + requirements -> CanonicalWorkOrder.

    Authoritative fields always come from requirements; explicit title,
    position and domain overwrite the draft; technologies are padded;
    degenerate title/description are replaced by templates.
    """
    cfg = cfg or default_settings
    req = requirements

    title = _pick(req, "title", draft.title) or ""
    position = _pick(req, "position", draft.position)
    domain = _pick(req, "domain", draft.domain)

    expertises = pad_expertises(draft.required_expertises, req, cfg)

    if len(title.strip()) < cfg.min_title_length:
        title = fallback_title(req)

    description = (draft.description or "").strip()
    if len(description) < cfg.min_description_length:
        description = fallback_description(req, expertises)

    start_immediately, start_date = resolve_start(draft.start_immediately, draft.start_date)

    return CanonicalWorkOrder(
        id=draft.id,
        title=title,
        description=description,
        country=(draft.country or "").strip() or req.country,
        # pinned
        city=req.city,
        work_mode=req.work_mode,
        duration=req.duration,
        duration_unit=req.duration_unit,
        daily_rate=req.daily_rate,
        currency=req.currency,
        contract_type=req.contract_type,
        experience_band=req.experience_band,
        start_immediately=start_immediately,
        start_date=start_date,
        domain=domain,
        position=position,
        expertises=expertises,
        created_at=draft.created_at,
        source_provider=provider,
    )
