from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Optional

from missionforge.db import WorkOrderStore
from missionforge.llm.providers.catalog import resolve
from missionforge.orch.graph import WorkOrderPipeline, candidate_order
from missionforge.settings import LOCAL_FALLBACK, settings


@lru_cache(maxsize=1)
def get_pipeline() -> WorkOrderPipeline:
    # built once per server process
    return WorkOrderPipeline.from_settings(settings)


@lru_cache(maxsize=1)
def get_store() -> WorkOrderStore:
    return WorkOrderStore(settings.db_path)


async def generate_work_order(
    text: str,
    preferred_provider: Optional[str] = None,
    save: bool = False,
) -> Dict[str, Any]:
    """
    Turn a short free-text request into a structured work order.

    Backends are tried preferred -> default -> the others; if none answers
    usefully the work order is built locally ("local-fallback").
    Set save=True to persist it in the work order store.
    """
    work_order, provider = await get_pipeline().generate_work_order(text, preferred_provider)
    saved = False
    if save:
        get_store().insert(work_order)
        saved = True
    return {
        "work_order": work_order.model_dump(mode="json", by_alias=True),
        "provider": provider,
        "saved": saved,
    }


def list_providers() -> Dict[str, Any]:
    """
    Configured backends in attempt order, whether each has credentials,
    and the local fallback id.
    """
    pipeline = get_pipeline()
    order = candidate_order(None, settings, pipeline.providers)
    providers: List[Dict[str, Any]] = []
    for name in order:
        resolved = resolve(name, default_timeout=settings.provider_timeout)
        providers.append({
            "name": name,
            "kind": resolved.kind if resolved else None,
            "model": resolved.model if resolved else None,
            "has_credentials": bool(resolved and resolved.api_key),
        })
    return {
        "default_provider": settings.default_provider,
        "providers": providers,
        "local_fallback": LOCAL_FALLBACK,
    }
