from __future__ import annotations

import random
import time
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx
from langgraph.graph import END, StateGraph
from loguru import logger

from missionforge.extractors.field_rules import extract
from missionforge.llm.prompts import build_prompt
from missionforge.llm.providers.base import BaseProvider
from missionforge.llm.providers.registry import build_providers
from missionforge.orch.finalize import finalize, synthesize_fallback_draft
from missionforge.orch.schema import PipelineState
from missionforge.schemas.work_order import CanonicalWorkOrder
from missionforge.settings import LOCAL_FALLBACK, Settings, settings as default_settings


def candidate_order(
    preferred: Optional[str],
    cfg: Settings,
    available: Iterable[str],
) -> List[str]:
    """
    preferred -> default -> remaining known providers (declared order).
    Ids are case-insensitive, each visited once; ids with no adapter are skipped.
    """
    available = {a.lower() for a in available}
    order: List[str] = []
    for i, name in enumerate([preferred, cfg.default_provider, *cfg.known_providers]):
        if not name:
            continue
        key = name.strip().lower()
        if key in order:
            continue
        if key not in available:
            # preferred and default are named on purpose; report them
            if i < 2:
                logger.warning("Provider {!r} is not configured, skipped", name)
            continue
        order.append(key)
    return order


class WorkOrderPipeline:
    """
    extract -> build_prompt -> attempt_provider* -> local_fallback? -> finalize

    The compiled graph and the provider registry are built once and shared
    by concurrent requests; per-request data lives only in the graph state.
    """

    def __init__(
        self,
        providers: Dict[str, BaseProvider],
        cfg: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.providers = {name.lower(): p for name, p in providers.items()}
        self.cfg = cfg or default_settings
        self.rng = rng
        self.graph = self._build_graph()

    @classmethod
    def from_settings(
        cls,
        cfg: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "WorkOrderPipeline":
        cfg = cfg or default_settings
        return cls(build_providers(cfg, transport=transport), cfg)

    # -----------------------
    # Nodes
    # -----------------------

    async def node_extract(self, state: PipelineState) -> Dict[str, Any]:
        req = extract(state["text"], self.cfg)
        logger.info(
            "Extracted domain={} city={} rate={} {} duration={} {}",
            req.domain, req.city, req.daily_rate, req.currency, req.duration, req.duration_unit,
        )
        return {"requirements": req}

    async def node_build_prompt(self, state: PipelineState) -> Dict[str, Any]:
        req = state["requirements"]
        return {"prompt": build_prompt(req.domain, req, state["text"], rng=self.rng)}

    async def node_attempt_provider(self, state: PipelineState) -> Dict[str, Any]:
        idx = state.get("next_index", 0)
        name = state["candidates"][idx]
        t0 = time.perf_counter()
        result = await self.providers[name].generate(state["prompt"])
        elapsed = time.perf_counter() - t0

        if result.ok:
            logger.info("{} produced a draft in {:.2f}s (repaired={})", name, elapsed, result.repaired)
            return {"next_index": idx + 1, "draft": result.draft, "source_provider": name}

        failure = result.failure
        logger.warning("{} failed [{}]: {}", name, failure.kind, failure.message)
        failures = list(state.get("failures", []))
        failures.append({"provider": name, "kind": failure.kind, "message": failure.message})
        return {"next_index": idx + 1, "failures": failures}

    async def node_local_fallback(self, state: PipelineState) -> Dict[str, Any]:
        tried = [f["provider"] for f in state.get("failures", [])]
        logger.warning("No provider produced a draft (tried: {}), using local fallback", tried or "none")
        return {
            "draft": synthesize_fallback_draft(state["requirements"], self.cfg),
            "source_provider": LOCAL_FALLBACK,
        }

    async def node_finalize(self, state: PipelineState) -> Dict[str, Any]:
        work_order = finalize(state["draft"], state["requirements"], state["source_provider"], self.cfg)
        return {"work_order": work_order}

    # -----------------------
    # Routers
    # -----------------------

    @staticmethod
    def route_after_prompt(state: PipelineState) -> str:
        return "attempt_provider" if state.get("candidates") else "local_fallback"

    @staticmethod
    def route_after_attempt(state: PipelineState) -> str:
        if state.get("draft") is not None:
            return "finalize"
        if state.get("next_index", 0) < len(state.get("candidates", [])):
            return "attempt_provider"
        return "local_fallback"

    def _build_graph(self) -> Any:
        g = StateGraph(PipelineState)

        g.add_node("extract", self.node_extract)
        g.add_node("build_prompt", self.node_build_prompt)
        g.add_node("attempt_provider", self.node_attempt_provider)
        g.add_node("local_fallback", self.node_local_fallback)
        g.add_node("finalize", self.node_finalize)

        g.set_entry_point("extract")
        g.add_edge("extract", "build_prompt")

        g.add_conditional_edges("build_prompt", self.route_after_prompt, {
            "attempt_provider": "attempt_provider",
            "local_fallback": "local_fallback",
        })
        g.add_conditional_edges("attempt_provider", self.route_after_attempt, {
            "attempt_provider": "attempt_provider",
            "local_fallback": "local_fallback",
            "finalize": "finalize",
        })

        g.add_edge("local_fallback", "finalize")
        g.add_edge("finalize", END)

        return g.compile()

    # -----------------------
    # Public API
    # -----------------------

    async def generate_work_order(
        self,
        text: str,
        preferred_provider: Optional[str] = None,
    ) -> Tuple[CanonicalWorkOrder, str]:
        candidates = candidate_order(preferred_provider, self.cfg, self.providers)
        logger.info("Generating work order, candidates: {}", candidates or "none")

        state: PipelineState = {
            "text": text,
            "preferred_provider": preferred_provider,
            "candidates": candidates,
            "next_index": 0,
            "draft": None,
            "source_provider": None,
            "failures": [],
        }
        # one step per node plus one per attempt
        out = await self.graph.ainvoke(state, config={"recursion_limit": len(candidates) + 10})
        work_order: CanonicalWorkOrder = out["work_order"]
        return work_order, work_order.source_provider
