"""Tests for provider ordering, failure isolation and the local fallback."""
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

import httpx
import pytest

from missionforge.llm.providers.catalog import ResolvedProvider
from missionforge.llm.providers.openai_compat_client import OpenAICompatProvider
from missionforge.orch.graph import WorkOrderPipeline, candidate_order
from missionforge.orch.schema import ProviderResult
from missionforge.schemas.work_order import WorkOrderDraft
from missionforge.settings import LOCAL_FALLBACK, Settings

CFG = Settings(default_provider="gemini", known_providers=("gemini", "mistral", "deepseek"))

GOOD_DESCRIPTION = (
    "Nous recherchons un développeur pour concevoir et maintenir des APIs REST "
    "performantes, sécuriser les accès et accompagner l'équipe produit sur la durée."
)


class ScriptedProvider:
    """Stands in for an adapter: returns a fixed outcome and counts calls."""

    def __init__(self, name: str, draft: Optional[WorkOrderDraft] = None, kind: str = "unavailable") -> None:
        self.name = name
        self.draft = draft
        self.kind = kind
        self.calls = 0

    async def generate(self, prompt: str) -> ProviderResult:
        self.calls += 1
        if self.draft is not None:
            return ProviderResult.success(self.name, self.draft)
        return ProviderResult.failed(self.name, self.kind, f"{self.name} scripted failure")


class HangingProvider(ScriptedProvider):
    async def generate(self, prompt: str) -> ProviderResult:
        self.calls += 1
        await asyncio.sleep(3600)
        raise AssertionError("unreachable")


class BrokenProvider(ScriptedProvider):
    async def generate(self, prompt: str) -> ProviderResult:
        raise RuntimeError("bug in adapter")


def good_draft(**overrides) -> WorkOrderDraft:
    data = {
        "title": "Développeur Backend Laravel confirmé",
        "description": GOOD_DESCRIPTION,
        "city": "Paris",
        "workMode": "ONSITE",
        "duration": 12,
        "durationType": "YEAR",
        "estimatedDailyRate": 1,
        "currency": "EUR",
        "contractType": "FORFAIT",
        "experienceYear": "0-3",
        "requiredExpertises": ["Laravel", "PHP", "MySQL", "Redis"],
    }
    data.update(overrides)
    return WorkOrderDraft.model_validate(data)


def failing_registry() -> Dict[str, ScriptedProvider]:
    return {name: ScriptedProvider(name) for name in CFG.known_providers}


def test_candidate_order() -> None:
    available = ["gemini", "mistral", "deepseek"]
    assert candidate_order(None, CFG, available) == ["gemini", "mistral", "deepseek"]
    assert candidate_order("deepseek", CFG, available) == ["deepseek", "gemini", "mistral"]
    # case-insensitive, visited once
    assert candidate_order("GEMINI", CFG, available) == ["gemini", "mistral", "deepseek"]
    # unknown ids are skipped
    assert candidate_order("nope", CFG, available) == ["gemini", "mistral", "deepseek"]
    assert candidate_order("mistral", CFG, ["mistral"]) == ["mistral"]


def test_all_failing_ends_in_local_fallback() -> None:
    providers = failing_registry()
    pipeline = WorkOrderPipeline(providers, CFG)

    wo, provider = asyncio.run(pipeline.generate_work_order("dev backend Laravel 7000 DH 3 mois"))

    assert provider == LOCAL_FALLBACK
    assert wo.source_provider == LOCAL_FALLBACK
    assert len(wo.title) >= CFG.min_title_length
    assert len(wo.description) >= CFG.min_description_length
    assert wo.daily_rate == 7000
    assert [p.calls for p in providers.values()] == [1, 1, 1]


def test_first_success_stops_the_chain() -> None:
    providers = failing_registry()
    providers["mistral"] = ScriptedProvider("mistral", draft=good_draft())
    pipeline = WorkOrderPipeline(providers, CFG)

    wo, provider = asyncio.run(pipeline.generate_work_order("dev backend Laravel 7000 DH 3 mois"))

    assert provider == "mistral"
    assert providers["gemini"].calls == 1
    assert providers["deepseek"].calls == 0
    assert wo.title == "Développeur Backend Laravel confirmé"


def test_preferred_provider_goes_first() -> None:
    providers = failing_registry()
    providers["deepseek"] = ScriptedProvider("deepseek", draft=good_draft())
    pipeline = WorkOrderPipeline(providers, CFG)

    _, provider = asyncio.run(pipeline.generate_work_order("dev backend", preferred_provider="DeepSeek"))

    assert provider == "deepseek"
    assert providers["gemini"].calls == 0
    assert providers["mistral"].calls == 0


def test_preferred_equal_to_default_is_tried_once() -> None:
    providers = failing_registry()
    pipeline = WorkOrderPipeline(providers, CFG)

    asyncio.run(pipeline.generate_work_order("dev backend", preferred_provider="gemini"))

    assert providers["gemini"].calls == 1


def test_authoritative_fields_survive_a_disagreeing_backend() -> None:
    providers = {"gemini": ScriptedProvider("gemini", draft=good_draft())}
    pipeline = WorkOrderPipeline(providers, CFG)

    wo, _ = asyncio.run(pipeline.generate_work_order("dev backend à Rabat, remote, 7000 DH, 3 mois, senior"))

    assert wo.city == "Rabat"
    assert wo.work_mode == "REMOTE"
    assert (wo.duration, wo.duration_unit) == (3, "MONTH")
    assert (wo.daily_rate, wo.currency) == (7000, "DH")
    assert wo.contract_type == "REGIE"
    assert wo.experience_band == "7-12"


def test_no_providers_configured() -> None:
    pipeline = WorkOrderPipeline({}, CFG)
    wo, provider = asyncio.run(pipeline.generate_work_order("application mobile flutter"))
    assert provider == LOCAL_FALLBACK
    assert wo.domain == "Mobile"


def test_invalid_credentials_everywhere() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "invalid api key"}})

    transport = httpx.MockTransport(handler)
    providers = {
        name: OpenAICompatProvider(
            ResolvedProvider(
                name=name,
                kind="openai_compat",
                base_url=f"https://{name}.example.test/v1",
                api_key="invalid",
                api_key_env=f"{name.upper()}_API_KEY",
                model="m",
                timeout=5.0,
                temperature=0.7,
                max_tokens=2000,
            ),
            transport=transport,
        )
        for name in CFG.known_providers
    }
    pipeline = WorkOrderPipeline(providers, CFG)

    wo, provider = asyncio.run(pipeline.generate_work_order("Besoin développeur React remote, 6000 DH, 3 mois, senior"))

    assert provider == LOCAL_FALLBACK
    assert wo.title.strip()
    assert wo.description.strip()
    assert wo.domain == "Frontend"
    assert "React" in wo.expertises


def test_internal_defects_propagate() -> None:
    pipeline = WorkOrderPipeline({"gemini": BrokenProvider("gemini")}, CFG)
    with pytest.raises(RuntimeError, match="bug in adapter"):
        asyncio.run(pipeline.generate_work_order("dev backend"))


def test_cancellation_is_not_swallowed() -> None:
    provider = HangingProvider("gemini")
    pipeline = WorkOrderPipeline({"gemini": provider}, CFG)

    async def scenario() -> None:
        task = asyncio.create_task(pipeline.generate_work_order("dev backend"))
        for _ in range(100):
            if provider.calls:
                break
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())


def test_concurrent_requests_do_not_share_state() -> None:
    providers = failing_registry()
    pipeline = WorkOrderPipeline(providers, CFG)
    texts = ["dev backend à Tanger", "dev react à Agadir", "devops à Oujda"]

    async def scenario() -> List:
        return await asyncio.gather(*(pipeline.generate_work_order(t) for t in texts))

    results = asyncio.run(scenario())

    assert [wo.city for wo, _ in results] == ["Tanger", "Agadir", "Oujda"]
    assert len({wo.id for wo, _ in results}) == 3


def test_garbled_envelope_falls_through_to_next_backend() -> None:
    garbled = OpenAICompatProvider(
        ResolvedProvider(
            name="gemini",
            kind="openai_compat",
            base_url="https://gemini.example.test/v1",
            api_key="k",
            api_key_env="GEMINI_API_KEY",
            model="m",
            timeout=5.0,
            temperature=0.7,
            max_tokens=2000,
        ),
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": [{"message": "oops"}]})),
    )
    providers = {"gemini": garbled, "mistral": ScriptedProvider("mistral", draft=good_draft())}
    pipeline = WorkOrderPipeline(providers, CFG)

    wo, provider = asyncio.run(pipeline.generate_work_order("dev backend 7000 DH"))

    assert provider == "mistral"
    assert wo.daily_rate == 7000
