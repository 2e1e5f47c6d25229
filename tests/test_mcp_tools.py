"""Tests for the MCP tool functions (called directly, no stdio server)."""
from __future__ import annotations

import asyncio

import pytest

from missionforge.db import WorkOrderStore
from missionforge.mcp_server import tools_generate
from missionforge.orch.graph import WorkOrderPipeline
from missionforge.settings import LOCAL_FALLBACK, Settings


def test_generate_and_save(monkeypatch, tmp_path) -> None:
    pipeline = WorkOrderPipeline({}, Settings())
    store = WorkOrderStore(tmp_path / "wo.db")
    monkeypatch.setattr(tools_generate, "get_pipeline", lambda: pipeline)
    monkeypatch.setattr(tools_generate, "get_store", lambda: store)

    out = asyncio.run(tools_generate.generate_work_order("dev backend à Fès, 5000 DH, 2 mois", save=True))

    assert out["provider"] == LOCAL_FALLBACK
    assert out["saved"] is True
    wo = out["work_order"]
    assert wo["city"] == "Fès"
    assert wo["dailyRate"] == 5000
    assert wo["durationUnit"] == "MONTH"
    assert store.get(wo["id"]).title == wo["title"]


def test_generate_without_save(monkeypatch) -> None:
    monkeypatch.setattr(tools_generate, "get_pipeline", lambda: WorkOrderPipeline({}, Settings()))

    out = asyncio.run(tools_generate.generate_work_order("application mobile flutter"))

    assert out["saved"] is False
    assert out["work_order"]["sourceProvider"] == LOCAL_FALLBACK


def test_list_providers(monkeypatch) -> None:
    pipeline = WorkOrderPipeline({"gemini": object(), "mistral": object()}, Settings())
    monkeypatch.setattr(tools_generate, "get_pipeline", lambda: pipeline)
    monkeypatch.setenv("MISTRAL_API_KEY", "k")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    out = tools_generate.list_providers()

    assert out["local_fallback"] == LOCAL_FALLBACK
    assert [p["name"] for p in out["providers"]] == ["gemini", "mistral"]
    assert [p["has_credentials"] for p in out["providers"]] == [False, True]
    assert out["providers"][0]["kind"] == "gemini"


def test_server_refuses_to_start_with_bad_settings(monkeypatch) -> None:
    from missionforge.mcp_server import server

    started = []
    monkeypatch.setattr(server, "settings", Settings(default_contract_type="CDI"))
    monkeypatch.setattr(server.mcp, "run", lambda **kwargs: started.append(kwargs))

    with pytest.raises(ValueError, match="DEFAULT_CONTRACT_TYPE"):
        server.main()
    assert started == []
