"""Tests for the sqlite work-order store."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from missionforge.db import WorkOrderStore
from missionforge.errors import WorkOrderNotFound
from missionforge.schemas.work_order import CanonicalWorkOrder


def work_order(title: str, minutes: int = 0) -> CanonicalWorkOrder:
    return CanonicalWorkOrder(
        title=title,
        description="Mission de développement backend.",
        country="Morocco",
        city="Rabat",
        work_mode="REMOTE",
        duration=3,
        duration_unit="MONTH",
        experience_band="3-7",
        contract_type="REGIE",
        daily_rate=4000,
        currency="DH",
        domain="Backend",
        position="Développeur Backend",
        expertises=["Node.js", "PostgreSQL"],
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
        source_provider="local-fallback",
    )


def test_insert_get_roundtrip(tmp_path) -> None:
    store = WorkOrderStore(tmp_path / "db" / "wo.db")
    wo = work_order("Développeur Backend Node.js - Rabat")

    assert store.insert(wo) == wo.id
    assert store.get(wo.id) == wo
    store.close()


def test_insert_is_an_upsert(tmp_path) -> None:
    store = WorkOrderStore(tmp_path / "wo.db")
    wo = work_order("Premier titre de mission")
    store.insert(wo)
    store.insert(wo.model_copy(update={"title": "Titre corrigé de mission"}))

    assert store.get(wo.id).title == "Titre corrigé de mission"
    assert len(store.list()) == 1


def test_list_newest_first(tmp_path) -> None:
    store = WorkOrderStore(tmp_path / "wo.db")
    old, new = work_order("Ancienne mission", 0), work_order("Nouvelle mission", 10)
    store.insert(old)
    store.insert(new)

    assert [w.id for w in store.list()] == [new.id, old.id]
    assert [w.id for w in store.list(limit=1)] == [new.id]


def test_missing_ids(tmp_path) -> None:
    store = WorkOrderStore(tmp_path / "wo.db")
    with pytest.raises(WorkOrderNotFound):
        store.get("nope")
    with pytest.raises(KeyError):
        store.delete("nope")


def test_delete(tmp_path) -> None:
    store = WorkOrderStore(tmp_path / "wo.db")
    wo = work_order("Mission à supprimer")
    store.insert(wo)
    store.delete(wo.id)
    assert store.list() == []
