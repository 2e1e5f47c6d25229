"""Tests for deterministic request extraction."""
from __future__ import annotations

from typing import get_args

import pytest

from missionforge.extractors.field_rules import extract, normalize_duration, parse_amount
from missionforge.schemas.work_order import ContractType, Currency, DurationUnit, ExperienceBand, WorkMode
from missionforge.settings import Settings


def test_react_remote_request() -> None:
    req = extract("Besoin développeur React remote, 6000 DH, 3 mois, senior")

    assert req.work_mode == "REMOTE"
    assert req.daily_rate == 6000
    assert req.currency == "DH"
    assert (req.duration, req.duration_unit) == (3, "MONTH")
    assert req.experience_band == "7-12"
    assert req.domain == "Frontend"
    assert "React" in req.expertises


def test_backend_weeks_junior() -> None:
    req = extract("dev backend 2 semaines junior")

    assert (req.duration, req.duration_unit) == (1, "MONTH")
    assert req.experience_band == "0-3"
    assert req.domain == "Backend"
    assert "domain" in req.explicit_fields
    # no amount: domain reference rate
    assert req.daily_rate == 4000
    # no technology named: first defaults of the domain
    assert req.expertises == ["Node.js", "Express.js", "MongoDB"]


def test_years_of_experience_are_not_a_duration() -> None:
    req = extract("Développeur Java avec 5 ans d'expérience, 4 mois à Casablanca")

    assert req.experience_band == "3-7"
    assert (req.duration, req.duration_unit) == (4, "MONTH")
    assert (req.city, req.country) == ("Casablanca", "Morocco")
    assert req.expertises == ["Java"]


def test_band_literal_is_not_a_duration() -> None:
    req = extract("profil 3-7 ans d'expérience, mission de 6 mois")

    assert req.experience_band == "3-7"
    assert (req.duration, req.duration_unit) == (6, "MONTH")


def test_years_after_seniority_word_are_not_a_duration() -> None:
    req = extract("senior 10 ans, mission 6 mois")

    assert (req.duration, req.duration_unit) == (6, "MONTH")
    assert req.experience_band == "7-12"

    # a plain year count is still a duration
    assert extract("mission backend 1 an").duration_unit == "YEAR"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("TJM 7 000 DH en remote", (7000.0, "DH")),
        ("budget 6,5k", (6500.0, "DH")),
        ("€500 par jour, projet Vue.js à Paris", (500.0, "EUR")),
        ("450 euros par jour", (450.0, "EUR")),
        ("rate 300 USD", (300.0, "USD")),
        ("tarif: 1.200 MAD", (1200.0, "DH")),
    ],
)
def test_amount_and_currency(text: str, expected: tuple) -> None:
    req = extract(text)
    assert (req.daily_rate, req.currency) == expected


def test_dh_family_wins_over_euro() -> None:
    req = extract("5000 dh soit environ 450 euros")
    assert (req.daily_rate, req.currency) == (5000.0, "DH")


def test_parse_amount_separators() -> None:
    assert parse_amount("7 000") == 7000
    assert parse_amount("7,000") == 7000
    assert parse_amount("6,5") == 6.5
    assert parse_amount("1.234,5") == 1234.5
    assert parse_amount("6.5", thousands=True) == 6500


def test_duration_normalization() -> None:
    assert normalize_duration(45, "DAY") == (1, "MONTH")
    assert normalize_duration(90, "DAY") == (3, "MONTH")
    assert normalize_duration(10, "DAY") == (1, "MONTH")
    assert normalize_duration(8, "WEEK") == (2, "MONTH")
    assert normalize_duration(2, "YEAR") == (2, "YEAR")


def test_work_mode_priority() -> None:
    assert extract("hybride, 2 jours sur site par semaine").work_mode == "HYBRID"
    assert extract("mission semi-présentiel").work_mode == "HYBRID"
    assert extract("présentiel à Rabat").work_mode == "ONSITE"
    assert extract("rien de précisé").work_mode == "REMOTE"


def test_contract_type() -> None:
    assert extract("projet au forfait").contract_type == "FORFAIT"
    assert extract("mission en régie").contract_type == "REGIE"
    assert extract("mission").contract_type == "REGIE"
    assert extract("mission", Settings(default_contract_type="FORFAIT")).contract_type == "FORFAIT"


def test_whole_word_matching() -> None:
    req = extract("développeur javascript")
    assert req.expertises == ["JavaScript"]
    assert "Java" not in req.expertises


def test_longest_alias_masks_shorter() -> None:
    req = extract("app mobile react native")
    assert req.expertises == ["React Native"]
    assert req.domain == "Mobile"


def test_expertises_order_of_appearance_and_dedup() -> None:
    req = extract("Docker, Laravel et docker, puis PostgreSQL")
    assert req.expertises == ["Docker", "Laravel", "PostgreSQL"]


def test_explicit_title() -> None:
    req = extract("Titre: Refonte du portail client, React, Rabat")
    assert req.title == "Refonte du portail client"
    assert "title" in req.explicit_fields

    quoted = extract('Mission "Application de suivi de flotte" en Flutter')
    assert quoted.title == "Application de suivi de flotte"


def test_role_sets_position_and_domain() -> None:
    req = extract("Recherche data scientist Python 3 mois")
    assert req.position == "Data Scientist"
    assert req.domain == "Data"
    assert {"position", "domain"} <= req.explicit_fields


def test_country_keyword_selects_default_city() -> None:
    assert (extract("mission en France").city, extract("mission en France").country) == ("Paris", "France")
    assert extract("mission au Maroc").city == "Rabat"


def test_fallback_locale_from_settings() -> None:
    req = extract("dev python", Settings(fallback_country="France", fallback_city="Lyon"))
    assert (req.city, req.country) == ("Lyon", "France")


def test_no_reference_rate_outside_dh() -> None:
    req = extract("dev python", Settings(default_currency="EUR"))
    assert req.currency == "EUR"
    assert req.daily_rate == 0


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "bonjour",
        "0 mois 0 DH",
        "k8s terraform 12+ ans d'expérience, 90 jours, 9k€",
        "Développeur Fullstack React/Node 8000dh 1 an Tanger hybride forfait",
    ],
)
def test_every_field_in_domain_and_idempotent(text: str) -> None:
    req = extract(text)

    assert req.work_mode in get_args(WorkMode)
    assert req.duration_unit in get_args(DurationUnit)
    assert req.currency in get_args(Currency)
    assert req.contract_type in get_args(ContractType)
    assert req.experience_band in get_args(ExperienceBand)
    assert req.duration > 0
    assert req.daily_rate >= 0
    assert req.city and req.country and req.domain and req.position
    assert req.expertises
    assert len({e.lower() for e in req.expertises}) == len(req.expertises)

    assert extract(text) == req
