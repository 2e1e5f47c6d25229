from __future__ import annotations

import re
from typing import List, Optional, Pattern, Tuple

from missionforge.extractors.domain_rules import classify, detect_role, get_profile
from missionforge.extractors.patterns import contains_phrase, first_group_match
from missionforge.extractors.skill_rules import extract_expertises
from missionforge.schemas.work_order import ExtractedRequirements
from missionforge.settings import Settings, settings as default_settings
from missionforge.text_clean.request_clean import clean_request

# ----------------------------
# Declarative tables (first match wins, in listed order)
# ----------------------------

# (city, country, aliases)
CITIES: List[Tuple[str, str, Tuple[str, ...]]] = [
    ("Casablanca", "Morocco", ("casablanca", "casa")),
    ("Rabat", "Morocco", ("rabat",)),
    ("Marrakech", "Morocco", ("marrakech", "marrakesh")),
    ("Fès", "Morocco", ("fès", "fes", "fez")),
    ("Tanger", "Morocco", ("tanger", "tangier")),
    ("Agadir", "Morocco", ("agadir",)),
    ("Meknès", "Morocco", ("meknès", "meknes")),
    ("Oujda", "Morocco", ("oujda",)),
    ("Kénitra", "Morocco", ("kénitra", "kenitra")),
    ("Tétouan", "Morocco", ("tétouan", "tetouan")),
    ("El Jadida", "Morocco", ("el jadida",)),
    ("Safi", "Morocco", ("safi",)),
    ("Paris", "France", ("paris",)),
    ("Lyon", "France", ("lyon",)),
    ("Marseille", "France", ("marseille",)),
    ("Toulouse", "France", ("toulouse",)),
    ("Lille", "France", ("lille",)),
    ("Bordeaux", "France", ("bordeaux",)),
    ("Nantes", "France", ("nantes",)),
]

# (country, its default city, aliases) when no city is named
COUNTRIES: List[Tuple[str, str, Tuple[str, ...]]] = [
    ("Morocco", "Rabat", ("maroc", "morocco")),
    ("France", "Paris", ("france",)),
]

_NUM = r"(?P<amount>\d{1,3}(?:[ .,]\d{3})+(?:[.,]\d+)?|\d+(?:[.,]\d+)?)"
_K = r"(?:\s?(?P<k>k))?"
_NUM_START = r"(?<![\w.,])"


def _currency_patterns(tokens: str) -> Tuple[Pattern[str], ...]:
    return (
        re.compile(rf"{_NUM_START}{_NUM}{_K}\s*(?:{tokens})(?!\w)", re.IGNORECASE),
        re.compile(rf"(?<!\w)(?:{tokens})\s*{_NUM}{_K}(?!\w)", re.IGNORECASE),
    )


# (currency or None for "keep default", patterns)
AMOUNT_FAMILIES: List[Tuple[Optional[str], Tuple[Pattern[str], ...]]] = [
    ("DH", _currency_patterns(r"dhs?|mad|dirhams?")),
    ("EUR", _currency_patterns(r"euros?|eur|€")),
    ("USD", _currency_patterns(r"us\$|\$|usd|dollars?")),
    (None, (
        re.compile(
            rf"(?<!\w)(?:budget|tarif|tjm|prix|salaire|rémunération|remuneration|rate)\D{{0,20}}?{_NUM}{_K}(?!\w)",
            re.IGNORECASE,
        ),
    )),
]

DURATION_RE = re.compile(
    r"(?<![\w.,+-])(?P<n>\d+)\s*"
    r"(?P<unit>jours?|jrs?|days?|semaines?|weeks?|mois|months?|ans?|années?|annees?|years?)(?!\w)"
    r"(?!\s*(?:d'|de\s+|of\s+)?(?:exp|expérience|experience))",
    re.IGNORECASE,
)

# "senior 10 ans": a year count right after an experience word is seniority
EXPERIENCE_LEAD_RE = re.compile(
    r"(?<!\w)(?:junior|senior|sénior|confirmé|confirme|expérimenté|experimente|expert|lead"
    r"|expérience|experience|exp)\W{0,3}$",
    re.IGNORECASE,
)

# unit token prefix -> unit; DAY and WEEK are folded into months
DURATION_UNITS: List[Tuple[Tuple[str, ...], str]] = [
    (("jour", "jr", "day"), "DAY"),
    (("semaine", "week"), "WEEK"),
    (("mois", "month"), "MONTH"),
    (("an", "year"), "YEAR"),
]
DAYS_PER_MONTH = 30
WEEKS_PER_MONTH = 4

WORK_MODES: List[Tuple[str, Tuple[str, ...]]] = [
    # hybrid first: "semi-présentiel" contains an onsite phrase
    ("HYBRID", ("hybrid", "hybride", "mixte", "semi-présentiel", "semi-presentiel", "semi-remote")),
    ("ONSITE", ("onsite", "on-site", "on site", "sur site", "présentiel", "presentiel", "au bureau", "dans nos locaux")),
    ("REMOTE", ("remote", "full remote", "télétravail", "teletravail", "à distance", "a distance", "distanciel", "home office")),
]

CONTRACT_TYPES: List[Tuple[str, Tuple[str, ...]]] = [
    ("FORFAIT", ("forfait", "au forfait", "prix fixe", "fixed price", "fixed-price")),
    ("REGIE", ("régie", "regie", "time and material", "time & material", "temps passé", "temps passe")),
]

EXPERIENCE_YEARS_RE = re.compile(
    r"(?<![\w.,-])(?P<n>\d+)\s*\+?\s*(?:ans|an|years?|yrs?)\s*(?:d'|de\s+|of\s+)?(?:exp|expérience|experience)",
    re.IGNORECASE,
)

EXPERIENCE_BANDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("0-3", ("junior", "débutant", "debutant", "entry level", "entry-level", "0-3")),
    ("3-7", ("intermédiaire", "intermediaire", "confirmé", "confirme", "mid level", "mid-level", "3-7")),
    ("7-12", ("senior", "sénior", "expérimenté", "experimente", "7-12")),
    ("12+", ("expert", "lead", "architecte", "architect", "principal", "12+")),
]

TITLE_RES: Tuple[Pattern[str], ...] = (
    re.compile(r"(?<!\w)(?:titre|title|intitulé|intitule)\s*:\s*(?P<t>[^,;\n]+)", re.IGNORECASE),
    re.compile(r'"(?P<t>[^"\n]{4,120})"'),
)

# ----------------------------
# Field family extractors
# ----------------------------


def parse_amount(raw: str, thousands: bool = False) -> Optional[float]:
    """
    "7 000" / "7,000" / "7.000" -> 7000 ; "6,5" -> 6.5 ; "1.234,5" -> 1234.5
    A separator followed by exactly three digits is a thousands separator.
    """
    s = raw.strip()
    if re.fullmatch(r"\d{1,3}(?:[ .,]\d{3})+", s):
        s = re.sub(r"[ .,]", "", s)
    elif re.fullmatch(r"\d{1,3}(?:[ .,]\d{3})+[.,]\d+", s):
        head, tail = re.match(r"(.*)[.,](\d+)$", s).groups()
        s = re.sub(r"[ .,]", "", head) + "." + tail
    else:
        s = s.replace(" ", "").replace(",", ".")
    try:
        value = float(s)
    except ValueError:
        return None
    return value * 1000 if thousands else value


def extract_location(text: str, cfg: Settings) -> Tuple[str, str]:
    for city, country, aliases in CITIES:
        if any(contains_phrase(text, a) for a in aliases):
            return city, country
    for country, city, aliases in COUNTRIES:
        if any(contains_phrase(text, a) for a in aliases):
            return city, country
    return cfg.fallback_city, cfg.fallback_country


def extract_amount(text: str) -> Optional[Tuple[float, Optional[str]]]:
    for currency, patterns in AMOUNT_FAMILIES:
        for pat in patterns:
            m = pat.search(text)
            if not m:
                continue
            value = parse_amount(m.group("amount"), thousands=bool(m.group("k")))
            if value is not None:
                return value, currency
    return None


def unit_of(token: str) -> str:
    t = token.lower()
    for prefixes, unit in DURATION_UNITS:
        if any(t.startswith(p) for p in prefixes):
            return unit
    return "MONTH"


def normalize_duration(n: int, unit: str) -> Tuple[int, str]:
    if unit == "DAY":
        return max(1, n // DAYS_PER_MONTH), "MONTH"
    if unit == "WEEK":
        return max(1, n // WEEKS_PER_MONTH), "MONTH"
    return max(1, n), unit


def extract_duration(text: str) -> Optional[Tuple[int, str]]:
    for m in DURATION_RE.finditer(text):
        n = int(m.group("n"))
        unit = unit_of(m.group("unit"))
        if n <= 0:
            continue
        if unit == "YEAR" and EXPERIENCE_LEAD_RE.search(text, 0, m.start()):
            continue
        return normalize_duration(n, unit)
    return None


def band_for_years(years: int) -> str:
    if years < 3:
        return "0-3"
    if years < 7:
        return "3-7"
    if years < 12:
        return "7-12"
    return "12+"


def extract_experience(text: str) -> Optional[str]:
    m = EXPERIENCE_YEARS_RE.search(text)
    if m:
        return band_for_years(int(m.group("n")))
    return first_group_match(text, EXPERIENCE_BANDS)


def extract_title(text: str) -> Optional[str]:
    for pat in TITLE_RES:
        m = pat.search(text)
        if m:
            title = m.group("t").strip(" .:-\"'")
            if len(title) >= 4:
                return title
    return None


# ----------------------------
# Public API
# ----------------------------


def extract(text: str, cfg: Optional[Settings] = None) -> ExtractedRequirements:
    """
    Deterministic free text -> ExtractedRequirements.
    Unresolved fields keep their documented defaults.
    """
    cfg = cfg or default_settings
    cleaned = clean_request(text)

    req = ExtractedRequirements(
        contract_type=cfg.default_contract_type,
        currency=cfg.default_currency,
    )

    match = classify(cleaned)
    req.domain = match.domain
    req.position = match.position
    if match.explicit:
        req.explicit_fields.add("domain")

    role = detect_role(cleaned)
    if role is not None:
        position, role_domain = role
        req.position = position
        req.explicit_fields.add("position")
        if role_domain is not None:
            req.domain = role_domain
            req.explicit_fields.add("domain")

    title = extract_title(cleaned)
    if title:
        req.title = title
        req.explicit_fields.add("title")

    req.city, req.country = extract_location(cleaned, cfg)

    amount = extract_amount(cleaned)
    if amount is not None:
        value, currency = amount
        req.daily_rate = value
        if currency is not None:
            req.currency = currency
    elif req.currency == "DH":
        # reference rates are expressed in DH
        req.daily_rate = get_profile(req.domain).reference_rate

    duration = extract_duration(cleaned)
    if duration is not None:
        req.duration, req.duration_unit = duration

    req.work_mode = first_group_match(cleaned, WORK_MODES) or "REMOTE"
    req.contract_type = first_group_match(cleaned, CONTRACT_TYPES) or cfg.default_contract_type
    req.experience_band = extract_experience(cleaned) or "3-7"

    req.expertises = extract_expertises(cleaned) or list(get_profile(req.domain).default_technologies[:3])
    return req
