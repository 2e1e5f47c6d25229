from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Optional, Pattern, Sequence, Tuple, TypeVar

T = TypeVar("T")


@lru_cache(maxsize=None)
def phrase_pattern(phrase: str) -> Pattern[str]:
    """
    Whole-phrase, case-insensitive matcher.
    Guards are lookarounds rather than \\b so phrases starting or ending
    with punctuation (".net", "c#", "12+", "€") still anchor correctly,
    and inner spaces accept any run of whitespace.
    """
    body = r"\s+".join(re.escape(tok) for tok in phrase.split())
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


def contains_phrase(text: str, phrase: str) -> bool:
    return phrase_pattern(phrase).search(text) is not None


def first_group_match(text: str, groups: Sequence[Tuple[T, Iterable[str]]]) -> Optional[T]:
    """
    Ordered (value, phrases) table: the first group with any phrase present wins.
    """
    for value, phrases in groups:
        if any(contains_phrase(text, p) for p in phrases):
            return value
    return None
