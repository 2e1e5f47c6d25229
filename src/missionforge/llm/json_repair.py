from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple


def strip_code_fences(text: str) -> str:
    t = (text or "").strip()
    if t.startswith("```"):
        lines = t.splitlines()
        lines = lines[1:] if lines else lines
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        t = "\n".join(lines).strip()
    return t


def _scan(text: str, start: int) -> Tuple[Optional[int], List[str]]:
    """
    Walk brackets from text[start] ("{"), ignoring anything inside strings.
    Returns (end index of the balanced object or None, still-open stack).
    """
    stack: List[str] = []
    in_str = False
    esc = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
            continue

        if ch == '"':
            in_str = True
            continue

        if ch in "{[":
            stack.append(ch)
        elif ch in "}]":
            if stack:
                top = stack[-1]
                if (top == "{" and ch == "}") or (top == "[" and ch == "]"):
                    stack.pop()
            if not stack:
                return i + 1, stack

    if in_str:
        stack.append('"')
    return None, stack


def first_balanced_object(text: str) -> Optional[str]:
    """
    The first top-level {...} block in text, prose before and after dropped.
    None when no "{" opens or the object never closes.
    """
    t = text or ""
    start = t.find("{")
    if start == -1:
        return None
    end, _ = _scan(t, start)
    if end is None:
        return None
    return t[start:end]


def repair_brackets(text: str, max_append: int = 256) -> str:
    """
    Best-effort for truncated output: keep from the first "{" and close
    whatever is still open (an unterminated string first, then brackets).
    """
    t = strip_code_fences(text)
    start = t.find("{")
    if start == -1:
        return t
    t = t[start:].rstrip().rstrip(",")
    _, stack = _scan(t, 0)

    closes = []
    for opener in reversed(stack):
        if opener == '"':
            closes.append('"')
        else:
            closes.append("}" if opener == "{" else "]")
    if closes:
        t = t + "".join(closes)[:max_append]
    return t.strip()


def parse_json_object(text: str) -> Tuple[Optional[Dict[str, Any]], bool, str]:
    """
    Returns: (obj_or_none, repaired_flag, used_text)
    - obj_or_none: dict if a JSON object could be read; else None
    - repaired_flag: True if the input had to be cut or patched
    - used_text: the string handed to json.loads on the final attempt
    """
    raw = strip_code_fences(text)

    try:
        obj = json.loads(raw)
        return (obj if isinstance(obj, dict) else None, False, raw)
    except json.JSONDecodeError:
        pass

    # prose around the object
    embedded = first_balanced_object(raw)
    if embedded is not None:
        try:
            obj = json.loads(embedded)
            return (obj if isinstance(obj, dict) else None, True, embedded)
        except json.JSONDecodeError:
            pass

    # truncated output
    repaired = repair_brackets(raw)
    try:
        obj = json.loads(repaired)
        return (obj if isinstance(obj, dict) else None, True, repaired)
    except json.JSONDecodeError:
        return (None, True, repaired)
