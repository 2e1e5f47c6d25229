from __future__ import annotations

from typing import Dict, Optional

import httpx
from loguru import logger

from missionforge.llm.providers.base import BaseProvider
from missionforge.llm.providers.catalog import resolve
from missionforge.llm.providers.gemini_client import GeminiProvider
from missionforge.llm.providers.openai_compat_client import OpenAICompatProvider
from missionforge.settings import Settings

ADAPTERS = {
    "openai_compat": OpenAICompatProvider,
    "gemini": GeminiProvider,
}


def build_providers(
    cfg: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, BaseProvider]:
    """
    One adapter per known provider id, in declared order.
    Ids with no catalog entry are logged and left out.
    """
    providers: Dict[str, BaseProvider] = {}
    for name in cfg.known_providers:
        resolved = resolve(name, default_timeout=cfg.provider_timeout)
        if resolved is None:
            logger.warning("Unknown provider {!r} in KNOWN_PROVIDERS, skipped", name)
            continue
        providers[resolved.name] = ADAPTERS[resolved.kind](resolved, transport=transport)
        if not resolved.api_key:
            logger.info("{} has no {}; it will report unavailable", resolved.name, resolved.api_key_env)
    return providers
