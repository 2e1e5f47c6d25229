from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Literal, Optional

ProviderKind = Literal["openai_compat", "gemini"]


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    kind: ProviderKind
    base_url: str          # e.g. https://api.mistral.ai/v1 (no trailing /chat/completions)
    api_key_env: str       # env var name
    default_model: str
    temperature: float = 0.7
    max_tokens: int = 2000


@dataclass(frozen=True)
class ResolvedProvider:
    """ProviderConfig with environment overrides applied."""
    name: str
    kind: ProviderKind
    base_url: str
    api_key: str
    api_key_env: str
    model: str
    timeout: float
    temperature: float
    max_tokens: int


PROVIDERS: Dict[str, ProviderConfig] = {
    "gemini": ProviderConfig(
        name="gemini",
        kind="gemini",
        base_url="https://generativelanguage.googleapis.com/v1beta",
        api_key_env="GEMINI_API_KEY",
        default_model="gemini-1.5-flash",
    ),
    "mistral": ProviderConfig(
        name="mistral",
        kind="openai_compat",
        base_url="https://api.mistral.ai/v1",
        api_key_env="MISTRAL_API_KEY",
        default_model="mistral-small-2503",
    ),
    "deepseek": ProviderConfig(
        name="deepseek",
        kind="openai_compat",
        base_url="https://api.deepseek.com/v1",
        api_key_env="DEEPSEEK_API_KEY",
        default_model="deepseek-chat",
    ),
    "openai": ProviderConfig(
        name="openai",
        kind="openai_compat",
        base_url="https://api.openai.com/v1",
        api_key_env="OPENAI_API_KEY",
        default_model="gpt-4o-mini",
    ),
    "llama": ProviderConfig(
        name="llama",
        kind="openai_compat",
        base_url="https://api.together.xyz/v1",
        api_key_env="TOGETHER_API_KEY",
        default_model="meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo",
    ),
    "grok": ProviderConfig(
        name="grok",
        kind="openai_compat",
        base_url="https://api.x.ai/v1",
        api_key_env="XAI_API_KEY",
        default_model="grok-3",
    ),
}


def resolve(name: str, default_timeout: float = 30.0) -> Optional[ResolvedProvider]:
    """
    Apply {NAME}_BASE_URL / {NAME}_MODEL / {NAME}_TIMEOUT overrides.
    None for a provider id that is not catalogued.
    A missing API key is not an error here; the adapter reports it per call.
    """
    cfg = PROVIDERS.get(name.strip().lower())
    if cfg is None:
        return None
    prefix = cfg.name.upper()
    return ResolvedProvider(
        name=cfg.name,
        kind=cfg.kind,
        base_url=os.environ.get(f"{prefix}_BASE_URL", cfg.base_url).rstrip("/"),
        api_key=os.environ.get(cfg.api_key_env, "").strip(),
        api_key_env=cfg.api_key_env,
        model=os.environ.get(f"{prefix}_MODEL", cfg.default_model),
        timeout=float(os.environ.get(f"{prefix}_TIMEOUT", default_timeout)),
        temperature=cfg.temperature,
        max_tokens=cfg.max_tokens,
    )
