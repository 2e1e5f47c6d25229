from __future__ import annotations

from typing import Any, Dict

import httpx

from missionforge.errors import ProviderMalformed
from missionforge.llm.providers.base import SYSTEM_PROMPT, BaseProvider


def _get_candidate_text(resp: Dict[str, Any]) -> str:
    candidates = resp.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        raise ProviderMalformed("Response has no candidates")
    content = candidates[0].get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    texts = [p.get("text") for p in parts if isinstance(p, dict)]
    return "".join(t for t in texts if isinstance(t, str))


class GeminiProvider(BaseProvider):
    """POST {base}/models/{model}:generateContent?key=..., JSON mime type requested."""

    async def _generate(self, client: httpx.AsyncClient, prompt: str) -> str:
        url = f"{self.cfg.base_url}/models/{self.cfg.model}:generateContent"
        payload: Dict[str, Any] = {
            "contents": [{"parts": [{"text": f"{SYSTEM_PROMPT}\n\n{prompt}"}]}],
            "generationConfig": {
                "temperature": self.cfg.temperature,
                "maxOutputTokens": self.cfg.max_tokens,
                "responseMimeType": "application/json",
            },
        }
        resp = await self._post_json(client, url, payload, params={"key": self.cfg.api_key})
        return _get_candidate_text(resp)
