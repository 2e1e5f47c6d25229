from __future__ import annotations

from typing import Any, Dict

import httpx

from missionforge.errors import ProviderMalformed
from missionforge.llm.providers.base import SYSTEM_PROMPT, BaseProvider


def _get_message_text(resp: Dict[str, Any]) -> str:
    """
    Assistant text from an OpenAI-compatible response.
    Some providers return message.content as null or as a list of parts.
    """
    choices = resp.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise ProviderMalformed("Response has no choices")
    choice0 = choices[0]
    msg = choice0.get("message") or {}
    if not isinstance(msg, dict):
        raise ProviderMalformed(f"choices[0].message is not an object: {type(msg).__name__}")

    content = msg.get("content")

    if isinstance(content, str) and content.strip():
        return content

    if isinstance(content, list):
        parts = []
        for p in content:
            if isinstance(p, str):
                parts.append(p)
            elif isinstance(p, dict):
                text = p.get("text") or p.get("content")
                if isinstance(text, str):
                    parts.append(text)
        joined = "".join(parts)
        if joined.strip():
            return joined

    # content null: reasoning models sometimes put the answer elsewhere
    for k in ("reasoning_content", "reasoning", "output_text", "text"):
        v = msg.get(k)
        if isinstance(v, str) and v.strip():
            return v

    v = choice0.get("text")
    if isinstance(v, str):
        return v
    return ""


class OpenAICompatProvider(BaseProvider):
    """POST {base}/chat/completions with bearer auth (Mistral, DeepSeek, OpenAI, Together, xAI)."""

    def chat_url(self) -> str:
        base = self.cfg.base_url
        return f"{base}/chat/completions" if base.endswith("/v1") else f"{base}/v1/chat/completions"

    async def _generate(self, client: httpx.AsyncClient, prompt: str) -> str:
        payload: Dict[str, Any] = {
            "model": self.cfg.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.cfg.temperature,
            "max_tokens": self.cfg.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.cfg.api_key}"}
        resp = await self._post_json(client, self.chat_url(), payload, headers=headers)
        return _get_message_text(resp)
