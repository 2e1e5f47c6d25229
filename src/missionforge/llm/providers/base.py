from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import httpx
from loguru import logger
from pydantic import ValidationError

from missionforge.errors import ProviderEmpty, ProviderError, ProviderMalformed, ProviderRejected, ProviderUnavailable
from missionforge.llm.json_repair import parse_json_object
from missionforge.llm.providers.catalog import ResolvedProvider
from missionforge.orch.schema import ProviderResult
from missionforge.schemas.work_order import WorkOrderDraft, new_id, utcnow

SYSTEM_PROMPT = (
    "Tu es un expert en création de missions freelance. "
    "Réponds uniquement en JSON valide, sans commentaires ni texte supplémentaire."
)


class BaseProvider(ABC):
    """
    Base class for all generation backends. Subclasses implement
    _generate(client, prompt) -> str which returns the generated text
    (ideally a single JSON object) and raise ProviderError subclasses.
    """

    def __init__(self, cfg: ResolvedProvider, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.cfg = cfg
        self.name = cfg.name
        # tests inject httpx.MockTransport here
        self.transport = transport

    @abstractmethod
    async def _generate(self, client: httpx.AsyncClient, prompt: str) -> str:
        raise NotImplementedError

    async def generate(self, prompt: str) -> ProviderResult:
        """
        generate -> parse JSON -> validate draft.
        Backend problems come back as a failed ProviderResult; cancellation
        and programming errors propagate.
        """
        raw = ""
        try:
            if not self.cfg.api_key:
                raise ProviderUnavailable(f"Missing {self.cfg.api_key_env}")
            async with httpx.AsyncClient(timeout=self.cfg.timeout, transport=self.transport) as client:
                raw = await self._generate(client, prompt)
            logger.debug("{} generated {} chars", self.name, len(raw))
            draft, repaired = self.parse_draft(raw)
            return ProviderResult.success(self.name, draft, raw_output=raw, repaired=repaired)
        except ProviderError as e:
            return ProviderResult.failed(self.name, e.kind, str(e), raw_output=raw)

    # ---------- HTTP ----------

    async def _post_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        try:
            r = await client.post(url, json=payload, headers=headers, params=params)
        except httpx.TimeoutException as e:
            raise ProviderUnavailable(f"Timeout after {self.cfg.timeout}s") from e
        except httpx.DecodingError as e:
            # body arrived but could not be decoded (bad Content-Encoding etc.)
            raise ProviderMalformed(f"Undecodable response body: {e}") from e
        except httpx.RequestError as e:
            raise ProviderUnavailable(f"{type(e).__name__}: {e}") from e

        if not r.is_success:
            # body usually carries the backend's error message
            raise ProviderRejected(f"HTTP {r.status_code}: {r.text[:300]}")

        try:
            data = r.json()
        except ValueError as e:
            raise ProviderMalformed(f"Undecodable response envelope: {e}") from e
        if not isinstance(data, dict):
            raise ProviderMalformed(f"Response envelope is not an object: {type(data).__name__}")
        logger.debug("{} envelope: {}", self.name, data)
        return data

    # ---------- JSON -> draft ----------

    def parse_draft(self, text: str) -> Tuple[WorkOrderDraft, bool]:
        if not (text or "").strip():
            raise ProviderEmpty("Backend returned no text")

        obj, repaired, _ = parse_json_object(text)
        if obj is None:
            raise ProviderMalformed("Generated text holds no JSON object")

        try:
            draft = WorkOrderDraft.model_validate(obj)
        except ValidationError as e:
            raise ProviderMalformed(f"Draft schema mismatch: {e.error_count()} error(s)") from e

        if not draft.title or not draft.description:
            raise ProviderMalformed("Draft is missing title or description")

        # identity is ours, whatever the backend wrote
        draft = draft.model_copy(update={"id": new_id(), "created_at": utcnow()})
        return draft, repaired
