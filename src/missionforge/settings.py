from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

LOCAL_FALLBACK = "local-fallback"


def _csv(value: str) -> Tuple[str, ...]:
    return tuple(p.strip().lower() for p in value.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    """
    Read-only runtime configuration shared by every request.
    Provider credentials live in PROVIDERS (see llm/providers/catalog.py).
    """

    default_provider: str = "gemini"
    known_providers: Tuple[str, ...] = field(
        default_factory=lambda: ("gemini", "mistral", "deepseek", "openai", "llama", "grok")
    )

    # locale used when the request names no place
    fallback_country: str = "Morocco"
    fallback_city: str = "Rabat"

    default_contract_type: str = "REGIE"
    default_currency: str = "DH"

    # validator/enhancer floors
    min_expertises: int = 4
    max_expertises: int = 8
    min_title_length: int = 10
    min_description_length: int = 120

    provider_timeout: float = 30.0

    log_level: str = "INFO"
    log_dir: str = "storage/logs"
    db_path: str = "data/db/work_orders.db"

    @classmethod
    def from_env(cls) -> "Settings":
        base = cls()
        return cls(
            default_provider=os.getenv("DEFAULT_PROVIDER", base.default_provider).strip().lower(),
            known_providers=_csv(os.getenv("KNOWN_PROVIDERS", ",".join(base.known_providers))),
            fallback_country=os.getenv("FALLBACK_COUNTRY", base.fallback_country),
            fallback_city=os.getenv("FALLBACK_CITY", base.fallback_city),
            default_contract_type=os.getenv("DEFAULT_CONTRACT_TYPE", base.default_contract_type).upper(),
            default_currency=os.getenv("DEFAULT_CURRENCY", base.default_currency).upper(),
            min_expertises=int(os.getenv("MIN_EXPERTISES", base.min_expertises)),
            max_expertises=int(os.getenv("MAX_EXPERTISES", base.max_expertises)),
            min_title_length=int(os.getenv("MIN_TITLE_LENGTH", base.min_title_length)),
            min_description_length=int(os.getenv("MIN_DESCRIPTION_LENGTH", base.min_description_length)),
            provider_timeout=float(os.getenv("PROVIDER_TIMEOUT", base.provider_timeout)),
            log_level=os.getenv("LOG_LEVEL", base.log_level),
            log_dir=os.getenv("LOG_DIR", base.log_dir),
            db_path=os.getenv("DB_PATH", base.db_path),
        )

    def validate(self) -> None:
        issues = []
        if self.default_contract_type not in ("FORFAIT", "REGIE"):
            issues.append(f"DEFAULT_CONTRACT_TYPE must be FORFAIT or REGIE, got {self.default_contract_type!r}")
        if self.default_currency not in ("DH", "EUR", "USD"):
            issues.append(f"DEFAULT_CURRENCY must be DH, EUR or USD, got {self.default_currency!r}")
        if self.min_expertises < 1:
            issues.append("MIN_EXPERTISES must be >= 1")
        if self.max_expertises < self.min_expertises:
            issues.append("MAX_EXPERTISES must be >= MIN_EXPERTISES")
        if self.provider_timeout <= 0:
            issues.append("PROVIDER_TIMEOUT must be > 0")
        if issues:
            raise ValueError("Invalid configuration: " + "; ".join(issues))


settings = Settings.from_env()
