from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from missionforge.db import WorkOrderStore
from missionforge.extractors.field_rules import extract
from missionforge.logger_manager import setup_logger
from missionforge.orch.graph import WorkOrderPipeline
from missionforge.settings import settings

ARTIFACTS_DIR = Path("data/artifacts")


def _write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")


async def main_async(args: argparse.Namespace) -> int:
    settings.validate()
    setup_logger(level=args.log_level)

    text = args.text if args.text is not None else sys.stdin.read()
    if not text.strip():
        print("empty request text", file=sys.stderr)
        return 2

    pipeline = WorkOrderPipeline.from_settings(settings)
    work_order, provider = await pipeline.generate_work_order(text, args.provider)
    payload = work_order.model_dump(mode="json", by_alias=True)

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    print(f"provider: {provider}", file=sys.stderr)

    if args.save:
        store = WorkOrderStore(args.db_path)
        try:
            store.insert(work_order)
        finally:
            store.close()
        print(f"saved {work_order.id} to {args.db_path}", file=sys.stderr)

    if args.out_dir:
        wo_dir = Path(args.out_dir) / work_order.id
        _write_json(wo_dir / "request.json", {"text": text, "preferred_provider": args.provider})
        _write_json(wo_dir / "requirements.json", extract(text, settings).model_dump(mode="json"))
        _write_json(wo_dir / "work_order.json", payload)
        print(f"wrote artifacts to: {wo_dir}", file=sys.stderr)

    return 0


def main() -> None:
    ap = argparse.ArgumentParser(description="Generate one structured work order from free text.")
    ap.add_argument("text", nargs="?", default=None, help="request text (read from stdin when omitted)")
    ap.add_argument("--provider", default=None, help="preferred backend, e.g. mistral")
    ap.add_argument("--save", action="store_true", help="persist the work order in the sqlite store")
    ap.add_argument("--db-path", default=settings.db_path)
    ap.add_argument("--out-dir", default=None, help=f"write artifacts here (e.g. {ARTIFACTS_DIR})")
    ap.add_argument("--log-level", default=settings.log_level)

    args = ap.parse_args()
    raise SystemExit(asyncio.run(main_async(args)))


if __name__ == "__main__":
    main()
