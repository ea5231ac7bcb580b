from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date, datetime
from pathlib import Path

from dotenv import load_dotenv

from application.engine import LedgerEngine
from application.planner import PAGES, PagePlanner
from application.tool_executor import ToolExecutor
from domain.schemas import PageRequest, ToolContext
from infrastructure.config import Settings, build_ledger_source, load_settings
from infrastructure.ledger_providers.json_provider import JsonFileProvider
from infrastructure.ledger_providers.provider import ProviderError
from infrastructure.ledger_source import LedgerSource
from interface.formatting import render_text
from tools.registry import registry


def build_engine(settings: Settings | None = None, source: LedgerSource | None = None) -> LedgerEngine:
    import tools  # noqa: F401

    settings = settings or load_settings()
    return LedgerEngine(
        planner=PagePlanner(registry=registry, settings=settings),
        tool_executor=ToolExecutor(registry),
        source=source or build_ledger_source(settings),
    )


def build_context(settings: Settings, today: date | None = None, user_id: str = "anonymous") -> ToolContext:
    return ToolContext(user_id=user_id, today=today, currency=settings.currency, budget_scope=settings.budget_scope)


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pocketledger", description="Render a PocketLedger page from a ledger snapshot.")
    parser.add_argument("page", choices=sorted(PAGES), help="page to render")
    parser.add_argument("--snapshot", type=Path, help="JSON snapshot file (overrides the configured source)")
    parser.add_argument("--today", type=_parse_day, help="reference date for the balance trend (YYYY-MM-DD)")
    parser.add_argument("--months", type=int, dest="months_window", help="months shown in monthly series")
    parser.add_argument("--query", help="search text for the transactions page")
    parser.add_argument("--type", choices=("all", "income", "expense"), help="transaction type filter")
    parser.add_argument("--seed-from-history", action="store_true", default=None,
                        help="start the balance trend from the all-time balance")
    parser.add_argument("--text", action="store_true", help="print a plain-text summary instead of JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    source = LedgerSource(providers=[JsonFileProvider(args.snapshot)]) if args.snapshot else None
    engine = build_engine(settings, source=source)

    options = {
        "months_window": args.months_window,
        "query": args.query,
        "type": args.type,
        "seed_from_history": args.seed_from_history,
    }
    request = PageRequest(
        request_id=f"req_cli_{datetime.now().strftime('%Y%m%d%H%M%S')}",
        user_id="u_cli",
        page=args.page,
        options={k: v for k, v in options.items() if v is not None},
        context=build_context(settings, today=args.today, user_id="u_cli"),
    )
    try:
        result = engine.run(request)
    except ProviderError as exc:
        print(f"[pocketledger] error: {exc}", file=sys.stderr)
        return 1

    if args.text:
        print(render_text(result, currency=settings.currency))
    else:
        print(result.model_dump_json(indent=2, by_alias=True))
    return 0 if result.ok else 2


def run() -> None:
    load_dotenv()
    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    raise SystemExit(main())


if __name__ == "__main__":
    run()
