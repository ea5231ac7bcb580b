"""Runtime configuration read from the environment (and `.env` via python-dotenv in main.py)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from domain.models import UncategorizedBudgetScope
from infrastructure.ledger_providers.json_provider import JsonFileProvider
from infrastructure.ledger_providers.provider import Provider
from infrastructure.ledger_providers.rest_provider import RestLedgerProvider
from infrastructure.ledger_source import LedgerSource

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_DATA_FILE = REPO_ROOT / "data" / "sample_ledger.json"
SOURCES = ("json", "rest")


@dataclass(frozen=True)
class Settings:
    source: str = "json"
    data_file: Path = DEFAULT_DATA_FILE
    api_url: str | None = None
    api_key: str | None = None
    access_token: str | None = None
    timeout_seconds: float = 30.0
    months_window: int = 6
    trend_days: int = 30
    trend_points: int = 14
    recent_limit: int = 10
    budget_scope: UncategorizedBudgetScope = UncategorizedBudgetScope.ALL_EXPENSES
    currency: str = "USD"


def _int_env(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if env is None else env

    source = env.get("POCKETLEDGER_SOURCE", "json").strip().lower()
    if source not in SOURCES:
        raise ValueError(f"POCKETLEDGER_SOURCE must be one of {', '.join(SOURCES)}, got {source!r}")

    raw_scope = env.get("POCKETLEDGER_BUDGET_SCOPE", UncategorizedBudgetScope.ALL_EXPENSES.value)
    try:
        scope = UncategorizedBudgetScope(raw_scope.strip().lower())
    except ValueError:
        raise ValueError(f"Unsupported POCKETLEDGER_BUDGET_SCOPE: {raw_scope!r}") from None

    data_file = Path(env.get("POCKETLEDGER_DATA_FILE") or DEFAULT_DATA_FILE)
    if not data_file.is_absolute():
        data_file = REPO_ROOT / data_file

    try:
        timeout = float(env.get("POCKETLEDGER_TIMEOUT_SECONDS") or 30)
    except ValueError:
        raise ValueError("POCKETLEDGER_TIMEOUT_SECONDS must be a number") from None

    return Settings(
        source=source,
        data_file=data_file,
        api_url=env.get("POCKETLEDGER_API_URL") or None,
        api_key=env.get("POCKETLEDGER_API_KEY") or None,
        access_token=env.get("POCKETLEDGER_ACCESS_TOKEN") or None,
        timeout_seconds=timeout,
        months_window=_int_env(env, "POCKETLEDGER_MONTHS_WINDOW", 6, minimum=1),
        trend_days=_int_env(env, "POCKETLEDGER_TREND_DAYS", 30),
        trend_points=_int_env(env, "POCKETLEDGER_TREND_POINTS", 14, minimum=1),
        recent_limit=_int_env(env, "POCKETLEDGER_RECENT_LIMIT", 10, minimum=1),
        budget_scope=scope,
        currency=(env.get("POCKETLEDGER_CURRENCY") or "USD").upper(),
    )


def build_provider(settings: Settings) -> Provider:
    if settings.source == "rest":
        if not settings.api_url or not settings.api_key:
            raise ValueError("POCKETLEDGER_API_URL and POCKETLEDGER_API_KEY are required for the rest source")
        return RestLedgerProvider(
            base_url=settings.api_url,
            api_key=settings.api_key,
            access_token=settings.access_token,
            timeout_seconds=settings.timeout_seconds,
        )
    return JsonFileProvider(settings.data_file)


def build_ledger_source(settings: Settings) -> LedgerSource:
    return LedgerSource(providers=[build_provider(settings)])
