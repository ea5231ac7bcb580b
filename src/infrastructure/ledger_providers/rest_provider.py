from __future__ import annotations

import json
import logging
import socket
import time
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from pydantic import BaseModel, ValidationError

from domain.models import Budget, Category, Transaction
from domain.schemas import BudgetRecord, CategoryRecord, TransactionQuery, TransactionRecord
from infrastructure.ledger_providers.provider import Provider, ProviderError

logger = logging.getLogger(__name__)


class RestLedgerProvider(Provider):
    """
    Adapter for a PostgREST-style backend exposing `transactions`,
    `transaction_categories` and `budgets` tables.

    Row-level access is enforced by the backend; the access token (or the
    anonymous API key) decides whose ledger is returned.
    """

    name = "rest"

    TRANSACTIONS_TABLE = "transactions"
    CATEGORIES_TABLE = "transaction_categories"
    BUDGETS_TABLE = "budgets"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        if not base_url:
            raise ProviderError("RestLedgerProvider requires a base_url")
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token
        self.timeout_seconds = timeout_seconds

    def fetch_transactions(self, _filter: TransactionQuery) -> list[Transaction]:
        params: list[tuple[str, str]] = [("select", "*"), ("order", "transaction_date.desc")]
        if _filter.date_range is not None:
            params.append(("transaction_date", f"gte.{_filter.date_range.start.isoformat()}"))
            params.append(("transaction_date", f"lte.{_filter.date_range.end.isoformat()}"))
        if _filter.types:
            params.append(("type", f"in.({','.join(_filter.types)})"))
        rows = self._get(self.TRANSACTIONS_TABLE, params)
        return [self._parse(TransactionRecord, row).to_model() for row in rows]

    def fetch_categories(self) -> list[Category]:
        rows = self._get(self.CATEGORIES_TABLE, [("select", "*"), ("order", "name")])
        return [self._parse(CategoryRecord, row).to_model() for row in rows]

    def fetch_budgets(self) -> list[Budget]:
        rows = self._get(self.BUDGETS_TABLE, [("select", "*"), ("order", "created_at.desc")])
        return [self._parse(BudgetRecord, row).to_model() for row in rows]

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token or self._api_key}",
            "Accept": "application/json",
        }

    def _get(self, table: str, params: list[tuple[str, str]]) -> list[dict[str, Any]]:
        url = f"{self.base_url}/{table}?{urllib.parse.urlencode(params)}"
        req = urllib.request.Request(url=url, headers=self._headers(), method="GET")
        started = time.perf_counter()
        logger.info("RestLedgerProvider request start table=%s timeout=%.1fs", table, self.timeout_seconds)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                body = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            logger.warning("RestLedgerProvider table=%s failed with HTTP %s", table, exc.code)
            raise ProviderError(f"Backend returned HTTP {exc.code} for {table}") from exc
        except (socket.timeout, urllib.error.URLError, TimeoutError, json.JSONDecodeError) as exc:
            elapsed = time.perf_counter() - started
            logger.warning("RestLedgerProvider table=%s failed after %.2fs: %s", table, elapsed, exc)
            raise ProviderError(f"Backend request for {table} failed: {exc}") from exc

        if not isinstance(body, list):
            raise ProviderError(f"Expected a list of rows for {table}, got {type(body).__name__}")
        logger.info(
            "RestLedgerProvider request complete table=%s rows=%d in %.2fs",
            table,
            len(body),
            time.perf_counter() - started,
        )
        return [row for row in body if isinstance(row, dict)]

    def _parse(self, schema: type[BaseModel], row: dict[str, Any]) -> Any:
        try:
            return schema.model_validate(row)
        except ValidationError as exc:
            raise ProviderError(f"Row {row.get('id')!r} did not match {schema.__name__}: {exc}") from exc
