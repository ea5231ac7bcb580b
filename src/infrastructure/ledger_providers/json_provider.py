from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from domain.models import Budget, Category, Transaction
from domain.schemas import LedgerSnapshotPayload, TransactionQuery
from infrastructure.ledger_providers.provider import Provider, ProviderError

logger = logging.getLogger(__name__)


class JsonFileProvider(Provider):
    """Reads a ledger snapshot file with `transactions`, `categories` and `budgets` arrays."""

    name = "json"

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._cached: tuple[tuple[int, int], LedgerSnapshotPayload] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def fetch_transactions(self, _filter: TransactionQuery) -> list[Transaction]:
        return [record.to_model() for record in self._load().transactions]

    def fetch_categories(self) -> list[Category]:
        return [record.to_model() for record in self._load().categories]

    def fetch_budgets(self) -> list[Budget]:
        return [record.to_model() for record in self._load().budgets]

    def _load(self) -> LedgerSnapshotPayload:
        # Reuse the parsed payload until the file mtime or size changes.
        try:
            stat = self._path.stat()
            version = (stat.st_mtime_ns, stat.st_size)
            if self._cached is not None and self._cached[0] == version:
                return self._cached[1]
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ProviderError(f"Unable to read ledger file {self._path}: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProviderError(f"Ledger file {self._path} is not valid JSON: {exc}") from exc

        try:
            payload = LedgerSnapshotPayload.model_validate(data)
        except ValidationError as exc:
            raise ProviderError(f"Ledger file {self._path} did not match the snapshot schema: {exc}") from exc

        logger.debug(
            "JsonFileProvider loaded path=%s transactions=%d categories=%d budgets=%d",
            self._path,
            len(payload.transactions),
            len(payload.categories),
            len(payload.budgets),
        )
        self._cached = (version, payload)
        return payload
