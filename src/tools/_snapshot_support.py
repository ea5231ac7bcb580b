from __future__ import annotations

from decimal import Decimal
from typing import Any

from domain.aggregation import resolve_category_name
from domain.models import Transaction


class ArgumentError(ValueError):
    pass


def money(value: Decimal) -> float:
    return round(float(value), 2)


def int_arg(args: dict[str, Any], key: str, default: int, minimum: int = 0) -> int:
    raw = args.get(key)
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool):
        raise ArgumentError(f"{key} must be an integer")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ArgumentError(f"{key} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ArgumentError(f"{key} must be >= {minimum}")
    return value


def bool_arg(args: dict[str, Any], key: str, default: bool = False) -> bool:
    raw = args.get(key)
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off", ""):
        return False
    raise ArgumentError(f"{key} must be a boolean, got {raw!r}")


def str_arg(args: dict[str, Any], key: str) -> str | None:
    raw = args.get(key)
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def serialize_transaction(txn: Transaction, names: dict[str, str]) -> dict[str, Any]:
    return {
        "id": txn.id,
        "transaction_date": txn.transaction_date.isoformat(),
        "type": txn.type.value,
        "amount": money(txn.amount),
        "category_id": txn.category_id,
        "category": resolve_category_name(txn.category_id, names),
        "description": txn.description,
    }
