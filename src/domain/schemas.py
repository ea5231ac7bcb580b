from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from domain.models import (
    Budget,
    BudgetPeriod,
    Category,
    CategoryType,
    LedgerSnapshot,
    Transaction,
    TransactionType,
    UncategorizedBudgetScope,
)


def coerce_date(value: Any) -> Any:
    """Parse common date spellings; datetimes keep their calendar date as written."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return value

    text = value.strip()
    if not text:
        return value
    # "2024-01-05T23:30:00+00:00" -> "2024-01-05", never shifted into another zone.
    if len(text) > 10 and text[10] in ("T", " "):
        text = text[:10]

    # Canonical format first.
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%m-%d-%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("id", mode="before", check_fields=False)
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class TransactionRecord(_Record):
    id: str
    amount: Decimal = Field(ge=0)
    type: Literal["income", "expense"]
    transaction_date: date
    category_id: Optional[str] = None
    description: Optional[str] = None

    @field_validator("transaction_date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Any:
        return coerce_date(value)

    @field_validator("category_id", "description", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_model(self) -> Transaction:
        return Transaction(
            id=self.id,
            amount=self.amount,
            type=TransactionType(self.type),
            transaction_date=self.transaction_date,
            category_id=self.category_id,
            description=self.description,
        )


class CategoryRecord(_Record):
    id: str
    name: str = Field(min_length=1)
    type: Literal["income", "expense", "both"] = "expense"
    color: Optional[str] = None

    def to_model(self) -> Category:
        return Category(id=self.id, name=self.name, type=CategoryType(self.type), color=self.color)


class BudgetRecord(_Record):
    id: str
    name: str
    amount: Decimal = Field(ge=0)
    period: Literal["weekly", "monthly", "quarterly", "yearly"] = "monthly"
    category_id: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return coerce_date(_blank_to_none(value))

    @field_validator("category_id", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def validate_order(self) -> "BudgetRecord":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self

    def to_model(self) -> Budget:
        return Budget(
            id=self.id,
            name=self.name,
            amount=self.amount,
            period=BudgetPeriod(self.period),
            category_id=self.category_id,
            start_date=self.start_date,
            end_date=self.end_date,
        )


class LedgerSnapshotPayload(BaseModel):
    transactions: List[TransactionRecord] = Field(default_factory=list)
    categories: List[CategoryRecord] = Field(default_factory=list)
    budgets: List[BudgetRecord] = Field(default_factory=list)

    @field_validator("transactions", "categories", "budgets", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_model(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            transactions=tuple(t.to_model() for t in self.transactions),
            categories=tuple(c.to_model() for c in self.categories),
            budgets=tuple(b.to_model() for b in self.budgets),
        )


class DateRange(BaseModel):
    start: date = Field(description="Start date in YYYY-MM-DD format, e.g. 2026-01-31.")
    end: date = Field(description="End date in YYYY-MM-DD format, e.g. 2026-01-31.")

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return coerce_date(value)

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError("date_range.start must be <= date_range.end")
        return self


class TransactionQuery(BaseModel):
    """
    Filters applied while building a snapshot.

    All fields are optional; an empty query returns the whole ledger.
      - source/providers: restrict which registered providers are read
      - date_range: inclusive transaction_date bounds
      - types / category_ids: exact matches
      - min/max amount, query (description substring)
    """

    date_range: Optional[DateRange] = None
    source: Optional[str] = None
    providers: List[str] = Field(default_factory=list)
    types: List[Literal["income", "expense"]] = Field(default_factory=list)
    category_ids: List[str] = Field(default_factory=list)
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    query: Optional[str] = None

    @model_validator(mode="after")
    def validate_amounts(self) -> "TransactionQuery":
        if self.min_amount is not None and self.max_amount is not None and self.min_amount > self.max_amount:
            raise ValueError("min_amount must be <= max_amount")
        return self


class ToolContext(BaseModel):
    user_id: str = "anonymous"
    today: Optional[date] = None
    currency: str = "USD"
    budget_scope: UncategorizedBudgetScope = UncategorizedBudgetScope.ALL_EXPENSES

    def resolved_today(self) -> date:
        return self.today or date.today()


class ToolRequest(BaseModel):
    request_id: str
    tool: str
    args: Dict[str, Any] = Field(default_factory=dict)
    context: ToolContext = Field(default_factory=ToolContext)


class ToolResponse(BaseModel):
    request_id: str
    tool: str
    ok: bool = True
    result: Dict[str, Any] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    context: ToolContext


class PlanCall(BaseModel):
    id: str
    tool: str
    args: Dict[str, Any] = Field(default_factory=dict)
    purpose: str


class PagePlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    schema_version: str = Field(default="pocketledger.plan.v1", alias="schema")
    page: str
    calls: List[PlanCall] = Field(default_factory=list)


class PageRequest(BaseModel):
    request_id: str
    user_id: str = "anonymous"
    page: str = Field(min_length=1)
    options: Dict[str, Any] = Field(default_factory=dict)
    filters: Optional[TransactionQuery] = None
    context: ToolContext = Field(default_factory=ToolContext)


class SnapshotCounts(BaseModel):
    transactions: int = 0
    categories: int = 0
    budgets: int = 0


class PageResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    schema_version: str = Field(default="pocketledger.page.v1", alias="schema")
    request_id: str
    page: str
    counts: SnapshotCounts = Field(default_factory=SnapshotCounts)
    views: List[ToolResponse] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(view.ok for view in self.views)

    def view(self, tool: str) -> ToolResponse:
        for response in self.views:
            if response.tool == tool:
                return response
        raise KeyError(f"View not in page result: {tool}")


class InlinePageRequest(BaseModel):
    """Body for rendering a page against a caller-supplied snapshot."""

    request_id: str = "req_inline"
    user_id: str = "anonymous"
    snapshot: LedgerSnapshotPayload = Field(default_factory=LedgerSnapshotPayload)
    options: Dict[str, Any] = Field(default_factory=dict)
    today: Optional[date] = None
