from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from domain.models import LedgerSnapshot
from domain.schemas import ToolRequest, ToolResponse


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_schema: dict[str, Any]


class Tool(ABC):
    """A named view that turns one ledger snapshot into a JSON-ready result."""

    name: str
    description: str = ""

    @abstractmethod
    def run(self, request: ToolRequest, snapshot: LedgerSnapshot) -> ToolResponse:
        raise NotImplementedError

    def spec(self) -> ToolSpec:
        return ToolSpec(name=self.name, description=self.description, args_schema={})

    def respond(self, request: ToolRequest, result: dict[str, Any]) -> ToolResponse:
        return ToolResponse(request_id=request.request_id, tool=self.name, result=result, context=request.context)

    def fail(self, request: ToolRequest, *errors: str) -> ToolResponse:
        return ToolResponse(
            request_id=request.request_id,
            tool=self.name,
            ok=False,
            errors=list(errors),
            context=request.context,
        )
