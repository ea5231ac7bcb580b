from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request

from application.planner import PAGES
from domain.schemas import InlinePageRequest, PageRequest
from infrastructure.config import load_settings
from infrastructure.ledger_providers.provider import ProviderError
from interface.cli import build_context, build_engine
from tools.registry import registry

logger = logging.getLogger(__name__)

app = FastAPI(title="PocketLedger API")
settings = load_settings()
engine = build_engine(settings)

RESERVED_PARAMS = {"today", "request_id", "user_id"}


def _render(page: str, request: PageRequest, snapshot=None) -> dict[str, Any]:
    if page not in PAGES:
        raise HTTPException(status_code=404, detail=f"Unknown page: {page}")
    try:
        result = engine.run(request, snapshot=snapshot)
    except ProviderError as exc:
        logger.warning("Page render failed request_id=%s page=%s: %s", request.request_id, page, exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return result.model_dump(mode="json", by_alias=True)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/views")
def list_views() -> list[dict[str, Any]]:
    return [
        {"name": spec.name, "description": spec.description, "args_schema": spec.args_schema}
        for spec in registry.list_specs()
    ]


@app.get("/pages")
def list_pages() -> dict[str, list[str]]:
    return {page: [slot.tool for slot in slots] for page, slots in PAGES.items()}


@app.get("/pages/{page}")
def render_page(
    page: str,
    request: Request,
    today: Optional[date] = None,
    request_id: str = "req_api",
    user_id: str = "anonymous",
) -> dict[str, Any]:
    options = {k: v for k, v in request.query_params.items() if k not in RESERVED_PARAMS}
    page_request = PageRequest(
        request_id=request_id,
        user_id=user_id,
        page=page,
        options=options,
        context=build_context(settings, today=today, user_id=user_id),
    )
    return _render(page, page_request)


@app.post("/pages/{page}")
def render_page_inline(page: str, body: InlinePageRequest) -> dict[str, Any]:
    page_request = PageRequest(
        request_id=body.request_id,
        user_id=body.user_id,
        page=page,
        options=body.options,
        context=build_context(settings, today=body.today, user_id=body.user_id),
    )
    return _render(page, page_request, snapshot=body.snapshot.to_model())
