from __future__ import annotations

import logging
import time

from application.planner import PagePlanner
from application.tool_executor import ToolExecutor
from domain.models import LedgerSnapshot
from domain.schemas import PageRequest, PageResult, SnapshotCounts
from infrastructure.ledger_source import LedgerSource

logger = logging.getLogger(__name__)


class LedgerEngine:
    """Plans a page, takes one ledger snapshot and renders every view against it."""

    def __init__(
        self,
        planner: PagePlanner,
        tool_executor: ToolExecutor,
        source: LedgerSource,
    ):
        self._planner = planner
        self._tool_executor = tool_executor
        self._source = source

    def run(self, request: PageRequest, snapshot: LedgerSnapshot | None = None) -> PageResult:
        logger.info("Engine run start request_id=%s user_id=%s page=%s", request.request_id, request.user_id, request.page)
        t0 = time.perf_counter()

        plan = self._planner.plan(request)

        if snapshot is None:
            t = time.perf_counter()
            snapshot = self._source.snapshot(request.filters)
            logger.info("Snapshot fetched in %.2fs transactions=%d", time.perf_counter() - t, len(snapshot.transactions))

        t = time.perf_counter()
        views = self._tool_executor.run_calls(plan, request, snapshot)
        logger.info("View execution complete in %.3fs views=%d", time.perf_counter() - t, len(views))

        logger.info("Engine run complete in %.2fs", time.perf_counter() - t0)
        return PageResult(
            request_id=request.request_id,
            page=request.page,
            counts=SnapshotCounts(
                transactions=len(snapshot.transactions),
                categories=len(snapshot.categories),
                budgets=len(snapshot.budgets),
            ),
            views=views,
        )
