"""Dashboard data API: live sources merged over the resolved baseline."""
from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from clawdash import config
from clawdash.observability import start_span
from clawdash.services.baseline import FallbackTier, default_tiers, load_placeholder, resolve_baseline
from clawdash.services.snapshot_assembler import SnapshotAssembler, build_default_assembler

logger = logging.getLogger("clawdash.dashboard")

dashboard_router = APIRouter(prefix="/api", tags=["dashboard"])


def _get_assembler(request: Request) -> SnapshotAssembler:
    assembler = getattr(request.app.state, "snapshot_assembler", None)
    if assembler is None:
        policy = getattr(request.app.state, "policy", None) or config.load_policy()
        assembler = build_default_assembler(policy)
        request.app.state.snapshot_assembler = assembler
    return assembler


def _get_tiers(request: Request) -> list[FallbackTier]:
    tiers = getattr(request.app.state, "baseline_tiers", None)
    return tiers if tiers is not None else default_tiers()


@dashboard_router.get("/dashboard-data")
async def get_dashboard_data(request: Request):
    """Always 200; the body is at worst the placeholder snapshot."""
    with start_span("clawdash.dashboard_data"):
        try:
            tier, baseline = await asyncio.to_thread(resolve_baseline, _get_tiers(request))
            logger.info("Baseline resolved from %s tier", tier)
            snapshot = await _get_assembler(request).assemble(baseline)
            # Rendering is strict JSON; non-finite floats fail here, not in the ASGI layer.
            return JSONResponse(content=snapshot.to_payload())
        except Exception:
            logger.exception("Dashboard data request failed, serving placeholder")
            return JSONResponse(content=load_placeholder().to_payload())
