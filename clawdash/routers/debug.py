"""Debug API for checking which snapshot files the dashboard can see."""
from __future__ import annotations

import asyncio

from fastapi import APIRouter

from clawdash.models import DataStatusReport
from clawdash.services.data_status import build_data_status

debug_router = APIRouter(prefix="/api/debug", tags=["debug"])


@debug_router.get("/data-status", response_model=DataStatusReport)
async def get_data_status():
    return await asyncio.to_thread(build_data_status)
