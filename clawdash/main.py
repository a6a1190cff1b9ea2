"""clawdash FastAPI backend: main application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.staticfiles import StaticFiles

from clawdash import config
from clawdash.auth import require_basic_auth
from clawdash.routers.dashboard import dashboard_router
from clawdash.routers.debug import debug_router
from clawdash.services.baseline import default_tiers
from clawdash.services.snapshot_assembler import build_default_assembler
from clawdash.observability import initialize as initialize_observability, shutdown as shutdown_observability

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("clawdash")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("clawdash backend starting up")
    initialize_observability(app)

    policy = config.load_policy()
    app.state.policy = policy
    app.state.snapshot_assembler = build_default_assembler(policy)
    app.state.baseline_tiers = default_tiers()
    logger.info(
        "openclaw binary %s (%s)",
        config.OPENCLAW_BIN,
        "found" if config.OPENCLAW_BIN.exists() else "missing",
    )

    yield

    logger.info("clawdash backend shutting down")
    shutdown_observability(app)


app = FastAPI(
    title="clawdash API",
    description="Backend API for the OpenClaw operations dashboard",
    version="0.1.0",
    lifespan=lifespan,
    dependencies=[Depends(require_basic_auth)],
)

app.include_router(dashboard_router)
app.include_router(debug_router)

if config.STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=str(config.STATIC_DIR), html=True), name="static")


@app.get("/api/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "openclaw": "available" if config.OPENCLAW_BIN.exists() else "missing",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
