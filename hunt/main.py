"""
FastAPI main application
Treasure Hunt - pass key scoring server with live leaderboard

Modular architecture with separated API routers in hunt/api/:
- health.py: Health check and system status
- admin.py: Team management and pass key publishing
- submission.py: Team autosave, drafts, final submission, progress
- leaderboard.py: Ranked leaderboard data
- config.py: Configuration retrieval

All routers access shared state via hunt.state module.
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hunt import __version__, state
from hunt.config import load_config
from hunt.errors import HuntError

# Import all API routers
from hunt.api import health, admin, submission, leaderboard
from hunt.api import config as config_router


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Error kind -> HTTP status
STATUS_BY_KIND = {
    "validation": 400,
    "incomplete": 400,
    "not_found": 404,
    "finalized": 409,
    "storage": 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup: Load settings and rebuild shared state
    try:
        settings = load_config()
        logging.getLogger().setLevel(settings.log_level)
        state.init_state(settings)
        logger.info(f"✅ Server started with {len(state.TEAMS.list_teams())} teams")
    except Exception as e:
        logger.error(f"❌ Failed to start: {e}")
        raise

    yield

    # Shutdown
    logger.info("🛑 Server shutting down")


# Create FastAPI app
app = FastAPI(
    title="Treasure Hunt Server",
    description="Team answer keys, pass key scoring and live leaderboard",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HuntError)
async def hunt_error_handler(request: Request, exc: HuntError):
    status_code = STATUS_BY_KIND.get(exc.kind, 400)
    if status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} | {exc.kind}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} | {exc.kind}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# ==================== INCLUDE ROUTERS ====================

# Health check (GET /)
app.include_router(health.router)

# Admin endpoints (teams, pass key)
app.include_router(admin.router)

# Team endpoints (answers, draft, submit, progress)
app.include_router(submission.router)

# Leaderboard endpoints (GET /api/leaderboard-data)
app.include_router(leaderboard.router)

# Config endpoint (GET /config)
app.include_router(config_router.router)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
