import argparse
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

import sys
from pathlib import Path

import structlog

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config, CONFIG_DIR
from logging_setup import configure_logging
from routes import decks, cards, study, stats, search, backups  # Import routers
from utils.sm2 import InvalidQualityError

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: config, logging, DB
    config = load_config()
    configure_logging(config["logging"]["level"], config["logging"]["json"])
    init_db()
    yield


app = FastAPI(
    title="FlipDeck",
    description="Local-first flashcards with spaced-repetition review",
    lifespan=lifespan,
)

# Include routers
app.include_router(decks.router, prefix="/decks", tags=["decks"])
app.include_router(cards.router, tags=["cards"])  # /decks/{deck_id}/cards and /cards/{card_id}
app.include_router(study.router, prefix="/study", tags=["study"])
app.include_router(stats.router, prefix="/stats", tags=["stats"])
app.include_router(search.router, prefix="/search", tags=["search"])
app.include_router(backups.router, prefix="/admin", tags=["admin"])


@app.exception_handler(InvalidQualityError)
async def invalid_quality_handler(request: Request, exc: InvalidQualityError):
    logger.warning("invalid_quality", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/")
async def home():
    return {"app": "FlipDeck", "docs": "/docs"}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="FlipDeck App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    args = parser.parse_args()
    config = load_config()  # Ensures config is copied if missing
    configure_logging(config["logging"]["level"], config["logging"]["json"])
    if args.init:
        init_db()
        logger.info("initialized", config_dir=str(CONFIG_DIR))
        sys.exit(0)
    uvicorn.run(
        "main:app",
        host=config["server"]["host"],
        port=config["server"]["port"],
        reload=args.dev,
        log_level=config["logging"]["level"].lower(),
    )
