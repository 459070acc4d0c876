import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_LOG_DIR.mkdir(exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "wayplanner.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("anthropic").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from app.data.destinations import DATA_VERSION
from app.routers import insights, plans
from app.services.cache_service import cache_service
from app.services.generation_orchestrator import generation_orchestrator
from app.services.llm_client import llm_client
from app.services.weather_client import weather_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not llm_client.configured:
        logger.warning("No LLM API key configured — every plan will use the offline generator")
    logger.info(f"Destination data version {DATA_VERSION}")

    yield

    # Shutdown
    await generation_orchestrator.shutdown()
    await weather_client.close()
    await cache_service.close()


app = FastAPI(
    title="Wayplanner",
    description="Itinerary generation and content transformation service",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(plans.router, prefix="/api", tags=["plans"])
app.include_router(insights.router, prefix="/api", tags=["insights"])


@app.get("/api/health")
async def health_check():
    return {
        "status": "ok",
        "service": "wayplanner",
        "llm_configured": llm_client.configured,
        "data_version": DATA_VERSION,
        "generation": generation_orchestrator.status(),
    }
