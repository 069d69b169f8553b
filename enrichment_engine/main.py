# enrichment_engine/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from enrichment_engine.core.config import settings
from enrichment_engine.features.enrichment.router import router as enrichment_router
from enrichment_engine.features.enrichment.service import (
    get_enrichment_service,
    shutdown_enrichment_service,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# Request URLs carry the search API key
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fails startup with EnrichmentDisabledError when no provider is configured
    get_enrichment_service().start()
    logger.info("Profile enrichment engine started")
    yield
    await shutdown_enrichment_service()


app = FastAPI(title="Profile Enrichment Engine", version="1.0.0", lifespan=lifespan)

app.include_router(enrichment_router)


@app.get("/health")
def health_check():
    return {"status": "healthy"}
