from fastapi import FastAPI
import logging
import os

from app.api.routes import router
from app.assets.singleton import init_spaces

app = FastAPI(title="pathway-moves", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=os.environ.get("PATHWAY_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    init_spaces()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "pathway-moves", "version": "0.1.0"}
