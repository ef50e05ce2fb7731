# reseller_monitor/main.py
from dotenv import load_dotenv

# Cargar variables de entorno desde .env ANTES de cualquier otra cosa
load_dotenv()

import logging

from fastapi import FastAPI

from .core.config import LOG_LEVEL
from .db.engine import create_db_and_tables

# Importaciones de API Routers
from .api import health
from .api.poll import main as poll_main_api
from .api.stats import main as stats_main_api

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - [API] - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Reseller Monitor", version="0.1.0")


# --- Database Initialization ---
@app.on_event("startup")
async def on_startup():
    """Initialize database tables on application startup"""
    await create_db_and_tables()
    logger.info("Database tables initialized")


app.include_router(health.router, prefix="/api")
app.include_router(poll_main_api.router, prefix="/api", tags=["Polling"])
app.include_router(stats_main_api.router, prefix="/api", tags=["Stats"])
