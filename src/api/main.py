"""FastAPI application entry point."""

import os
import sys
import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Must run before anything reads the environment
load_dotenv()

# main.py is at <root>/src/api/main.py; src is two levels up
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from api.errors import install_error_handlers
from api.routes import auth, health, users
from utils.logging import setup_structured_logging
from utils.settings import cors_config, get_settings
from adapter.mongodb.connection import get_mongodb_client, get_database_name
from adapter.mongodb.indexes import ensure_all_indexes

logger = logging.getLogger(__name__)

# Read version from pyproject.toml (single source of truth)
_project_root = _src_path.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "Storefront Admin API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: validate settings, configure logging, ensure indexes."""
    # Fails fast when JWT_SECRET_KEY is missing
    settings = get_settings()
    # Error handlers clear cookies with the same attributes the routes set them with
    app.state.settings = settings
    setup_structured_logging(settings.log_level)
    logger.info("Starting service", extra={"environment": settings.environment, "version": VERSION})

    client = get_mongodb_client()
    if client:
        db = client[get_database_name()]
        if ensure_all_indexes(db):
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")
    else:
        logger.warning("MongoDB unavailable, skipping index creation")

    yield


app = FastAPI(
    title=SERVICE_NAME,
    description="Admin dashboard backend: session-based auth, device sessions, customer management",
    version=VERSION,
    lifespan=lifespan,
)

# Wildcard origin cannot carry credentials; list origins explicitly in production
cors_origins, allow_credentials = cors_config()
if cors_origins == "*":
    logger.warning(
        "CORS configured with wildcard origin ('*'). "
        "Cookie auth needs CORS_ORIGINS set to specific domains (e.g., 'https://admin.example.com')"
    )
else:
    logger.info(f"CORS configured with specific origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    # Application logs go through structured logging; uvicorn's access log is noise
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        access_log=False
    )
