from contextlib import asynccontextmanager
import logging

from dotenv import load_dotenv
from fastapi import FastAPI

from credit_risk.config import get_settings
from credit_risk.core.exceptions import ModelStructureError
from credit_risk.logging_config import configure_logging

# IMPORT ROUTERS
from credit_risk.routers.health import router as health_router
from credit_risk.routers.scoring import model_structure_exception_handler
from credit_risk.routers.scoring import router as scoring_router

load_dotenv()

settings = get_settings()
configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

logger = logging.getLogger(__name__)


# SWAGGER UI - tag display order
_OPENAPI_TAGS = [
    {"name": "Root"},
    {"name": "Health"},
    {"name": "Scoring"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.APP_ENV})")
    yield
    logger.info(f"Shutting down {settings.APP_NAME}...")


# FASTAPI APPLICATION CONFIGURATION
app = FastAPI(
    title=f"{settings.APP_NAME} API",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=_OPENAPI_TAGS,
    lifespan=lifespan,
)

# REGISTER EXCEPTION HANDLERS
app.add_exception_handler(ModelStructureError, model_structure_exception_handler)

# REGISTER ROUTERS (order matches _OPENAPI_TAGS / Swagger UI display order)
app.include_router(health_router)                                   # Health
app.include_router(scoring_router, prefix=settings.API_V1_PREFIX)   # Scoring


# ROOT ENDPOINT
@app.get("/", tags=["Root"], summary="Root endpoint")
async def root():
    return {
        "service": f"{settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "status": "running"
    }


# RUN WITH UVICORN
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "credit_risk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
