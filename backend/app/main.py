# backend/app/main.py

# import logger first so handlers attach before anything logs
from app.core.logger import logger

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import create_tables
from app.core.request_middleware import RequestLoggingMiddleware
from app.core.error_middleware import ExceptionLoggingMiddleware
from app.services.farmer.yield_estimation_service import get_estimator

from app.api.farmer import yield_estimation, land

# ---------------------------------------------------
# Create FastAPI instance FIRST
# ---------------------------------------------------
app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------
# Logging middlewares
# ---------------------------------------------------
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(ExceptionLoggingMiddleware)


# ---------------------------------------------------
# Include Routers
# ---------------------------------------------------
app.include_router(yield_estimation.router, prefix="/farmer")
app.include_router(land.router, prefix="/farmer")


@app.on_event("startup")
async def startup_event():
    await create_tables()

    # fail fast on a broken YIELD_MODEL_CONFIG_PATH
    estimator = get_estimator()

    logger.info(
        "Yield estimator API started with %d known crops",
        len(estimator.config.baseline_yields),
    )


@app.get("/health")
async def health_check():
    return {"status": "ok"}
