"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from disaster_reports.api import api_router
from disaster_reports.core.config import get_settings
from disaster_reports.core.exceptions import ReportValidationError
from disaster_reports.db.session import engine, get_session, init_models
from disaster_reports.services.reports import format_validation_errors
from disaster_reports.services.seed import seed_database

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    await init_models()
    async with get_session() as session:
        await seed_database(session, settings)
    logger.info("%s ready", settings.app_name)

    try:
        yield
    finally:
        await engine.dispose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request data", "errors": format_validation_errors(list(exc.errors()))},
    )


@app.exception_handler(ReportValidationError)
async def report_validation_handler(_: Request, exc: ReportValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid report data", "errors": exc.errors},
    )


app.include_router(api_router)
