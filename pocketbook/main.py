# pocketbook/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from pocketbook import db
from pocketbook.config import get_settings
from pocketbook.errors import AppError
from pocketbook.observability import RequestLogMiddleware
from pocketbook.responses import fail
from pocketbook.routers.auth import router as auth_router
from pocketbook.routers.budgets import router as budgets_router
from pocketbook.routers.categories import router as categories_router
from pocketbook.routers.dashboard import router as dashboard_router
from pocketbook.routers.goals import router as goals_router
from pocketbook.routers.system import VERSION
from pocketbook.routers.system import router as system_router
from pocketbook.routers.transactions import expenses_router, incomes_router

settings = get_settings()
logger = logging.getLogger("pb.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # No storage, no service: fail fast instead of answering every request with 500s.
    try:
        db.check_connection()
    except Exception:
        logger.critical("Database connection failed: %s", db.engine.url, exc_info=True)
        raise SystemExit(1)
    db.create_db_and_tables()
    logger.info("Started in %s mode", settings.environment)
    yield
    db.engine.dispose()


app = FastAPI(title="Pocketbook", version=VERSION, lifespan=lifespan)

# Middleware order: CORS outermost so error responses carry the headers too
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------ error envelopes ------------


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return fail(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        # loc looks like ("body", "amount") or ("query", "limit")
        field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
        message = f"Invalid {field}: {first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request"
    return fail(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return fail(404, "Route not found")
    return fail(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = None if settings.is_production else str(exc)
    return fail(500, "Server error", detail)


# ------------ routers ------------

app.include_router(system_router)
for router in (
    auth_router,
    categories_router,
    expenses_router,
    incomes_router,
    budgets_router,
    goals_router,
    dashboard_router,
):
    app.include_router(router, prefix="/api")
