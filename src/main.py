"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.ty_account.api.router import router as account_router
from src.ty_catalog.api.router import router as catalog_router
from src.ty_common.database import engine
from src.ty_common.errors import AppError, CooldownError
from src.ty_common.redis_client import close_redis, get_redis
from src.ty_common.response import error_response
from src.ty_gateway.bot.router import router as bot_router
from src.ty_gateway.middleware.request_log import RequestLogMiddleware
from src.ty_leaderboard.api.router import router as leaderboard_router
from src.ty_mining.api.router import router as mining_router
from src.ty_purchase.api.router import router as purchase_router
from src.ty_referral.api.router import router as referral_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, error=exc.error, data=exc.details)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    headers = None
    if isinstance(exc, CooldownError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
        headers=headers,
    )


app.include_router(account_router, prefix="/api/v1")
app.include_router(mining_router, prefix="/api/v1")
app.include_router(purchase_router, prefix="/api/v1")
app.include_router(referral_router, prefix="/api/v1")
app.include_router(catalog_router, prefix="/api/v1")
app.include_router(leaderboard_router, prefix="/api/v1")
app.include_router(bot_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
