"""FastAPI application factory"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from src.adapter.services.erp_gateway import create_erp_gateway
from src.adapter.services.erp_sync_history import InMemoryErpSyncHistoryStore
from src.api.error import ClientError
from src.api.routes import billing_batches, services, billing_pendings, invoices, erp_sync, health
from src.app.services.erp_gateway import ErpGateway
from src.app.services.erp_sync_history import ErpSyncHistoryStore

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    )


def create_app(
    config,
    erp_gateway: Optional[ErpGateway] = None,
    erp_history: Optional[ErpSyncHistoryStore] = None,
) -> FastAPI:
    """
    Build the API application

    Args:
        config: ApplicationConfig (or a subclass overriding attributes)
        erp_gateway: ERP gateway, built from config when omitted
        erp_history: ERP sync history, a fresh in-memory store when omitted
    """
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.CREATE_TABLES_ON_STARTUP:
            from src.depends import engine

            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
            logger.info("Database tables ensured")
        yield

    app = FastAPI(
        title="Billing Batch Administration API",
        description="Services, billing pendings, billing batches, invoices and ERP sync",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.erp_gateway = erp_gateway or create_erp_gateway(
        mode=config.ERP_MODE,
        url=config.ERP_URL,
        timeout=config.ERP_TIMEOUT_SECONDS,
        success_rate=config.ERP_SIMULATED_SUCCESS_RATE,
        latency_seconds=config.ERP_SIMULATED_LATENCY_SECONDS,
    )
    app.state.erp_history = erp_history or InMemoryErpSyncHistoryStore()

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=config.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms}ms)"
            )
            return response

    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request parameters",
                    "reason": _validation_message(exc),
                }
            },
        )

    for module in (health, billing_batches, services, billing_pendings, invoices, erp_sync):
        app.include_router(module.router, prefix=config.API_PREFIX)

    return app
