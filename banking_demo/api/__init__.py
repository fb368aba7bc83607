"""
Banking Demo API Application Factory
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn

from .auth import BankingSystem
from .accounts import router as accounts_router
from .sessions import router as sessions_router
from .transactions import router as transactions_router
from .. import __version__
from ..config import get_config
from ..errors import BankingError
from ..events import BankingEvent, new_correlation_id
from ..logging_config import get_logger, setup_logging


CORRELATION_HEADER = "X-Correlation-Id"

logger = get_logger("banking_demo.api")


def create_app(system: Optional[BankingSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    if system is None:
        config = get_config()
        setup_logging(config.log_level, "banking_demo")
        system = BankingSystem(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        system.telemetry.emit(BankingEvent.APP_STARTUP, data={"port": system.config.api_port})
        yield
        system.close()

    app = FastAPI(
        title="Banking Telemetry Demo API",
        description="Minimal banking service instrumented through pluggable telemetry sinks",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.banking_system = system

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        request.state.correlation_id = request.headers.get(CORRELATION_HEADER) or new_correlation_id()
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = request.state.correlation_id
        return response

    @app.exception_handler(BankingError)
    async def banking_error_handler(request: Request, exc: BankingError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
        )

    app.include_router(sessions_router, tags=["Sessions"])
    app.include_router(accounts_router, tags=["Accounts"])
    app.include_router(transactions_router, tags=["Transactions"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "banking_demo_api",
            "version": __version__,
            "telemetry_sinks": system.telemetry.get_sink_names(),
        }

    # Root endpoint
    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Banking Telemetry Demo API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "login": "POST /login",
                "logout": "POST /logout",
                "transfer": "POST /transfer",
                "balance": "GET /balance",
                "transactions": "GET /transactions",
            },
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the API server with uvicorn"""
    config = get_config()
    uvicorn.run(
        create_app(),
        host=host or config.api_host,
        port=port or config.api_port,
        log_level=config.log_level.lower(),
    )
