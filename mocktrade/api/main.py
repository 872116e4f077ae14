"""
FastAPI main application for the trading simulator.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from mocktrade.core.config import EngineSettings
from mocktrade.core.exceptions.trading import (
    AccountError,
    MockTradeException,
    PersistenceFailureError,
    ValidationError,
)
from mocktrade.engine.portfolio import Portfolio

from .routers import orders, snapshots

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AccountError, 409),
    (PersistenceFailureError, 503),
)


async def _handle_domain_error(request: Request, exc: MockTradeException) -> JSONResponse:
    status_code = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": type(exc).__name__})


def create_app(portfolio: Portfolio | None = None) -> FastAPI:
    """Build the API around a Portfolio, creating one from the environment if needed."""
    app = FastAPI(
        title="MockTrade API",
        version="1.0.0",
        description="Administrative API for the stock trading simulator",
    )
    app.state.portfolio = portfolio or Portfolio.from_settings(EngineSettings.from_env())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",  # Development frontend
            "http://localhost:8080",
        ],
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
    )
    app.add_exception_handler(MockTradeException, _handle_domain_error)

    app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
    app.include_router(snapshots.router, prefix="/api/snapshots", tags=["snapshots"])

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint returning API information."""
        return {"message": "MockTrade API", "version": "1.0.0", "status": "running"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
