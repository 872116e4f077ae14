"""
Order API endpoints.
"""

from fastapi import APIRouter, Depends

from mocktrade.api.dependencies import get_portfolio
from mocktrade.api.schemas.api_models import ExecutionResponse, FillResponse, OrderResponse
from mocktrade.engine.portfolio import Portfolio

router = APIRouter()


@router.post("/execute", response_model=ExecutionResponse)
def force_execute(portfolio: Portfolio = Depends(get_portfolio)) -> ExecutionResponse:
    """Run an execution pass now, ignoring market hours."""
    result = portfolio.force_execute()
    snapshot = result.snapshot
    return ExecutionResponse(
        skipped=result.skipped,
        fills=[FillResponse.from_result(fill) for fill in result.fills],
        deferred=result.deferred,
        errors=result.errors,
        signals=result.signals,
        snapshots_written=len(snapshot.inserts) + len(snapshot.updates) if snapshot else 0,
    )


@router.get("/open", response_model=list[OrderResponse])
def get_open_orders(portfolio: Portfolio = Depends(get_portfolio)) -> list[OrderResponse]:
    """List OPEN orders, oldest first."""
    return [OrderResponse.from_order(order) for order in portfolio.get_open_orders()]
