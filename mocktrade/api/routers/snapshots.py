"""
Snapshot API endpoints.
"""

from fastapi import APIRouter, Depends, Query

from mocktrade.api.dependencies import get_portfolio
from mocktrade.api.schemas.api_models import PurgeResponse, SnapshotResponse
from mocktrade.core.constants import DEFAULT_DAILY_SNAPSHOT_DAYS
from mocktrade.engine.portfolio import Portfolio

router = APIRouter()


@router.get("/current", response_model=list[SnapshotResponse])
def get_current_snapshot(
    account_id: int | None = Query(default=None),
    portfolio: Portfolio = Depends(get_portfolio),
) -> list[SnapshotResponse]:
    """Latest snapshot per account."""
    items = portfolio.ledger.get_current_snapshot(account_id)
    return [SnapshotResponse.from_item(item) for item in items]


@router.get("/daily", response_model=list[SnapshotResponse])
def get_daily_snapshot(
    days: int = Query(default=DEFAULT_DAILY_SNAPSHOT_DAYS, ge=1),
    account_id: int | None = Query(default=None),
    portfolio: Portfolio = Depends(get_portfolio),
) -> list[SnapshotResponse]:
    """Snapshots for charting, oldest first.

    Without an account id the series is the all-accounts rollup.
    """
    items = portfolio.ledger.get_current_daily_snapshot(days, account_id)
    if account_id is None:
        items = portfolio.ledger.rollup(items)
    return [SnapshotResponse.from_item(item) for item in items]


@router.delete("", response_model=PurgeResponse)
def purge_snapshots(
    older_than_days: int = Query(..., ge=0),
    portfolio: Portfolio = Depends(get_portfolio),
) -> PurgeResponse:
    """Delete snapshots older than the cutoff."""
    removed = portfolio.purge_snapshots(older_than_days)
    return PurgeResponse(older_than_days=older_than_days, removed=removed)
