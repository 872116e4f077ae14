"""
Snapshot aggregation.

Turns the current account and investment state into snapshot rows. A batch
is partitioned into in-place updates (same polling cycle, changed figures)
and inserts (new cycle), and the whole batch is written in one transaction
so snapshot totals across accounts always add up.
"""

import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from loguru import logger

from mocktrade.core.models.account import Account
from mocktrade.core.models.investment import Investment
from mocktrade.core.models.performance import PerformanceItem
from mocktrade.core.utils.decorators import log_operation
from mocktrade.core.utils.validation import validate_days
from mocktrade.infrastructure.persistence import Database, SnapshotRepository


def truncate_timestamp(timestamp: datetime, granularity_seconds: int) -> datetime:
    """Truncate a timestamp down to a whole multiple of the granularity.

    Examples:
        >>> truncate_timestamp(datetime(2024, 1, 2, 10, 31, 45, tzinfo=UTC), 60)
        datetime.datetime(2024, 1, 2, 10, 31, tzinfo=datetime.timezone.utc)
    """
    if granularity_seconds <= 0:
        raise ValueError(f"Granularity must be positive, got {granularity_seconds}")
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    timestamp = timestamp.astimezone(UTC)
    epoch = datetime(1970, 1, 1, tzinfo=UTC)
    elapsed = (timestamp - epoch) // timedelta(seconds=granularity_seconds)
    return epoch + timedelta(seconds=elapsed * granularity_seconds)


@dataclass
class SnapshotBatch:
    """A partitioned batch of snapshot writes."""

    inserts: list[PerformanceItem] = field(default_factory=list)
    updates: list[PerformanceItem] = field(default_factory=list)
    skipped: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.inserts and not self.updates

    def log_context(self) -> dict:
        return {
            "inserted": len(self.inserts),
            "updated": len(self.updates),
            "skipped": self.skipped,
        }


class SnapshotAggregator:
    """Writes deduplicated, atomically committed performance snapshots."""

    def __init__(
        self,
        database: Database,
        granularity_seconds: int = 60,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.database = database
        self.granularity_seconds = granularity_seconds
        self._clock = clock or (lambda: datetime.now(UTC))
        # One snapshot batch at a time per process
        self._batch_lock = threading.Lock()

    def current_timestamp(self) -> datetime:
        """The snapshot timestamp for the current polling cycle."""
        return truncate_timestamp(self._clock(), self.granularity_seconds)

    @staticmethod
    def partition(
        items: Sequence[PerformanceItem], repository: SnapshotRepository
    ) -> SnapshotBatch:
        """Split computed items into updates of existing rows and inserts."""
        batch = SnapshotBatch()
        for item in items:
            last = repository.last_for_account(item.account_id)
            if last is not None and last.timestamp == item.timestamp:
                if last.differs_from(item):
                    last.copy_figures_from(item)
                    batch.updates.append(last)
                else:
                    batch.skipped += 1
            else:
                batch.inserts.append(item)
        return batch

    @log_operation
    def create_snapshot_totals(
        self,
        accounts: Sequence[Account],
        account_to_investments: Mapping[int, Sequence[Investment]],
        timestamp: datetime | None = None,
    ) -> SnapshotBatch:
        """Snapshot every account that holds at least one investment.

        Args:
            accounts: Accounts to snapshot
            account_to_investments: Investments keyed by account id
            timestamp: Snapshot timestamp; defaults to the current cycle

        Returns:
            The batch that was written

        Raises:
            PersistenceFailureError: If any write fails; nothing was written
        """
        if timestamp is None:
            timestamp = self.current_timestamp()
        else:
            timestamp = truncate_timestamp(timestamp, self.granularity_seconds)

        items = [
            account.performance_item(account_to_investments[account.id], timestamp)
            for account in accounts
            if account_to_investments.get(account.id)
        ]

        with self._batch_lock, self.database.transaction() as session:
            repository = SnapshotRepository(session)
            batch = self.partition(items, repository)
            if batch.is_empty:
                logger.debug(f"No snapshot changes at {timestamp.isoformat()}")
                return batch

            for item in batch.inserts:
                repository.insert(item)
            for item in batch.updates:
                repository.update(item)

        logger.info(
            f"Snapshot batch committed at {timestamp.isoformat()}: "
            f"{len(batch.inserts)} inserted, {len(batch.updates)} updated, {batch.skipped} unchanged"
        )
        return batch

    @log_operation
    def purge_snapshots(self, older_than_days: int) -> int:
        """Delete snapshots strictly older than the cutoff.

        Returns:
            Number of rows removed
        """
        older_than_days = validate_days(older_than_days, "older_than_days")
        cutoff = self._clock() - timedelta(days=older_than_days)

        with self.database.transaction() as session:
            removed = SnapshotRepository(session).delete_older_than(cutoff)

        logger.info(f"Purged {removed} snapshots older than {cutoff.isoformat()}")
        return removed
