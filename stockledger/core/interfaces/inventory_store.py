"""Abstract interface for stock ledger storage."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from stockledger.core.entities.inventory import (
    AggregationKey,
    Movement,
    MovementKind,
    StockStatusRecord,
)


@dataclass
class MovementFilter:
    """Filters for movement history queries. ``None`` means no filter."""

    tenant_id: str
    material_name: str | None = None
    key: AggregationKey | None = None
    kind: MovementKind | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    supplier: str | None = None
    employee: str | None = None
    department: str | None = None


class IStockLedgerStore(ABC):
    """Interface for stock status records and the append-only movement log."""

    @abstractmethod
    async def get_status(self, key: AggregationKey) -> StockStatusRecord | None:
        """Get the status record for an aggregation key."""
        pass

    @abstractmethod
    async def commit_movement(
        self,
        record: StockStatusRecord,
        expected_version: int | None,
        movement: Movement,
    ) -> tuple[StockStatusRecord, Movement]:
        """
        Atomically write new totals and append the movement.

        ``expected_version`` is the version the caller read; ``None`` means the
        caller saw no record and the row must be created. Raises
        ConcurrencyConflictError if the stored row no longer matches.
        """
        pass

    @abstractmethod
    async def replace_totals(
        self,
        record: StockStatusRecord,
        expected_version: int,
    ) -> StockStatusRecord:
        """Compare-and-swap the totals of an existing record (no movement)."""
        pass

    @abstractmethod
    async def list_statuses(
        self,
        tenant_id: str,
        material_name: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[StockStatusRecord]:
        """List status records for a tenant ordered by material name."""
        pass

    @abstractmethod
    async def list_movements(
        self, filters: MovementFilter, limit: int = 100, offset: int = 0
    ) -> list[Movement]:
        """List movements matching the filter, newest first."""
        pass

    @abstractmethod
    async def get_key_movements(self, key: AggregationKey) -> list[Movement]:
        """Get every movement for a key in admission order."""
        pass
