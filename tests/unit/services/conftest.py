"""Fixtures for core service tests: an in-memory ledger store with CAS semantics."""

import asyncio
from datetime import datetime

import pytest

from stockledger.core.entities.inventory import AggregationKey, Movement, StockStatusRecord
from stockledger.core.exceptions import ConcurrencyConflictError
from stockledger.core.interfaces.inventory_store import IStockLedgerStore, MovementFilter
from stockledger.core.services import StockLedgerService


class InMemoryLedgerStore(IStockLedgerStore):
    """
    Dict-backed store honoring the version check of the SQLite store.

    Every call yields to the event loop once so concurrent applies interleave.
    """

    def __init__(self) -> None:
        self.records: dict[str, StockStatusRecord] = {}
        self.movements: list[Movement] = []
        self.injected_conflicts = 0
        self.commit_attempts = 0
        self.read_delay = 0.0
        self.commit_delay = 0.0

    async def get_status(self, key: AggregationKey) -> StockStatusRecord | None:
        await asyncio.sleep(self.read_delay)
        record = self.records.get(key.canonical())
        return record.model_copy() if record is not None else None

    def _check_version(self, key: str, expected_version: int | None) -> None:
        stored = self.records.get(key)
        if expected_version is None:
            if stored is not None:
                raise ConcurrencyConflictError(key, 0)
        elif stored is None or stored.version != expected_version:
            raise ConcurrencyConflictError(key, expected_version)

    async def commit_movement(self, record, expected_version, movement):
        await asyncio.sleep(0)
        self.commit_attempts += 1
        key = record.key.canonical()
        if self.injected_conflicts:
            self.injected_conflicts -= 1
            raise ConcurrencyConflictError(key, expected_version or 0)
        self._check_version(key, expected_version)

        saved = record.model_copy(
            update={
                "id": record.id or len(self.records) + 1,
                "version": (expected_version or 0) + 1,
            }
        )
        self.records[key] = saved
        stored_movement = movement.model_copy(
            update={"id": len(self.movements) + 1, "created_at": datetime.utcnow()}
        )
        self.movements.append(stored_movement)
        # Written already; a slow acknowledgement follows
        await asyncio.sleep(self.commit_delay)
        return saved.model_copy(), stored_movement

    async def replace_totals(self, record, expected_version):
        await asyncio.sleep(0)
        key = record.key.canonical()
        self._check_version(key, expected_version)
        saved = record.model_copy(update={"version": expected_version + 1})
        self.records[key] = saved
        return saved.model_copy()

    async def list_statuses(self, tenant_id, material_name=None, limit=None, offset=0):
        records = sorted(
            (
                r
                for r in self.records.values()
                if r.key.tenant_id == tenant_id
                and (material_name is None or r.key.material_name == material_name)
            ),
            key=lambda r: (r.key.material_name, r.id),
        )
        end = None if limit is None else offset + limit
        return records[offset:end]

    async def list_movements(self, filters: MovementFilter, limit=100, offset=0):
        matching = [
            m
            for m in reversed(self.movements)
            if m.key.tenant_id == filters.tenant_id
            and (filters.key is None or m.key == filters.key)
            and (filters.kind is None or m.kind == filters.kind)
        ]
        return matching[offset : offset + limit]

    async def get_key_movements(self, key):
        return [m for m in self.movements if m.key == key]


@pytest.fixture
def memory_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def ledger(memory_store: InMemoryLedgerStore) -> StockLedgerService:
    """Ledger without backoff delay."""
    return StockLedgerService(
        store=memory_store,
        max_retries=5,
        retry_delay=0,
        apply_timeout=2.0,
        default_critical_ratio=0.2,
    )
