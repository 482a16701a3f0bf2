"""Tests for SQLiteStockLedgerStore."""

import asyncio
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

import aiosqlite
import pytest

import stockledger.infrastructure.storage.sqlite.inventory_store as store_module
from stockledger.core.entities.inventory import AggregationKey, MovementKind, StockStatusRecord
from stockledger.core.exceptions import (
    ConcurrencyConflictError,
    InsufficientStockError,
    StorageUnavailableError,
)
from stockledger.core.interfaces.inventory_store import MovementFilter
from stockledger.core.services import StockLedgerService, fold_movement

ENTRY = MovementKind.ENTRY
OUTPUT = MovementKind.OUTPUT


async def _commit(store, current, movement):
    record = fold_movement(current, movement)
    return await store.commit_movement(
        record, current.version if current is not None else None, movement
    )


class TestCommitMovement:
    """Tests for the compare-and-swap write."""

    async def test_first_commit_inserts_record(self, ledger_store, bolt_key, make_movement):
        movement = make_movement(bolt_key, ENTRY, "12.500", unit="kg", supplier="Acme")

        record, stored = await _commit(ledger_store, None, movement)

        assert record.id is not None
        assert record.version == 1
        assert stored.id is not None
        assert stored.created_at is not None

        fetched = await ledger_store.get_status(bolt_key)
        assert fetched.total_entry == Decimal("12.500")
        assert str(fetched.total_entry) == "12.500"
        assert fetched.unit == "kg"
        assert fetched.version == 1

    async def test_second_commit_bumps_version(self, ledger_store, bolt_key, make_movement):
        current, _ = await _commit(ledger_store, None, make_movement(bolt_key, ENTRY, "10"))
        current = await ledger_store.get_status(bolt_key)

        record, _ = await _commit(ledger_store, current, make_movement(bolt_key, OUTPUT, "4"))

        assert record.version == 2
        fetched = await ledger_store.get_status(bolt_key)
        assert fetched.current_stock == Decimal("6")
        assert fetched.version == 2

    async def test_stale_version_conflicts_and_writes_nothing(
        self, ledger_store, bolt_key, make_movement
    ):
        await _commit(ledger_store, None, make_movement(bolt_key, ENTRY, "10"))
        stale = await ledger_store.get_status(bolt_key)
        await _commit(ledger_store, stale, make_movement(bolt_key, OUTPUT, "1"))

        with pytest.raises(ConcurrencyConflictError):
            await _commit(ledger_store, stale, make_movement(bolt_key, OUTPUT, "2"))

        fetched = await ledger_store.get_status(bolt_key)
        assert fetched.total_output == Decimal("1")
        assert len(await ledger_store.get_key_movements(bolt_key)) == 2

    async def test_duplicate_insert_conflicts(self, ledger_store, bolt_key, make_movement):
        await _commit(ledger_store, None, make_movement(bolt_key, ENTRY, "10"))

        with pytest.raises(ConcurrencyConflictError):
            await _commit(ledger_store, None, make_movement(bolt_key, ENTRY, "5"))

        assert len(await ledger_store.get_key_movements(bolt_key)) == 1

    async def test_optional_dimensions_are_separate_keys(self, ledger_store, make_movement):
        plain = AggregationKey(tenant_id="T1", material_name="Bolt")
        empty_warehouse = AggregationKey(tenant_id="T1", material_name="Bolt", warehouse="")
        named = AggregationKey(tenant_id="T1", material_name="Bolt", warehouse="A")

        for key, qty in ((plain, "1"), (empty_warehouse, "2"), (named, "3")):
            await _commit(ledger_store, None, make_movement(key, ENTRY, qty))

        assert (await ledger_store.get_status(plain)).total_entry == Decimal("1")
        assert (await ledger_store.get_status(empty_warehouse)).total_entry == Decimal("2")
        fetched = await ledger_store.get_status(named)
        assert fetched.total_entry == Decimal("3")
        assert fetched.key == named


class TestReplaceTotals:
    async def test_replace_totals(self, ledger_store, bolt_key, make_movement):
        await _commit(ledger_store, None, make_movement(bolt_key, ENTRY, "10"))
        current = await ledger_store.get_status(bolt_key)

        updated = current.model_copy(update={"total_output": Decimal("3")})
        saved = await ledger_store.replace_totals(updated, current.version)

        assert saved.version == 2
        assert (await ledger_store.get_status(bolt_key)).current_stock == Decimal("7")

    async def test_replace_totals_stale(self, ledger_store, bolt_key, make_movement):
        await _commit(ledger_store, None, make_movement(bolt_key, ENTRY, "10"))
        current = await ledger_store.get_status(bolt_key)

        with pytest.raises(ConcurrencyConflictError):
            await ledger_store.replace_totals(current, current.version + 5)


class TestQueries:
    """Listing statuses and movement history."""

    async def _seed(self, store, make_movement):
        for tenant, name, when in (
            ("T1", "Cable", datetime(2026, 1, 3)),
            ("T1", "Apple", datetime(2026, 1, 1)),
            ("T1", "Bolt", datetime(2026, 1, 2)),
            ("T2", "Apple", datetime(2026, 1, 4)),
        ):
            key = AggregationKey(tenant_id=tenant, material_name=name)
            await _commit(
                store, None, make_movement(key, ENTRY, "5", occurred_at=when, supplier="Acme")
            )

    async def test_list_statuses_sorted_and_paged(self, ledger_store, make_movement):
        await self._seed(ledger_store, make_movement)

        everything = await ledger_store.list_statuses("T1")
        page = await ledger_store.list_statuses("T1", limit=1, offset=1)

        assert [r.key.material_name for r in everything] == ["Apple", "Bolt", "Cable"]
        assert [r.key.material_name for r in page] == ["Bolt"]

    async def test_list_statuses_by_material(self, ledger_store, make_movement):
        await self._seed(ledger_store, make_movement)
        records = await ledger_store.list_statuses("T2", material_name="Apple")
        assert len(records) == 1
        assert records[0].key.tenant_id == "T2"

    async def test_movements_newest_first(self, ledger_store, make_movement):
        await self._seed(ledger_store, make_movement)

        movements = await ledger_store.list_movements(MovementFilter(tenant_id="T1"))

        assert [m.key.material_name for m in movements] == ["Cable", "Bolt", "Apple"]
        assert movements[0].supplier == "Acme"

    async def test_movement_filters(self, ledger_store, bolt_key, make_movement):
        await self._seed(ledger_store, make_movement)
        current = await ledger_store.get_status(bolt_key)
        await _commit(
            ledger_store,
            current,
            make_movement(
                bolt_key, OUTPUT, "2", occurred_at=datetime(2026, 2, 1), employee="Ayse"
            ),
        )

        outputs = await ledger_store.list_movements(
            MovementFilter(tenant_id="T1", kind=OUTPUT)
        )
        by_key = await ledger_store.list_movements(MovementFilter(tenant_id="T1", key=bolt_key))
        in_range = await ledger_store.list_movements(
            MovementFilter(
                tenant_id="T1",
                date_from=datetime(2026, 1, 2),
                date_to=datetime(2026, 1, 3),
            )
        )
        by_employee = await ledger_store.list_movements(
            MovementFilter(tenant_id="T1", employee="Ayse")
        )

        assert [m.quantity for m in outputs] == [Decimal("2")]
        assert [m.kind for m in by_key] == [OUTPUT, ENTRY]
        assert {m.key.material_name for m in in_range} == {"Bolt", "Cable"}
        assert len(by_employee) == 1

    async def test_key_movements_in_admission_order(self, ledger_store, bolt_key, make_movement):
        current = None
        for kind, qty in ((ENTRY, "10"), (OUTPUT, "3"), (ENTRY, "1")):
            await _commit(ledger_store, current, make_movement(bolt_key, kind, qty))
            current = await ledger_store.get_status(bolt_key)

        movements = await ledger_store.get_key_movements(bolt_key)

        assert [m.quantity for m in movements] == [Decimal("10"), Decimal("3"), Decimal("1")]


class TestStorageErrors:
    async def test_driver_error_becomes_storage_unavailable(self, ledger_store, bolt_key):
        with patch.object(
            store_module,
            "get_connection",
            side_effect=aiosqlite.OperationalError("disk I/O error"),
        ):
            with pytest.raises(StorageUnavailableError):
                await ledger_store.get_status(bolt_key)


class TestLedgerOnSQLite:
    """StockLedgerService against the real store."""

    @pytest.fixture
    def ledger(self, ledger_store) -> StockLedgerService:
        return StockLedgerService(store=ledger_store, retry_delay=0, apply_timeout=10)

    async def test_racing_outputs_admit_exactly_one(self, ledger, bolt_key, make_movement):
        """Two outputs of 4 against stock 5 never both succeed."""
        await ledger.apply(make_movement(bolt_key, ENTRY, "5"))

        results = await asyncio.gather(
            ledger.apply(make_movement(bolt_key, OUTPUT, "4")),
            ledger.apply(make_movement(bolt_key, OUTPUT, "4")),
            return_exceptions=True,
        )

        assert sum(isinstance(r, StockStatusRecord) for r in results) == 1
        assert sum(isinstance(r, InsufficientStockError) for r in results) == 1
        record = await ledger.read(bolt_key)
        assert record.current_stock == Decimal("1")

    async def test_rebuild_matches_log(self, ledger, ledger_store, bolt_key, make_movement):
        await ledger.apply(make_movement(bolt_key, ENTRY, "100"))
        await ledger.apply(make_movement(bolt_key, OUTPUT, "40"))
        current = await ledger.read(bolt_key)
        await ledger_store.replace_totals(
            current.model_copy(update={"total_entry": Decimal("1")}), current.version
        )

        record = await ledger.rebuild(bolt_key)

        assert record.total_entry == Decimal("100")
        assert (await ledger.read(bolt_key)).current_stock == Decimal("60")

    async def test_slow_commit_past_timeout_reports_success(
        self, ledger, ledger_store, bolt_key, make_movement
    ):
        """A write that lands after the budget expires is reported as applied, once."""
        await ledger.apply(make_movement(bolt_key, ENTRY, "10"))
        real_commit = aiosqlite.Connection.commit

        async def commit_then_stall(conn):
            await real_commit(conn)
            await asyncio.sleep(0.5)

        with patch.object(aiosqlite.Connection, "commit", commit_then_stall):
            record = await ledger.apply(make_movement(bolt_key, OUTPUT, "4"), timeout=0.1)

        assert record.total_output == Decimal("4")
        stored = await ledger.read(bolt_key)
        assert stored.total_output == Decimal("4")
        assert stored.version == 2
        movements = await ledger_store.get_key_movements(bolt_key)
        assert [m.kind for m in movements] == [ENTRY, OUTPUT]
