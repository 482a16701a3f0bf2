"""SQLite implementation of stock ledger storage."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    AggregationKey,
    Movement,
    MovementKind,
    StockStatusRecord,
)
from stockledger.core.exceptions import ConcurrencyConflictError, StorageUnavailableError
from stockledger.core.interfaces.inventory_store import IStockLedgerStore, MovementFilter
from stockledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)

logger = get_logger(__name__)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Surface driver failures as StorageUnavailableError."""
    try:
        yield
    except aiosqlite.Error as e:
        logger.error("storage_operation_failed", operation=operation, error=str(e))
        raise StorageUnavailableError(operation, str(e)) from e


def _dec(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


def _text(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def _parse_datetime(value: str | None) -> datetime:
    if value:
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            pass
    return datetime.utcnow()


class SQLiteStockLedgerStore(IStockLedgerStore):
    """
    SQLite implementation of stock status records and the movement log.

    Status rows are guarded by a ``version`` column: every write names the
    version it read and fails with ConcurrencyConflictError if another writer
    got there first. The movement row is written in the same transaction, so
    totals and log never diverge.
    """

    async def get_status(self, key: AggregationKey) -> StockStatusRecord | None:
        """Get the status record for an aggregation key."""
        with storage_errors("get_status"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM stock_status WHERE key_canonical = ?",
                    (key.canonical(),),
                )
                row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_status(row)

    async def commit_movement(
        self,
        record: StockStatusRecord,
        expected_version: int | None,
        movement: Movement,
    ) -> tuple[StockStatusRecord, Movement]:
        """Write new totals and append the movement in one transaction."""
        key = record.key.canonical()
        now = datetime.utcnow()

        with storage_errors("commit_movement"):
            async with get_transaction(immediate=True) as conn:
                if expected_version is None:
                    status_id = await self._insert_status(conn, record, now)
                    new_version = 1
                else:
                    await self._swap_totals(conn, record, expected_version, now)
                    status_id = record.id
                    new_version = expected_version + 1

                cursor = await conn.execute(
                    """
                    INSERT INTO stock_movements (
                        status_id, key_canonical, tenant_id, material_name, kind,
                        quantity, unit, unit_price, critical_level_hint, occurred_at,
                        reference, note, supplier, category,
                        employee, department, issued_by, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        status_id,
                        key,
                        movement.key.tenant_id,
                        movement.key.material_name,
                        movement.kind.value,
                        str(movement.quantity),
                        movement.unit,
                        _text(movement.unit_price),
                        _text(movement.critical_level_hint),
                        movement.occurred_at.isoformat(),
                        movement.reference,
                        movement.note,
                        movement.supplier,
                        movement.category,
                        movement.employee,
                        movement.department,
                        movement.issued_by,
                        now.isoformat(),
                    ),
                )
                movement_id = cursor.lastrowid

        saved = record.model_copy(
            update={"id": status_id, "version": new_version, "updated_at": now}
        )
        stored_movement = movement.model_copy(update={"id": movement_id, "created_at": now})
        logger.info(
            "stock_movement_recorded",
            movement_id=movement_id,
            key=key,
            kind=movement.kind.value,
            version=new_version,
        )
        return saved, stored_movement

    async def replace_totals(
        self,
        record: StockStatusRecord,
        expected_version: int,
    ) -> StockStatusRecord:
        """Compare-and-swap the totals of an existing record."""
        now = datetime.utcnow()
        with storage_errors("replace_totals"):
            async with get_transaction(immediate=True) as conn:
                await self._swap_totals(conn, record, expected_version, now)

        logger.info("stock_status_totals_replaced", key=record.key.canonical())
        return record.model_copy(update={"version": expected_version + 1, "updated_at": now})

    async def _insert_status(
        self,
        conn: aiosqlite.Connection,
        record: StockStatusRecord,
        now: datetime,
    ) -> int:
        key = record.key
        try:
            cursor = await conn.execute(
                """
                INSERT INTO stock_status (
                    key_canonical, tenant_id, material_name, warehouse, sku,
                    variant, bin_code, total_entry, total_output, critical_level,
                    unit, version, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?)
                """,
                (
                    key.canonical(),
                    key.tenant_id,
                    key.material_name,
                    key.warehouse,
                    key.sku,
                    key.variant,
                    key.bin_code,
                    str(record.total_entry),
                    str(record.total_output),
                    str(record.critical_level),
                    record.unit,
                    record.created_at.isoformat(),
                    now.isoformat(),
                ),
            )
        except aiosqlite.IntegrityError as e:
            # Another writer created the row after our read
            raise ConcurrencyConflictError(key.canonical(), 0) from e
        return cursor.lastrowid

    async def _swap_totals(
        self,
        conn: aiosqlite.Connection,
        record: StockStatusRecord,
        expected_version: int,
        now: datetime,
    ) -> None:
        key = record.key.canonical()
        cursor = await conn.execute(
            """
            UPDATE stock_status SET
                total_entry = ?,
                total_output = ?,
                critical_level = ?,
                unit = ?,
                version = version + 1,
                updated_at = ?
            WHERE key_canonical = ? AND version = ?
            """,
            (
                str(record.total_entry),
                str(record.total_output),
                str(record.critical_level),
                record.unit,
                now.isoformat(),
                key,
                expected_version,
            ),
        )
        if cursor.rowcount == 0:
            raise ConcurrencyConflictError(key, expected_version)

    async def list_statuses(
        self,
        tenant_id: str,
        material_name: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[StockStatusRecord]:
        """List status records for a tenant ordered by material name."""
        sql = "SELECT * FROM stock_status WHERE tenant_id = ?"
        params: list = [tenant_id]
        if material_name is not None:
            sql += " AND material_name = ?"
            params.append(material_name)
        # LIMIT -1 means unbounded in SQLite
        sql += " ORDER BY material_name, id LIMIT ? OFFSET ?"
        params.extend([limit if limit is not None else -1, offset])

        with storage_errors("list_statuses"):
            async with get_connection() as conn:
                cursor = await conn.execute(sql, params)
                rows = await cursor.fetchall()
        return [self._row_to_status(row) for row in rows]

    async def list_movements(
        self, filters: MovementFilter, limit: int = 100, offset: int = 0
    ) -> list[Movement]:
        """List movements matching the filter, newest first."""
        conditions = ["tenant_id = ?"]
        params: list = [filters.tenant_id]

        if filters.key is not None:
            conditions.append("key_canonical = ?")
            params.append(filters.key.canonical())
        if filters.material_name is not None:
            conditions.append("material_name = ?")
            params.append(filters.material_name)
        if filters.kind is not None:
            conditions.append("kind = ?")
            params.append(filters.kind.value)
        if filters.date_from is not None:
            conditions.append("occurred_at >= ?")
            params.append(filters.date_from.isoformat())
        if filters.date_to is not None:
            conditions.append("occurred_at <= ?")
            params.append(filters.date_to.isoformat())
        for column in ("supplier", "employee", "department"):
            value = getattr(filters, column)
            if value is not None:
                conditions.append(f"{column} = ?")
                params.append(value)

        sql = f"""
            SELECT * FROM stock_movements
            WHERE {" AND ".join(conditions)}
            ORDER BY occurred_at DESC, id DESC
            LIMIT ? OFFSET ?
        """
        params.extend([limit, offset])

        with storage_errors("list_movements"):
            async with get_connection() as conn:
                cursor = await conn.execute(sql, params)
                rows = await cursor.fetchall()
        return [self._row_to_movement(row) for row in rows]

    async def get_key_movements(self, key: AggregationKey) -> list[Movement]:
        """Get every movement for a key in admission order."""
        with storage_errors("get_key_movements"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM stock_movements WHERE key_canonical = ? ORDER BY id",
                    (key.canonical(),),
                )
                rows = await cursor.fetchall()
        return [self._row_to_movement(row) for row in rows]

    @staticmethod
    def _row_to_status(row: aiosqlite.Row) -> StockStatusRecord:
        """Convert a database row to a StockStatusRecord entity."""
        return StockStatusRecord(
            id=row["id"],
            key=AggregationKey.from_canonical(row["key_canonical"]),
            total_entry=Decimal(row["total_entry"]),
            total_output=Decimal(row["total_output"]),
            critical_level=Decimal(row["critical_level"]),
            unit=row["unit"] or "",
            version=row["version"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> Movement:
        """Convert a database row to a Movement entity."""
        return Movement(
            id=row["id"],
            kind=MovementKind(row["kind"]),
            key=AggregationKey.from_canonical(row["key_canonical"]),
            quantity=Decimal(row["quantity"]),
            unit=row["unit"] or "",
            unit_price=_dec(row["unit_price"]),
            critical_level_hint=_dec(row["critical_level_hint"]),
            occurred_at=_parse_datetime(row["occurred_at"]),
            reference=row["reference"],
            note=row["note"],
            supplier=row["supplier"],
            category=row["category"],
            employee=row["employee"],
            department=row["department"],
            issued_by=row["issued_by"],
            created_at=_parse_datetime(row["created_at"]),
        )
