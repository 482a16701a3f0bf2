"""
Stock ledger service.

Keeps one StockStatusRecord per aggregation key in step with the append-only
movement log. Every admission is a read / validate / compare-and-swap cycle:
the validator sees exactly the record the write replaces, and a lost race is
retried against fresh totals instead of overwriting them.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from tenacity import (
    RetryCallState,
    RetryError,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stockledger.config import get_logger
from stockledger.core.entities.inventory import (
    AggregationKey,
    HealthStatus,
    Movement,
    MovementKind,
    StockStatusRecord,
)
from stockledger.core.exceptions import (
    ConcurrencyConflictError,
    LedgerTimeoutError,
    StockStatusNotFoundError,
    StorageUnavailableError,
)
from stockledger.core.interfaces.inventory_store import IStockLedgerStore, MovementFilter
from stockledger.core.services.movement_validator import validate_movement

logger = get_logger(__name__)


@dataclass
class _Admission:
    """Write issued by the current attempt of one apply() call, if any."""

    commit: asyncio.Future | None = None


def fold_movement(
    current: StockStatusRecord | None,
    movement: Movement,
    default_critical_ratio: Decimal = Decimal("0"),
) -> StockStatusRecord:
    """
    Return the record that results from applying a movement.

    Does not validate; callers run validate_movement first. The returned
    record keeps the version of ``current`` so the store can compare-and-swap.
    """
    now = datetime.utcnow()
    if current is None:
        record = StockStatusRecord(
            key=movement.key,
            unit=movement.unit,
            created_at=now,
            updated_at=now,
        )
    else:
        record = current.model_copy()
        record.updated_at = now

    if movement.kind == MovementKind.ENTRY:
        record.total_entry = record.total_entry + movement.quantity
        hint = movement.critical_level_hint
        if hint is not None and hint > 0:
            record.critical_level = hint
        elif current is None:
            record.critical_level = movement.quantity * default_critical_ratio
    else:
        record.total_output = record.total_output + movement.quantity

    if movement.unit:
        record.unit = movement.unit
    return record


class StockLedgerService:
    """
    Movement admission and stock status reads.

    Required interfaces for DI:
    - IStockLedgerStore: status records + movement log with CAS writes
    """

    DEFAULT_MAX_RETRIES = 5
    DEFAULT_RETRY_DELAY = 0.01
    DEFAULT_APPLY_TIMEOUT = 5.0
    DEFAULT_CRITICAL_RATIO = 0.2

    def __init__(
        self,
        store: IStockLedgerStore,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        apply_timeout: float | None = None,
        default_critical_ratio: float | None = None,
    ):
        """
        Initialize the ledger with injected storage.

        Args:
            store: Ledger storage implementation
            max_retries: Extra attempts after a concurrency conflict. Default 5.
            retry_delay: Base backoff in seconds, doubled per attempt. Default 0.01.
            apply_timeout: Time budget for one apply() in seconds. Default 5.0.
            default_critical_ratio: Critical level seed as a fraction of the
                first entry when no hint is given. Default 0.2; 0 disables.
        """
        self._store = store
        self._max_retries = (
            max_retries if max_retries is not None else self.DEFAULT_MAX_RETRIES
        )
        self._retry_delay = (
            retry_delay if retry_delay is not None else self.DEFAULT_RETRY_DELAY
        )
        self._apply_timeout = (
            apply_timeout if apply_timeout is not None else self.DEFAULT_APPLY_TIMEOUT
        )
        ratio = (
            default_critical_ratio
            if default_critical_ratio is not None
            else self.DEFAULT_CRITICAL_RATIO
        )
        self._critical_ratio = Decimal(str(ratio))

    def _cas_retry(self):
        return retry(
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                max=self._retry_delay * 8,
            ),
            retry=retry_if_exception_type(ConcurrencyConflictError),
            before_sleep=self._log_conflict,
        )

    @staticmethod
    def _log_conflict(retry_state: RetryCallState) -> None:
        logger.warning(
            "stock_cas_conflict",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def apply(
        self,
        movement: Movement,
        timeout: float | None = None,
    ) -> StockStatusRecord:
        """
        Admit a movement and return the updated status record.

        The time budget covers reads, validation and conflict backoff. A write
        that has already been issued when the budget runs out is not
        cancelled; its outcome decides the result.

        Raises:
            MovementRejectedError: Movement failed validation (never retried)
            LedgerTimeoutError: Time budget exhausted; nothing was committed
            StorageUnavailableError: Store failed or conflicts did not settle
        """
        limit = timeout if timeout is not None else self._apply_timeout
        admission = _Admission()
        try:
            record = await asyncio.wait_for(
                self._apply_with_retry(movement, admission), timeout=limit
            )
        except asyncio.TimeoutError:
            record = await self._settle_after_timeout(movement, admission, limit)

        logger.info(
            "movement_applied",
            key=record.key.canonical(),
            kind=movement.kind.value,
            quantity=str(movement.quantity),
            current_stock=str(record.current_stock),
            status=record.status.value,
        )
        return record

    async def _settle_after_timeout(
        self,
        movement: Movement,
        admission: _Admission,
        limit: float,
    ) -> StockStatusRecord:
        if admission.commit is None:
            logger.error("movement_apply_timeout", key=movement.key.canonical(), timeout=limit)
            raise LedgerTimeoutError(limit)

        try:
            record, _ = await admission.commit
        except ConcurrencyConflictError:
            # Lost race rolled back; no time left for another attempt
            logger.error("movement_apply_timeout", key=movement.key.canonical(), timeout=limit)
            raise LedgerTimeoutError(limit)

        logger.warning(
            "movement_committed_after_timeout",
            key=movement.key.canonical(),
            timeout=limit,
        )
        return record

    async def _apply_with_retry(
        self,
        movement: Movement,
        admission: _Admission,
    ) -> StockStatusRecord:
        try:
            return await self._cas_retry()(self._apply_once)(movement, admission)
        except RetryError as e:
            raise StorageUnavailableError(
                "apply",
                f"{self._max_retries + 1} conflicting attempts",
            ) from e

    async def _apply_once(self, movement: Movement, admission: _Admission) -> StockStatusRecord:
        admission.commit = None
        current = await self._store.get_status(movement.key)

        rejection = validate_movement(movement, current)
        if rejection is not None:
            logger.info(
                "movement_rejected",
                key=movement.key.canonical(),
                reason=rejection.reason.value,
                available=str(rejection.available) if rejection.available is not None else None,
                requested=str(rejection.requested) if rejection.requested is not None else None,
            )
            raise rejection.to_error()

        updated = fold_movement(current, movement, self._critical_ratio)
        # Once issued, the write runs to completion even if apply() times out
        admission.commit = asyncio.ensure_future(
            self._store.commit_movement(
                updated,
                current.version if current is not None else None,
                movement,
            )
        )
        record, _ = await asyncio.shield(admission.commit)
        return record

    async def read(self, key: AggregationKey) -> StockStatusRecord | None:
        """Current status record for a key, or None if never seen."""
        return await self._store.get_status(key)

    async def list_statuses(
        self,
        tenant_id: str,
        status: HealthStatus | None = None,
        material_name: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockStatusRecord]:
        """
        List status records sorted by material name.

        Status is derived, so a status filter is applied after loading the
        tenant's records and pagination follows the filter.
        """
        if status is None:
            return await self._store.list_statuses(
                tenant_id, material_name=material_name, limit=limit, offset=offset
            )

        records = await self._store.list_statuses(tenant_id, material_name=material_name)
        matching = [r for r in records if r.status == status]
        return matching[offset : offset + limit]

    async def list_movements(
        self,
        filters: MovementFilter,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Movement]:
        """Movement history, newest first."""
        return await self._store.list_movements(filters, limit=limit, offset=offset)

    async def rebuild(self, key: AggregationKey) -> StockStatusRecord:
        """
        Recompute a record's totals from the movement log.

        Raises:
            StockStatusNotFoundError: No record exists for the key
        """
        try:
            record = await self._cas_retry()(self._rebuild_once)(key)
        except RetryError as e:
            raise StorageUnavailableError(
                "rebuild",
                f"{self._max_retries + 1} conflicting attempts",
            ) from e

        logger.info(
            "stock_status_rebuilt",
            key=key.canonical(),
            total_entry=str(record.total_entry),
            total_output=str(record.total_output),
        )
        return record

    async def _rebuild_once(self, key: AggregationKey) -> StockStatusRecord:
        current = await self._store.get_status(key)
        if current is None:
            raise StockStatusNotFoundError(key.canonical())

        replayed: StockStatusRecord | None = None
        for movement in await self._store.get_key_movements(key):
            replayed = fold_movement(replayed, movement, self._critical_ratio)

        rebuilt = current.model_copy()
        rebuilt.updated_at = datetime.utcnow()
        if replayed is None:
            rebuilt.total_entry = Decimal("0")
            rebuilt.total_output = Decimal("0")
        else:
            rebuilt.total_entry = replayed.total_entry
            rebuilt.total_output = replayed.total_output
            rebuilt.critical_level = replayed.critical_level

        if rebuilt.total_entry != current.total_entry or rebuilt.total_output != current.total_output:
            logger.warning(
                "stock_status_drift",
                key=key.canonical(),
                stored_entry=str(current.total_entry),
                stored_output=str(current.total_output),
                replayed_entry=str(rebuilt.total_entry),
                replayed_output=str(rebuilt.total_output),
            )

        return await self._store.replace_totals(rebuilt, current.version)
