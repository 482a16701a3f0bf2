"""Pytest configuration and fixtures."""

from collections.abc import Callable, Generator
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from stockledger.application.services import reset_services
from stockledger.config import reset_settings
from stockledger.core.entities.inventory import (
    AggregationKey,
    Movement,
    MovementKind,
    StockStatusRecord,
)


@pytest.fixture(autouse=True)
def isolated_settings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Point settings at a temporary data dir and drop cached singletons."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


@pytest.fixture
def bolt_key() -> AggregationKey:
    """Key for material "Bolt" of tenant T1 with no optional dimensions."""
    return AggregationKey(tenant_id="T1", material_name="Bolt")


@pytest.fixture
def make_movement() -> Callable[..., Movement]:
    """Factory for movements with Decimal quantities."""

    def _make(
        key: AggregationKey,
        kind: MovementKind,
        quantity: str | Decimal,
        **kwargs,
    ) -> Movement:
        return Movement(kind=kind, key=key, quantity=Decimal(quantity), **kwargs)

    return _make


@pytest.fixture
def make_record() -> Callable[..., StockStatusRecord]:
    """Factory for stored status records."""

    def _make(
        key: AggregationKey,
        total_entry: str = "0",
        total_output: str = "0",
        critical_level: str = "0",
        version: int = 1,
        **kwargs,
    ) -> StockStatusRecord:
        now = datetime.utcnow()
        return StockStatusRecord(
            id=kwargs.pop("id", 1),
            key=key,
            total_entry=Decimal(total_entry),
            total_output=Decimal(total_output),
            critical_level=Decimal(critical_level),
            version=version,
            created_at=now,
            updated_at=now,
            **kwargs,
        )

    return _make
