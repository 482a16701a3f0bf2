"""
Schema migrations and consistency checks for the ledger database.

Migrations are ``vNNN_name.sql`` files beside this module. They run in
version order and are recorded with a content checksum in
``schema_migrations``; a file edited after it was applied is reported, never
re-run.

``verify_ledger`` goes further than SQLite's own integrity check: every
status row must equal the fold of its movement log and must never show
negative stock.
"""

import asyncio
import hashlib
import re
import shutil
import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
FILENAME_PATTERN = re.compile(r"v(\d+)_(\w+)\.sql")

LEDGER_TABLES = ("stock_status", "stock_movements", "price_rules")


@dataclass(frozen=True)
class Migration:
    """One versioned SQL file."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def load(cls, path: Path) -> "Migration":
        match = FILENAME_PATTERN.fullmatch(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest)


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class LedgerCheck:
    """Outcome of one consistency check; ``keys`` names offending status lines."""

    name: str
    passed: bool
    keys: list[str] = field(default_factory=list)
    detail: str | None = None


def discover_migrations() -> list[Migration]:
    """Bundled migrations in version order; misnamed files are skipped."""
    migrations = []
    for path in MIGRATIONS_DIR.glob("v*.sql"):
        try:
            migrations.append(Migration.load(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(migrations, key=lambda m: int(m.version))


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to the checksum they were applied with."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}  # fresh database
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def _apply(conn: aiosqlite.Connection, migration: Migration) -> MigrationResult:
    start = time.perf_counter()
    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        elapsed = int((time.perf_counter() - start) * 1000)
        await conn.execute(
            "INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            migration.version,
            migration.name,
            success=False,
            execution_time_ms=int((time.perf_counter() - start) * 1000),
            error=str(e),
        )

    logger.info("migration_applied", version=migration.version, name=migration.name, ms=elapsed)
    return MigrationResult(migration.version, migration.name, True, elapsed)


def _backup(db_path: Path) -> Path:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply pending migrations, stopping at the first failure.

    An existing database is copied aside first when anything is pending. If
    a migration fails the copy is restored and kept next to the database.

    Returns:
        Results for the migrations attempted in this run
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    migrations = discover_migrations()

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)
    for m in migrations:
        if m.version in applied and applied[m.version] != m.checksum:
            logger.warning("migration_checksum_changed", version=m.version, name=m.name)
    pending = [m for m in migrations if m.version not in applied]
    if not pending:
        logger.info("database_up_to_date", db_path=str(db_path))
        return []

    backup_path = None
    if create_backup_before and applied:
        backup_path = _backup(db_path)

    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        for migration in pending:
            result = await _apply(conn, migration)
            results.append(result)
            if not result.success:
                break

    if backup_path is not None:
        if all(r.success for r in results):
            backup_path.unlink()
        else:
            shutil.copy2(backup_path, db_path)
            logger.error("database_restored_from_backup", backup_path=str(backup_path))
    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Applied, pending and changed migration versions."""
    db_path = db_path or get_settings().storage.db_path
    migrations = discover_migrations()

    applied: dict[str, str] = {}
    if db_path.exists():
        async with aiosqlite.connect(db_path) as conn:
            applied = await get_applied_migrations(conn)

    return {
        "exists": db_path.exists(),
        "current_version": max(applied, key=int) if applied else None,
        "applied_migrations": sorted(applied, key=int),
        "pending_migrations": [m.version for m in migrations if m.version not in applied],
        "changed_migrations": [
            m.version for m in migrations if m.version in applied and applied[m.version] != m.checksum
        ],
    }


async def _ledger_drift(conn: aiosqlite.Connection) -> tuple[list[str], list[str]]:
    """Keys whose totals differ from their movement log, and keys below zero."""
    logged: dict[str, dict[str, Decimal]] = {}
    cursor = await conn.execute("SELECT key_canonical, kind, quantity FROM stock_movements")
    for key, kind, quantity in await cursor.fetchall():
        sums = logged.setdefault(key, {"entry": Decimal("0"), "output": Decimal("0")})
        sums[kind] += Decimal(quantity)

    drifted, negative = [], []
    cursor = await conn.execute(
        "SELECT key_canonical, total_entry, total_output FROM stock_status ORDER BY id"
    )
    for key, total_entry, total_output in await cursor.fetchall():
        entry, output = Decimal(total_entry), Decimal(total_output)
        sums = logged.get(key, {"entry": Decimal("0"), "output": Decimal("0")})
        if (entry, output) != (sums["entry"], sums["output"]):
            drifted.append(key)
        if entry - output < 0:
            negative.append(key)
    return drifted, negative


async def verify_ledger(db_path: Path | None = None) -> list[LedgerCheck]:
    """
    Check the database file and the ledger invariants.

    The ledger checks run only when the ledger tables exist.
    """
    db_path = db_path or get_settings().storage.db_path
    checks: list[LedgerCheck] = []

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA integrity_check")
        result = (await cursor.fetchone())[0]
        checks.append(LedgerCheck("sqlite_integrity", result == "ok", detail=result))

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in LEDGER_TABLES if t not in tables]
        checks.append(
            LedgerCheck("ledger_tables", not missing, detail=", ".join(missing) or None)
        )
        if missing:
            return checks

        cursor = await conn.execute(
            "SELECT DISTINCT m.key_canonical FROM stock_movements m "
            "LEFT JOIN stock_status s ON s.id = m.status_id WHERE s.id IS NULL"
        )
        orphans = [row[0] for row in await cursor.fetchall()]
        checks.append(LedgerCheck("movements_have_status", not orphans, keys=orphans))

        drifted, negative = await _ledger_drift(conn)
        checks.append(LedgerCheck("totals_match_movements", not drifted, keys=drifted))
        checks.append(LedgerCheck("stock_not_negative", not negative, keys=negative))

    for check in checks:
        if not check.passed:
            logger.warning("ledger_check_failed", check=check.name, keys=check.keys, detail=check.detail)
    return checks


def main() -> None:
    """CLI entry point: migrate (default), --status or --verify."""
    import argparse

    parser = argparse.ArgumentParser(description="Stock ledger database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--status", action="store_true", help="Show applied and pending versions")
    parser.add_argument("--verify", action="store_true", help="Check totals against the movement log")
    parser.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    args = parser.parse_args()

    async def run() -> int:
        if args.status:
            status = await get_migration_status(args.db_path)
            for label in ("current_version", "applied_migrations", "pending_migrations", "changed_migrations"):
                print(f"{label}: {status[label]}")
            return 0

        if args.verify:
            checks = await verify_ledger(args.db_path)
            for check in checks:
                print(f"[{'PASS' if check.passed else 'FAIL'}] {check.name}")
                for key in check.keys:
                    print(f"       {key}")
                if check.detail and not check.passed:
                    print(f"       {check.detail}")
            return 0 if all(c.passed for c in checks) else 1

        results = await initialize_database(args.db_path, create_backup_before=not args.no_backup)
        if not results:
            print("Database is up to date.")
        for result in results:
            outcome = "SUCCESS" if result.success else "FAILED"
            print(f"[{outcome}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
            if result.error:
                print(f"         Error: {result.error}")
        return 0 if all(r.success for r in results) else 1

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
