#!/usr/bin/env python3
"""
Stock ledger management CLI.

Usage:
    python manage.py serve        Run migrations and start the API server
    python manage.py dev          Start the API server with reload
    python manage.py migrate      Apply pending database migrations
    python manage.py low-stock    List red status lines for a tenant
    python manage.py rebuild      Recompute a status line from its movements
"""

import argparse
import asyncio
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


def _uvicorn_cmd(host: str, port: int, reload: bool = False) -> list[str]:
    cmd = [
        sys.executable, "-m", "uvicorn",
        "stockledger.api.main:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the server in the foreground."""
    print(f"Starting server on {args.host}:{args.port}...")
    sys.exit(subprocess.call(_uvicorn_cmd(args.host, args.port), cwd=str(ROOT_DIR)))


def cmd_dev(args: argparse.Namespace) -> None:
    """Start the server with auto-reload."""
    print(f"Starting server on {args.host}:{args.port} (reload mode)...")
    try:
        subprocess.call(_uvicorn_cmd(args.host, args.port, reload=True), cwd=str(ROOT_DIR))
    except KeyboardInterrupt:
        print("\nServer stopped.")


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from stockledger.infrastructure.storage.sqlite.migrations import initialize_database

    results = asyncio.run(initialize_database(create_backup_before=not args.no_backup))
    if not results:
        print("Database is up to date.")
    for result in results:
        status = "SUCCESS" if result.success else "FAILED"
        print(f"[{status}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    if any(not r.success for r in results):
        sys.exit(1)


async def _low_stock(tenant_id: str) -> None:
    from stockledger.application.services import get_stock_ledger_service
    from stockledger.core.entities.inventory import HealthStatus
    from stockledger.infrastructure.storage.sqlite import close_pool

    try:
        ledger = await get_stock_ledger_service()
        records = await ledger.list_statuses(tenant_id, status=HealthStatus.RED, limit=1000)
        if not records:
            print("No stock lines at or below their critical level.")
        for record in records:
            print(
                f"{record.key.material_name:<40} "
                f"{record.current_stock:>12} {record.unit:<6} "
                f"(critical {record.critical_level})"
            )
    finally:
        await close_pool()


def cmd_low_stock(args: argparse.Namespace) -> None:
    """Print red status lines."""
    asyncio.run(_low_stock(args.tenant))


async def _rebuild(args: argparse.Namespace) -> None:
    from stockledger.application.services import get_stock_ledger_service
    from stockledger.core.entities.inventory import AggregationKey
    from stockledger.infrastructure.storage.sqlite import close_pool

    key = AggregationKey(
        tenant_id=args.tenant,
        material_name=args.material,
        warehouse=args.warehouse,
        sku=args.sku,
        variant=args.variant,
        bin_code=args.bin_code,
    )
    try:
        ledger = await get_stock_ledger_service()
        record = await ledger.rebuild(key)
        print(
            f"Rebuilt {key.material_name}: entry {record.total_entry}, "
            f"output {record.total_output}, stock {record.current_stock} "
            f"({record.status.value})"
        )
    finally:
        await close_pool()


def cmd_rebuild(args: argparse.Namespace) -> None:
    """Recompute one status line from the movement log."""
    asyncio.run(_rebuild(args))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Stock ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p_serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    p_serve.set_defaults(func=cmd_serve)

    # dev
    p_dev = sub.add_parser("dev", help="Start the API server with reload")
    p_dev.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    p_dev.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    p_dev.set_defaults(func=cmd_dev)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip database backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # low-stock
    p_low = sub.add_parser("low-stock", help="List red status lines")
    p_low.add_argument("--tenant", required=True, help="Tenant ID")
    p_low.set_defaults(func=cmd_low_stock)

    # rebuild
    p_rebuild = sub.add_parser("rebuild", help="Recompute a status line from movements")
    p_rebuild.add_argument("--tenant", required=True, help="Tenant ID")
    p_rebuild.add_argument("--material", required=True, help="Exact material name")
    p_rebuild.add_argument("--warehouse", default=None)
    p_rebuild.add_argument("--sku", default=None)
    p_rebuild.add_argument("--variant", default=None)
    p_rebuild.add_argument("--bin-code", dest="bin_code", default=None)
    p_rebuild.set_defaults(func=cmd_rebuild)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
