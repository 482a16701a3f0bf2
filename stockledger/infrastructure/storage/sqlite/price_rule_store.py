"""SQLite implementation of price rule storage."""

import uuid
from datetime import date, datetime
from decimal import Decimal

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.entities.pricing import (
    CustomerScope,
    GeneralScope,
    GroupScope,
    PriceRule,
)
from stockledger.core.interfaces.price_rule_store import IPriceRuleStore
from stockledger.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from stockledger.infrastructure.storage.sqlite.inventory_store import storage_errors

logger = get_logger(__name__)


class SQLitePriceRuleStore(IPriceRuleStore):
    """SQLite implementation of price rule storage."""

    async def add_rule(self, rule: PriceRule) -> PriceRule:
        """Persist a new rule with a generated id."""
        now = datetime.utcnow()
        rule = rule.model_copy(
            update={"id": rule.id or uuid.uuid4().hex, "created_at": now, "updated_at": now}
        )
        scope = rule.scope
        with storage_errors("add_rule"):
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO price_rules (
                        id, tenant_id, material_name, sku, scope_kind,
                        customer_id, customer_group, price, currency,
                        discount_percent, min_quantity, start_date, end_date,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        rule.id,
                        rule.tenant_id,
                        rule.material_name,
                        rule.sku,
                        scope.kind,
                        scope.customer_id if isinstance(scope, CustomerScope) else None,
                        scope.group if isinstance(scope, GroupScope) else None,
                        str(rule.price),
                        rule.currency,
                        str(rule.discount_percent) if rule.discount_percent is not None else None,
                        str(rule.min_quantity) if rule.min_quantity is not None else None,
                        rule.start_date.isoformat() if rule.start_date else None,
                        rule.end_date.isoformat() if rule.end_date else None,
                        now.isoformat(),
                        now.isoformat(),
                    ),
                )
        logger.info(
            "price_rule_created",
            rule_id=rule.id,
            material_name=rule.material_name,
            scope=scope.kind,
        )
        return rule

    async def get_rule(self, rule_id: str) -> PriceRule | None:
        """Get a rule by ID."""
        with storage_errors("get_rule"):
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM price_rules WHERE id = ?", (rule_id,)
                )
                row = await cursor.fetchone()
        return self._row_to_rule(row) if row else None

    async def list_rules(
        self,
        tenant_id: str,
        material_name: str | None = None,
    ) -> list[PriceRule]:
        """List a tenant's rules in creation order."""
        sql = "SELECT * FROM price_rules WHERE tenant_id = ?"
        params: list = [tenant_id]
        if material_name is not None:
            sql += " AND material_name = ?"
            params.append(material_name)
        sql += " ORDER BY created_at, rowid"

        with storage_errors("list_rules"):
            async with get_connection() as conn:
                cursor = await conn.execute(sql, params)
                rows = await cursor.fetchall()
        return [self._row_to_rule(row) for row in rows]

    async def delete_rule(self, rule_id: str) -> bool:
        """Delete a rule. Returns False if it did not exist."""
        with storage_errors("delete_rule"):
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    "DELETE FROM price_rules WHERE id = ?", (rule_id,)
                )
                deleted = cursor.rowcount > 0
        if deleted:
            logger.info("price_rule_deleted", rule_id=rule_id)
        return deleted

    @staticmethod
    def _row_to_rule(row: aiosqlite.Row) -> PriceRule:
        """Convert a database row to a PriceRule entity."""
        kind = row["scope_kind"]
        if kind == "customer":
            scope = CustomerScope(customer_id=row["customer_id"])
        elif kind == "group":
            scope = GroupScope(group=row["customer_group"])
        else:
            scope = GeneralScope()

        return PriceRule(
            id=row["id"],
            tenant_id=row["tenant_id"],
            material_name=row["material_name"],
            sku=row["sku"],
            scope=scope,
            price=Decimal(row["price"]),
            currency=row["currency"],
            discount_percent=(
                Decimal(row["discount_percent"]) if row["discount_percent"] is not None else None
            ),
            min_quantity=(
                Decimal(row["min_quantity"]) if row["min_quantity"] is not None else None
            ),
            start_date=date.fromisoformat(row["start_date"]) if row["start_date"] else None,
            end_date=date.fromisoformat(row["end_date"]) if row["end_date"] else None,
            created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
            updated_at=datetime.fromisoformat(row["updated_at"]) if row["updated_at"] else None,
        )
