"""Tests for SQLitePriceRuleStore."""

from datetime import date
from decimal import Decimal

from stockledger.core.entities.pricing import CustomerScope, GeneralScope, GroupScope, PriceRule


def _rule(**kwargs) -> PriceRule:
    kwargs.setdefault("tenant_id", "T1")
    kwargs.setdefault("material_name", "Bolt")
    kwargs.setdefault("price", Decimal("10"))
    kwargs.setdefault("currency", "TRY")
    return PriceRule(**kwargs)


class TestSQLitePriceRuleStore:
    async def test_add_and_get_round_trip(self, rule_store):
        """Every field survives storage, including the scope."""
        created = await rule_store.add_rule(
            _rule(
                scope=CustomerScope(customer_id="C1"),
                price=Decimal("8.125"),
                discount_percent=Decimal("12.5"),
                min_quantity=Decimal("50"),
                start_date=date(2026, 1, 1),
                end_date=date(2026, 12, 31),
                sku="B-10",
            )
        )

        fetched = await rule_store.get_rule(created.id)

        assert created.id
        assert fetched.scope == CustomerScope(customer_id="C1")
        assert fetched.price == Decimal("8.125")
        assert fetched.discount_percent == Decimal("12.5")
        assert fetched.min_quantity == Decimal("50")
        assert fetched.start_date == date(2026, 1, 1)
        assert fetched.end_date == date(2026, 12, 31)
        assert fetched.sku == "B-10"
        assert fetched.created_at is not None

    async def test_get_missing(self, rule_store):
        assert await rule_store.get_rule("missing") is None

    async def test_list_filters_and_order(self, rule_store):
        first = await rule_store.add_rule(_rule(scope=GroupScope(group="wholesale")))
        second = await rule_store.add_rule(_rule())
        await rule_store.add_rule(_rule(material_name="Nut"))
        await rule_store.add_rule(_rule(tenant_id="T2"))

        rules = await rule_store.list_rules(tenant_id="T1", material_name="Bolt")

        assert [r.id for r in rules] == [first.id, second.id]
        assert rules[0].scope == GroupScope(group="wholesale")
        assert rules[1].scope == GeneralScope()
        assert [r.tenant_id for r in await rule_store.list_rules(tenant_id="T2")] == ["T2"]

    async def test_list_never_crosses_tenants(self, rule_store):
        await rule_store.add_rule(_rule(tenant_id="OTHER", price=Decimal("1")))

        assert await rule_store.list_rules(tenant_id="T1", material_name="Bolt") == []

    async def test_delete(self, rule_store):
        created = await rule_store.add_rule(_rule())

        assert await rule_store.delete_rule(created.id) is True
        assert await rule_store.delete_rule(created.id) is False
        assert await rule_store.get_rule(created.id) is None
