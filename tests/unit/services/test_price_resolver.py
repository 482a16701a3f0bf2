"""Tests for PriceRuleResolver."""

import random
from datetime import date
from decimal import Decimal

import pytest

from stockledger.core.entities.pricing import CustomerScope, GeneralScope, GroupScope, PriceRule
from stockledger.core.services import PriceRuleResolver, ResolutionPass

TODAY = date(2026, 6, 15)


def rule(price: str, scope=None, **kwargs) -> PriceRule:
    kwargs.setdefault("material_name", "Bolt")
    kwargs.setdefault("currency", "TRY")
    return PriceRule(price=Decimal(price), scope=scope or GeneralScope(), **kwargs)


@pytest.fixture
def resolver() -> PriceRuleResolver:
    return PriceRuleResolver()


class TestScopePriority:
    """Customer beats group beats general."""

    def test_scenario_customer_rule_wins_for_its_customer(self, resolver):
        rules = [rule("10"), rule("8", CustomerScope(customer_id="C1"))]

        chosen = resolver.resolve("Bolt", rules, customer_id="C1", as_of=TODAY)
        assert chosen.price == Decimal("8")

        chosen = resolver.resolve("Bolt", rules, customer_id="C2", as_of=TODAY)
        assert chosen.price == Decimal("10")

    def test_group_rule_beats_general(self, resolver):
        rules = [rule("10"), rule("9", GroupScope(group="wholesale"))]
        chosen = resolver.resolve(
            "Bolt", rules, customer_id="C9", customer_group="wholesale", as_of=TODAY
        )
        assert chosen.price == Decimal("9")

    def test_customer_rule_beats_group_rule(self, resolver):
        rules = [
            rule("9", GroupScope(group="wholesale")),
            rule("7", CustomerScope(customer_id="C1")),
        ]
        chosen = resolver.resolve(
            "Bolt", rules, customer_id="C1", customer_group="wholesale", as_of=TODAY
        )
        assert chosen.price == Decimal("7")

    def test_non_matching_scopes_yield_none(self, resolver):
        rules = [
            rule("7", CustomerScope(customer_id="C1")),
            rule("9", GroupScope(group="wholesale")),
        ]
        assert resolver.resolve("Bolt", rules, customer_id="C2", as_of=TODAY) is None

    def test_anonymous_query_gets_general_rule(self, resolver):
        rules = [rule("7", CustomerScope(customer_id="C1")), rule("10")]
        assert resolver.resolve("Bolt", rules, as_of=TODAY).price == Decimal("10")


class TestFiltering:
    """Material, validity window and currency."""

    def test_other_material_ignored(self, resolver):
        assert resolver.resolve("Nut", [rule("10")], as_of=TODAY) is None

    def test_empty_rule_list(self, resolver):
        assert resolver.resolve("Bolt", [], as_of=TODAY) is None

    @pytest.mark.parametrize(
        ("start", "end", "applies"),
        [
            (date(2026, 6, 15), None, True),
            (None, date(2026, 6, 15), True),
            (date(2026, 6, 16), None, False),
            (None, date(2026, 6, 14), False),
            (date(2026, 1, 1), date(2026, 12, 31), True),
        ],
    )
    def test_window_is_inclusive(self, resolver, start, end, applies):
        rules = [rule("10", start_date=start, end_date=end)]
        assert (resolver.resolve("Bolt", rules, as_of=TODAY) is not None) is applies

    def test_expired_customer_rule_falls_back_to_general(self, resolver):
        rules = [
            rule("10"),
            rule("8", CustomerScope(customer_id="C1"), end_date=date(2026, 1, 1)),
        ]
        chosen = resolver.resolve("Bolt", rules, customer_id="C1", as_of=TODAY)
        assert chosen.price == Decimal("10")

    def test_currency_filter_is_case_insensitive(self, resolver):
        rules = [rule("10", currency="TRY"), rule("0.3", currency="usd")]

        assert resolver.resolve("Bolt", rules, currency="usd", as_of=TODAY).price == Decimal("0.3")
        assert resolver.resolve("Bolt", rules, currency="try", as_of=TODAY).price == Decimal("10")
        assert resolver.resolve("Bolt", rules, currency="EUR", as_of=TODAY) is None


class TestQuantityBreaks:
    """Two-pass resolution around minimum quantities."""

    def test_scenario_break_not_met_falls_through_to_general(self, resolver):
        rules = [rule("5", GroupScope(group="wholesale"), min_quantity=Decimal("50")), rule("9")]

        resolution = resolver.explain(
            "Bolt", rules, customer_group="wholesale", quantity=Decimal("10"), as_of=TODAY
        )
        assert resolution.rule.price == Decimal("9")
        assert resolution.resolution_pass == ResolutionPass.QUANTITY_BREAK

    def test_scenario_break_met_ranks_by_scope(self, resolver):
        rules = [rule("5", GroupScope(group="wholesale"), min_quantity=Decimal("50")), rule("9")]

        chosen = resolver.resolve(
            "Bolt", rules, customer_group="wholesale", quantity=Decimal("60"), as_of=TODAY
        )
        assert chosen.price == Decimal("5")

    def test_break_rule_used_as_fallback(self, resolver):
        """The only matching rule has an unmet break: it still applies, flagged."""
        rules = [rule("5", min_quantity=Decimal("50"))]

        resolution = resolver.explain("Bolt", rules, quantity=Decimal("10"), as_of=TODAY)

        assert resolution.rule.price == Decimal("5")
        assert resolution.resolution_pass == ResolutionPass.FALLBACK
        assert resolution.quantity_break_met is False

    def test_missing_quantity_does_not_meet_break(self, resolver):
        resolution = resolver.explain(
            "Bolt", [rule("5", min_quantity=Decimal("1"))], as_of=TODAY
        )
        assert resolution.resolution_pass == ResolutionPass.FALLBACK

    def test_break_boundary_is_inclusive(self, resolver):
        resolution = resolver.explain(
            "Bolt", [rule("5", min_quantity=Decimal("50"))], quantity=Decimal("50"), as_of=TODAY
        )
        assert resolution.quantity_break_met is True


class TestTieBreaks:
    """Ordering within one scope."""

    def test_latest_start_date_wins(self, resolver):
        rules = [
            rule("10", start_date=date(2026, 1, 1)),
            rule("11", start_date=date(2026, 5, 1)),
            rule("12"),
        ]
        assert resolver.resolve("Bolt", rules, as_of=TODAY).price == Decimal("11")

    def test_missing_start_sorts_as_earliest(self, resolver):
        rules = [rule("12"), rule("10", start_date=date(2020, 1, 1))]
        assert resolver.resolve("Bolt", rules, as_of=TODAY).price == Decimal("10")

    def test_lowest_id_wins_on_equal_start(self, resolver):
        rules = [rule("10", id="b"), rule("11", id="a"), rule("12")]
        assert resolver.resolve("Bolt", rules, as_of=TODAY).id == "a"

    def test_list_order_decides_without_ids(self, resolver):
        rules = [rule("10"), rule("11")]
        assert resolver.resolve("Bolt", rules, as_of=TODAY).price == Decimal("10")

    def test_result_independent_of_input_order(self, resolver):
        rules = [
            rule(str(10 + i), id=f"r{i}", start_date=date(2026, 1 + i % 3, 1))
            for i in range(9)
        ]
        expected = resolver.resolve("Bolt", rules, as_of=TODAY)

        rng = random.Random(7)
        for _ in range(10):
            shuffled = rules[:]
            rng.shuffle(shuffled)
            assert resolver.resolve("Bolt", shuffled, as_of=TODAY) == expected
