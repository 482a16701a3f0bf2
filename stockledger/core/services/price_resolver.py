"""
Price rule resolver.

Layer-pure: works on an already-fetched, tenant-filtered rule list and never
touches storage. Resolution is deterministic for a fixed rule list and query.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from stockledger.config import get_logger
from stockledger.core.entities.pricing import PriceRule

logger = get_logger(__name__)


class ResolutionPass(str, Enum):
    """Which candidate set produced the rule."""

    QUANTITY_BREAK = "quantity_break"  # minimum quantities honored
    FALLBACK = "fallback"  # minimum quantities ignored


@dataclass(frozen=True)
class PriceResolution:
    """A resolved rule plus how it was reached."""

    rule: PriceRule
    resolution_pass: ResolutionPass

    @property
    def quantity_break_met(self) -> bool:
        return self.resolution_pass == ResolutionPass.QUANTITY_BREAK


def _rank_key(indexed: tuple[int, PriceRule]) -> tuple:
    position, rule = indexed
    start = rule.start_date.toordinal() if rule.start_date is not None else 0
    return (
        rule.scope.priority,
        -start,  # later start date first; missing start sorts as earliest
        rule.id is None,  # rules with an id before rules without
        rule.id or "",
        position,
    )


def _pick(
    candidates: Sequence[tuple[int, PriceRule]],
    customer_id: str | None,
    customer_group: str | None,
) -> PriceRule | None:
    for _, rule in sorted(candidates, key=_rank_key):
        if rule.scope.matches(customer_id, customer_group):
            return rule
    return None


class PriceRuleResolver:
    """
    Selects at most one applicable price rule.

    Order of consideration: customer rules, then group rules, then general
    rules; within a scope the most recent start date wins, then the lowest
    rule id, then list order. A rule is only returned if its scope matches
    the query.
    """

    def explain(
        self,
        material_name: str,
        rules: Iterable[PriceRule],
        customer_id: str | None = None,
        customer_group: str | None = None,
        quantity: Decimal | None = None,
        currency: str | None = None,
        as_of: date | None = None,
    ) -> PriceResolution | None:
        """
        Resolve a rule and report whether its quantity break was met.

        Args:
            material_name: Exact material name
            rules: Candidate rules (already scoped to the tenant)
            customer_id: Customer placing the order, if known
            customer_group: That customer's group, if any
            quantity: Ordered quantity; rules with a minimum need it
            currency: Restrict to rules priced in this currency
            as_of: Evaluation date (default today)

        Returns:
            PriceResolution, or None when no rule applies
        """
        as_of = as_of or date.today()
        wanted_currency = currency.strip().upper() if currency else None

        candidates = [
            (position, rule)
            for position, rule in enumerate(rules)
            if rule.material_name == material_name
            and rule.in_window(as_of)
            and (wanted_currency is None or rule.currency == wanted_currency)
        ]

        with_break = [c for c in candidates if c[1].meets_quantity_break(quantity)]
        rule = _pick(with_break, customer_id, customer_group)
        if rule is not None:
            resolution = PriceResolution(rule, ResolutionPass.QUANTITY_BREAK)
        else:
            rule = _pick(candidates, customer_id, customer_group)
            if rule is None:
                logger.debug(
                    "price_rule_not_found",
                    material_name=material_name,
                    candidates=len(candidates),
                )
                return None
            resolution = PriceResolution(rule, ResolutionPass.FALLBACK)

        logger.debug(
            "price_rule_resolved",
            material_name=material_name,
            rule_id=rule.id,
            scope=rule.scope.kind,
            resolution_pass=resolution.resolution_pass.value,
        )
        return resolution

    def resolve(
        self,
        material_name: str,
        rules: Iterable[PriceRule],
        customer_id: str | None = None,
        customer_group: str | None = None,
        quantity: Decimal | None = None,
        currency: str | None = None,
        as_of: date | None = None,
    ) -> PriceRule | None:
        """Resolve the applicable rule, or None. Never raises for a missing match."""
        resolution = self.explain(
            material_name,
            rules,
            customer_id=customer_id,
            customer_group=customer_group,
            quantity=quantity,
            currency=currency,
            as_of=as_of,
        )
        return resolution.rule if resolution is not None else None
