"""Abstract interface for price rule storage."""

from abc import ABC, abstractmethod

from stockledger.core.entities.pricing import PriceRule


class IPriceRuleStore(ABC):
    """Interface for price rule persistence."""

    @abstractmethod
    async def add_rule(self, rule: PriceRule) -> PriceRule:
        """Persist a new rule and return it with its id."""
        pass

    @abstractmethod
    async def get_rule(self, rule_id: str) -> PriceRule | None:
        """Get a rule by ID."""
        pass

    @abstractmethod
    async def list_rules(
        self,
        tenant_id: str,
        material_name: str | None = None,
    ) -> list[PriceRule]:
        """List a tenant's rules, optionally restricted to one material."""
        pass

    @abstractmethod
    async def delete_rule(self, rule_id: str) -> bool:
        """Delete a rule. Returns False if it did not exist."""
        pass
