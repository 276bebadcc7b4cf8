"""
Static plan catalog: the purchasable membership tiers.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal

from gymapp.errors import PlanNotFound


@dataclass(frozen=True)
class Plan:
    """
    Catalog entry for a membership tier.

    Attributes:
        id (str): Plan identifier used by clients
        name (str): Display name
        duration_months (int): Length of one membership period
        price (Decimal): Price of one period
        features (tuple): Ordered feature list
    """
    id: str
    name: str
    duration_months: int
    price: Decimal
    features: tuple = field(default_factory=tuple)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'duration_months': self.duration_months,
            'price': float(self.price),
            'features': list(self.features),
        }


DEFAULT_PLANS = (
    Plan(
        id='monthly',
        name='Monthly Plan',
        duration_months=1,
        price=Decimal('699'),
        features=(
            'Access to all gym equipment',
            'Personal trainer consultation',
            'Group fitness classes',
            'Locker room access',
            'Fitness assessment',
        ),
    ),
    Plan(
        id='quarterly',
        name='Quarterly Plan',
        duration_months=3,
        price=Decimal('1999'),
        features=(
            'All Monthly Plan features',
            'Nutrition consultation',
            'Progress tracking',
            'Priority booking for classes',
            'Guest passes (2)',
        ),
    ),
    Plan(
        id='6month',
        name='6 Month Plan',
        duration_months=6,
        price=Decimal('3999'),
        features=(
            'All Quarterly Plan features',
            'Personalized workout plans',
            'Monthly body composition analysis',
            'Premium app features',
            'Unlimited guest passes',
        ),
    ),
)


class PlanCatalog:
    """Immutable, ordered collection of plans keyed by id."""

    def __init__(self, plans):
        catalog = OrderedDict()
        for plan in plans:
            if plan.id in catalog:
                raise ValueError(f"Duplicate plan id in catalog: {plan.id}")
            if int(plan.duration_months) < 1:
                raise ValueError(f"Plan {plan.id} must last at least one month")
            catalog[plan.id] = plan
        if not catalog:
            raise ValueError("Plan catalog cannot be empty")
        self._plans = catalog

    @classmethod
    def from_config(cls, plans=None):
        """
        Build a catalog from configuration.

        Args:
            plans (list, optional): Mappings with id, name, duration_months,
                price and features keys. None selects the built-in plans.

        Returns:
            PlanCatalog: The catalog
        """
        if plans is None:
            return cls(DEFAULT_PLANS)
        return cls(
            Plan(
                id=str(entry['id']),
                name=entry['name'],
                duration_months=int(entry['duration_months']),
                price=Decimal(str(entry.get('price', 0))),
                features=tuple(entry.get('features', ())),
            )
            for entry in plans
        )

    def get(self, plan_id):
        """
        Look up a plan.

        Raises:
            PlanNotFound: If the id is not in the catalog
        """
        try:
            return self._plans[plan_id]
        except (KeyError, TypeError):
            raise PlanNotFound(f"Membership plan not found: {plan_id}")

    def ids(self):
        return list(self._plans)

    def __iter__(self):
        return iter(self._plans.values())

    def __len__(self):
        return len(self._plans)

    def __contains__(self, plan_id):
        return plan_id in self._plans
