"""Savings and efficiency metrics for one planning run.

overlap_efficiency  base-unit quantity of pool entries needed by two or more
                    groups, as a percentage of all pooled quantity.
                    Quantities are summed across unit classes as they
                    stand (grams, millilitres and pieces alike), so mass and
                    volume entries dominate count items.
cost_savings        naive cost (one grocery list per group) minus the
                    consolidated list total. Loose items are priced the same
                    way on both sides, so only package rounding produces
                    savings and the value is never negative.
waste_reduction     package over-purchase cost, naive vs consolidated:
                    (naive_waste - consolidated_waste) / naive_waste * 100.
                    Merging demand before rounding up to whole packages never
                    buys more packages, so the value stays in [0, 100].
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List

from groupmeal.domain.GroceryList import GroceryList, GroceryLineItem
from groupmeal.domain.MealAssignment import MealAssignment
from groupmeal.domain.Recipe import Recipe
from groupmeal.domain.SharedIngredientPool import SharedIngredientPool
from groupmeal.logic.shopping.consolidator import GroceryConsolidator, round_price

logger = logging.getLogger(__name__)


def _percent(part, whole) -> float:
    if not whole:
        return 0.0
    return float((Decimal(str(part)) / Decimal(str(whole)) * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def waste_cost(grocery_list: GroceryList) -> Decimal:
    return sum((item.waste_cost for item in grocery_list.items), Decimal("0"))


class PlanMetrics:
    def __init__(self, overlap_efficiency: float, cost_savings: Decimal, waste_reduction: float,
                 naive_cost: Decimal, consolidated_cost: Decimal, shared_ingredients: List[dict]):
        self.overlap_efficiency = overlap_efficiency
        self.cost_savings = cost_savings
        self.waste_reduction = waste_reduction
        self.naive_cost = naive_cost
        self.consolidated_cost = consolidated_cost
        self.shared_ingredients = shared_ingredients

    def __str__(self) -> str:
        return (f"overlap {self.overlap_efficiency}% - savings {self.cost_savings} - "
                f"waste reduction {self.waste_reduction}%")

    __repr__ = __str__

    def to_dict(self):
        return {
            "overlap_efficiency": self.overlap_efficiency,
            "cost_savings": float(self.cost_savings),
            "waste_reduction": self.waste_reduction,
            "naive_cost": float(self.naive_cost),
            "consolidated_cost": float(self.consolidated_cost),
            "shared_ingredients": list(self.shared_ingredients),
        }


class MetricsCalculator:
    def __init__(self, consolidator: GroceryConsolidator):
        self.consolidator = consolidator

    def overlap_efficiency(self, pool: SharedIngredientPool) -> float:
        total = 0.0
        shared = 0.0
        for entry in pool.entries():
            total += entry.quantity
            if entry.is_shared:
                shared += entry.quantity
        return _percent(round(shared, 6), round(total, 6))

    def per_group_lists(self, assignments: Iterable[MealAssignment],
                        recipes_by_id: Dict[str, Recipe]) -> Dict[str, GroceryList]:
        by_group: Dict[str, List[MealAssignment]] = {}
        for a in assignments:
            by_group.setdefault(a.group, []).append(a)
        return {group: self.consolidator.consolidate(items, recipes_by_id, name=f"{group} shopping list")
                for group, items in by_group.items()}

    def separate_cost(self, item: GroceryLineItem, per_group: Dict[str, GroceryList]) -> Decimal:
        """What one consolidated line would cost if every group bought its own share.

        Only whole-package purchases change when demand is merged; loose items
        count at the consolidated price so per-line cent rounding cannot show
        up as a saving or a loss.
        """
        if not item.package_size or len(item.groups) < 2:
            return item.estimated_price
        separate = Decimal("0.00")
        for group in item.groups:
            own = per_group[group].find(item.key) if group in per_group else None
            if own is not None:
                separate += own.estimated_price
        # separate packages never cost less than the merged purchase
        return max(separate, item.estimated_price)

    def shared_ingredients(self, grocery_list: GroceryList, per_group: Dict[str, GroceryList]) -> List[dict]:
        """Line items used by several groups, with what buying them together saves."""
        result = []
        for item in grocery_list.items:
            if len(item.groups) < 2:
                continue
            result.append({
                "name": item.name,
                "quantity": item.quantity,
                "unit": item.unit,
                "groups": list(item.groups),
                "estimated_savings": float(self.separate_cost(item, per_group) - item.estimated_price),
            })
        return result

    def calculate(self, assignments: List[MealAssignment], recipes_by_id: Dict[str, Recipe],
                  pool: SharedIngredientPool, grocery_list: GroceryList) -> PlanMetrics:
        per_group = self.per_group_lists(assignments, recipes_by_id)
        naive_cost = sum((self.separate_cost(item, per_group) for item in grocery_list.items), Decimal("0.00"))
        consolidated_cost = grocery_list.total_cost
        naive_waste = round_price(sum((waste_cost(gl) for gl in per_group.values()), Decimal("0")))
        consolidated_waste = round_price(waste_cost(grocery_list))
        metrics = PlanMetrics(
            overlap_efficiency=self.overlap_efficiency(pool),
            cost_savings=naive_cost - consolidated_cost,
            waste_reduction=_percent(naive_waste - consolidated_waste, naive_waste),
            naive_cost=naive_cost,
            consolidated_cost=consolidated_cost,
            shared_ingredients=self.shared_ingredients(grocery_list, per_group),
        )
        logger.info("Run metrics: %s", metrics)
        return metrics


__all__ = ['PlanMetrics', 'MetricsCalculator', 'waste_cost']
