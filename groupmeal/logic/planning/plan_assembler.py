"""Plan assembly: fills every (date, meal type) slot of one group's plan.

Slots are walked in calendar order, then meal-type declaration order. Each slot
takes the best-scored admissible recipe that was not used by the group in the
last W = duration // 2 days; when that window leaves nothing, the full
candidate list is used and the plan is warned about repeats.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Set, Tuple, TypeVar

from groupmeal.domain.errors import BudgetInfeasible, PlanWarning, REPEATS, BUDGET_EXCEEDED
from groupmeal.domain.MealAssignment import MealAssignment
from groupmeal.domain.MealPlanGroup import MealPlanGroup
from groupmeal.domain.Recipe import Recipe
from groupmeal.logic.planning.overlap_scorer import OverlapScorer, slot_cost

logger = logging.getLogger(__name__)

T = TypeVar("T")


def filter_with_fallback(items: List[T], predicate: Callable[[T], bool]) -> Tuple[List[T], bool]:
    """Items passing `predicate`; all items (and True) when none passes."""
    kept = [item for item in items if predicate(item)]
    if kept or not items:
        return kept, False
    return list(items), True


def no_repeat_window(duration_days: int) -> int:
    return duration_days // 2


def recently_used(history: Dict[str, List[date]], slot_date: date, window: int) -> Set[str]:
    """Recipe ids used on a date d with 0 <= (slot_date - d).days < window."""
    used = set()
    for recipe_id, dates in history.items():
        if any(0 <= (slot_date - d).days < window for d in dates):
            used.add(recipe_id)
    return used


class AssembledPlan:
    def __init__(self, group: MealPlanGroup):
        self.group = group
        self.assignments: List[MealAssignment] = []
        self.warnings: List[PlanWarning] = []
        self.remaining_budget: Optional[Decimal] = group.budget

    @property
    def total_cost(self) -> Decimal:
        return sum((a.estimated_cost for a in self.assignments), Decimal("0.00"))

    def recipe_ids(self) -> List[str]:
        return [a.recipe_id for a in self.assignments]

    def __str__(self) -> str:
        return f"{self.group.name}: {len(self.assignments)} meals, {self.total_cost}"

    __repr__ = __str__

    def to_dict(self):
        return {
            "group": self.group.name,
            "total_cost": float(self.total_cost),
            "remaining_budget": float(self.remaining_budget) if self.remaining_budget is not None else None,
            "assignments": [a.to_dict() for a in self.assignments],
            "warnings": [w.to_dict() for w in self.warnings],
        }


class PlanAssembler:
    def __init__(self, scorer: Optional[OverlapScorer] = None):
        self.scorer = scorer or OverlapScorer()

    def cheapest_total(self, group: MealPlanGroup, candidates_by_type: Dict[str, List[Recipe]]) -> Decimal:
        """Lowest possible plan cost, ignoring the no-repeat window."""
        total = Decimal("0.00")
        for meal_type in group.meal_types:
            cheapest = min(slot_cost(r, group.servings) for r in candidates_by_type[meal_type])
            total += cheapest * group.duration_days
        return total

    def check_budget(self, group: MealPlanGroup, candidates_by_type: Dict[str, List[Recipe]]) -> Optional[PlanWarning]:
        if group.budget is None:
            return None
        minimum = self.cheapest_total(group, candidates_by_type)
        if minimum <= group.budget:
            return None
        condition = BudgetInfeasible(
            f"Budget {group.budget} for group '{group.name}' is below the cheapest possible plan ({minimum})",
            group=group.name,
        )
        logger.warning(condition.detail)
        return condition.to_warning()

    def assemble(self, group: MealPlanGroup, candidates_by_type: Dict[str, List[Recipe]], pool) -> AssembledPlan:
        plan = AssembledPlan(group)
        infeasible = self.check_budget(group, candidates_by_type)
        if infeasible:
            plan.warnings.append(infeasible)

        window = no_repeat_window(group.duration_days)
        history: Dict[str, List[date]] = {}
        repeats_warned: Set[str] = set()
        slots_left = group.slot_count

        for slot_date, meal_type in group.slots():
            candidates = candidates_by_type[meal_type]
            recent = recently_used(history, slot_date, window)
            options, fell_back = filter_with_fallback(candidates, lambda r: r.recipe_id not in recent)
            if fell_back and meal_type not in repeats_warned:
                repeats_warned.add(meal_type)
                plan.warnings.append(PlanWarning(
                    REPEATS,
                    f"Not enough distinct {meal_type} recipes for group '{group.name}'; recipes repeat within {window} days",
                    group=group.name, meal_type=meal_type,
                ))
                logger.warning("Group %s: %s recipes repeat within the window", group.name, meal_type)

            choice = self.scorer.best(options, pool, group, plan.remaining_budget, slots_left)
            recipe = choice.recipe
            cost = slot_cost(recipe, group.servings)
            plan.assignments.append(MealAssignment(
                group=group.name, date=slot_date, meal_type=meal_type, recipe_id=recipe.recipe_id,
                recipe_name=recipe.name, servings=group.servings, estimated_cost=cost, repeat=fell_back,
            ))
            history.setdefault(recipe.recipe_id, []).append(slot_date)
            if plan.remaining_budget is not None:
                plan.remaining_budget -= cost
            slots_left -= 1

        if group.budget is not None and infeasible is None and plan.total_cost > group.budget:
            plan.warnings.append(PlanWarning(
                BUDGET_EXCEEDED,
                f"Plan for group '{group.name}' costs {plan.total_cost}, over its budget of {group.budget}",
                group=group.name,
            ))
        logger.info("Assembled %s", plan)
        return plan


__all__ = ['filter_with_fallback', 'no_repeat_window', 'recently_used', 'AssembledPlan', 'PlanAssembler']
