"""Cross-plan optimizer: plans groups one after another against a growing shared pool.

Larger groups go first (their demand dominates purchases), ties keep input
order. After each group is assembled its ingredient requirements are absorbed
into the pool, so later groups are scored toward what is already being bought.
No backtracking: a group's plan is final once assembled.
"""
import logging
import time
from typing import Callable, Dict, List, Optional

from groupmeal.domain.errors import OptimizationTimeout, PlanWarning
from groupmeal.domain.MealPlanGroup import MealPlanGroup
from groupmeal.domain.Recipe import Recipe
from groupmeal.domain.SharedIngredientPool import SharedIngredientPool
from groupmeal.events.event_helpers import publish_group_assembled
from groupmeal.logic.planning.plan_assembler import AssembledPlan, PlanAssembler
from groupmeal.logic.shopping.requirements import assignment_requirements
from groupmeal.utilities import config

logger = logging.getLogger(__name__)


class Deadline:
    """Soft wall-clock limit; the clock is injectable so tests can drive it."""

    def __init__(self, seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.seconds = config.PLANNING_DEADLINE_SECONDS if seconds is None else seconds
        self.clock = clock
        self.started = clock()

    @property
    def elapsed(self) -> float:
        return self.clock() - self.started

    def expired(self) -> bool:
        return self.seconds is not None and self.seconds > 0 and self.elapsed >= self.seconds

    def check(self, remaining: List[str]) -> None:
        if self.expired():
            raise OptimizationTimeout(
                f"Planning deadline of {self.seconds:g}s reached; skipped groups: {', '.join(remaining)}"
            )


def processing_order(groups: List[MealPlanGroup]) -> List[MealPlanGroup]:
    """Descending member count; sorted() is stable so ties keep input order."""
    return sorted(groups, key=lambda g: -g.member_count)


class OptimizationResult:
    def __init__(self, plans: List[AssembledPlan], pool: SharedIngredientPool,
                 warnings: List[PlanWarning], skipped: List[str]):
        self.plans = plans
        self.pool = pool
        self.warnings = warnings
        self.skipped = skipped

    @property
    def assignments(self):
        return [a for p in self.plans for a in p.assignments]

    def all_warnings(self) -> List[PlanWarning]:
        result = [w for p in self.plans for w in p.warnings]
        result.extend(self.warnings)
        return result


class CrossPlanOptimizer:
    def __init__(self, assembler: Optional[PlanAssembler] = None, deadline_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic, event_bus=None):
        self.assembler = assembler or PlanAssembler()
        self.deadline_seconds = deadline_seconds
        self.clock = clock
        self.event_bus = event_bus

    def optimize(self, groups: List[MealPlanGroup], candidates_by_group: Dict[str, Dict[str, List[Recipe]]],
                 recipes_by_id: Dict[str, Recipe]) -> OptimizationResult:
        pool = SharedIngredientPool()
        deadline = Deadline(self.deadline_seconds, self.clock)
        ordered = processing_order(groups)
        plans: List[AssembledPlan] = []
        warnings: List[PlanWarning] = []
        skipped: List[str] = []

        for index, group in enumerate(ordered):
            try:
                deadline.check([g.name for g in ordered[index:]])
            except OptimizationTimeout as timeout:
                logger.warning(timeout.detail)
                warnings.append(timeout.to_warning())
                skipped = [g.name for g in ordered[index:]]
                break
            plan = self.assembler.assemble(group, candidates_by_group[group.name], pool.view())
            pool.absorb(group.name, assignment_requirements(plan.assignments, recipes_by_id))
            plans.append(plan)
            logger.info("Pool holds %s ingredient keys after group %s", len(pool), group.name)
            publish_group_assembled(plan, len(pool), bus=self.event_bus)

        return OptimizationResult(plans, pool, warnings, skipped)


__all__ = ['Deadline', 'processing_order', 'OptimizationResult', 'CrossPlanOptimizer']
