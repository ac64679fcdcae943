"""Meal planning engine: one call from a generation request to committed plans.

    engine = MealPlanningEngine(catalog, households, price_table, persistence=PlanRepository())
    result = engine.generate_meal_plans({"groups": [{"name": "adults"}], "duration_days": 7, ...})

Fatal errors (ValidationError, NoAdmissibleRecipes, PersistenceFailure) are
raised and nothing is written. Recoverable conditions end up in result.warnings.
"""
import logging
import time
from typing import Callable, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from groupmeal.domain.errors import PlanWarning, ValidationError
from groupmeal.domain.GroceryList import GroceryList
from groupmeal.domain.MealPlanGroup import MealPlanGroup
from groupmeal.domain.Recipe import Recipe
from groupmeal.events.Event_Bus import GLOBAL_EVENT_BUS, EventBus
from groupmeal.events.event_helpers import publish_generated, publish_warnings
from groupmeal.infra.Plan_Repository import meal_plan_record
from groupmeal.logic.planning.candidate_filter import candidates_by_meal_type
from groupmeal.logic.planning.cross_plan_optimizer import CrossPlanOptimizer
from groupmeal.logic.planning.overlap_scorer import OverlapScorer
from groupmeal.logic.planning.plan_assembler import AssembledPlan, PlanAssembler
from groupmeal.logic.reporting.metrics import MetricsCalculator, PlanMetrics
from groupmeal.logic.reporting.nutrition import compute_plan_nutrition
from groupmeal.logic.shopping.consolidator import GroceryConsolidator, unit_mismatch_warnings
from groupmeal.utilities.validators import GenerateMealPlansRequest

logger = logging.getLogger(__name__)


class PlanningResult:
    def __init__(self, plans: List[AssembledPlan], grocery_list: GroceryList, metrics: PlanMetrics,
                 nutrition: dict, warnings: List[PlanWarning], skipped_groups: List[str],
                 run_id: Optional[str] = None):
        self.plans = plans
        self.grocery_list = grocery_list
        self.metrics = metrics
        self.nutrition = nutrition
        self.warnings = warnings
        self.skipped_groups = skipped_groups
        self.run_id = run_id

    @property
    def plan_records(self) -> List[dict]:
        return [meal_plan_record(p) for p in self.plans]

    def plan_for(self, group: str) -> Optional[AssembledPlan]:
        for p in self.plans:
            if p.group.name == group:
                return p
        return None

    def __str__(self) -> str:
        return (f"Run {self.run_id}: {len(self.plans)} plans, {len(self.grocery_list)} grocery items, "
                f"{len(self.warnings)} warnings")

    __repr__ = __str__

    def to_dict(self):
        return {
            "run_id": self.run_id,
            "plans": [p.to_dict() for p in self.plans],
            "plan_records": self.plan_records,
            "grocery_list": self.grocery_list.to_dict(),
            "metrics": self.metrics.to_dict(),
            "nutrition": self.nutrition,
            "warnings": [w.to_dict() for w in self.warnings],
            "skipped_groups": list(self.skipped_groups),
        }


def parse_request(request: Union[dict, GenerateMealPlansRequest]) -> GenerateMealPlansRequest:
    if isinstance(request, GenerateMealPlansRequest):
        return request
    try:
        return GenerateMealPlansRequest.model_validate(request)
    except PydanticValidationError as e:
        raise ValidationError(e.errors(include_url=False, include_context=False, include_input=False)) from e


class MealPlanningEngine:
    def __init__(self, catalog, households, price_table, persistence=None, scorer: Optional[OverlapScorer] = None,
                 deadline_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic,
                 event_bus: Optional[EventBus] = GLOBAL_EVENT_BUS):
        self.catalog = catalog
        self.households = households
        self.price_table = price_table
        self.persistence = persistence
        self.scorer = scorer
        self.deadline_seconds = deadline_seconds
        self.clock = clock
        self.event_bus = event_bus

    def build_groups(self, req: GenerateMealPlansRequest) -> List[MealPlanGroup]:
        groups = []
        for position, g in enumerate(req.groups):
            try:
                members = self.households.members(g.member_ids) if g.member_ids is not None else self.households(g.name)
            except KeyError as e:
                raise ValidationError([{"loc": ["groups", position], "msg": e.args[0], "type": "unknown_members"}],
                                      detail=f"Cannot resolve members of group '{g.name}'") from e
            if not members:
                raise ValidationError([{"loc": ["groups", position], "msg": "Group has no members", "type": "empty_group"}],
                                      detail=f"Group '{g.name}' has no members")
            groups.append(MealPlanGroup(
                name=g.name,
                members=members,
                duration_days=req.duration_days,
                start_date=req.start_date,
                meal_types=req.meal_types,
                budget=g.budget if g.budget is not None else req.budget_per_group,
                goals=g.goals if g.goals is not None else req.goals,
                position=position,
            ))
        return groups

    def generate_meal_plans(self, request: Union[dict, GenerateMealPlansRequest]) -> PlanningResult:
        """Validate, plan every group, consolidate, measure and commit.

        Raises:
            ValidationError: malformed request or unknown members/groups.
            NoAdmissibleRecipes: a group has no admissible recipe for a requested meal type.
            PersistenceFailure: the commit failed; nothing was stored.
        """
        req = parse_request(request)
        groups = self.build_groups(req)
        recipes = self.catalog.all()
        recipes_by_id: Dict[str, Recipe] = {r.recipe_id: r for r in recipes}
        logger.info("Planning %s group(s) over %s day(s) from %s with %s catalog recipes",
                    len(groups), req.duration_days, req.start_date.isoformat(), len(recipes))

        # every group is checked before any planning starts
        candidates = {g.name: candidates_by_meal_type(g, recipes) for g in groups}

        scorer = self.scorer or OverlapScorer.for_catalog(recipes)
        optimizer = CrossPlanOptimizer(PlanAssembler(scorer), self.deadline_seconds, self.clock, self.event_bus)
        optimized = optimizer.optimize(groups, candidates, recipes_by_id)
        assignments = optimized.assignments

        consolidator = GroceryConsolidator(self.price_table)
        grocery_list = consolidator.consolidate(assignments, recipes_by_id)
        metrics = MetricsCalculator(consolidator).calculate(assignments, recipes_by_id, optimized.pool, grocery_list)
        warnings = optimized.all_warnings() + unit_mismatch_warnings(grocery_list)
        plans = sorted(optimized.plans, key=lambda p: p.group.position)

        result = PlanningResult(
            plans=plans,
            grocery_list=grocery_list,
            metrics=metrics,
            nutrition=compute_plan_nutrition(assignments, recipes_by_id),
            warnings=warnings,
            skipped_groups=optimized.skipped,
        )
        if self.persistence is not None:
            result.run_id = self.persistence.commit(plans, grocery_list, metrics.to_dict())

        publish_warnings(warnings, bus=self.event_bus)
        publish_generated(result, bus=self.event_bus)
        logger.info("%s", result)
        return result


__all__ = ['MealPlanningEngine', 'PlanningResult', 'parse_request']
