"""
Overlap scorer: ranks admissible recipes for one slot.

    score = alpha * overlap_score + beta * nutrition_fit + gamma * (1 / cost)

overlap_score   sum over the recipe's ingredients already in the shared pool of
                max(min_weight, min(1, need / pooled)): an ingredient the pool already
                holds in abundance adds less than a scarce one.
nutrition_fit   share of the group's goals the recipe meets, nudged by member
                preferences and dislikes, clamped to [0, 1].
cost            per-serving cost, floored at one cent.

Ordering is total: score desc, rating desc (missing = catalog minimum), cost asc, id asc.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence

from groupmeal.domain.Ingredient import normalize_tag
from groupmeal.domain.MealPlanGroup import MealPlanGroup
from groupmeal.domain.Recipe import Recipe
from groupmeal.logic.planning.candidate_filter import ingredient_matches
from groupmeal.logic.shopping.requirements import recipe_requirements
from groupmeal.utilities import config
from groupmeal.utilities.constants import GOAL_NUTRIENT_RULES

logger = logging.getLogger(__name__)

MIN_COST = Decimal("0.01")
SCORE_PRECISION = 9
CENT = Decimal("0.01")


class ScoringWeights:
    """Scoring coefficients. Defaults come from configuration, never from the data."""

    def __init__(self, alpha: Optional[float] = None, beta: Optional[float] = None, gamma: Optional[float] = None,
                 min_overlap_weight: Optional[float] = None, preference_bonus: Optional[float] = None,
                 dislike_penalty: Optional[float] = None):
        self.alpha = config.SCORE_ALPHA if alpha is None else alpha
        self.beta = config.SCORE_BETA if beta is None else beta
        self.gamma = config.SCORE_GAMMA if gamma is None else gamma
        self.min_overlap_weight = config.OVERLAP_MIN_WEIGHT if min_overlap_weight is None else min_overlap_weight
        self.preference_bonus = config.PREFERENCE_BONUS if preference_bonus is None else preference_bonus
        self.dislike_penalty = config.DISLIKE_PENALTY if dislike_penalty is None else dislike_penalty

    def to_dict(self):
        return dict(vars(self))


class ScoredCandidate:
    def __init__(self, recipe: Recipe, score: float, overlap: float, nutrition_fit: float,
                 slot_cost: Decimal, rating: float, over_budget: bool = False):
        self.recipe = recipe
        self.score = score
        self.overlap = overlap
        self.nutrition_fit = nutrition_fit
        self.slot_cost = slot_cost
        self.rating = rating
        self.over_budget = over_budget

    def order_key(self):
        return (-round(self.score, SCORE_PRECISION), -self.rating, self.recipe.cost_per_serving, self.recipe.recipe_id)

    def __str__(self) -> str:
        return (f"{self.recipe.recipe_id} score={self.score:.4f} overlap={self.overlap:.3f} "
                f"fit={self.nutrition_fit:.3f} cost={self.slot_cost}")

    __repr__ = __str__


def slot_cost(recipe: Recipe, servings: int) -> Decimal:
    """Cost of one slot: cost per serving times servings, half-up to the cent."""
    return (recipe.cost_per_serving * servings).quantize(CENT, rounding=ROUND_HALF_UP)


def _goal_met(goal: str, recipe: Recipe) -> bool:
    if goal in recipe.tags:
        return True
    rule = GOAL_NUTRIENT_RULES.get(goal)
    if not rule:
        return False
    nutrient, op, threshold = rule
    value = recipe.nutrition.get(nutrient, 0)
    if op == ">=":
        return value >= threshold
    # Unknown nutrition (0) never counts as meeting an upper bound
    return 0 < value <= threshold


def _mentions(recipe: Recipe, term: str) -> bool:
    return (normalize_tag(term) in recipe.tags
            or normalize_tag(term) == normalize_tag(recipe.cuisine)
            or any(ingredient_matches(ing.name, term) for ing in recipe.ingredients))


class OverlapScorer:
    def __init__(self, weights: Optional[ScoringWeights] = None, min_rating: float = 0.0):
        self.weights = weights or ScoringWeights()
        # Stand-in rating for recipes the catalog has not rated
        self.min_rating = min_rating

    @classmethod
    def for_catalog(cls, recipes: Iterable[Recipe], weights: Optional[ScoringWeights] = None) -> "OverlapScorer":
        ratings = [r.rating for r in recipes if r.rating is not None]
        return cls(weights, min(ratings) if ratings else 0.0)

    def overlap_score(self, recipe: Recipe, pool, servings: int) -> float:
        total = 0.0
        for req in recipe_requirements(recipe, servings):
            if req.key not in pool:
                continue
            pooled = pool.quantity_of(req.key)
            weight = 1.0 if pooled <= 0 else min(1.0, req.quantity / pooled)
            total += max(self.weights.min_overlap_weight, weight)
        return total

    def nutrition_fit(self, recipe: Recipe, goals: Sequence[str], preferences: Iterable[str] = (),
                      dislikes: Iterable[str] = ()) -> float:
        goal_share = (sum(1 for g in goals if _goal_met(g, recipe)) / len(goals)) if goals else 0.0
        preferences = list(preferences)
        dislikes = list(dislikes)
        liked = (sum(1 for p in preferences if _mentions(recipe, p)) / len(preferences)) if preferences else 0.0
        disliked = (sum(1 for d in dislikes if _mentions(recipe, d)) / len(dislikes)) if dislikes else 0.0
        fit = goal_share + self.weights.preference_bonus * liked - self.weights.dislike_penalty * disliked
        return max(0.0, min(1.0, fit))

    def score(self, recipe: Recipe, pool, group: MealPlanGroup,
              remaining_budget: Optional[Decimal] = None, slots_left: int = 1) -> ScoredCandidate:
        w = self.weights
        overlap = self.overlap_score(recipe, pool, group.servings)
        fit = self.nutrition_fit(recipe, group.goals, group.preferences, group.dislikes)
        cost = max(recipe.cost_per_serving, MIN_COST)
        value = w.alpha * overlap + w.beta * fit + w.gamma * (1.0 / float(cost))
        cost_of_slot = slot_cost(recipe, group.servings)
        over_budget = False
        if remaining_budget is not None:
            fair_share = remaining_budget / max(1, slots_left)
            over_budget = cost_of_slot > fair_share
        rating = recipe.rating if recipe.rating is not None else self.min_rating
        return ScoredCandidate(recipe, value, overlap, fit, cost_of_slot, rating, over_budget)

    def rank(self, scored: List[ScoredCandidate]) -> List[ScoredCandidate]:
        """Best first. Under budget pressure candidates that fit the fair share come first;
        when none fits, the cheapest slot wins."""
        if scored and all(c.over_budget for c in scored):
            return sorted(scored, key=lambda c: (c.slot_cost,) + c.order_key())
        return sorted(scored, key=lambda c: (c.over_budget,) + c.order_key())

    def best(self, recipes: Iterable[Recipe], pool, group: MealPlanGroup,
             remaining_budget: Optional[Decimal] = None, slots_left: int = 1) -> ScoredCandidate:
        scored = [self.score(r, pool, group, remaining_budget, slots_left) for r in recipes]
        if not scored:
            raise ValueError("No candidates to rank")
        ranked = self.rank(scored)
        logger.debug("Top candidates for %s: %s", group.name, ranked[:3])
        return ranked[0]


__all__ = ['ScoringWeights', 'ScoredCandidate', 'OverlapScorer', 'slot_cost']
