"""Nutrition aggregation logic.

Per-serving nutrition facts are summed per person and day for every plan.
"""
from collections import defaultdict
from typing import Dict, Iterable, List

from groupmeal.domain.MealAssignment import MealAssignment
from groupmeal.domain.Recipe import Recipe
from groupmeal.utilities.constants import NUTRIENTS


def _empty() -> Dict[str, float]:
    return {k: 0.0 for k in NUTRIENTS}


def _averages(days: Dict[str, Dict[str, float]]) -> Dict[str, float]:
    if not days:
        return _empty()
    return {k: round(sum(d[k] for d in days.values()) / len(days), 1) for k in NUTRIENTS}


def compute_plan_nutrition(assignments: Iterable[MealAssignment], recipes_by_id: Dict[str, Recipe]):
    """Aggregate nutrition stats per plan (one person's intake).

    Returns structure:
    {
      'plans': {
         'adults': {
            'days': { 'YYYY-MM-DD': { 'calories': kcal, 'protein': g, 'carbs': g, 'fat': g, 'fiber': g }, ... },
            'daily_average': { 'calories': ..., ... }
         },
         ...
      },
      'daily_average': { 'calories': ..., ... }   # over every plan-day
    }
    """
    per_plan: Dict[str, Dict[str, Dict[str, float]]] = defaultdict(dict)
    for a in assignments:
        r = recipes_by_id.get(a.recipe_id)
        if r is None:
            continue
        day = per_plan[a.group].setdefault(a.date.isoformat(), _empty())
        for k in NUTRIENTS:
            day[k] += r.nutrition.get(k, 0.0)

    plans = {}
    all_days: List[Dict[str, float]] = []
    for group, days in per_plan.items():
        plans[group] = {
            'days': {d: {k: round(v, 1) for k, v in totals.items()} for d, totals in sorted(days.items())},
            'daily_average': _averages(days),
        }
        all_days.extend(days.values())

    return {
        'plans': plans,
        'daily_average': _averages({str(i): d for i, d in enumerate(all_days)}),
    }


__all__ = ["compute_plan_nutrition"]
