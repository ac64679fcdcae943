"""Expand meal assignments into normalized ingredient requirements."""
from typing import Dict, Iterable, List, NamedTuple
from groupmeal.domain.MealAssignment import MealAssignment
from groupmeal.domain.Recipe import Recipe
from groupmeal.logic.shopping.units import normalize, ingredient_key


class Requirement(NamedTuple):
    key: str
    name_key: str
    name: str
    quantity: float
    unit: str
    unit_class: str
    category: str
    group: str


def recipe_requirements(recipe: Recipe, servings: int, group: str = "") -> List[Requirement]:
    """Ingredients of one recipe scaled to `servings`, in base units."""
    factor = recipe.scale_factor(servings)
    result = []
    for ing in recipe.ingredients:
        norm = normalize(ing.quantity * factor, ing.unit)
        result.append(Requirement(
            key=ingredient_key(ing.key_name, norm.unit_class),
            name_key=ing.key_name,
            name=ing.name,
            quantity=norm.quantity,
            unit=norm.unit,
            unit_class=norm.unit_class,
            category=ing.category,
            group=group,
        ))
    return result


def assignment_requirements(assignments: Iterable[MealAssignment], recipes_by_id: Dict[str, Recipe]) -> List[Requirement]:
    result: List[Requirement] = []
    for a in assignments:
        recipe = recipes_by_id[a.recipe_id]
        result.extend(recipe_requirements(recipe, a.servings, a.group))
    return result


__all__ = ["Requirement", "recipe_requirements", "assignment_requirements"]
