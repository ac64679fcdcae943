"""Candidate filtering: which catalog recipes a whole group can eat.

Hard rules only. A recipe is admissible for a group when
  - no tag and no ingredient matches any member's allergy, and
  - every member's dietary restriction is satisfied (logical AND across members).
Preferences and dislikes are left to scoring.
"""
import logging
from typing import Dict, Iterable, List
from groupmeal.domain.errors import NoAdmissibleRecipes
from groupmeal.domain.Ingredient import name_words, normalize_name, normalize_tag
from groupmeal.domain.MealPlanGroup import MealPlanGroup
from groupmeal.domain.Recipe import Recipe
from groupmeal.utilities.constants import RESTRICTION_IMPLICATIONS

logger = logging.getLogger(__name__)


def ingredient_matches(ingredient_name: str, term: str) -> bool:
    """'peanut' matches 'Peanut Butter' and 'peanuts'; 'egg' does not match 'eggplant'."""
    if normalize_name(ingredient_name) == normalize_name(term):
        return True
    term_words = name_words(term)
    if not term_words:
        return False
    # 'gluten-free bread' is labelled free of the term
    if normalize_tag(" ".join(term_words) + " free") in normalize_tag(" ".join(name_words(ingredient_name))):
        return False
    words = set(name_words(ingredient_name))
    return all(w in words for w in term_words)


def violates_allergies(recipe: Recipe, allergies: Iterable[str]) -> bool:
    for allergen in allergies:
        if {normalize_tag(allergen), normalize_tag(normalize_name(allergen))} & recipe.tags:
            return True
        if any(ingredient_matches(ing.name, allergen) for ing in recipe.ingredients):
            return True
    return False


def satisfied_tags(recipe: Recipe) -> frozenset:
    """Recipe tags plus every restriction they imply."""
    implied = [RESTRICTION_IMPLICATIONS.get(t, frozenset()) for t in recipe.tags]
    return recipe.tags.union(*implied)


def satisfies_restrictions(recipe: Recipe, restrictions: Iterable[str]) -> bool:
    tags = satisfied_tags(recipe)
    return all(r in tags for r in restrictions)


def is_admissible(recipe: Recipe, group: MealPlanGroup) -> bool:
    return not violates_allergies(recipe, group.allergies) and satisfies_restrictions(recipe, group.restrictions)


def admissible_recipes(group: MealPlanGroup, catalog: Iterable[Recipe]) -> List[Recipe]:
    """Recipes the whole group can eat, ordered by recipe id."""
    allergies = group.allergies
    restrictions = group.restrictions
    result = [r for r in catalog
              if not violates_allergies(r, allergies) and satisfies_restrictions(r, restrictions)]
    result.sort(key=lambda r: r.recipe_id)
    return result


def candidates_by_meal_type(group: MealPlanGroup, catalog: Iterable[Recipe]) -> Dict[str, List[Recipe]]:
    """Admissible recipes per requested meal type.

    Raises:
        NoAdmissibleRecipes: when a requested meal type has no admissible recipe.
    """
    admissible = admissible_recipes(group, catalog)
    logger.info("Group %s: %s admissible recipes (allergies=%s, restrictions=%s)",
                group.name, len(admissible), sorted(group.allergies), sorted(group.restrictions))
    by_type: Dict[str, List[Recipe]] = {}
    for meal_type in group.meal_types:
        candidates = [r for r in admissible if r.serves(meal_type)]
        if not candidates:
            raise NoAdmissibleRecipes(group.name, meal_type)
        by_type[meal_type] = candidates
    return by_type


__all__ = ['ingredient_matches', 'violates_allergies', 'satisfies_restrictions', 'is_admissible',
           'admissible_recipes', 'candidates_by_meal_type']
