"""Small builders shared by the test modules."""
from datetime import date
from decimal import Decimal

from groupmeal.domain.HouseholdMember import HouseholdMember
from groupmeal.domain.Ingredient import Ingredient
from groupmeal.domain.MealAssignment import MealAssignment
from groupmeal.domain.MealPlanGroup import MealPlanGroup
from groupmeal.domain.Recipe import Recipe

START = date(2025, 3, 3)


def make_recipe(recipe_id, ingredients=(), cost="2.00", tags=(), meal_types=("dinner",), rating=4.0,
                servings=1, nutrition=None, name=None, cuisine=""):
    """ingredients: (name, quantity, unit[, category]) tuples."""
    ings = []
    for spec in ingredients:
        name_, qty, unit = spec[:3]
        category = spec[3] if len(spec) > 3 else "other"
        ings.append(Ingredient(name_, qty, unit, category))
    return Recipe(
        recipe_id=recipe_id,
        name=name or f"Recipe {recipe_id}",
        tags=tags,
        ingredients=ings,
        cost_per_serving=Decimal(cost),
        servings=servings,
        rating=rating,
        meal_types=meal_types,
        cuisine=cuisine,
        nutrition=nutrition or {},
    )


def make_member(member_id, restrictions=(), allergies=(), preferences=(), dislikes=()):
    return HouseholdMember(member_id, f"Member {member_id}", None, restrictions, allergies, preferences, dislikes)


def make_group(name, members=None, size=1, days=7, meal_types=("dinner",), budget=None, goals=None,
               start=START, position=0):
    if members is None:
        members = [make_member(i) for i in range(size)]
    return MealPlanGroup(name, members, days, start, meal_types, budget=budget, goals=goals, position=position)


def make_assignment(group, recipe, servings=1, day=START, meal_type="dinner"):
    return MealAssignment(group, day, meal_type, recipe.recipe_id, recipe.name, servings,
                          (recipe.cost_per_serving * servings).quantize(Decimal("0.01")))


def recipe_record(recipe_id, ingredients, cost=2.0, tags=(), meal_types=("dinner",), rating=4.0, servings=4,
                  nutrition=None):
    """Raw catalog record as found in recipes.json."""
    return {
        "id": recipe_id,
        "name": f"Recipe {recipe_id}",
        "servings": servings,
        "meal_types": list(meal_types),
        "tags": list(tags),
        "cost_per_serving": cost,
        "rating": rating,
        "ingredients": [
            {"name": n, "quantity": q, "unit": u, "category": c} for n, q, u, c in ingredients
        ],
        "nutrition": nutrition or {},
    }


class StepClock:
    """Fake monotonic clock returning the given readings, then repeating the last one."""

    def __init__(self, *readings):
        self.readings = list(readings)

    def __call__(self):
        if len(self.readings) > 1:
            return self.readings.pop(0)
        return self.readings[0]
