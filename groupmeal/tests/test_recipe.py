import unittest
from datetime import date
from decimal import Decimal

from groupmeal.domain.MealPlanGroup import MealPlanGroup
from groupmeal.domain.Recipe import Recipe
from groupmeal.domain.SharedIngredientPool import SharedIngredientPool
from groupmeal.logic.shopping.requirements import recipe_requirements
from groupmeal.tests.fixtures import make_member, make_recipe


class TestRecipe(unittest.TestCase):

    def setUp(self):
        self.pancakes = Recipe.from_dict({
            "id": 7,
            "name": "Pancakes",
            "servings": 4,
            "tags": ["Vegetarian", "High Protein"],
            "meal_types": ["Breakfast"],
            "cost_per_serving": 1.1,
            "ingredients": [
                {"name": "Flour", "quantity": 200, "unit": "g"},
                {"name": "Milk", "quantity": 300, "unit": "ml", "category": "dairy"},
            ],
            "nutrition": {"calories": 500, "carbohydrates": 60},
        })

    def test_from_dict(self):
        self.assertEqual(self.pancakes.recipe_id, "7")
        self.assertEqual(self.pancakes.tags, frozenset({"vegetarian", "high-protein"}))
        self.assertEqual(self.pancakes.cost_per_serving, Decimal("1.1"))
        self.assertEqual(self.pancakes.nutrition["carbs"], 60.0)
        self.assertIsNone(self.pancakes.rating)

    def test_serves(self):
        self.assertTrue(self.pancakes.serves("breakfast"))
        self.assertFalse(self.pancakes.serves("dinner"))
        self.assertTrue(make_recipe("any", meal_types=[]).serves("snack"))

    def test_requirements_scale_with_servings(self):
        reqs = recipe_requirements(self.pancakes, 2, "kids")
        self.assertEqual([(r.key, r.quantity) for r in reqs], [("flour|mass", 100.0), ("milk|volume", 150.0)])
        self.assertTrue(all(r.group == "kids" for r in reqs))

    def test_to_dict(self):
        data = self.pancakes.to_dict()
        self.assertEqual(data["meal_types"], ["breakfast"])
        self.assertEqual(data["cost_per_serving"], 1.1)


class TestMealPlanGroup(unittest.TestCase):

    def test_slots_follow_calendar_then_meal_type_order(self):
        group = MealPlanGroup("g", [make_member(1)], 2, date(2025, 3, 3), ["lunch", "breakfast"])
        self.assertEqual(list(group.slots()), [
            (date(2025, 3, 3), "lunch"), (date(2025, 3, 3), "breakfast"),
            (date(2025, 3, 4), "lunch"), (date(2025, 3, 4), "breakfast"),
        ])
        self.assertEqual(group.slot_count, 4)
        self.assertEqual(group.end_date, date(2025, 3, 4))

    def test_constraints_are_unions(self):
        members = [make_member(1, allergies=["Peanut"]), make_member(2, restrictions=["Gluten Free"]),
                   make_member(3, allergies=["shellfish"])]
        group = MealPlanGroup("g", members, 1, date(2025, 3, 3), ["dinner"])
        self.assertEqual(group.allergies, frozenset({"peanut", "shellfish"}))
        self.assertEqual(group.restrictions, frozenset({"gluten-free"}))
        self.assertEqual(group.servings, 3)


class TestSharedIngredientPool(unittest.TestCase):

    def setUp(self):
        self.pool = SharedIngredientPool()
        self.rice = make_recipe("r", [("rice", 100, "g")])

    def test_absorb_tracks_contributions(self):
        self.pool.absorb("a", recipe_requirements(self.rice, 1, "a"))
        self.pool.absorb("b", recipe_requirements(self.rice, 3, "b"))
        entry = self.pool.get("rice|mass")
        self.assertEqual(entry.quantity, 400.0)
        self.assertEqual(entry.contributions, {"a": 100.0, "b": 300.0})
        self.assertTrue(entry.is_shared)
        self.assertEqual(self.pool.absorbed_groups, ["a", "b"])

    def test_group_is_absorbed_once(self):
        self.pool.absorb("a", recipe_requirements(self.rice, 1, "a"))
        with self.assertRaises(ValueError):
            self.pool.absorb("a", recipe_requirements(self.rice, 1, "a"))
        self.assertEqual(self.pool.quantity_of("rice|mass"), 100.0)

    def test_negative_quantities_are_refused(self):
        reqs = recipe_requirements(make_recipe("n", [("rice", 100, "g")]), 1, "a")
        negative = [reqs[0]._replace(quantity=-1.0)]
        with self.assertRaises(ValueError):
            self.pool.absorb("a", negative)
        self.assertEqual(len(self.pool), 0)
        self.assertEqual(self.pool.absorbed_groups, [])

    def test_view_is_read_only(self):
        self.pool.absorb("a", recipe_requirements(self.rice, 1, "a"))
        view = self.pool.view()
        self.assertEqual(view.quantity_of("rice|mass"), 100.0)
        self.assertIn("rice|mass", view)
        self.assertFalse(hasattr(view, "absorb"))


if __name__ == "__main__":
    unittest.main()
