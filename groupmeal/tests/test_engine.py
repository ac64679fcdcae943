import unittest
from decimal import Decimal
from pathlib import Path

from groupmeal.domain.errors import NoAdmissibleRecipes, PersistenceFailure, ValidationError
from groupmeal.events.Event_Bus import EventBus, PLANNING_GENERATED, PLANNING_GROUP_ASSEMBLED, PLANNING_WARNING
from groupmeal.infra.Household_Repository import HouseholdProfileStore
from groupmeal.infra.Price_Table import IngredientPriceTable
from groupmeal.infra.Recipe_Repository import RecipeCatalog
from groupmeal.logic.planning.candidate_filter import is_admissible
from groupmeal.logic.planning.engine import MealPlanningEngine
from groupmeal.tests.fixtures import StepClock, make_member, make_recipe

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def catalog():
    return RecipeCatalog([
        make_recipe("d1", [("chicken breast", 200, "g", "poultry"), ("rice", 100, "g", "grains")], cost="3.00"),
        make_recipe("d2", [("noodles", 100, "g", "pasta"), ("peanut butter", 30, "g", "pantry")], cost="2.00",
                    tags=["vegan", "peanut"]),
        make_recipe("d3", [("tofu", 150, "g", "produce"), ("rice", 100, "g", "grains")], cost="2.50",
                    tags=["vegan"]),
        make_recipe("d4", [("chicken breast", 150, "g", "poultry"), ("lettuce", 1, "", "produce")], cost="2.75",
                    tags=["high-protein"]),
        make_recipe("b1", [("oats", 50, "g", "grains")], cost="1.00", meal_types=["breakfast"]),
        make_recipe("b2", [("bread", 2, "", "bakery"), ("peanut butter", 20, "g", "pantry")], cost="1.20",
                    meal_types=["breakfast"], tags=["vegetarian"]),
    ])


def households():
    members = [make_member(1), make_member(2, preferences=["chicken"]), make_member(3, allergies=["peanut"])]
    return HouseholdProfileStore(members, {"adults": [1, 2], "kids": [3]})


def prices():
    return IngredientPriceTable.from_dict({
        "rice": {"unit": "g", "package_size": 1000, "package_price": 2.49},
        "chicken breast": {"unit": "kg", "price": 11.00},
        "oats": {"unit": "g", "package_size": 500, "package_price": 1.99},
    })


def request(**overrides):
    body = {
        "groups": [{"name": "adults"}, {"name": "kids"}],
        "duration_days": 4,
        "start_date": "2025-03-03",
        "meal_types": ["breakfast", "dinner"],
    }
    body.update(overrides)
    return body


class MemoryPersistence:
    def __init__(self):
        self.commits = []

    def commit(self, plans, grocery_list, metrics=None):
        self.commits.append((plans, grocery_list, metrics))
        return f"run-{len(self.commits)}"


class FailingPersistence:
    def commit(self, plans, grocery_list, metrics=None):
        raise PersistenceFailure("disk full")


class TestMealPlanningEngine(unittest.TestCase):

    def setUp(self):
        self.bus = EventBus()
        self.events = []
        for name in (PLANNING_GROUP_ASSEMBLED, PLANNING_WARNING, PLANNING_GENERATED):
            self.bus.subscribe(name, lambda event, payload: self.events.append((event, payload)))
        self.persistence = MemoryPersistence()

    def engine(self, persistence=None, **kwargs):
        kwargs.setdefault("deadline_seconds", 0)
        kwargs.setdefault("event_bus", self.bus)
        return MealPlanningEngine(catalog(), households(), prices(),
                                  persistence=persistence or self.persistence, **kwargs)

    def test_plans_every_slot_of_every_group(self):
        result = self.engine().generate_meal_plans(request())
        self.assertEqual([p.group.name for p in result.plans], ["adults", "kids"])
        for plan in result.plans:
            self.assertEqual(len(plan.assignments), 8)
        self.assertEqual(result.run_id, "run-1")
        self.assertEqual(len(self.persistence.commits), 1)
        self.assertEqual(result.skipped_groups, [])

    def test_every_assignment_is_admissible(self):
        result = self.engine().generate_meal_plans(request())
        by_id = catalog().by_id()
        for plan in result.plans:
            for a in plan.assignments:
                self.assertTrue(is_admissible(by_id[a.recipe_id], plan.group), a)
        kids = result.plan_for("kids")
        self.assertFalse({"d2", "b2"} & set(kids.recipe_ids()))

    def test_same_input_gives_same_output(self):
        first = self.engine(MemoryPersistence()).generate_meal_plans(request()).to_dict()
        second = self.engine(MemoryPersistence()).generate_meal_plans(request()).to_dict()
        self.assertEqual(first, second)

    def test_grocery_total_matches_items(self):
        result = self.engine().generate_meal_plans(request())
        self.assertEqual(result.grocery_list.total_cost,
                         sum(i.estimated_price for i in result.grocery_list.items))
        rice = result.grocery_list.find("rice|mass")
        if rice is not None:
            self.assertEqual(rice.purchase_quantity % 1000, 0)

    def test_explicit_member_ids_and_group_overrides(self):
        body = request(
            groups=[{"name": "Everyone", "member_ids": [1, 2, 3], "budget": 0, "goals": ["high-protein"]},
                    {"name": "adults"}],
            budget_per_group=100,
            goals=["low-carb"],
        )
        result = self.engine().generate_meal_plans(body)
        everyone = result.plan_for("Everyone")
        self.assertEqual(everyone.group.servings, 3)
        self.assertEqual(everyone.group.budget, Decimal("0"))
        self.assertEqual(everyone.group.goals, ("high-protein",))
        self.assertEqual(result.plan_for("adults").group.budget, Decimal("100"))
        self.assertEqual(result.plan_for("adults").group.goals, ("low-carb",))
        infeasible = [w for w in result.warnings if w.code == "BudgetInfeasible"]
        self.assertEqual([w.group for w in infeasible], ["Everyone"])

    def test_invalid_requests(self):
        bad = [
            request(groups=[]),
            request(duration_days=0),
            request(meal_types=["brunch"]),
            request(groups=[{"name": "adults"}, {"name": "Adults"}]),
            request(groups=[{"name": "x", "member_ids": [99]}]),
            request(groups=[{"name": "x", "member_ids": []}]),
            request(groups=[{"name": "x", "member_ids": [1, 1]}]),
            request(groups=[{"name": "pets"}]),
            {"groups": [{"name": "adults"}]},
        ]
        for body in bad:
            with self.assertRaises(ValidationError, msg=body):
                self.engine().generate_meal_plans(body)
        self.assertEqual(self.persistence.commits, [])

    def test_household_group_without_members_is_rejected(self):
        store = HouseholdProfileStore([make_member(1)], {"adults": [1], "guests": []})
        engine = MealPlanningEngine(catalog(), store, prices(), persistence=self.persistence, deadline_seconds=0,
                                    event_bus=self.bus)
        with self.assertRaises(ValidationError) as ctx:
            engine.generate_meal_plans(request(groups=[{"name": "adults"}, {"name": "guests"}]))
        self.assertEqual(ctx.exception.errors[0]["type"], "empty_group")
        self.assertEqual(self.persistence.commits, [])

    def test_validation_error_lists_problems(self):
        with self.assertRaises(ValidationError) as ctx:
            self.engine().generate_meal_plans(request(duration_days=0))
        self.assertEqual(ctx.exception.to_dict()["error"], "ValidationError")
        self.assertTrue(ctx.exception.errors)

    def test_no_admissible_recipes_aborts_before_planning(self):
        with self.assertRaises(NoAdmissibleRecipes) as ctx:
            self.engine().generate_meal_plans(request(meal_types=["dinner", "snack"]))
        self.assertEqual(ctx.exception.meal_type, "snack")
        self.assertEqual(self.persistence.commits, [])
        self.assertEqual(self.events, [])

    def test_persistence_failure_propagates(self):
        with self.assertRaises(PersistenceFailure):
            self.engine(FailingPersistence()).generate_meal_plans(request())
        self.assertNotIn(PLANNING_GENERATED, [e for e, _ in self.events])

    def test_events_are_published(self):
        result = self.engine().generate_meal_plans(request())
        assembled = [p["group"] for e, p in self.events if e == PLANNING_GROUP_ASSEMBLED]
        self.assertEqual(assembled, ["adults", "kids"])
        warnings = [p for e, p in self.events if e == PLANNING_WARNING]
        self.assertEqual(len(warnings), len(result.warnings))
        generated = [p for e, p in self.events if e == PLANNING_GENERATED]
        self.assertEqual(len(generated), 1)
        self.assertEqual(generated[0]["run_id"], "run-1")
        self.assertEqual(generated[0]["groups"], ["adults", "kids"])

    def test_timeout_returns_partial_result(self):
        result = self.engine(deadline_seconds=10, clock=StepClock(0, 0, 100)).generate_meal_plans(request())
        self.assertEqual([p.group.name for p in result.plans], ["adults"])
        self.assertEqual(result.skipped_groups, ["kids"])
        self.assertIn("OptimizationTimeout", [w.code for w in result.warnings])
        self.assertTrue(all("kids" not in i.groups for i in result.grocery_list.items))

    def test_repeats_are_reported(self):
        # kids have a single admissible breakfast
        result = self.engine().generate_meal_plans(request())
        repeats = [w for w in result.warnings if w.code == "repeats"]
        self.assertIn(("kids", "breakfast"), [(w.group, w.meal_type) for w in repeats])

    def test_result_serializes(self):
        data = self.engine().generate_meal_plans(request()).to_dict()
        for key in ("run_id", "plans", "plan_records", "grocery_list", "metrics", "nutrition", "warnings",
                    "skipped_groups"):
            self.assertIn(key, data)
        self.assertEqual(data["plan_records"][0]["status"], "active")
        self.assertEqual(len(data["plan_records"][1]["meals"]), 8)


class TestSampleData(unittest.TestCase):

    def test_sample_household_week(self):
        engine = MealPlanningEngine(
            RecipeCatalog.from_file(DATA_DIR / "recipes.json"),
            HouseholdProfileStore.from_file(DATA_DIR / "household.json"),
            IngredientPriceTable.from_file(DATA_DIR / "prices.json"),
            deadline_seconds=0,
            event_bus=EventBus(),
        )
        result = engine.generate_meal_plans({
            "groups": [{"name": "adults"}, {"name": "kids"}, {"name": "gluten-free"}],
            "duration_days": 7,
            "start_date": "2025-03-03",
            "meal_types": ["breakfast", "lunch", "dinner"],
        })
        self.assertEqual(len(result.plans), 3)
        for plan in result.plans:
            self.assertEqual(len(plan.assignments), 21)
        self.assertFalse({"r15", "r17"} & set(result.plan_for("kids").recipe_ids()))
        gluten_free = {"r02", "r05", "r07", "r09", "r12", "r13", "r14", "r16", "r17"}
        self.assertTrue(set(result.plan_for("gluten-free").recipe_ids()) <= gluten_free)
        self.assertGreater(result.metrics.overlap_efficiency, 0)
        self.assertGreater(result.grocery_list.total_cost, 0)


if __name__ == "__main__":
    unittest.main()
