import unittest

from groupmeal.events.Event_Bus import EventBus, PLANNING_GROUP_ASSEMBLED
from groupmeal.logic.planning.candidate_filter import candidates_by_meal_type
from groupmeal.logic.planning.cross_plan_optimizer import CrossPlanOptimizer, Deadline, processing_order
from groupmeal.logic.planning.overlap_scorer import OverlapScorer, ScoringWeights
from groupmeal.logic.planning.plan_assembler import PlanAssembler
from groupmeal.tests.fixtures import StepClock, make_group, make_recipe

WEIGHTS = ScoringWeights(alpha=1.0, beta=0.5, gamma=0.25, min_overlap_weight=0.1,
                         preference_bonus=0.2, dislike_penalty=0.3)

KEYS = ("chicken breast|mass", "rice|mass", "tofu|mass")


class RecordingAssembler(PlanAssembler):
    """Records the pool quantities each group was scored against."""

    def __init__(self, scorer):
        super().__init__(scorer)
        self.snapshots = []

    def assemble(self, group, candidates_by_type, pool):
        self.snapshots.append((group.name, {k: pool.quantity_of(k) for k in KEYS}))
        return super().assemble(group, candidates_by_type, pool)


def catalog():
    return [
        make_recipe("c1", [("chicken breast", 300, "g"), ("rice", 100, "g")], cost="3.00"),
        make_recipe("c2", [("chicken breast", 250, "g"), ("broccoli", 100, "g")], cost="3.00"),
        make_recipe("t1", [("tofu", 300, "g"), ("rice", 100, "g")], cost="3.00"),
        make_recipe("t2", [("tofu", 200, "g"), ("peas", 100, "g")], cost="3.00"),
    ]


class TestProcessingOrder(unittest.TestCase):

    def test_larger_groups_first_ties_keep_input_order(self):
        groups = [make_group("a", size=1), make_group("b", size=3), make_group("c", size=3), make_group("d", size=2)]
        self.assertEqual([g.name for g in processing_order(groups)], ["b", "c", "d", "a"])


class TestDeadline(unittest.TestCase):

    def test_expires_with_clock(self):
        deadline = Deadline(10, StepClock(0, 5, 12))
        self.assertFalse(deadline.expired())
        self.assertTrue(deadline.expired())

    def test_zero_disables_the_limit(self):
        self.assertFalse(Deadline(0, StepClock(0, 1000)).expired())


class TestCrossPlanOptimizer(unittest.TestCase):

    def setUp(self):
        self.recipes = catalog()
        self.by_id = {r.recipe_id: r for r in self.recipes}
        self.groups = [make_group("small", size=1, days=4, position=0),
                       make_group("large", size=2, days=4, position=1)]
        self.candidates = {g.name: candidates_by_meal_type(g, self.recipes) for g in self.groups}

    def test_pool_grows_monotonically(self):
        assembler = RecordingAssembler(OverlapScorer(WEIGHTS))
        result = CrossPlanOptimizer(assembler, deadline_seconds=0, event_bus=EventBus()).optimize(
            self.groups, self.candidates, self.by_id)
        self.assertEqual([name for name, _ in assembler.snapshots], ["large", "small"])
        first, second = assembler.snapshots[0][1], assembler.snapshots[1][1]
        self.assertTrue(all(q == 0 for q in first.values()))
        self.assertTrue(all(second[k] >= first[k] for k in KEYS))
        final = {k: result.pool.quantity_of(k) for k in KEYS}
        self.assertTrue(all(final[k] >= second[k] for k in KEYS))
        self.assertEqual(result.pool.absorbed_groups, ["large", "small"])

    def test_later_group_follows_pooled_ingredients(self):
        result = CrossPlanOptimizer(PlanAssembler(OverlapScorer(WEIGHTS)), deadline_seconds=0,
                                    event_bus=EventBus()).optimize(self.groups, self.candidates, self.by_id)
        large, small = result.plans
        self.assertEqual(large.group.name, "large")
        pooled = {e.key for e in result.pool.entries() if "large" in e.groups}
        for a in small.assignments:
            recipe = self.by_id[a.recipe_id]
            keys = {f"{i.key_name}|mass" for i in recipe.ingredients}
            self.assertTrue(keys & pooled)
        shared = [e for e in result.pool.entries() if e.is_shared]
        self.assertTrue(shared)

    def test_pool_contributions_sum_to_quantity(self):
        result = CrossPlanOptimizer(PlanAssembler(OverlapScorer(WEIGHTS)), deadline_seconds=0,
                                    event_bus=EventBus()).optimize(self.groups, self.candidates, self.by_id)
        for entry in result.pool.entries():
            self.assertAlmostEqual(sum(entry.contributions.values()), entry.quantity)

    def test_timeout_skips_remaining_groups(self):
        clock = StepClock(0, 0, 100)
        result = CrossPlanOptimizer(PlanAssembler(OverlapScorer(WEIGHTS)), deadline_seconds=10, clock=clock,
                                    event_bus=EventBus()).optimize(self.groups, self.candidates, self.by_id)
        self.assertEqual([p.group.name for p in result.plans], ["large"])
        self.assertEqual(result.skipped, ["small"])
        self.assertEqual(len(result.warnings), 1)
        self.assertEqual(result.warnings[0].code, "OptimizationTimeout")
        self.assertIn("small", result.warnings[0].message)
        self.assertEqual(result.pool.absorbed_groups, ["large"])

    def test_group_assembled_events(self):
        bus = EventBus()
        seen = []
        bus.subscribe(PLANNING_GROUP_ASSEMBLED, lambda name, payload: seen.append(payload))
        CrossPlanOptimizer(PlanAssembler(OverlapScorer(WEIGHTS)), deadline_seconds=0,
                           event_bus=bus).optimize(self.groups, self.candidates, self.by_id)
        self.assertEqual([p["group"] for p in seen], ["large", "small"])
        self.assertEqual(seen[0]["meals"], 4)
        self.assertGreater(seen[1]["pool_size"], 0)


if __name__ == "__main__":
    unittest.main()
