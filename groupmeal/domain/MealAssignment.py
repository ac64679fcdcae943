"""MealAssignment: one filled (date, meal type) slot of a group's plan. Written once, never edited."""
from datetime import date
from decimal import Decimal


class MealAssignment:
    __slots__ = ("group", "date", "meal_type", "recipe_id", "recipe_name", "servings", "estimated_cost", "repeat")

    def __init__(self, group: str, date: date, meal_type: str, recipe_id: str, recipe_name: str,
                 servings: int, estimated_cost: Decimal, repeat: bool = False):
        for attr, value in (("group", group), ("date", date), ("meal_type", meal_type),
                            ("recipe_id", recipe_id), ("recipe_name", recipe_name),
                            ("servings", servings), ("estimated_cost", estimated_cost), ("repeat", repeat)):
            object.__setattr__(self, attr, value)

    def __setattr__(self, name, value):
        raise AttributeError("MealAssignment is immutable")

    def __eq__(self, other):
        if not isinstance(other, MealAssignment):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.group, self.date, self.meal_type, self.recipe_id))

    def __str__(self) -> str:
        return f"{self.group} {self.date.isoformat()} {self.meal_type}: {self.recipe_name} x{self.servings} ({self.estimated_cost})"

    __repr__ = __str__

    def to_dict(self):
        return {
            "group": self.group,
            "date": self.date.isoformat(),
            "meal_type": self.meal_type,
            "recipe_id": self.recipe_id,
            "recipe_name": self.recipe_name,
            "servings": self.servings,
            "estimated_cost": float(self.estimated_cost),
            "repeat": self.repeat,
        }
