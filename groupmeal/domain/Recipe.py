"""Recipe domain entity: catalog recipe with tags, ingredients, cost and nutrition per serving."""
from decimal import Decimal
from typing import List, Dict, Optional, Iterable
from groupmeal.domain.Ingredient import Ingredient, normalize_tag
from groupmeal.utilities.constants import NUTRIENTS


class Recipe:
    def __init__(self, recipe_id: str = "", name: str = "", tags: Optional[Iterable[str]] = None,
                 ingredients: Optional[List[Ingredient]] = None, cost_per_serving=Decimal("0"),
                 servings: int = 1, rating: Optional[float] = None, prep_time: int = 0, cook_time: int = 0,
                 meal_types: Optional[Iterable[str]] = None, cuisine: str = "",
                 nutrition: Optional[Dict[str, float]] = None):
        self.recipe_id = str(recipe_id)
        self.name = name
        self.tags = frozenset(t for t in (normalize_tag(t) for t in (tags or [])) if t)
        self.ingredients = list(ingredients) if ingredients else []
        self.cost_per_serving = Decimal(str(cost_per_serving))
        self.servings = max(1, int(servings))
        self.rating = float(rating) if rating is not None else None
        self.prep_time = prep_time
        self.cook_time = cook_time
        self.meal_types = frozenset(m.strip().lower() for m in (meal_types or []) if m and m.strip())
        self.cuisine = (cuisine or "").strip()
        n = nutrition or {}
        # Normalize key synonyms
        if 'carbohydrates' in n and 'carbs' not in n:
            n = dict(n, carbs=n['carbohydrates'])
        if 'fats' in n and 'fat' not in n:
            n = dict(n, fat=n['fats'])
        self.nutrition = {k: float(n.get(k, 0) or 0) for k in NUTRIENTS}

    def __str__(self) -> str:
        return (f"{self.recipe_id}: {self.name} - serves {self.servings} - "
                f"{self.cost_per_serving}/serving - Tags: {', '.join(sorted(self.tags))}")

    __repr__ = __str__

    def serves(self, meal_type: str) -> bool:
        """A recipe without declared meal types fits any slot."""
        return not self.meal_types or meal_type in self.meal_types

    def scale_factor(self, servings: int) -> float:
        return servings / self.servings

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return Recipe(
            recipe_id=d.get("id", d.get("recipe_id", "")),
            name=d.get("name", ""),
            tags=d.get("tags", []),
            ingredients=[Ingredient.from_dict(ing) for ing in d.get("ingredients", [])],
            cost_per_serving=d.get("cost_per_serving", 0),
            servings=d.get("servings", 1),
            rating=d.get("rating"),
            prep_time=d.get("prep_time", 0) or 0,
            cook_time=d.get("cook_time", 0) or 0,
            meal_types=d.get("meal_types", []),
            cuisine=d.get("cuisine", ""),
            nutrition=d.get("nutrition", {}),
        )

    def to_dict(self):
        return {
            "id": self.recipe_id,
            "name": self.name,
            "tags": sorted(self.tags),
            "ingredients": [ing.to_dict() for ing in self.ingredients],
            "cost_per_serving": float(self.cost_per_serving),
            "servings": self.servings,
            "rating": self.rating,
            "prep_time": self.prep_time,
            "cook_time": self.cook_time,
            "meal_types": sorted(self.meal_types),
            "cuisine": self.cuisine,
            "nutrition": dict(self.nutrition),
        }
