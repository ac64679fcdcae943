"""Recipe catalog lookup backed by a JSON file.

Records are validated with RecipeInput; malformed records are logged and
skipped so they never reach the optimizer.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from groupmeal.domain.Recipe import Recipe
from groupmeal.domain.Ingredient import normalize_tag
from groupmeal.infra.paths import RECIPES_FILE
from groupmeal.utilities.validators import RecipeInput

logger = logging.getLogger(__name__)


def parse_recipes(records: Iterable[dict]) -> List[Recipe]:
    """Validate raw catalog records; duplicates of an id keep the first record."""
    recipes: List[Recipe] = []
    seen = set()
    for index, entry in enumerate(records):
        try:
            data = RecipeInput.model_validate(entry)
        except PydanticValidationError as e:
            logger.warning("Rejected catalog record #%s: %s", index, e.errors(include_url=False))
            continue
        if data.id in seen:
            logger.warning("Rejected duplicate catalog id %s", data.id)
            continue
        seen.add(data.id)
        recipes.append(Recipe.from_dict(data.model_dump()))
    return recipes


class RecipeCatalog:
    def __init__(self, recipes: Optional[Iterable[Recipe]] = None):
        self._recipes: List[Recipe] = sorted(recipes or [], key=lambda r: r.recipe_id)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "RecipeCatalog":
        return cls(parse_recipes(records))

    @classmethod
    def from_file(cls, path: Path = RECIPES_FILE) -> "RecipeCatalog":
        """Read recipes from JSON file with proper error handling."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                records = json.load(f)
        except FileNotFoundError:
            logger.warning(f"Recipes file not found: {path}. Using an empty catalog.")
            return cls([])
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in recipes file: {e}")
            return cls([])
        return cls.from_records(records if isinstance(records, list) else [])

    def __len__(self) -> int:
        return len(self._recipes)

    def all(self) -> List[Recipe]:
        return list(self._recipes)

    def by_id(self) -> Dict[str, Recipe]:
        return {r.recipe_id: r for r in self._recipes}

    def lookup(self, criteria: Optional[dict] = None) -> List[Recipe]:
        """Recipes matching the filter criteria.

        Supported keys:
            meal_types: recipe must serve at least one of them
            exclude_tags: recipe must carry none of them
        """
        criteria = criteria or {}
        meal_types = [m.lower() for m in criteria.get('meal_types') or []]
        exclude = {normalize_tag(t) for t in criteria.get('exclude_tags') or []}
        result = []
        for r in self._recipes:
            if meal_types and not any(r.serves(m) for m in meal_types):
                continue
            if exclude and r.tags & exclude:
                continue
            result.append(r)
        return result

    __call__ = lookup
