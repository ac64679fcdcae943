from typing import Optional
from fastapi import APIRouter, Query, Depends
from groupmeal.api.dependencies import get_catalog
from groupmeal.infra.Recipe_Repository import RecipeCatalog

router = APIRouter()


@router.get("")
def list_recipes(meal_type: Optional[str] = Query(default=None),
                 catalog: RecipeCatalog = Depends(get_catalog)):
    """Catalog summary, optionally only the recipes serving one meal type."""
    criteria = {'meal_types': [meal_type]} if meal_type else {}
    recipes = catalog.lookup(criteria)
    return {
        "count": len(recipes),
        "recipes": [
            {
                "id": r.recipe_id,
                "name": r.name,
                "tags": sorted(r.tags),
                "meal_types": sorted(r.meal_types),
                "cost_per_serving": float(r.cost_per_serving),
                "servings": r.servings,
                "rating": r.rating,
                "cuisine": r.cuisine,
            }
            for r in recipes
        ],
    }
