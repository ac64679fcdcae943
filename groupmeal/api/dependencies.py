"""Collaborators handed to the endpoints; tests swap them with app.dependency_overrides."""
from functools import lru_cache

from groupmeal.infra.Household_Repository import HouseholdProfileStore
from groupmeal.infra.Plan_Repository import PlanRepository
from groupmeal.infra.Price_Table import IngredientPriceTable
from groupmeal.infra.Recipe_Repository import RecipeCatalog


@lru_cache(maxsize=1)
def get_catalog() -> RecipeCatalog:
    return RecipeCatalog.from_file()


@lru_cache(maxsize=1)
def get_households() -> HouseholdProfileStore:
    return HouseholdProfileStore.from_file()


@lru_cache(maxsize=1)
def get_price_table() -> IngredientPriceTable:
    return IngredientPriceTable.from_file()


def get_repository() -> PlanRepository:
    return PlanRepository()
