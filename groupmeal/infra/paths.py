from pathlib import Path
from groupmeal.utilities.config import DATA_DIR as _CONFIGURED_DATA_DIR

# Centralized paths for data files (single source of truth)
DATA_DIR = Path(_CONFIGURED_DATA_DIR).resolve()
RECIPES_FILE = DATA_DIR / 'recipes.json'
HOUSEHOLD_FILE = DATA_DIR / 'household.json'
PRICES_FILE = DATA_DIR / 'prices.json'
PLANS_FILE = DATA_DIR / 'meal_plans.json'

__all__ = ['DATA_DIR', 'RECIPES_FILE', 'HOUSEHOLD_FILE', 'PRICES_FILE', 'PLANS_FILE']
