from typing import Final

MEAL_TYPES: Final[tuple[str, ...]] = ("breakfast", "lunch", "dinner", "snack")

# A recipe carrying the key tag also satisfies every restriction in the value set
RESTRICTION_IMPLICATIONS: Final[dict[str, frozenset[str]]] = {
    "vegan": frozenset({"vegetarian", "dairy-free", "egg-free", "pescatarian"}),
    "vegetarian": frozenset({"pescatarian"}),
}

# Goals that can also be met from per-serving nutrition facts: (nutrient, comparison, threshold)
GOAL_NUTRIENT_RULES: Final[dict[str, tuple[str, str, float]]] = {
    "high-protein": ("protein", ">=", 25),
    "low-carb": ("carbs", "<=", 20),
    "low-calorie": ("calories", "<=", 500),
    "low-fat": ("fat", "<=", 10),
    "high-fiber": ("fiber", ">=", 8),
}

NUTRIENTS: Final[tuple[str, ...]] = ("calories", "protein", "carbs", "fat", "fiber")

CATEGORY_AISLES: Final[dict[str, str]] = {
    "produce": "Produce",
    "vegetables": "Produce",
    "fruits": "Produce",
    "meat": "Meat & Seafood",
    "poultry": "Meat & Seafood",
    "seafood": "Meat & Seafood",
    "dairy": "Dairy",
    "cheese": "Dairy",
    "pantry": "Pantry/Dry Goods",
    "grains": "Pantry/Dry Goods",
    "pasta": "Pantry/Dry Goods",
    "spices": "Pantry/Dry Goods",
    "condiments": "Pantry/Dry Goods",
    "frozen": "Frozen",
    "bakery": "Bakery",
    "beverages": "Beverages",
    "snacks": "Snacks",
}
DEFAULT_AISLE: Final[str] = "Other"

DELIVERY_HEADER: Final[str] = "Please add these items to my grocery delivery cart:"
DELIVERY_FOOTER: Final[str] = (
    "If any items are unavailable, please suggest similar alternatives.\n"
    "Prefer organic options when available."
)
DELIVERY_PROMPT_TEMPLATE: Final[str] = (
    """
    You are a grocery shopping assistant. Convert this consolidated ingredient list
    into grocery store purchasing language (standard package sizes, round up so there
    is enough, keep whole produce as counts).

    Return exactly this format:
    {header}
    - [grocery quantity/package] [specific item name]

    {footer}

    INGREDIENTS:
    """
)
