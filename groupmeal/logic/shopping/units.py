"""Unit normalization.

Every recipe unit maps to a unit class and that class's base unit:
  mass   -> g
  volume -> ml
  count  -> pcs
Units outside the table (clove, can, bunch, pinch, ...) form their own class named
after the singular unit, so 3 cloves and 2 clove merge but never merge with grams.
"""
from typing import Dict, NamedTuple, Tuple
from groupmeal.domain.Ingredient import _stem

MASS = "mass"
VOLUME = "volume"
COUNT = "count"

BASE_UNITS: Dict[str, str] = {MASS: "g", VOLUME: "ml", COUNT: "pcs"}

# alias -> (unit class, factor to the class base unit)
CONVERSIONS: Dict[str, Tuple[str, float]] = {
    # mass
    "g": (MASS, 1.0), "gram": (MASS, 1.0), "grams": (MASS, 1.0),
    "kg": (MASS, 1000.0), "kilogram": (MASS, 1000.0), "kilograms": (MASS, 1000.0),
    "mg": (MASS, 0.001), "milligram": (MASS, 0.001), "milligrams": (MASS, 0.001),
    "oz": (MASS, 28.349523125), "ounce": (MASS, 28.349523125), "ounces": (MASS, 28.349523125),
    "lb": (MASS, 453.59237), "lbs": (MASS, 453.59237), "pound": (MASS, 453.59237), "pounds": (MASS, 453.59237),
    # volume
    "ml": (VOLUME, 1.0), "milliliter": (VOLUME, 1.0), "milliliters": (VOLUME, 1.0),
    "millilitre": (VOLUME, 1.0), "millilitres": (VOLUME, 1.0),
    "l": (VOLUME, 1000.0), "liter": (VOLUME, 1000.0), "liters": (VOLUME, 1000.0),
    "litre": (VOLUME, 1000.0), "litres": (VOLUME, 1000.0),
    "tsp": (VOLUME, 4.92892159375), "teaspoon": (VOLUME, 4.92892159375), "teaspoons": (VOLUME, 4.92892159375),
    "tbsp": (VOLUME, 14.78676478125), "tablespoon": (VOLUME, 14.78676478125),
    "tablespoons": (VOLUME, 14.78676478125),
    "fl oz": (VOLUME, 29.5735295625), "fluid ounce": (VOLUME, 29.5735295625),
    "fluid ounces": (VOLUME, 29.5735295625),
    "cup": (VOLUME, 236.5882365), "cups": (VOLUME, 236.5882365),
    "pint": (VOLUME, 473.176473), "pints": (VOLUME, 473.176473),
    "quart": (VOLUME, 946.352946), "quarts": (VOLUME, 946.352946),
    "gallon": (VOLUME, 3785.411784), "gallons": (VOLUME, 3785.411784),
    # count
    "": (COUNT, 1.0), "pc": (COUNT, 1.0), "pcs": (COUNT, 1.0), "piece": (COUNT, 1.0), "pieces": (COUNT, 1.0),
    "each": (COUNT, 1.0), "whole": (COUNT, 1.0), "unit": (COUNT, 1.0), "units": (COUNT, 1.0),
    "dozen": (COUNT, 12.0),
}

# Rounding applied to converted quantities so float noise never splits equal amounts
QUANTITY_PRECISION = 6


class NormalizedQuantity(NamedTuple):
    quantity: float
    unit: str
    unit_class: str


def unit_class_of(unit: str) -> Tuple[str, str, float]:
    """Return (unit class, base unit, factor) for a unit string."""
    u = " ".join((unit or "").strip().lower().rstrip(".").split())
    if u in CONVERSIONS:
        cls, factor = CONVERSIONS[u]
        return cls, BASE_UNITS[cls], factor
    singular = _stem(u)
    return f"unit:{singular}", singular, 1.0


def normalize(quantity: float, unit: str) -> NormalizedQuantity:
    """Convert a quantity to its class base unit. Normalizing a normalized value is a no-op."""
    cls, base, factor = unit_class_of(unit)
    return NormalizedQuantity(round(float(quantity) * factor, QUANTITY_PRECISION), base, cls)


def ingredient_key(name_key: str, unit_class: str) -> str:
    return f"{name_key}|{unit_class}"
