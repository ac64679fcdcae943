"""Ingredient domain entity: name, quantity, unit, store category."""
import re
from typing import List


def _stem(word: str) -> str:
    # Simple plural to singular heuristics (not perfect, acceptable for this use case)
    if word.endswith('ies') and len(word) > 3:
        return word[:-3] + 'y'  # berries -> berry
    if word.endswith('oes') and len(word) > 3:
        return word[:-3] + 'o'  # tomatoes -> tomato, potatoes -> potato
    if word.endswith('sses') and len(word) > 4:
        return word[:-2]  # glasses -> glass
    if word.endswith('ses') and len(word) > 3:
        return word[:-1]  # cheeses -> cheese
    if word.endswith('es') and len(word) > 2 and word[-3] in 'hx':
        return word[:-2]  # boxes -> box, dishes -> dish
    if word.endswith('s') and not word.endswith(('ss', 'us')) and len(word) > 1:
        return word[:-1]
    return word


def name_words(name: str) -> List[str]:
    """Lowercased, singularized words of an ingredient or allergen name."""
    if not isinstance(name, str):
        return []
    return [_stem(w) for w in re.split(r"[\s\-_,/]+", name.strip().lower()) if w]


def normalize_name(name: str) -> str:
    """Normalize an ingredient name for matching (case, whitespace, plural of the last word)."""
    if not isinstance(name, str):
        return ""
    words = name.strip().lower().split()
    if not words:
        return ""
    words[-1] = _stem(words[-1])
    return " ".join(words)


def normalize_tag(tag: str) -> str:
    """'High Protein', 'high_protein' and 'high-protein' all map to 'high-protein'."""
    if not isinstance(tag, str):
        return ""
    return re.sub(r"[\s_]+", "-", tag.strip().lower())


class Ingredient:
    def __init__(self, name: str = "", quantity: float = 0.0, unit: str = "", category: str = "other"):
        self.name = name.strip() if isinstance(name, str) else ""
        self.quantity = float(quantity)
        self.unit = (unit or "").strip().lower()
        self.category = (category or "other").strip().lower()

    @property
    def key_name(self) -> str:
        return normalize_name(self.name)

    def scaled(self, factor: float) -> "Ingredient":
        return Ingredient(self.name, self.quantity * factor, self.unit, self.category)

    def __str__(self) -> str:
        return f"{self.name} - {self.quantity:g} {self.unit} ({self.category})".replace("  ", " ")

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates an Ingredient from a validated dictionary. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        return Ingredient(
            name=d.get("name", ""),
            quantity=d.get("quantity", 0) or 0,
            unit=d.get("unit", "") or "",
            category=d.get("category", "other") or "other",
        )

    def to_dict(self):
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "category": self.category,
        }
