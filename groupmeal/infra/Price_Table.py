"""Ingredient price table backed by a JSON file.

File layout (one entry or a list of entries per ingredient, one per unit class):
    {
      "chicken breast": {"unit": "kg", "price": 11.00},
      "rice": {"unit": "g", "package_size": 1000, "package_price": 2.49},
      "garlic": [{"unit": "clove", "price": 0.10}, {"unit": "g", "price": 0.02}]
    }

Prices are converted to the base unit of their class (g, ml, pcs, ...), so lookups
and line-item quantities always speak the same unit.
"""
import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from groupmeal.domain.Ingredient import normalize_name
from groupmeal.infra.paths import PRICES_FILE
from groupmeal.logic.shopping.units import unit_class_of, QUANTITY_PRECISION
from groupmeal.utilities.validators import PriceTableFile

logger = logging.getLogger(__name__)


class PriceEntry:
    def __init__(self, unit_price: Decimal, package_size: Optional[float] = None):
        self.unit_price = unit_price          # per base unit
        self.package_size = package_size      # in base units

    def __str__(self) -> str:
        pkg = f" (package {self.package_size:g})" if self.package_size else ""
        return f"{self.unit_price}/unit{pkg}"

    __repr__ = __str__


class IngredientPriceTable:
    def __init__(self, entries: Optional[Dict[Tuple[str, str], PriceEntry]] = None):
        self._entries: Dict[Tuple[str, str], PriceEntry] = dict(entries or {})

    @classmethod
    def from_dict(cls, data: dict) -> "IngredientPriceTable":
        try:
            parsed = PriceTableFile.model_validate({'prices': data})
        except PydanticValidationError as e:
            logger.error("Invalid price table: %s", e.errors(include_url=False))
            raise
        entries: Dict[Tuple[str, str], PriceEntry] = {}
        for name, rows in parsed.prices.items():
            for row in rows:
                cls_name, _base, factor = unit_class_of(row.unit)
                factor_dec = Decimal(str(factor))
                if row.package_price is not None:
                    # price per table unit derived from the package
                    per_unit = row.package_price / Decimal(str(row.package_size))
                else:
                    per_unit = row.price
                package = round(row.package_size * factor, QUANTITY_PRECISION) if row.package_size else None
                entries[(normalize_name(name), cls_name)] = PriceEntry(per_unit / factor_dec, package)
        return cls(entries)

    @classmethod
    def from_file(cls, path: Path = PRICES_FILE) -> "IngredientPriceTable":
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"Price file not found: {path}. All items will be unpriced.")
            return cls()
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in price file: {e}")
            return cls()
        return cls.from_dict(data if isinstance(data, dict) else {})

    def lookup(self, name_key: str, unit_class: str) -> Optional[PriceEntry]:
        return self._entries.get((name_key, unit_class))

    def __call__(self, ingredient_key: str) -> Optional[Decimal]:
        """Unit price for a '<name>|<unit class>' key, None when unknown."""
        name_key, _, unit_class = ingredient_key.partition('|')
        entry = self.lookup(name_key, unit_class)
        return entry.unit_price if entry else None

    def __len__(self) -> int:
        return len(self._entries)
