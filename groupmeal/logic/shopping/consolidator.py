"""Grocery consolidation.

Provides GroceryConsolidator(price_table).consolidate(assignments, recipes_by_id):
every assignment is expanded into its recipe's ingredients scaled to the
assignment's servings, normalized to base units and summed per
'<name>|<unit class>' key, then priced and sorted into a GroceryList.
"""
import logging
import math
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional

from groupmeal.domain.errors import PlanWarning, UnitMismatch
from groupmeal.domain.GroceryList import GroceryList, GroceryLineItem, NO_PRICE_FLAG, UNIT_MISMATCH_FLAG
from groupmeal.domain.MealAssignment import MealAssignment
from groupmeal.domain.Recipe import Recipe
from groupmeal.logic.shopping.requirements import Requirement, assignment_requirements
from groupmeal.logic.shopping.units import QUANTITY_PRECISION
from groupmeal.utilities.constants import CATEGORY_AISLES, DEFAULT_AISLE

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def round_price(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def aisle_for(category: str) -> str:
    return CATEGORY_AISLES.get((category or "").strip().lower(), DEFAULT_AISLE)


def packages_needed(quantity: float, package_size: float) -> int:
    # round first so 3 x 333.333333 g never asks for a second 1000 g bag
    return math.ceil(round(quantity / package_size, QUANTITY_PRECISION))


def aggregate(requirements: Iterable[Requirement]) -> "OrderedDict[str, dict]":
    """Sum requirements per key; display name and category come from the first occurrence."""
    totals: "OrderedDict[str, dict]" = OrderedDict()
    for req in requirements:
        row = totals.get(req.key)
        if row is None:
            row = totals[req.key] = {
                'name': req.name,
                'name_key': req.name_key,
                'unit': req.unit,
                'unit_class': req.unit_class,
                'category': req.category,
                'quantity': 0.0,
                'groups': [],
            }
        row['quantity'] += req.quantity
        if req.group and req.group not in row['groups']:
            row['groups'].append(req.group)
    for row in totals.values():
        row['quantity'] = round(row['quantity'], QUANTITY_PRECISION)
    return totals


def unit_mismatch_warnings(grocery_list: GroceryList) -> List[PlanWarning]:
    """One UnitMismatch warning per ingredient name listed under several unit classes."""
    by_name: Dict[str, List[GroceryLineItem]] = OrderedDict()
    for item in grocery_list.items:
        if item.unit_mismatch:
            by_name.setdefault(item.key.partition('|')[0], []).append(item)
    warnings = []
    for name_key, items in by_name.items():
        units = ", ".join(f"{i.quantity:g} {i.unit}" for i in items)
        warnings.append(UnitMismatch(
            f"'{items[0].name}' is needed in incompatible units ({units}); listed separately"
        ).to_warning())
    return warnings


class GroceryConsolidator:
    def __init__(self, price_table=None):
        # price_table: IngredientPriceTable-like, lookup(name_key, unit_class) -> PriceEntry | None
        self.price_table = price_table

    def _price_entry(self, name_key: str, unit_class: str):
        if self.price_table is None:
            return None
        return self.price_table.lookup(name_key, unit_class)

    def line_item(self, key: str, row: dict, mismatch: bool) -> GroceryLineItem:
        flags = [UNIT_MISMATCH_FLAG] if mismatch else []
        quantity = row['quantity']
        purchase = quantity
        entry = self._price_entry(row['name_key'], row['unit_class'])
        if entry is None:
            flags.append(NO_PRICE_FLAG)
            price = Decimal("0.00")
            unit_price: Optional[Decimal] = None
        else:
            if entry.package_size:
                purchase = round(packages_needed(quantity, entry.package_size) * entry.package_size,
                                 QUANTITY_PRECISION)
            unit_price = entry.unit_price
            price = round_price(unit_price * Decimal(str(purchase)))
        return GroceryLineItem(
            key=key, name=row['name'], quantity=quantity, unit=row['unit'], unit_class=row['unit_class'],
            category=row['category'], aisle=aisle_for(row['category']), estimated_price=price,
            groups=row['groups'], purchase_quantity=purchase, flags=flags, unit_price=unit_price,
            package_size=entry.package_size if entry is not None else None,
        )

    def consolidate(self, assignments: Iterable[MealAssignment], recipes_by_id: Dict[str, Recipe],
                    name: str = "Consolidated Shopping List") -> GroceryList:
        totals = aggregate(assignment_requirements(assignments, recipes_by_id))

        classes: Dict[str, set] = {}
        for row in totals.values():
            classes.setdefault(row['name_key'], set()).add(row['unit_class'])

        items = [self.line_item(key, row, len(classes[row['name_key']]) > 1) for key, row in totals.items()]
        items.sort(key=lambda i: (i.category, i.name.lower(), i.unit_class))
        grocery_list = GroceryList(name, items)

        unpriced = [i.name for i in items if NO_PRICE_FLAG in i.flags]
        if unpriced:
            logger.warning("No price for %s ingredient(s): %s", len(unpriced), ", ".join(unpriced))
        logger.info("Grocery list '%s': %s items, total %s", name, len(items), grocery_list.total_cost)
        return grocery_list


__all__ = ['GroceryConsolidator', 'aggregate', 'aisle_for', 'packages_needed', 'round_price',
           'unit_mismatch_warnings']
