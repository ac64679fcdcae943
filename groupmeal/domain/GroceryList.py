"""GroceryList aggregate: consolidated, priced line items for one planning run."""
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List, Optional

UNIT_MISMATCH_FLAG = "unit-mismatch"
NO_PRICE_FLAG = "no-price"


class GroceryLineItem:
    def __init__(self, key: str, name: str, quantity: float, unit: str, unit_class: str, category: str,
                 aisle: str, estimated_price: Decimal, groups: List[str],
                 purchase_quantity: Optional[float] = None, flags: Optional[List[str]] = None,
                 purchased: bool = False, unit_price: Optional[Decimal] = None,
                 package_size: Optional[float] = None):
        self.key = key
        self.name = name
        self.quantity = quantity
        self.unit = unit
        self.unit_class = unit_class
        self.category = category
        self.aisle = aisle
        self.estimated_price = estimated_price
        self.groups = list(groups)
        self.purchase_quantity = quantity if purchase_quantity is None else purchase_quantity
        self.flags = list(flags or [])
        self.purchased = purchased
        # per base unit, None when the price table has no entry
        self.unit_price = unit_price
        # base units per package, None when sold loose
        self.package_size = package_size

    @property
    def waste_cost(self) -> Decimal:
        """Cost of what is bought beyond the need (package rounding)."""
        if self.unit_price is None:
            return Decimal("0")
        return self.unit_price * Decimal(str(round(self.purchase_quantity - self.quantity, 6)))

    @property
    def unit_mismatch(self) -> bool:
        return UNIT_MISMATCH_FLAG in self.flags

    def __str__(self) -> str:
        flags = f" [{', '.join(self.flags)}]" if self.flags else ""
        return f"{self.name} - {self.quantity:g} {self.unit} - {self.estimated_price}{flags}"

    __repr__ = __str__

    def to_dict(self):
        return {
            "key": self.key,
            "name": self.name,
            "amount": self.quantity,
            "unit": self.unit,
            "purchase_amount": self.purchase_quantity,
            "category": self.category,
            "aisle": self.aisle,
            "estimated_price": float(self.estimated_price),
            "purchased": self.purchased,
            "used_in_plans": list(self.groups),
            "flags": list(self.flags),
        }

    @staticmethod
    def from_dict(data):
        d = dict(data)
        key = d.get("key", "")
        return GroceryLineItem(
            key=key,
            name=d.get("name", ""),
            quantity=float(d.get("amount", 0) or 0),
            unit=d.get("unit", ""),
            unit_class=key.partition("|")[2],
            category=d.get("category", "other"),
            aisle=d.get("aisle", ""),
            estimated_price=Decimal(str(d.get("estimated_price", 0))).quantize(Decimal("0.01")),
            groups=d.get("used_in_plans", []),
            purchase_quantity=d.get("purchase_amount"),
            flags=d.get("flags", []),
            purchased=bool(d.get("purchased", False)),
        )


class GroceryList:
    def __init__(self, name: str = "Consolidated Shopping List", items: Optional[List[GroceryLineItem]] = None):
        self.name = name
        self.items: List[GroceryLineItem] = list(items or [])

    @property
    def total_cost(self) -> Decimal:
        return sum((item.estimated_price for item in self.items), Decimal("0.00"))

    def by_category(self) -> Dict[str, List[GroceryLineItem]]:
        buckets: Dict[str, List[GroceryLineItem]] = OrderedDict()
        for item in self.items:
            buckets.setdefault(item.category, []).append(item)
        return buckets

    def find(self, key: str) -> Optional[GroceryLineItem]:
        for item in self.items:
            if item.key == key:
                return item
        return None

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        items_str = ",\n\t".join(str(item) for item in self.items)
        return f"{self.name} ({self.total_cost}):\n\t{items_str}"

    def __repr__(self) -> str:
        return self.__str__()

    def to_dict(self):
        return {
            "name": self.name,
            "items": [item.to_dict() for item in self.items],
            "total_cost": float(self.total_cost),
            "categories": {cat: [i.key for i in items] for cat, items in self.by_category().items()},
        }

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return GroceryList(
            name=d.get("name", "Consolidated Shopping List"),
            items=[GroceryLineItem.from_dict(i) for i in d.get("items", [])],
        )
