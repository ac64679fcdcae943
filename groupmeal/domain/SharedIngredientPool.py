"""Shared-ingredient pool: running ingredient demand of the groups already planned in one run.

The pool is created by the cross-plan optimizer for a single run and only grows:
`absorb` adds one group's requirements exactly once and refuses negative amounts.
Plan assembly reads it through a PoolView, which has no mutators.
"""
from collections import OrderedDict
from typing import Dict, Iterable, Iterator, List


class PoolEntry:
    def __init__(self, key: str, name: str, unit: str, unit_class: str):
        self.key = key
        self.name = name
        self.unit = unit
        self.unit_class = unit_class
        self.quantity = 0.0
        self.contributions: Dict[str, float] = OrderedDict()

    @property
    def groups(self) -> List[str]:
        return list(self.contributions.keys())

    @property
    def is_shared(self) -> bool:
        return len(self.contributions) > 1

    def to_dict(self):
        return {
            "key": self.key,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "groups": self.groups,
        }

    def __str__(self) -> str:
        return f"{self.key}: {self.quantity:g} {self.unit} <- {', '.join(self.groups)}"

    __repr__ = __str__


class SharedIngredientPool:
    def __init__(self):
        self._entries: Dict[str, PoolEntry] = OrderedDict()
        self._absorbed: List[str] = []

    def quantity_of(self, key: str) -> float:
        entry = self._entries.get(key)
        return entry.quantity if entry else 0.0

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> Iterator[PoolEntry]:
        return iter(self._entries.values())

    def get(self, key: str):
        return self._entries.get(key)

    @property
    def absorbed_groups(self) -> List[str]:
        return list(self._absorbed)

    def absorb(self, group: str, requirements: Iterable) -> None:
        """Add one group's requirements (objects with key/name/quantity/unit/unit_class)."""
        if group in self._absorbed:
            raise ValueError(f"Group '{group}' was already merged into the pool")
        reqs = list(requirements)
        for req in reqs:
            if req.quantity < 0:
                raise ValueError(f"Negative quantity for '{req.key}' from group '{group}'")
        for req in reqs:
            entry = self._entries.get(req.key)
            if entry is None:
                entry = self._entries[req.key] = PoolEntry(req.key, req.name, req.unit, req.unit_class)
            entry.quantity += req.quantity
            entry.contributions[group] = entry.contributions.get(group, 0.0) + req.quantity
        self._absorbed.append(group)

    def view(self) -> "PoolView":
        return PoolView(self)

    def to_dict(self):
        return [e.to_dict() for e in self._entries.values()]


class PoolView:
    """Read-only window on a pool."""
    __slots__ = ("_pool",)

    def __init__(self, pool: SharedIngredientPool):
        self._pool = pool

    def quantity_of(self, key: str) -> float:
        return self._pool.quantity_of(key)

    def __contains__(self, key: str) -> bool:
        return key in self._pool

    def __len__(self) -> int:
        return len(self._pool)
