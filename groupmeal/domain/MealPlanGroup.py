"""MealPlanGroup domain entity: a named subset of members sharing one meal plan for one run."""
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Iterator, List, Optional, Tuple
from groupmeal.domain.HouseholdMember import HouseholdMember
from groupmeal.domain.Ingredient import normalize_tag


class MealPlanGroup:
    def __init__(self, name: str, members: Iterable[HouseholdMember], duration_days: int, start_date: date,
                 meal_types: Iterable[str], budget: Optional[Decimal] = None,
                 goals: Optional[Iterable[str]] = None, position: int = 0):
        self.name = name
        self.members: Tuple[HouseholdMember, ...] = tuple(members)
        self.duration_days = duration_days
        self.start_date = start_date
        self.meal_types: Tuple[str, ...] = tuple(meal_types)
        self.budget = Decimal(str(budget)) if budget is not None else None
        self.goals: Tuple[str, ...] = tuple(g for g in (normalize_tag(g) for g in (goals or [])) if g)
        self.position = position

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def servings(self) -> int:
        return max(1, self.member_count)

    @property
    def end_date(self) -> date:
        return self.start_date + timedelta(days=self.duration_days - 1)

    @property
    def allergies(self) -> frozenset:
        return frozenset().union(*(m.allergies for m in self.members))

    @property
    def restrictions(self) -> frozenset:
        return frozenset().union(*(m.dietary_restrictions for m in self.members))

    @property
    def preferences(self) -> frozenset:
        return frozenset().union(*(m.preferences for m in self.members))

    @property
    def dislikes(self) -> frozenset:
        return frozenset().union(*(m.dislikes for m in self.members))

    def dates(self) -> List[date]:
        return [self.start_date + timedelta(days=i) for i in range(self.duration_days)]

    def slots(self) -> Iterator[Tuple[date, str]]:
        """(date, meal type) pairs in calendar order, then meal-type declaration order."""
        for day in self.dates():
            for meal_type in self.meal_types:
                yield day, meal_type

    @property
    def slot_count(self) -> int:
        return self.duration_days * len(self.meal_types)

    def __str__(self) -> str:
        return f"{self.name} ({self.member_count} members, {self.duration_days} days from {self.start_date.isoformat()})"

    __repr__ = __str__
