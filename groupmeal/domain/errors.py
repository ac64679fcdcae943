"""Planning error taxonomy and recoverable warnings.

Fatal errors (ValidationError, NoAdmissibleRecipes, PersistenceFailure) abort
a run and are returned alone. Recoverable conditions (BudgetInfeasible,
UnitMismatch, OptimizationTimeout) are turned into PlanWarning entries on an
otherwise successful result.
"""
from __future__ import annotations

from typing import Any, Optional


class PlanningError(Exception):
    code = "planning_error"
    recoverable = False

    def __init__(self, detail: Optional[str] = None, **extra: Any):
        self.detail = detail or self.code
        self.extra = extra
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.detail, **self.extra}


class ValidationError(PlanningError):
    code = "ValidationError"

    def __init__(self, errors: Any, detail: str = "Invalid meal plan request"):
        super().__init__(detail, errors=errors)
        self.errors = errors


class NoAdmissibleRecipes(PlanningError):
    code = "NoAdmissibleRecipes"

    def __init__(self, group: str, meal_type: str):
        super().__init__(
            f"No admissible recipes for group '{group}' and meal type '{meal_type}'",
            group=group, meal_type=meal_type,
        )
        self.group = group
        self.meal_type = meal_type


class PersistenceFailure(PlanningError):
    code = "PersistenceFailure"


class RecoverableCondition(PlanningError):
    recoverable = True

    def __init__(self, detail: str, group: Optional[str] = None, meal_type: Optional[str] = None):
        super().__init__(detail)
        self.group = group
        self.meal_type = meal_type

    def to_warning(self) -> "PlanWarning":
        return PlanWarning(self.code, self.detail, group=self.group, meal_type=self.meal_type)


class BudgetInfeasible(RecoverableCondition):
    code = "BudgetInfeasible"


class UnitMismatch(RecoverableCondition):
    code = "UnitMismatch"


class OptimizationTimeout(RecoverableCondition):
    code = "OptimizationTimeout"


# Warning codes that have no exception counterpart
REPEATS = "repeats"
BUDGET_EXCEEDED = "budget-exceeded"


class PlanWarning:
    def __init__(self, code: str, message: str, group: Optional[str] = None, meal_type: Optional[str] = None):
        self.code = code
        self.message = message
        self.group = group
        self.meal_type = meal_type

    def __eq__(self, other):
        if not isinstance(other, PlanWarning):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    __repr__ = __str__

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "group": self.group,
            "meal_type": self.meal_type,
        }
