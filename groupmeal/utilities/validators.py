"""
Input validation schemas using Pydantic: catalog records, household profiles,
price table entries and the meal-plan generation request.
"""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from groupmeal.utilities.constants import MEAL_TYPES


def _clean_list(v):
    """Strip entries and drop empty ones."""
    return [s.strip() for s in (v or []) if isinstance(s, str) and s.strip()]


class IngredientInput(BaseModel):
    """Schema for one recipe ingredient."""
    name: str = Field(..., min_length=1, max_length=100)
    quantity: float = Field(..., gt=0, le=100000)
    unit: str = Field(default="", max_length=20)
    category: str = Field(default="other", max_length=40)

    @field_validator('name', 'unit', 'category')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        if isinstance(v, str):
            return v.strip()
        return v


class NutritionInput(BaseModel):
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)
    fiber: float = Field(default=0, ge=0)


class RecipeInput(BaseModel):
    """Schema for a catalog recipe record."""
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=3, max_length=200)
    servings: int = Field(default=4, ge=1, le=50)
    ingredients: List[IngredientInput]
    tags: List[str] = Field(default_factory=list)
    meal_types: List[str] = Field(default_factory=list)
    cost_per_serving: Decimal = Field(..., ge=0, le=1000)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    prep_time: int = Field(default=0, ge=0)
    cook_time: int = Field(default=0, ge=0)
    cuisine: str = ""
    nutrition: NutritionInput = Field(default_factory=NutritionInput)

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        """Catalog ids may be numeric; the engine compares them as strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Recipe name cannot be empty')
        return v.strip()

    @field_validator('ingredients')
    @classmethod
    def validate_ingredients(cls, v):
        """Ensure recipe has at least one ingredient."""
        if not v:
            raise ValueError('Recipe must have at least one ingredient')
        return v

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        return _clean_list(v)

    @field_validator('meal_types')
    @classmethod
    def validate_meal_types(cls, v):
        cleaned = [m.lower() for m in _clean_list(v)]
        unknown = [m for m in cleaned if m not in MEAL_TYPES]
        if unknown:
            raise ValueError(f"Unknown meal types: {', '.join(unknown)}")
        return cleaned


class HouseholdMemberInput(BaseModel):
    """Schema for a household profile record."""
    id: int = Field(..., ge=0)
    name: str = Field(..., min_length=1, max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=130)
    dietary_restrictions: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    preferences: List[str] = Field(default_factory=list)
    dislikes: List[str] = Field(default_factory=list)

    @field_validator('dietary_restrictions', 'allergies', 'preferences', 'dislikes')
    @classmethod
    def clean_terms(cls, v):
        return _clean_list(v)


class PriceInput(BaseModel):
    """Price of one ingredient: either per unit, or per package of `package_size` units."""
    unit: str = Field(default="", max_length=20)
    price: Optional[Decimal] = Field(default=None, ge=0)
    package_size: Optional[float] = Field(default=None, gt=0)
    package_price: Optional[Decimal] = Field(default=None, ge=0)

    @model_validator(mode='after')
    def check_price_given(self):
        if self.price is None and self.package_price is None:
            raise ValueError('Either price or package_price is required')
        if self.package_price is not None and self.package_size is None:
            raise ValueError('package_price requires package_size')
        return self


class GroupRequest(BaseModel):
    """One group of a generation request. Members come from ids or from the household's named group."""
    name: str = Field(..., min_length=1, max_length=100)
    member_ids: Optional[List[int]] = None
    budget: Optional[Decimal] = Field(default=None, ge=0)
    goals: Optional[List[str]] = None

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        if not v.strip():
            raise ValueError('Group name cannot be empty')
        return v.strip()

    @field_validator('member_ids')
    @classmethod
    def unique_members(cls, v):
        if v is not None and not v:
            raise ValueError('A group needs at least one member')
        if v is not None and len(set(v)) != len(v):
            raise ValueError('Duplicate member ids')
        return v


class GenerateMealPlansRequest(BaseModel):
    """Schema for a meal-plan generation request."""
    groups: List[GroupRequest] = Field(..., min_length=1)
    duration_days: int = Field(..., ge=1, le=31)
    start_date: date
    meal_types: List[str] = Field(..., min_length=1)
    budget_per_group: Optional[Decimal] = Field(default=None, ge=0)
    goals: List[str] = Field(default_factory=list)
    name: str = Field(default="Household", max_length=100)

    @field_validator('meal_types')
    @classmethod
    def validate_meal_types(cls, v):
        cleaned = [m.lower() for m in _clean_list(v)]
        unknown = [m for m in cleaned if m not in MEAL_TYPES]
        if unknown:
            raise ValueError(f"Unknown meal types: {', '.join(unknown)}")
        if not cleaned:
            raise ValueError('At least one meal type is required')
        if len(set(cleaned)) != len(cleaned):
            raise ValueError('Duplicate meal types')
        return cleaned

    @field_validator('goals')
    @classmethod
    def validate_goals(cls, v):
        return _clean_list(v)

    @model_validator(mode='after')
    def unique_group_names(self):
        names = [g.name.lower() for g in self.groups]
        if len(set(names)) != len(names):
            raise ValueError('Group names must be unique')
        return self


class PriceTableFile(BaseModel):
    prices: Dict[str, List[PriceInput]]

    @field_validator('prices', mode='before')
    @classmethod
    def listify(cls, v):
        """Accept a single entry or a list of entries per ingredient."""
        if isinstance(v, dict):
            return {k: (e if isinstance(e, list) else [e]) for k, e in v.items()}
        return v
