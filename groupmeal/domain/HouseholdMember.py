"""HouseholdMember domain entity: who eats, and what they cannot or would rather not eat."""
from typing import Iterable, Optional
from groupmeal.domain.Ingredient import normalize_tag


def _tags(values: Optional[Iterable[str]]) -> frozenset:
    return frozenset(t for t in (normalize_tag(v) for v in (values or [])) if t)


def _terms(values: Optional[Iterable[str]]) -> frozenset:
    return frozenset(v.strip().lower() for v in (values or []) if isinstance(v, str) and v.strip())


class HouseholdMember:
    def __init__(self, member_id: int, name: str = "", age: Optional[int] = None,
                 dietary_restrictions: Optional[Iterable[str]] = None, allergies: Optional[Iterable[str]] = None,
                 preferences: Optional[Iterable[str]] = None, dislikes: Optional[Iterable[str]] = None):
        self.member_id = member_id
        self.name = name
        self.age = age
        self.dietary_restrictions = _tags(dietary_restrictions)
        # Allergens and dislikes are matched against ingredient names as well as tags
        self.allergies = _terms(allergies)
        self.preferences = _terms(preferences)
        self.dislikes = _terms(dislikes)

    def __str__(self) -> str:
        return f"{self.member_id}: {self.name} (restrictions: {', '.join(sorted(self.dietary_restrictions)) or '-'}; " \
               f"allergies: {', '.join(sorted(self.allergies)) or '-'})"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return HouseholdMember(
            member_id=d["id"],
            name=d.get("name", ""),
            age=d.get("age"),
            dietary_restrictions=d.get("dietary_restrictions", []),
            allergies=d.get("allergies", []),
            preferences=d.get("preferences", []),
            dislikes=d.get("dislikes", []),
        )

    def to_dict(self):
        return {
            "id": self.member_id,
            "name": self.name,
            "age": self.age,
            "dietary_restrictions": sorted(self.dietary_restrictions),
            "allergies": sorted(self.allergies),
            "preferences": sorted(self.preferences),
            "dislikes": sorted(self.dislikes),
        }
