"""Household profile store backed by a JSON file.

File layout:
    {
      "members": [ { id, name, age, dietary_restrictions, allergies, preferences, dislikes }, ... ],
      "groups": { "adults": [1, 2], "kids": [3] }
    }
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from groupmeal.domain.HouseholdMember import HouseholdMember
from groupmeal.infra.paths import HOUSEHOLD_FILE
from groupmeal.utilities.validators import HouseholdMemberInput

logger = logging.getLogger(__name__)


class HouseholdProfileStore:
    def __init__(self, members: Optional[Iterable[HouseholdMember]] = None,
                 groups: Optional[Dict[str, List[int]]] = None):
        self._members: Dict[int, HouseholdMember] = {m.member_id: m for m in (members or [])}
        self._groups = {name.lower(): list(ids) for name, ids in (groups or {}).items()}

    @classmethod
    def from_dict(cls, data: dict) -> "HouseholdProfileStore":
        members = []
        for index, entry in enumerate(data.get('members', []) or []):
            try:
                record = HouseholdMemberInput.model_validate(entry)
            except PydanticValidationError as e:
                logger.warning("Rejected household record #%s: %s", index, e.errors(include_url=False))
                continue
            members.append(HouseholdMember.from_dict(record.model_dump()))
        return cls(members, data.get('groups', {}) or {})

    @classmethod
    def from_file(cls, path: Path = HOUSEHOLD_FILE) -> "HouseholdProfileStore":
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"Household file not found: {path}. Using an empty household.")
            return cls()
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in household file: {e}")
            return cls()
        return cls.from_dict(data if isinstance(data, dict) else {})

    def all_members(self) -> List[HouseholdMember]:
        return sorted(self._members.values(), key=lambda m: m.member_id)

    def members(self, member_ids: Iterable[int]) -> List[HouseholdMember]:
        """Members for the given ids, in the given order. Unknown ids raise KeyError."""
        missing = [i for i in member_ids if i not in self._members]
        if missing:
            raise KeyError(f"Unknown household member ids: {missing}")
        return [self._members[i] for i in member_ids]

    def __call__(self, group_id: str) -> List[HouseholdMember]:
        """Members of a named household group."""
        ids = self._groups.get(group_id.lower())
        if ids is None:
            raise KeyError(f"Unknown household group: {group_id}")
        return self.members(ids)
