"""Committed planning runs, stored in one JSON file keyed by run id.

A commit writes every plan of a run and its grocery list in a single atomic
replace of the store file (temp file + move): either the whole run is stored
or the file is left untouched.
"""
import json
import logging
import os
import shutil
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Callable, List, Optional

from groupmeal.domain.errors import PersistenceFailure
from groupmeal.domain.GroceryList import GroceryList
from groupmeal.infra.paths import PLANS_FILE

logger = logging.getLogger(__name__)

PLAN_STATUS_ACTIVE = "active"

# serializes read-modify-write of the store across request threads
_store_lock = Lock()


def meal_plan_record(plan) -> dict:
    """Persisted shape of one AssembledPlan: the meal plan plus its meals."""
    group = plan.group
    return {
        "name": group.name,
        "start_date": group.start_date.isoformat(),
        "end_date": group.end_date.isoformat(),
        "duration_days": group.duration_days,
        "status": PLAN_STATUS_ACTIVE,
        "budget": float(group.budget) if group.budget is not None else None,
        "total_cost": float(plan.total_cost),
        "goals": list(group.goals),
        "meal_types": list(group.meal_types),
        "member_ids": [m.member_id for m in group.members],
        "meals": [
            {
                "date": a.date.isoformat(),
                "meal_type": a.meal_type,
                "recipe_id": a.recipe_id,
                "recipe_name": a.recipe_name,
                "servings": a.servings,
                "estimated_cost": float(a.estimated_cost),
                "repeat": a.repeat,
            }
            for a in plan.assignments
        ],
    }


class PlanRepository:
    def __init__(self, store_file: Path = PLANS_FILE, id_factory: Callable[[], str] = lambda: uuid.uuid4().hex):
        self.store_file = Path(store_file)
        self.id_factory = id_factory

    def _read_store(self) -> dict:
        if not self.store_file.exists():
            return {}
        try:
            with open(self.store_file, "r", encoding="utf-8") as f:
                store = json.load(f) or {}
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceFailure(f"Cannot read plan store {self.store_file}: {e}") from e
        if not isinstance(store, dict):
            raise PersistenceFailure(f"Plan store {self.store_file} is not a JSON object")
        return store

    def _atomic_write(self, store: dict) -> None:
        directory = self.store_file.parent
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".meal_plans_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(store, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, self.store_file)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def commit(self, plans: List, grocery_list: GroceryList, metrics: Optional[dict] = None) -> str:
        """Store a whole run at once and return its id.

        Raises:
            PersistenceFailure: when the store cannot be read or written; nothing is written.
        """
        run_id = self.id_factory()
        record = {
            "run_id": run_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "meal_plans": [meal_plan_record(p) for p in plans],
            "grocery_list": grocery_list.to_dict(),
            "metrics": metrics or {},
        }
        try:
            with _store_lock:
                store = self._read_store()
                if run_id in store:
                    raise PersistenceFailure(f"Run id {run_id} already exists")
                store[run_id] = record
                self._atomic_write(store)
        except PersistenceFailure:
            logger.error("Commit of run %s failed", run_id)
            raise
        except (OSError, TypeError, ValueError) as e:
            logger.error("Commit of run %s failed: %s", run_id, e)
            raise PersistenceFailure(f"Failed to save meal plans: {e}") from e
        logger.info("Committed run %s (%s plans, %s grocery items)", run_id, len(plans), len(grocery_list))
        return run_id

    def get_run(self, run_id: str) -> Optional[dict]:
        return self._read_store().get(run_id)

    def list_runs(self) -> List[str]:
        return list(self._read_store().keys())


__all__ = ['PlanRepository', 'meal_plan_record', 'PLAN_STATUS_ACTIVE']
