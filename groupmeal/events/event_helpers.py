"""Event helper utilities.

Helper functions for publishing planning events, on the global event bus
unless another bus is passed.

Quick import:
    from groupmeal.events.event_helpers import (
        publish_group_assembled, publish_warnings, publish_generated,
        PLANNING_GROUP_ASSEMBLED, PLANNING_WARNING, PLANNING_GENERATED
    )
"""
from __future__ import annotations
from typing import Iterable, Any, Optional
from .Event_Bus import (
    crea, create_event,
    PLANNING_GROUP_ASSEMBLED, PLANNING_WARNING, PLANNING_GENERATED,
    EventBus
)

__all__ = [
    'publish_group_assembled', 'publish_warnings', 'publish_generated',
    'PLANNING_GROUP_ASSEMBLED', 'PLANNING_WARNING', 'PLANNING_GENERATED',
    'crea', 'create_event'
]


def publish_group_assembled(plan: Any, pool_size: int, bus: Optional[EventBus] = None):
    """Publish a planning.group_assembled event for one AssembledPlan."""
    crea(PLANNING_GROUP_ASSEMBLED, {
        'group': plan.group.name,
        'meals': len(plan.assignments),
        'total_cost': float(plan.total_cost),
        'pool_size': pool_size,
    }, bus=bus)


def publish_warnings(warnings: Iterable[Any], bus: Optional[EventBus] = None):
    """Publish one planning.warning event per PlanWarning."""
    for warning in warnings:
        crea(PLANNING_WARNING, warning.to_dict(), bus=bus)


def publish_generated(result: Any, bus: Optional[EventBus] = None):
    """Publish a planning.generated event summarizing a PlanningResult.

    Payload structure:
        {
          'run_id': <str or None>,
          'groups': [<group name>, ...],
          'total_cost': <float>,
          'warnings': <int>
        }
    """
    crea(PLANNING_GENERATED, {
        'run_id': result.run_id,
        'groups': [p.group.name for p in result.plans],
        'total_cost': float(result.grocery_list.total_cost),
        'warnings': len(result.warnings),
    }, bus=bus)
