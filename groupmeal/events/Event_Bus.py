"""Simple Event Bus / Observer implementation for planning notifications.

Event names used so far:
  planning.group_assembled -> payload {"group": str, "meals": int, "total_cost": float, "pool_size": int}
  planning.warning -> payload {"code": str, "message": str, "group": str|None, "meal_type": str|None}
  planning.generated -> payload {"run_id": str|None, "groups": [str], "total_cost": float, "warnings": int}

Subscribers can be callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PLANNING_GROUP_ASSEMBLED = "planning.group_assembled"
PLANNING_WARNING = "planning.warning"
PLANNING_GENERATED = "planning.generated"


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def subscribers(self, event_name: str) -> List[Callable[[str, Any], None]]:
		return list(self._subscribers.get(event_name, []))

	def publish(self, event_name: str, payload: Any):
		for cb in self.subscribers(event_name):
			try:
				cb(event_name, payload)
			except Exception:
				# A broken subscriber never aborts a planning run
				logger.exception("Error delivering %s to %s", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def log_listener(event_name: str, payload: Any):
	logger.debug("[EVENT] %s: %s", event_name, payload)


def crea(event_name: str, payload: Any = None, bus: EventBus | None = None) -> None:
	"""Publish an event on the given bus, the global one by default."""
	(bus or GLOBAL_EVENT_BUS).publish(event_name, payload)


# Alias semantic
create_event = crea

__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'crea', 'create_event', 'log_listener',
	'PLANNING_GROUP_ASSEMBLED', 'PLANNING_WARNING', 'PLANNING_GENERATED'
]
