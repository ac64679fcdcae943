"""Web-facing observers for planning events.

This module subscribes to the GLOBAL_EVENT_BUS for:
  - planning.group_assembled
  - planning.warning
  - planning.generated

and stores a lightweight in-memory ring buffer of recent events that the
FastAPI layer serves at /api/planning/events.

Design:
  * Each event stored with an auto-increment integer id (cursor) so clients
    can request only newer events (since=<last_id_seen>).
  * Thread-safety ensured with a simple Lock (uvicorn may serve requests from
    several threads; multi-process deployments keep one buffer per process).
  * A MAX_EVENTS cap prevents unbounded memory growth.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone

from groupmeal.utilities import config
from .Event_Bus import (
    GLOBAL_EVENT_BUS, PLANNING_GROUP_ASSEMBLED, PLANNING_WARNING, PLANNING_GENERATED, log_listener
)

logger = logging.getLogger(__name__)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300  # keep a few hundred recent events
_started = False

# Payload fields copied onto the stored event
_FIELDS = ('group', 'meal_type', 'code', 'message', 'meals', 'total_cost', 'pool_size', 'run_id', 'groups', 'warnings')


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        }
        if isinstance(payload, dict):
            for k in _FIELDS:
                if k in payload:
                    evt[k] = payload[k]
        _events.append(evt)
        _next_id += 1
        # Trim buffer
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for name in (PLANNING_GROUP_ASSEMBLED, PLANNING_WARNING, PLANNING_GENERATED):
        GLOBAL_EVENT_BUS.subscribe(name, _record)
        if config.DEBUG:
            GLOBAL_EVENT_BUS.subscribe(name, log_listener)
    _started = True
    logger.debug("Planning event observers subscribed")


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive).

    If since is None, returns the last N (up to MAX_EVENTS) events.
    Response includes next_cursor (largest id) so client can poll with since=next_cursor.
    """
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events']
