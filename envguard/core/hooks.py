"""Hook Registry

Ordered, synchronous observer registry used to broadcast lifecycle events.
"""

import logging
import threading
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from .contracts import HookEvent

logger = logging.getLogger(__name__)

HookCallback = Callable[[Any], Any]


def _key(event: Union[str, Enum]) -> str:
    return event.value if isinstance(event, Enum) else str(event)


class HookRegistry:
    """Registry of callbacks keyed by event kind.

    Callbacks run in registration order on the caller's thread. By default a
    callback that raises aborts the trigger and the exception reaches the
    code that triggered the event. With ``isolate_errors=True`` the failure
    is logged and the remaining callbacks still run.
    """

    def __init__(self, isolate_errors: bool = False, max_history: int = 0):
        self._subscribers: Dict[str, List[HookCallback]] = defaultdict(list)
        self._lock = threading.RLock()
        self._event_history: List[HookEvent] = []
        self._max_history = max_history
        self.isolate_errors = isolate_errors

    def subscribe(self, event_type: Union[str, Enum], callback: HookCallback):
        with self._lock:
            key = _key(event_type)
            if callback not in self._subscribers[key]:
                self._subscribers[key].append(callback)

    def unsubscribe(self, event_type: Union[str, Enum], callback: HookCallback):
        with self._lock:
            key = _key(event_type)
            if callback in self._subscribers[key]:
                self._subscribers[key].remove(callback)

    on = subscribe
    off = unsubscribe

    def publish(self, event_type: Union[str, Enum], payload: Any = None):
        """Call every subscriber of ``event_type`` with ``payload``."""
        key = _key(event_type)
        with self._lock:
            if self._max_history:
                self._event_history.append(HookEvent(event_type=key, payload=payload))
                if len(self._event_history) > self._max_history:
                    self._event_history.pop(0)

            # snapshot, a callback may (un)subscribe while we iterate
            subscribers = list(self._subscribers.get(key, []))

            if not subscribers:
                logger.debug(f"No subscribers for {key}")
                return

            logger.debug(f"Publishing {key} to {len(subscribers)} subscribers")

        # Call subscribers outside the lock
        for callback in subscribers:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Error in hook handler for {key}: {e}")
                if not self.isolate_errors:
                    raise

    trigger = publish

    def get_history(self, event_type: Optional[Union[str, Enum]] = None, limit: int = 100) -> List[HookEvent]:
        with self._lock:
            if event_type:
                key = _key(event_type)
                events = [e for e in self._event_history if e.event_type == key]
            else:
                events = list(self._event_history)
            return events[-limit:]

    def clear_history(self):
        with self._lock:
            self._event_history.clear()

    def get_subscriber_count(self, event_type: Union[str, Enum]) -> int:
        with self._lock:
            return len(self._subscribers.get(_key(event_type), []))


__all__ = ['HookRegistry', 'HookCallback']
