"""Change notifications for state owned by a single device."""
import logging
import threading
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, Any], None]

class Observable:
    """Mixin giving a store a lock and a subscriber list."""
    
    def __init__(self, lock: Optional[threading.RLock] = None):
        self.lock = lock or threading.RLock()
        self._subscribers: List[Subscriber] = []
    
    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback(event, obj)``; returns an unsubscribe function."""
        self._subscribers.append(callback)
        
        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        
        return unsubscribe
    
    def _notify(self, event: str, obj: Any) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event, obj)
            except Exception:
                # A broken view must not undo a committed state change
                logger.exception("Subscriber failed handling %s", event)
