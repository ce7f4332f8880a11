import logging
from collections import defaultdict
from typing import Callable

logger = logging.getLogger("mediator.client")

AUTH_CHANGED = "auth_changed"
FRIEND_REQUESTS_CHANGED = "friend_requests_changed"


class EventBus:
    """In-process publish/subscribe, handed to whoever needs to notify or listen"""

    def __init__(self):
        self._subscribers: dict[str, list[Callable]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Callable) -> Callable[[], None]:
        """Register a handler, returns the function that unregisters it"""
        self._subscribers[topic].append(handler)

        def unsubscribe():
            if handler in self._subscribers[topic]:
                self._subscribers[topic].remove(handler)

        return unsubscribe

    def publish(self, topic: str, **payload) -> int:
        """Call every handler of the topic, returns how many were called.

        A failing handler is logged and does not stop the others.
        """
        handlers = list(self._subscribers.get(topic, ()))
        for handler in handlers:
            try:
                handler(**payload)
            except Exception:
                logger.exception(f"Event handler failed for {topic}")
        return len(handlers)
