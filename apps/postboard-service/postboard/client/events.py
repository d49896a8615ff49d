"""
Mutation events and the bus that fans them out to cache subscribers.
"""
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List

logger = logging.getLogger(__name__)


class MutationKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"


@dataclass(frozen=True)
class PostMutation:
    kind: MutationKind
    post_id: str
    data: Any = None


Handler = Callable[[PostMutation], None]


class MutationBus:
    """Synchronous publish/subscribe for post mutations.

    Handlers run in subscription order on the publishing thread. A handler
    that raises is logged and the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: List[Handler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        with self._lock:
            self._handlers.append(handler)
        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: Handler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def publish(self, event: PostMutation) -> None:
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("mutation_handler_failed: kind=%s post_id=%s", event.kind.value, event.post_id)
