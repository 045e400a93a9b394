"""In-process domain events.

The verification core only publishes; notification delivery belongs to whoever
subscribes.
"""
import logging
from collections.abc import Callable

from pydantic import BaseModel

logger = logging.getLogger("docverify.events")


class DomainEvent(BaseModel):
    event: str
    document_id: str
    owner_id: str
    version: int


class DocumentDecided(DomainEvent):
    event: str = "document.decided"
    outcome: str


class DocumentResubmitted(DomainEvent):
    event: str = "document.resubmitted"


Handler = Callable[[DomainEvent], None]


class EventBus:
    def __init__(self):
        self._handlers: list[Handler] = []

    def subscribe(self, handler: Handler) -> Handler:
        self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: Handler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, event: DomainEvent) -> None:
        # Published after commit; a failing subscriber must not undo the write.
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, event.event)


def log_event(event: DomainEvent) -> None:
    logger.info("%s %s", event.event, event.model_dump_json())


event_bus = EventBus()
event_bus.subscribe(log_event)
