"""Synchronous in-process event bus with marker-driven handler discovery."""

from __future__ import annotations

from typing import Any

from eventbus.domain.errors import InvalidHandlerError
from eventbus.domain.handlers import Handler
from eventbus.logging_config import get_logger
from eventbus.repos.memory import SubscriberRegistry
from eventbus.services.discovery import collect_handlers

logger = get_logger(__name__)


class EventBus:
    """Publish/subscribe bus routing events by runtime type.

    Subscribers are plain objects whose marked fields are discovered on
    ``subscribe``. Handlers run synchronously on the publishing thread, and a
    handler exception stops delivery for that ``publish`` call.
    """

    def __init__(self) -> None:
        self.registry = SubscriberRegistry()

    def subscribe(self, instance: Any) -> None:
        """Discover ``instance``'s handlers and register them.

        Replaces any previous registration of the same instance. An instance
        without handlers is not registered.

        Raises:
            InvalidHandlerError: A marked field does not fit its marker form.
        """
        try:
            handlers = collect_handlers(instance)
        except InvalidHandlerError as exc:
            logger.warning(
                "handler_discovery_failed",
                subscriber=type(instance).__qualname__,
                field=exc.field_name,
                reason=exc.reason,
            )
            raise

        if not handlers:
            logger.debug("subscriber_ignored", subscriber=type(instance).__qualname__)
            return

        self.registry.put(instance, handlers)
        logger.debug(
            "subscriber_registered",
            subscriber=type(instance).__qualname__,
            handlers=len(handlers),
        )

    def unsubscribe(self, instance: Any) -> None:
        if self.registry.remove(instance):
            logger.debug("subscriber_removed", subscriber=type(instance).__qualname__)

    def unsubscribe_all(self) -> None:
        removed = self.registry.clear()
        logger.debug("registry_cleared", removed=removed)

    def publish(self, event: Any) -> None:
        delivered = 0
        for handlers in self.registry.snapshot():
            for handler in handlers:
                if handler.matches(event):
                    handler.invoke(event)
                    delivered += 1
        logger.debug("event_published", event_type=type(event).__qualname__, delivered=delivered)

    def is_subscribed(self, instance: Any) -> bool:
        return instance in self.registry

    def handlers_for(self, instance: Any) -> tuple[Handler, ...]:
        return self.registry.get(instance) or ()
