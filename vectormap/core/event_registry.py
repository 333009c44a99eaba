"""Process-wide registry of interaction listeners.

Every listener any component binds on a host element goes through
EventRegistry.subscribe(), which attaches it to the subject and returns a
Subscription handle. Owners (map instances) keep their own list of handles,
so teardown is a local loop over that list and never disturbs listeners
owned by other live instances.

The shared table is still process-wide so leaks are observable:
entries_for(owner) lists whatever an owner has not released yet.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class EventTarget(Protocol):
    """Anything listeners can be attached to (host elements, documents)."""

    def add_event_listener(self, event_name: str, handler: Callable[..., Any]) -> None: ...

    def remove_event_listener(self, event_name: str, handler: Callable[..., Any]) -> None: ...


@dataclass(frozen=True, eq=False)
class Subscription:
    """Handle for one bound listener.

    Attributes:
        owner: Object that installed the listener (e.g. a VectorMap)
        subject: Element the listener is attached to
        event_name: Event name on the subject
        handler: The bound callable
    """

    owner: object
    subject: EventTarget
    event_name: str
    handler: Callable[..., Any]


class EventRegistry:
    """Table of live subscriptions shared by all map instances.

    Example:
        registry = EventRegistry.shared()
        sub = registry.subscribe(owner=self, subject=container, event_name="click", handler=on_click)
        registry.unsubscribe(sub)
    """

    _instance: Optional["EventRegistry"] = None

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    @classmethod
    def shared(cls) -> "EventRegistry":
        """Return the process-wide registry."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def subscribe(
        self,
        owner: object,
        subject: EventTarget,
        event_name: str,
        handler: Callable[..., Any],
    ) -> Subscription:
        """Attach handler to subject and record it.

        Returns:
            Subscription handle the owner must keep for teardown.
        """
        subject.add_event_listener(event_name, handler)
        subscription = Subscription(owner=owner, subject=subject, event_name=event_name, handler=handler)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Detach and forget one subscription.

        Returns:
            True if it was live, False if it had already been removed.
        """
        if subscription not in self._subscriptions:
            return False
        subscription.subject.remove_event_listener(subscription.event_name, subscription.handler)
        self._subscriptions.remove(subscription)
        return True

    def entries(self) -> list[Subscription]:
        return list(self._subscriptions)

    def entries_for(self, owner: object) -> list[Subscription]:
        """Live subscriptions installed by owner."""
        return [s for s in self._subscriptions if s.owner is owner]

    def __len__(self) -> int:
        return len(self._subscriptions)
