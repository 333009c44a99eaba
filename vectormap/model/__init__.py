"""Data model classes for map entities and their state.

- Category: Entity category (regions, markers)
- EntityHandle: Reference to one rendered region/marker, owns its selection flag
- EntityRegistry: Key -> handle mapping per category
- SelectionStore: Pure query layer over handle selection flags
- MapEvent / EventEmitter: Typed events, option hooks and on()/unsubscribe
"""

from vectormap.model.entity import Category, EntityHandle
from vectormap.model.events import EVENT_HOOKS, EventEmitter, MapEvent, Unsubscribe
from vectormap.model.registry import EntityRegistry
from vectormap.model.selection import SelectionStore

__all__ = [
    "Category",
    "EntityHandle",
    "EntityRegistry",
    "SelectionStore",
    "MapEvent",
    "EVENT_HOOKS",
    "EventEmitter",
    "Unsubscribe",
]
