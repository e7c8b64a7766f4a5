"""
Core runtime module.

Exports:
- DataModel: Frozen Pydantic base for data-only models
- EventBus, Event, EventHandler: Event system
"""

from nexus.core.model import DataModel
from nexus.core.events import EventBus, Event, EventHandler

__all__ = [
    # Models
    "DataModel",
    # Events
    "EventBus",
    "Event",
    "EventHandler",
]
