"""
Nexus runtime layer.

Generic building blocks shared by the game-specific packages:
- Typed event bus for synchronous publish/subscribe
- Frozen Pydantic base for data-only models
- JSON data loading with schema validation

Quick Start:
    from nexus import EventBus, DataModel

    class Reward(DataModel):
        points: int = 1

    bus = EventBus()
    bus.subscribe(MyEvents.REWARD_GRANTED, on_reward, weak=False)
    bus.publish(MyEvents.REWARD_GRANTED, reward=Reward(points=2))
"""

__version__ = "0.1.0"

from nexus.core import (
    DataModel,
    EventBus,
    Event,
    EventHandler,
)
from nexus.resources import Database, DataValidationError

__all__ = [
    # Models
    "DataModel",
    # Events
    "EventBus",
    "Event",
    "EventHandler",
    # Resources
    "Database",
    "DataValidationError",
]
