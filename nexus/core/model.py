"""
Base class for data-only models.

Models are immutable data containers with NO mutating logic.
State changes happen by building a new model, never by editing one
in place. This keeps snapshots safe to hand out:
- Readers can hold on to a value without it changing underneath them
- Validation happens once, at construction
- Serialization comes for free

Usage:
    class NodeEffect(DataModel):
        stat: Stat
        value: float

    effect = NodeEffect(stat=Stat.DAMAGE_BONUS, value=0.08)
    doubled = effect.model_copy(update={"value": 0.16})
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DataModel(BaseModel):
    """
    Base class for all data-only models.

    Uses Pydantic for:
    - Automatic validation
    - JSON serialization
    - Type hints
    - Default values

    IMPORTANT: Models are frozen. Do NOT add methods that modify state.
    """

    model_config = ConfigDict(
        # Snapshots are shared with readers, so never mutable
        frozen=True,
        # Reject unknown fields so authoring typos fail loudly
        extra='forbid',
    )

    def clone(self) -> DataModel:
        """Create a deep copy of this model."""
        return self.model_copy(deep=True)
