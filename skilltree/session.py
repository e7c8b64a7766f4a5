"""
Skill tree session - the activation engine.

Owns the mutable progression state of one play session: the set of
active nodes and the skill-point balance. Every mutation recomputes
the modifiers snapshot (where it can change) and notifies subscribers
synchronously, in registration order.

Usage:
    session = SkillTreeSession()
    session.subscribe(on_tree_changed)

    session.add_skill_points(3)
    if not session.activate("rf_entry"):
        show_hint("Unlock a connected node first")

    stats = session.modifiers  # poll once per tick
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Iterable, Optional

from nexus.core.events import EventBus, EventHandler
from skilltree.buildcode import BuildCodec
from skilltree.catalog import Adjacency, CatalogError, NodeCatalog, build_adjacency, default_catalog, load_catalog
from skilltree.compositor import ComputedModifiers, compose, wave_clear_reward
from skilltree.config import ProgressionConfig

logger = logging.getLogger(__name__)


class ProgressionEvent(Enum):
    """Events published by a skill tree session."""
    STATE_CHANGED = auto()


class ChangeReason(Enum):
    """What caused a STATE_CHANGED event."""
    NODE_ACTIVATED = auto()
    SKILL_POINTS_ADDED = auto()
    BUILD_LOADED = auto()
    SESSION_RESET = auto()


class NodeState(Enum):
    """Presentation state of a node."""
    LOCKED = auto()       # No active neighbor
    REACHABLE = auto()    # Adjacent to the build, but too expensive
    AVAILABLE = auto()    # Can be activated now
    ACTIVE = auto()       # Already allocated


class SkillTreeSession:
    """
    Mutable progression state for one play session.

    Invariants:
    - the root node is always active
    - every active node reaches the root through active nodes
      (activation only extends the frontier; imports are validated)
    - the balance never goes negative
    """

    def __init__(
        self,
        catalog: Optional[NodeCatalog] = None,
        config: Optional[ProgressionConfig] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.config = config or ProgressionConfig()
        if catalog is None:
            if self.config.catalog_path is not None:
                catalog = load_catalog(self.config.catalog_path)
            else:
                catalog = default_catalog()
        if catalog.root_id != self.config.root_id:
            raise CatalogError(
                f"Catalog root '{catalog.root_id}' does not match configured root '{self.config.root_id}'"
            )

        self._catalog = catalog
        self._codec = BuildCodec(catalog, prefix=self.config.build_code_prefix)
        self.event_bus = event_bus or EventBus()

        self._active: set[str] = {catalog.root_id}
        self._skill_points = self.config.starting_skill_points
        self._adjacency: Adjacency = build_adjacency(catalog)
        self._modifiers = compose(self._active, catalog)

    @property
    def catalog(self) -> NodeCatalog:
        return self._catalog

    @property
    def active_nodes(self) -> frozenset[str]:
        return frozenset(self._active)

    @property
    def skill_points(self) -> int:
        return self._skill_points

    @property
    def modifiers(self) -> ComputedModifiers:
        """Current modifiers snapshot. Replaced, never mutated."""
        return self._modifiers

    @property
    def adjacency(self) -> Adjacency:
        return self._adjacency

    def is_active(self, node_id: str) -> bool:
        """True if the node is currently active."""
        return node_id in self._active

    def is_reachable(self, node_id: str) -> bool:
        """True if the node is inactive and has an active neighbor. Ignores cost."""
        if node_id in self._active:
            return False
        return any(n in self._active for n in self._adjacency.get(node_id, ()))

    def can_activate(self, node_id: str) -> bool:
        """True if the node is reachable and affordable."""
        node = self._catalog.get(node_id)
        if node is None:
            return False
        return self.is_reachable(node_id) and self._skill_points >= node.cost

    def node_state(self, node_id: str) -> NodeState:
        """Classify a node for presentation."""
        if self.is_active(node_id):
            return NodeState.ACTIVE
        if self.can_activate(node_id):
            return NodeState.AVAILABLE
        if self.is_reachable(node_id):
            return NodeState.REACHABLE
        return NodeState.LOCKED

    def points_needed(self, node_id: str) -> int:
        """Skill points still missing to afford a node (0 if affordable or unknown)."""
        node = self._catalog.get(node_id)
        if node is None:
            return 0
        return max(0, node.cost - self._skill_points)

    def activate(self, node_id: str) -> bool:
        """
        Attempt to activate a node.

        Returns:
            True on success. False, with no state change, if the node is
            unknown, already active, not adjacent to the build, or too
            expensive.
        """
        if not self.can_activate(node_id):
            return False

        node = self._catalog.get(node_id)
        self._active.add(node_id)
        self._skill_points -= node.cost
        self._modifiers = compose(self._active, self._catalog)
        logger.debug(f"Activated '{node_id}' for {node.cost} SP ({self._skill_points} left)")
        self._notify(ChangeReason.NODE_ACTIVATED, node_id=node_id)
        return True

    def add_skill_points(self, amount: int) -> None:
        """
        Award skill points.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Cannot grant a negative amount of skill points ({amount})")
        self._skill_points += amount
        logger.debug(f"Granted {amount} SP ({self._skill_points} total)")
        self._notify(ChangeReason.SKILL_POINTS_ADDED, amount=amount)

    def grant_wave_clear(self) -> int:
        """Award the wave-clear reward, including bonus points from the build."""
        reward = wave_clear_reward(self._modifiers)
        self.add_skill_points(reward)
        return reward

    def load_build(self, active_ids: Iterable[str]) -> None:
        """
        Replace the active set wholesale.

        The root is always kept. Ids the catalog does not know are
        dropped. The balance is reset to 0: an imported build counts as
        a finished allocation.
        """
        requested = set(active_ids)
        unknown = sorted(i for i in requested if i not in self._catalog)
        if unknown:
            logger.warning(f"Ignoring unknown nodes in build: {', '.join(unknown)}")

        self._active = {i for i in requested if i in self._catalog}
        self._active.add(self._catalog.root_id)
        self._skill_points = 0
        self._adjacency = build_adjacency(self._catalog)
        self._modifiers = compose(self._active, self._catalog)
        logger.info(f"Loaded build with {len(self._active)} active nodes")
        self._notify(ChangeReason.BUILD_LOADED)

    def reset(self) -> None:
        """Restore the initial state: only the root active, starting balance."""
        self._active = {self._catalog.root_id}
        self._skill_points = self.config.starting_skill_points
        self._adjacency = build_adjacency(self._catalog)
        self._modifiers = compose(self._active, self._catalog)
        logger.info("Skill tree reset")
        self._notify(ChangeReason.SESSION_RESET)

    def export_code(self) -> str:
        """Encode the current build as a shareable code."""
        return self._codec.encode(self._active)

    def import_code(self, text: str) -> bool:
        """
        Decode a build code and load it.

        Returns:
            True if the build was loaded. False if the code was rejected,
            in which case the session is left untouched.
        """
        nodes = self._codec.decode(text)
        if nodes is None:
            return False
        self.load_build(nodes)
        return True

    def subscribe(self, handler: EventHandler, weak: bool = False) -> None:
        """
        Subscribe to state changes.

        Handlers receive an Event with `reason`, `skill_points` and
        `modifiers` data. They must not call mutating methods.
        """
        self.event_bus.subscribe(ProgressionEvent.STATE_CHANGED, handler, weak=weak)

    def unsubscribe(self, handler: EventHandler) -> None:
        self.event_bus.unsubscribe(ProgressionEvent.STATE_CHANGED, handler)

    def _notify(self, reason: ChangeReason, **data) -> None:
        self.event_bus.broadcast(
            ProgressionEvent.STATE_CHANGED,
            reason=reason,
            skill_points=self._skill_points,
            modifiers=self._modifiers,
            **data,
        )
