"""
Node catalog - static skill tree nodes and their adjacency.

The catalog is loaded once and never mutated. Its node order is
meaningful: build codes store one bit per node in catalog order.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from pydantic import Field, ValidationError, field_validator

from nexus.core.model import DataModel
from nexus.resources.database import Database, DataValidationError
from skilltree.stats import BehaviorSet, Stat

logger = logging.getLogger(__name__)

DATA_PATH = Path(__file__).parent / "data"
DEFAULT_CATALOG_FILE = "nodes.json"
NODE_SCHEMA = "node.schema.json"

# Id -> neighbor ids, symmetric
Adjacency = dict[str, frozenset[str]]


class CatalogError(ValueError):
    """The node catalog is malformed or violates a graph invariant."""


class NodeTier(Enum):
    """Node tiers, roughly by power and cost."""
    START = "start"
    SMALL = "small"
    NOTABLE = "notable"
    KEYSTONE = "keystone"


class Branch(Enum):
    """Cosmetic grouping of nodes. Not used by any rule."""
    START = "start"
    RAPID_FIRE = "rapid_fire"
    HEAVY_STRIKE = "heavy_strike"
    BULWARK = "bulwark"
    WARP = "warp"
    CHAIN = "chain"
    COLLECTOR = "collector"
    JUNCTION = "junction"


class NodeEffect(DataModel):
    """A single numeric modifier granted while the node is active."""
    stat: Stat
    value: float

    @field_validator("stat", mode="before")
    @classmethod
    def _resolve_stat(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return Stat.from_key(value)
            except KeyError as e:
                raise ValueError(str(e)) from e
        return value


class SkillNode(DataModel):
    """
    A node in the skill tree graph.

    Attributes:
        id: Unique key
        tier: Node tier
        branch: Cosmetic grouping tag
        cost: Skill points needed to activate
        label: Display name
        description: Flavor text
        effects: Stat modifiers, in authoring order
        behaviors: Behavior tags granted while active
        connections: Declared neighbor ids (may be one-directional)
    """
    id: str
    tier: NodeTier
    branch: Branch
    cost: int = Field(ge=0)
    label: str = ""
    description: str = ""
    effects: tuple[NodeEffect, ...] = ()
    behaviors: BehaviorSet = frozenset()
    connections: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return self.tier is NodeTier.START


class NodeCatalog:
    """
    Ordered, immutable collection of skill nodes.

    Construction checks the graph invariants:
    - node ids are unique
    - exactly one START node exists, and it is the only node costing 0
    - every connection targets a known node
    - every node is reachable from the root
    """

    def __init__(self, nodes: Iterable[SkillNode]):
        self._nodes: tuple[SkillNode, ...] = tuple(nodes)
        self._by_id: dict[str, SkillNode] = {}
        self._index: dict[str, int] = {}

        for i, node in enumerate(self._nodes):
            if node.id in self._by_id:
                raise CatalogError(f"Duplicate node id '{node.id}'")
            self._by_id[node.id] = node
            self._index[node.id] = i

        roots = [node for node in self._nodes if node.is_root]
        if len(roots) != 1:
            raise CatalogError(f"Expected exactly one start node, found {len(roots)}")
        self._root = roots[0]
        if self._root.cost != 0:
            raise CatalogError(f"Start node '{self._root.id}' must cost 0")
        free = [node.id for node in self._nodes if node.cost == 0 and not node.is_root]
        if free:
            raise CatalogError(f"Only the start node may cost 0, found: {', '.join(free)}")

        for node in self._nodes:
            for conn in node.connections:
                if conn not in self._by_id:
                    raise CatalogError(f"Node '{node.id}' connects to unknown node '{conn}'")

        reached = reachable_from(self._root.id, build_adjacency(self))
        unreached = [node.id for node in self._nodes if node.id not in reached]
        if unreached:
            raise CatalogError(f"Nodes unreachable from '{self._root.id}': {', '.join(unreached)}")

    @property
    def root(self) -> SkillNode:
        return self._root

    @property
    def root_id(self) -> str:
        return self._root.id

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(node.id for node in self._nodes)

    def get(self, node_id: str) -> Optional[SkillNode]:
        """Get a node by id, or None if the catalog does not know it."""
        return self._by_id.get(node_id)

    def index_of(self, node_id: str) -> Optional[int]:
        """Position of a node in catalog order."""
        return self._index.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __iter__(self) -> Iterator[SkillNode]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)


def build_adjacency(catalog: NodeCatalog) -> Adjacency:
    """
    Build the bidirectional adjacency index.

    A connection declared on either endpoint yields an edge in both
    directions. Pure: returns a fresh map on every call.
    """
    adj: dict[str, set[str]] = {node.id: set() for node in catalog}
    for node in catalog:
        for conn in node.connections:
            adj[node.id].add(conn)
            adj.setdefault(conn, set()).add(node.id)
    return {node_id: frozenset(neighbors) for node_id, neighbors in adj.items()}


def reachable_from(
    root_id: str,
    adjacency: Adjacency,
    allowed: Optional[Iterable[str]] = None,
) -> set[str]:
    """
    Breadth-first search from the root.

    Args:
        root_id: Start of the traversal
        adjacency: Adjacency index to walk
        allowed: If given, only step onto nodes in this collection

    Returns:
        Every node id reached, including the root
    """
    allowed_set = None if allowed is None else set(allowed)
    visited = {root_id}
    queue = deque([root_id])

    while queue:
        current = queue.popleft()
        for neighbor in adjacency.get(current, ()):
            if neighbor in visited:
                continue
            if allowed_set is not None and neighbor not in allowed_set:
                continue
            visited.add(neighbor)
            queue.append(neighbor)

    return visited


def parse_catalog(data: dict[str, Any]) -> NodeCatalog:
    """Build a catalog from already-decoded catalog JSON."""
    try:
        nodes = [SkillNode.model_validate(entry) for entry in data.get("nodes", [])]
    except ValidationError as e:
        raise CatalogError(f"Invalid node definition: {e}") from e
    return NodeCatalog(nodes)


def load_catalog(path: Optional[Path | str] = None) -> NodeCatalog:
    """
    Load a node catalog from JSON.

    Args:
        path: Catalog file. Defaults to the catalog shipped with the package.

    Raises:
        CatalogError: If the file is missing, fails schema validation,
            or violates a graph invariant
    """
    database = Database(DATA_PATH)
    source = Path(path).absolute() if path else DEFAULT_CATALOG_FILE
    try:
        data = database.load_document(source, NODE_SCHEMA)
    except DataValidationError as e:
        raise CatalogError(str(e)) from e

    catalog = parse_catalog(data)
    logger.info(f"Loaded {len(catalog)} skill nodes (root '{catalog.root_id}')")
    return catalog


@lru_cache(maxsize=1)
def default_catalog() -> NodeCatalog:
    """The catalog shipped with the package, loaded once."""
    return load_catalog()
