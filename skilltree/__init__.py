"""
Skill tree progression module.

Provides:
- Stat and behavior definitions (additive / multiplicative composition)
- The node catalog and its adjacency index
- Stat composition into a modifiers snapshot
- The activation engine (one session per play session)
- Build codes for sharing allocations
"""

from skilltree.stats import (
    Stat,
    StatKind,
    Behavior,
    BehaviorSet,
)
from skilltree.catalog import (
    NodeCatalog,
    SkillNode,
    NodeEffect,
    NodeTier,
    Branch,
    CatalogError,
    build_adjacency,
    load_catalog,
    default_catalog,
)
from skilltree.compositor import (
    ComputedModifiers,
    compose,
    wave_clear_reward,
)
from skilltree.config import (
    ProgressionConfig,
    ConfigError,
    load_config,
)
from skilltree.buildcode import (
    BuildCodec,
    encode_build,
    decode_build,
    is_connected,
)
from skilltree.session import (
    SkillTreeSession,
    ProgressionEvent,
    ChangeReason,
    NodeState,
)
from skilltree.describe import (
    describe_effect,
    describe_node,
)

__all__ = [
    # Stats
    "Stat",
    "StatKind",
    "Behavior",
    "BehaviorSet",
    # Catalog
    "NodeCatalog",
    "SkillNode",
    "NodeEffect",
    "NodeTier",
    "Branch",
    "CatalogError",
    "build_adjacency",
    "load_catalog",
    "default_catalog",
    # Composition
    "ComputedModifiers",
    "compose",
    "wave_clear_reward",
    # Config
    "ProgressionConfig",
    "ConfigError",
    "load_config",
    # Build codes
    "BuildCodec",
    "encode_build",
    "decode_build",
    "is_connected",
    # Session
    "SkillTreeSession",
    "ProgressionEvent",
    "ChangeReason",
    "NodeState",
    # Descriptions
    "describe_effect",
    "describe_node",
]
