"""
Stat compositor - folds active nodes into a modifiers snapshot.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Iterable, Optional

from nexus.core.model import DataModel
from skilltree.catalog import NodeCatalog, default_catalog
from skilltree.stats import Behavior, BehaviorSet, Stat


class ComputedModifiers(DataModel):
    """
    Accumulated result of all active nodes, ready for combat systems.

    One field per Stat (named by its key) plus the union of behavior
    tags. Additive fields default to 0, multiplicative fields to 1.
    """
    # Additive pools: final stat = BASE x (1 + total)
    fire_rate_bonus: float = 0.0
    damage_bonus: float = 0.0
    speed_bonus: float = 0.0
    range_bonus: float = 0.0
    max_hp_bonus: float = 0.0
    armor_flat: float = 0.0
    score_bonus: float = 0.0
    bonus_sp_per_wave: float = 0.0
    multishot_add: float = 0.0

    # Multiplicative pools: product of node values
    fire_rate_multiplier: float = 1.0
    damage_multiplier: float = 1.0
    max_hp_multiplier: float = 1.0
    damage_taken_multiplier: float = 1.0
    score_multiplier: float = 1.0

    behaviors: BehaviorSet = frozenset()

    @classmethod
    def identity(cls) -> ComputedModifiers:
        """Modifiers of a build with no contributing nodes."""
        return cls()

    def get(self, stat: Stat) -> float:
        """Get the composed value of a stat."""
        return getattr(self, stat.key)

    def has(self, behavior: Behavior) -> bool:
        """Check whether a behavior tag is granted."""
        return behavior in self.behaviors

    def as_stat_dict(self) -> dict[Stat, float]:
        return {stat: self.get(stat) for stat in Stat}


def compose(
    active_ids: Iterable[str],
    catalog: Optional[NodeCatalog] = None,
) -> ComputedModifiers:
    """
    Compose the modifiers granted by a set of active nodes.

    Additive stats are summed and multiplicative stats multiplied,
    starting from each kind's identity. Ids the catalog does not know
    are ignored. Declared ceilings are applied once, after every node
    has contributed.

    Totals are accumulated exactly, so the result does not depend on
    the order in which nodes are visited.

    Args:
        active_ids: Active node ids
        catalog: Node catalog (defaults to the shipped catalog)

    Returns:
        A fresh ComputedModifiers
    """
    catalog = catalog or default_catalog()

    totals: dict[Stat, Fraction] = {stat: Fraction(stat.kind.identity) for stat in Stat}
    behaviors: set[Behavior] = set()

    for node_id in set(active_ids):
        node = catalog.get(node_id)
        if node is None:
            continue
        for effect in node.effects:
            stat = effect.stat
            totals[stat] = stat.kind.combine(totals[stat], Fraction(effect.value))
        behaviors.update(node.behaviors)

    values = {stat.key: stat.clamp(float(total)) for stat, total in totals.items()}
    return ComputedModifiers(**values, behaviors=frozenset(behaviors))


def wave_clear_reward(modifiers: ComputedModifiers) -> int:
    """Skill points granted for clearing a wave: 1 plus whole bonus points."""
    return 1 + math.floor(modifiers.bonus_sp_per_wave)
