"""
Stat names and behavior tags.

Every stat declares how it composes across active nodes:
- ADDITIVE stats are summed (identity 0).
  Combat applies them as BASE x (1 + total).
- MULTIPLICATIVE stats are multiplied (identity 1).
  A node contributing 0.7 reduces the stat by 30%.

The composition kind is part of each member's declaration, so a new
stat cannot be added without choosing one. Reclassifying an existing
stat changes the numbers every combat system sees.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Optional


class StatKind(Enum):
    """How a stat combines across active nodes."""
    ADDITIVE = auto()
    MULTIPLICATIVE = auto()

    @property
    def identity(self) -> float:
        """Value of the stat when no node contributes."""
        if self is StatKind.ADDITIVE:
            return 0.0
        return 1.0

    def combine(self, total: float, value: float) -> float:
        """Fold one contribution into a running total."""
        if self is StatKind.ADDITIVE:
            return total + value
        return total * value


class Stat(Enum):
    """
    Every stat a node effect may modify.

    Value tuple: (key, kind, ceiling, label). The key doubles as the
    catalog JSON name and the ComputedModifiers field name.
    """
    # Additive pools
    FIRE_RATE_BONUS = ("fire_rate_bonus", StatKind.ADDITIVE, None, "Fire Rate")
    DAMAGE_BONUS = ("damage_bonus", StatKind.ADDITIVE, None, "Damage")
    SPEED_BONUS = ("speed_bonus", StatKind.ADDITIVE, None, "Projectile Speed")
    RANGE_BONUS = ("range_bonus", StatKind.ADDITIVE, None, "Range")
    MAX_HP_BONUS = ("max_hp_bonus", StatKind.ADDITIVE, None, "Max HP")
    ARMOR_FLAT = ("armor_flat", StatKind.ADDITIVE, 0.85, "Damage Reduction")
    SCORE_BONUS = ("score_bonus", StatKind.ADDITIVE, None, "Score")
    BONUS_SP_PER_WAVE = ("bonus_sp_per_wave", StatKind.ADDITIVE, None, "Skill Point/Wave")
    MULTISHOT_ADD = ("multishot_add", StatKind.ADDITIVE, None, "Projectile")

    # Multiplicative pools
    FIRE_RATE_MULTIPLIER = ("fire_rate_multiplier", StatKind.MULTIPLICATIVE, None, "Fire Rate")
    DAMAGE_MULTIPLIER = ("damage_multiplier", StatKind.MULTIPLICATIVE, None, "Damage")
    MAX_HP_MULTIPLIER = ("max_hp_multiplier", StatKind.MULTIPLICATIVE, None, "Max HP")
    DAMAGE_TAKEN_MULTIPLIER = ("damage_taken_multiplier", StatKind.MULTIPLICATIVE, None, "Damage Taken")
    SCORE_MULTIPLIER = ("score_multiplier", StatKind.MULTIPLICATIVE, None, "Score")

    def __init__(self, key: str, kind: StatKind, ceiling: Optional[float], label: str):
        self.key = key
        self.kind = kind
        self.ceiling = ceiling
        self.label = label

    @property
    def is_additive(self) -> bool:
        return self.kind is StatKind.ADDITIVE

    @property
    def is_multiplicative(self) -> bool:
        return self.kind is StatKind.MULTIPLICATIVE

    def clamp(self, value: float) -> float:
        """Apply the declared ceiling, if any."""
        if self.ceiling is None:
            return value
        return min(value, self.ceiling)

    @classmethod
    def from_key(cls, key: str) -> Stat:
        """
        Resolve a stat by its key.

        Raises:
            KeyError: If no stat uses this key
        """
        try:
            return _STATS_BY_KEY[key]
        except KeyError:
            raise KeyError(f"Unknown stat '{key}'") from None


_STATS_BY_KEY: dict[str, Stat] = {stat.key: stat for stat in Stat}


class Behavior(Enum):
    """
    Gameplay behavior tags granted by nodes.

    Combat systems check `modifiers.has(Behavior.X)` to switch logic.
    """
    # Rapid Fire branch
    BEAM_MODE = "BEAM_MODE"                    # continuous beam replaces projectiles
    SWEEPING = "SWEEPING"                      # beam sweeps across enemy clusters
    THERMAL_ACCELERATION = "THERMAL_ACCELERATION"  # fire rate ramps during sustained fire
    # Heavy Strike branch
    KNOCKBACK = "KNOCKBACK"
    DELAYED_EXPLOSION = "DELAYED_EXPLOSION"
    # Bulwark branch
    AURA_DAMAGE = "AURA_DAMAGE"
    SCALES_WITH_HP = "SCALES_WITH_HP"
    # Warp branch
    BOOMERANG = "BOOMERANG"
    SPAWN_BLACKHOLE = "SPAWN_BLACKHOLE"
    MAGNETIC_PULL = "MAGNETIC_PULL"
    # Chain branch
    SEEKER = "SEEKER"
    CHAIN_LIGHTNING = "CHAIN_LIGHTNING"
    SMART_TARGETING = "SMART_TARGETING"
    # Collector branch
    KINETIC_HARVEST = "KINETIC_HARVEST"
    DAMAGE_SCALES_WITH_SCORE = "DAMAGE_SCALES_WITH_SCORE"
    ORBITAL_DRONES = "ORBITAL_DRONES"
    # Legacy, not granted by the default catalog
    INFINITE_PIERCE = "INFINITE_PIERCE"
    PIERCING_1 = "PIERCING_1"
    CHAIN_1 = "CHAIN_1"
    EXPLOSIVE = "EXPLOSIVE"
    HOMING = "HOMING"
    NOVA_BURST = "NOVA_BURST"
    RAPID_BURST = "RAPID_BURST"
    THORNS = "THORNS"
    CULL_THRESHOLD = "CULL_THRESHOLD"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ")


# Explicit container for behavior tags: presence/absence only
BehaviorSet = frozenset[Behavior]
