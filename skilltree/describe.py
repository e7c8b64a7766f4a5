"""
Human-readable effect descriptions for tooltips.
"""

from __future__ import annotations

from skilltree.catalog import SkillNode
from skilltree.stats import Stat


def _percent(value: float) -> str:
    return f"{round(value * 100):+d}%"


def _number(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):+d}"
    return f"{value:+g}"


def describe_effect(stat: Stat, value: float) -> str:
    """
    Describe a single stat modifier.

    Examples:
        describe_effect(Stat.FIRE_RATE_BONUS, 0.08)      -> "+8% Fire Rate"
        describe_effect(Stat.BONUS_SP_PER_WAVE, 1)       -> "+1 Skill Point/Wave"
        describe_effect(Stat.DAMAGE_MULTIPLIER, 0.7)     -> "Damage x0.7"
    """
    if stat.is_additive:
        if stat in (Stat.BONUS_SP_PER_WAVE, Stat.MULTISHOT_ADD):
            return f"{_number(value)} {stat.label}"
        return f"{_percent(value)} {stat.label}"
    return f"{stat.label} x{value:g}"


def describe_node(node: SkillNode) -> list[str]:
    """Effect lines for a node, followed by any granted behaviors."""
    lines = [describe_effect(effect.stat, effect.value) for effect in node.effects]
    if node.behaviors:
        lines.append("Grants:")
        # Sorted so tooltips are stable between runs
        for behavior in sorted(node.behaviors, key=lambda b: b.value):
            lines.append(f"  [{behavior.display_name}]")
    return lines
