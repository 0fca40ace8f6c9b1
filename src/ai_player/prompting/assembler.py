"""Deterministic prompt assembly.

The same snapshot and policy always produce byte-identical output. Every
situation section is rendered even when empty so the oracle sees a stable
shape from cycle to cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ai_player.models import ObjectiveKind, WorldSnapshot


class PolicyPriority(str, Enum):
    SURVIVAL = "survival"
    INVENTORY = "inventory-management"
    RESUPPLY = "resupply"
    PROGRESSION = "progression"
    OBJECTIVES = "objectives"


_PRIORITY_TEXT: dict[PolicyPriority, str] = {
    PolicyPriority.SURVIVAL: "Stay alive (heal/flee if needed)",
    PolicyPriority.INVENTORY: "Manage inventory (store/sell if overweight)",
    PolicyPriority.RESUPPLY: "Restock supplies (buy potions if low)",
    PolicyPriority.PROGRESSION: "Level efficiently (fight appropriate monsters)",
    PolicyPriority.OBJECTIVES: "Complete quests",
}

DEFAULT_PRIORITIES: tuple[PolicyPriority, ...] = (
    PolicyPriority.SURVIVAL,
    PolicyPriority.INVENTORY,
    PolicyPriority.RESUPPLY,
    PolicyPriority.PROGRESSION,
    PolicyPriority.OBJECTIVES,
)

NONE_MARKER = "None"


@dataclass(frozen=True, slots=True)
class PromptPolicy:
    game_title: str = "Ragnarok Online"
    max_level_diff: int = 10
    min_hp_to_attack: int = 30
    overweight_percent: int = 70
    low_supply_threshold: int = 10
    priorities: tuple[PolicyPriority, ...] = DEFAULT_PRIORITIES


def render_instructions(snapshot: WorldSnapshot, policy: PromptPolicy) -> str:
    actor = snapshot.actor
    class_name = actor.class_name if actor.class_name != "Unknown" else "Adventurer"
    priorities = "\n".join(
        f"{index}. {_PRIORITY_TEXT[priority]}" for index, priority in enumerate(policy.priorities, start=1)
    )
    return (
        f'You are an AI controlling a {class_name} character named "{actor.name}" in {policy.game_title}.\n'
        "\n"
        "ROLE: You are an autonomous adventurer leveling to max level. "
        "Make decisions that are efficient and safe.\n"
        "\n"
        "CURRENT STATUS:\n"
        f"- Level: {actor.level} | HP: {actor.hp_percent}% | SP: {actor.sp_percent}%\n"
        f"- Map: {actor.map_name} | Position: ({actor.x}, {actor.y})\n"
        f"- Weight: {actor.weight_percent}%\n"
        "\n"
        "AUTONOMOUS LEVELING RULES:\n"
        f"1. SURVIVAL: If HP < {policy.min_hp_to_attack}%, use potion or teleport before doing anything else\n"
        f"2. WEIGHT: If weight > {policy.overweight_percent}%, go to town to store items or sell junk\n"
        f"3. SUPPLIES: If potions < {policy.low_supply_threshold}, go buy more at town\n"
        "4. ZONE: If no monsters around, use change_leveling_zone to find a good spot\n"
        f"5. COMBAT: Attack monsters within {policy.max_level_diff} levels of you\n"
        "6. QUESTS: Complete any active kill quests on the way\n"
        "\n"
        "PRIORITY ORDER:\n"
        f"{priorities}\n"
        "\n"
        "RESPOND ONLY WITH TOOL CALLS - no explanations needed."
    )


def render_situation(snapshot: WorldSnapshot) -> str:
    parts: list[str] = []

    if snapshot.hostiles:
        parts.append("NEARBY MONSTERS:")
        parts.extend(
            f"- {m.name} (ID:{m.entity_id}, Lv:{m.level}, Dist:{int(m.distance)}"
            + (", aggressive" if m.aggressive else "")
            + ")"
            for m in snapshot.hostiles
        )
    else:
        parts.append(f"NEARBY MONSTERS: {NONE_MARKER}")

    if snapshot.objectives:
        parts.append("\nACTIVE QUESTS:")
        for objective in snapshot.objectives:
            if objective.kind == ObjectiveKind.PURSUIT:
                parts.append(f"- Kill {objective.target}: {objective.current}/{objective.required}")
            else:
                parts.append(f"- {objective.name}")
    else:
        parts.append(f"\nACTIVE QUESTS: {NONE_MARKER}")

    if snapshot.interactives:
        parts.append("\nNEARBY NPCs:")
        parts.extend(f"- {n.name} (ID:{n.entity_id}, Dist:{int(n.distance)})" for n in snapshot.interactives)
    else:
        parts.append(f"\nNEARBY NPCs: {NONE_MARKER}")

    inventory = snapshot.inventory
    parts.append(f"\nINVENTORY: {inventory.healing_items} healing items, {inventory.total_items} item stacks")

    parts.append("\nWhat action should you take?")
    return "\n".join(parts)


def assemble(snapshot: WorldSnapshot, policy: PromptPolicy) -> tuple[str, str]:
    """Return ``(instructions, situation)`` for one oracle request."""
    return render_instructions(snapshot, policy), render_situation(snapshot)
