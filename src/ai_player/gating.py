"""Heuristic gate deciding whether a cycle needs the oracle at all."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

PROTECTED_ACTIVITIES: frozenset[str] = frozenset(
    {"attack", "route", "move", "deal", "storageauto", "sellauto", "buyauto"}
)
IDLE_ACTIVITIES: frozenset[str] = frozenset({"", "idle"})


@dataclass(frozen=True, slots=True)
class GatingThresholds:
    critical_hp_percent: int = 20
    overweight_percent: int = 70


@dataclass(frozen=True, slots=True)
class GatingView:
    """The few numbers the gate looks at, computed without a full snapshot."""

    hp_percent: int
    weight_percent: int
    hostile_count: int
    objective_count: int


class GateTrigger(str, Enum):
    CRITICAL_HEALTH = "critical_health"
    OVERWEIGHT = "overweight"
    NO_HOSTILES = "no_hostiles"
    ACTIVE_OBJECTIVES = "active_objectives"
    IDLE = "idle"


@dataclass(frozen=True, slots=True)
class GateDecision:
    needs_oracle: bool
    trigger: GateTrigger | None = None
    protected: bool = False


def is_protected_activity(activity: str | None) -> bool:
    return bool(activity) and activity.strip().lower() in PROTECTED_ACTIVITIES


def is_idle(activity: str | None) -> bool:
    return activity is None or activity.strip().lower() in IDLE_ACTIVITIES


def evaluate_gate(view: GatingView, activity: str | None, thresholds: GatingThresholds) -> GateDecision:
    """Protected activity vetoes everything; otherwise the first trigger wins."""
    if is_protected_activity(activity):
        return GateDecision(needs_oracle=False, protected=True)

    if view.hp_percent < thresholds.critical_hp_percent:
        return GateDecision(True, GateTrigger.CRITICAL_HEALTH)
    if view.weight_percent > thresholds.overweight_percent:
        return GateDecision(True, GateTrigger.OVERWEIGHT)
    if view.hostile_count == 0:
        return GateDecision(True, GateTrigger.NO_HOSTILES)
    if view.objective_count > 0:
        return GateDecision(True, GateTrigger.ACTIVE_OBJECTIVES)
    if is_idle(activity):
        return GateDecision(True, GateTrigger.IDLE)
    return GateDecision(needs_oracle=False)


def needs_oracle(view: GatingView, activity: str | None, thresholds: GatingThresholds) -> bool:
    return evaluate_gate(view, activity, thresholds).needs_oracle
