from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True, slots=True)
class ActorStatus:
    name: str = "Unknown"
    class_name: str = "Unknown"
    level: int = 0
    job_level: int = 0
    hp: int = 0
    hp_max: int = 0
    hp_percent: int = 0
    sp: int = 0
    sp_max: int = 0
    sp_percent: int = 0
    weight: int = 0
    weight_max: int = 0
    weight_percent: int = 0
    map_name: str = "unknown"
    x: int = 0
    y: int = 0
    sitting: bool = False
    dead: bool = False


@dataclass(frozen=True, slots=True)
class HostileView:
    entity_id: int
    name: str
    level: int
    hp_percent: int
    distance: float
    x: int
    y: int
    aggressive: bool = False


@dataclass(frozen=True, slots=True)
class EntityView:
    entity_id: int
    name: str
    distance: float
    x: int
    y: int


class ObjectiveKind(str, Enum):
    PURSUIT = "pursuit"
    GENERAL = "general"


@dataclass(frozen=True, slots=True)
class Objective:
    objective_id: int
    name: str
    kind: ObjectiveKind = ObjectiveKind.GENERAL
    target: str | None = None
    current: int = 0
    required: int = 0


@dataclass(frozen=True, slots=True)
class InventoryDigest:
    total_items: int = 0
    healing_items: int = 0


@dataclass(frozen=True, slots=True)
class WorldSnapshot:
    """Bounded, ranked, read-only capture of world state for one cycle."""

    actor: ActorStatus = field(default_factory=ActorStatus)
    hostiles: tuple[HostileView, ...] = ()
    interactives: tuple[EntityView, ...] = ()
    peers: tuple[EntityView, ...] = ()
    objectives: tuple[Objective, ...] = ()
    inventory: InventoryDigest = field(default_factory=InventoryDigest)
    activity: str = "idle"
    captured_at: float = 0.0

    def find_hostile(self, entity_id: int) -> HostileView | None:
        return next((h for h in self.hostiles if h.entity_id == entity_id), None)

    def find_interactive(self, entity_id: int) -> EntityView | None:
        return next((e for e in self.interactives if e.entity_id == entity_id), None)

    def references(self, entity_id: int) -> bool:
        """True when any ranked entity list carries ``entity_id``."""
        return (
            self.find_hostile(entity_id) is not None
            or self.find_interactive(entity_id) is not None
            or any(p.entity_id == entity_id for p in self.peers)
        )


class OutcomeKind(str, Enum):
    DISPATCHED = "dispatched"
    REJECTED = "rejected"
    NOOP = "noop"


@dataclass(frozen=True, slots=True)
class ActionOutcome:
    """Result of dispatching a single tool call."""

    tool: str
    kind: OutcomeKind
    reason: str | None = None
    detail: str | None = None

    @classmethod
    def dispatched(cls, tool: str, detail: str | None = None) -> ActionOutcome:
        return cls(tool=tool, kind=OutcomeKind.DISPATCHED, detail=detail)

    @classmethod
    def rejected(cls, tool: str, reason: str, detail: str | None = None) -> ActionOutcome:
        return cls(tool=tool, kind=OutcomeKind.REJECTED, reason=reason, detail=detail)

    @classmethod
    def noop(cls, tool: str, reason: str) -> ActionOutcome:
        return cls(tool=tool, kind=OutcomeKind.NOOP, reason=reason)


class CyclePhase(str, Enum):
    DEFERRED = "deferred"
    CONSULTING = "consulting"


@dataclass(slots=True)
class CycleReport:
    """What one decision cycle did; appended to the cycle history."""

    id: str
    started_at: datetime
    phase: CyclePhase
    reason: str
    trigger: str | None = None
    forced: bool = False
    decision_received: bool = False
    outcomes: list[ActionOutcome] = field(default_factory=list)
    finished_at: datetime | None = None

    @property
    def dispatched(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.kind == OutcomeKind.DISPATCHED)

    @property
    def succeeded(self) -> bool:
        """A consulting cycle that got a decision and did not reject every call."""
        return (
            self.phase == CyclePhase.CONSULTING
            and self.decision_received
            and any(outcome.kind != OutcomeKind.REJECTED for outcome in self.outcomes)
        )
