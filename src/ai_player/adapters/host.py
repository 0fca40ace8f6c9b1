"""Boundary types for the host game client.

The engine only reads host state through :class:`GameStateProvider` and only
changes the world through :class:`ActionExecutor`. Every field on the raw host
records is optional because the host may hand over partially-populated objects
(e.g. while a map is loading).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


@dataclass(slots=True)
class HostActor:
    name: str | None = None
    job_id: int | None = None
    level: int | None = None
    job_level: int | None = None
    hp: int | None = None
    hp_max: int | None = None
    sp: int | None = None
    sp_max: int | None = None
    weight: int | None = None
    weight_max: int | None = None
    x: int | None = None
    y: int | None = None
    sitting: bool = False
    dead: bool = False


@dataclass(slots=True)
class HostEntity:
    """A monster, NPC or player as reported by the host lists."""

    entity_id: int
    name: str | None = None
    x: int | None = None
    y: int | None = None
    level: int | None = None
    hp: int | None = None
    hp_max: int | None = None
    dead: bool = False
    damage_to_actor: int = 0


@dataclass(slots=True)
class HostMission:
    mob_id: int | None = None
    mob_name: str | None = None
    count: int | None = None
    goal: int | None = None


@dataclass(slots=True)
class HostQuest:
    quest_id: int
    title: str | None = None
    active: bool = False
    missions: list[HostMission] = field(default_factory=list)


@dataclass(slots=True)
class HostItem:
    index: int
    name: str | None = None
    amount: int | None = None


@dataclass(slots=True)
class HostSkill:
    handle: str
    name: str
    level: int = 1


@dataclass(slots=True)
class HostField:
    """Current map plus the blocked cells used for walkability queries."""

    name: str
    width: int | None = None
    height: int | None = None
    blocked: frozenset[tuple[int, int]] = frozenset()

    def is_walkable(self, x: int, y: int) -> bool:
        if x < 0 or y < 0:
            return False
        if self.width is not None and x >= self.width:
            return False
        if self.height is not None and y >= self.height:
            return False
        return (x, y) not in self.blocked


class Posture(str, Enum):
    SITTING = "sitting"
    STANDING = "standing"


class TeleportKind(str, Enum):
    RANDOM = "random"
    SAVEPOINT = "savepoint"


class GameStateProvider(Protocol):
    """Read-only view of the host game state."""

    def in_game(self) -> bool: ...

    def actor(self) -> HostActor | None: ...

    def field(self) -> HostField | None: ...

    def monsters(self) -> list[HostEntity] | None: ...

    def npcs(self) -> list[HostEntity] | None: ...

    def players(self) -> list[HostEntity] | None: ...

    def quests(self) -> dict[int, HostQuest] | None: ...

    def inventory(self) -> list[HostItem] | None: ...

    def skills(self) -> list[HostSkill] | None: ...

    def current_activity(self) -> str | None:
        """Name of the automated behaviour currently running, if any."""

    def is_walkable(self, x: int, y: int) -> bool | None:
        """Terrain query for the current map; ``None`` when no map is loaded."""


class ActionExecutor(Protocol):
    """Write surface of the host client; one call per dispatched tool request."""

    def engage(self, target_id: int) -> None: ...

    def move_to(self, x: int, y: int) -> None: ...

    def route_to_map(self, map_name: str) -> None: ...

    def use_ability(self, handle: str, level: int, target_id: int | None = None) -> None: ...

    def use_item(self, item_index: int) -> None: ...

    def interact(self, target_id: int, dialog_sequence: str, position: tuple[int, int]) -> None: ...

    def set_posture(self, posture: Posture) -> None: ...

    def teleport(self, kind: TeleportKind) -> None: ...

    def storage_op(self, action: str, item: str | None = None, amount: int | None = None) -> None: ...

    def trade_op(self, side: str, item: str | None = None, amount: int | None = None) -> None: ...

    def issue_plain_command(self, command: str) -> None: ...
