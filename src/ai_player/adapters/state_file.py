"""State providers backed by an in-memory document or a JSON file.

Used by the CLI to run forced cycles against a captured host state, and by
tests as a deterministic world.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from ai_player.adapters.host import HostActor, HostEntity, HostField, HostItem, HostQuest, HostSkill


@dataclass(slots=True)
class HostState:
    """Complete host state document, mirroring the provider surface."""

    in_game: bool = True
    actor: HostActor | None = None
    map_field: HostField | None = None
    activity: str | None = None
    monsters: list[HostEntity] | None = None
    npcs: list[HostEntity] | None = None
    players: list[HostEntity] | None = None
    quests: dict[int, HostQuest] | None = None
    inventory: list[HostItem] | None = None
    skills: list[HostSkill] | None = None


_STATE_ADAPTER = TypeAdapter(HostState)


def load_host_state(payload: dict[str, Any]) -> HostState:
    """Validate a decoded JSON document into a :class:`HostState`."""
    return _STATE_ADAPTER.validate_python(payload)


class StaticStateProvider:
    """Serves a fixed :class:`HostState`; tests mutate ``state`` between calls."""

    def __init__(self, state: HostState | None = None) -> None:
        self.state = state or HostState()

    def in_game(self) -> bool:
        return self.state.in_game

    def actor(self) -> HostActor | None:
        return self.state.actor

    def field(self) -> HostField | None:
        return self.state.map_field

    def monsters(self) -> list[HostEntity] | None:
        return self.state.monsters

    def npcs(self) -> list[HostEntity] | None:
        return self.state.npcs

    def players(self) -> list[HostEntity] | None:
        return self.state.players

    def quests(self) -> dict[int, HostQuest] | None:
        return self.state.quests

    def inventory(self) -> list[HostItem] | None:
        return self.state.inventory

    def skills(self) -> list[HostSkill] | None:
        return self.state.skills

    def current_activity(self) -> str | None:
        return self.state.activity

    def is_walkable(self, x: int, y: int) -> bool | None:
        if self.state.map_field is None:
            return None
        return self.state.map_field.is_walkable(x, y)


class JsonStateProvider(StaticStateProvider):
    """Provider that (re)loads its state from a JSON file."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self.reload()

    def reload(self) -> HostState:
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        self.state = load_host_state(payload)
        return self.state
