from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from ai_player.adapters import JsonStateProvider, load_host_state

DOCUMENT = {
    "actor": {"name": "Tester", "job_id": 4, "level": 30, "hp": 50, "hp_max": 100, "x": 10, "y": 12},
    "map_field": {"name": "prt_fild08", "width": 20, "height": 20, "blocked": [[3, 3]]},
    "activity": "idle",
    "monsters": [{"entity_id": 7, "name": "Poring", "x": 11, "y": 12}],
    "quests": {"1": {"quest_id": 1, "title": "Hunt", "active": True, "missions": [{"mob_id": 1002, "goal": 5}]}},
    "inventory": [{"index": 0, "name": "Red Potion", "amount": 3}],
    "skills": [{"handle": "AL_HEAL", "name": "Heal"}],
}


def test_document_is_validated_into_host_state() -> None:
    state = load_host_state(DOCUMENT)

    assert state.in_game is True
    assert state.actor.level == 30
    assert state.quests[1].missions[0].goal == 5
    assert state.map_field.is_walkable(3, 3) is False
    assert state.npcs is None


def test_invalid_document_raises() -> None:
    with pytest.raises(ValidationError):
        load_host_state({"actor": {"level": "high"}})


def test_json_provider_reloads_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps(DOCUMENT), encoding="utf-8")
    provider = JsonStateProvider(path)

    assert provider.is_walkable(4, 4) is True
    assert provider.current_activity() == "idle"

    path.write_text(json.dumps({**DOCUMENT, "activity": "attack"}), encoding="utf-8")
    provider.reload()

    assert provider.current_activity() == "attack"
