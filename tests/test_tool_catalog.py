from __future__ import annotations

import pytest

from ai_player.errors import ToolArgumentsError, UnknownToolError
from ai_player.tools import (
    DEFAULT_CATALOG,
    AttackMonster,
    ChangeLevelingZone,
    GoToMap,
    TalkToNpc,
    ToolCall,
    ToolKind,
    UseSkill,
    parse_tool_call,
)


def test_catalog_covers_every_tool_kind() -> None:
    assert len(DEFAULT_CATALOG) == len(ToolKind)
    assert all(kind.value in DEFAULT_CATALOG for kind in ToolKind)
    assert DEFAULT_CATALOG.version == "1.0.0"


def test_openai_rendering_carries_schemas() -> None:
    tools = {tool["function"]["name"]: tool for tool in DEFAULT_CATALOG.to_openai()}

    attack = tools["attack_monster"]
    assert attack["type"] == "function"
    assert attack["function"]["parameters"]["required"] == ["monster_id"]
    assert attack["function"]["parameters"]["properties"]["monster_id"]["type"] == "integer"
    assert "title" not in attack["function"]["parameters"]

    stand = tools["stand"]["function"]["parameters"]
    assert stand["properties"] == {}

    kafra = tools["use_kafra"]["function"]["parameters"]["properties"]["destination"]
    assert "prontera" in kafra["enum"]

    wait = tools["wait"]["function"]["parameters"]
    assert "reason" in wait["properties"]
    assert "required" not in wait

    teleport = tools["teleport"]["function"]["parameters"]["properties"]["type"]
    assert teleport["enum"] == ["random", "savepoint"]


def test_unknown_tool_is_rejected() -> None:
    with pytest.raises(UnknownToolError) as excinfo:
        parse_tool_call(ToolCall(name="fly_away", arguments="{}"))

    assert excinfo.value.reason == "unknown tool"


@pytest.mark.parametrize(
    "name, arguments",
    [
        ("attack_monster", '{"monster_id": "abc"}'),
        ("attack_monster", "{}"),
        ("attack_monster", "not json"),
        ("teleport", '{"type": "home"}'),
        ("use_storage", '{"action": "get_item"}'),
        ("buy_items", '{"item_name": "Red Potion", "amount": 0}'),
        ("use_kafra", '{"destination": "atlantis"}'),
        ("go_to_map", '{"map_name": ".gat"}'),
        ("use_item", '{"item_name": "   "}'),
        ("buy_items", '{"item_name": " ", "amount": 3}'),
        ("use_skill", '{"skill_name": "\\t"}'),
        ("use_storage", '{"action": "get_item", "item_name": "  "}'),
    ],
)
def test_bad_arguments_are_rejected(name: str, arguments: str) -> None:
    with pytest.raises(ToolArgumentsError) as excinfo:
        parse_tool_call(ToolCall(name=name, arguments=arguments))

    assert excinfo.value.reason == "bad arguments"
    assert excinfo.value.tool_name == name


def test_valid_arguments_become_typed_requests() -> None:
    request = parse_tool_call(ToolCall(name="attack_monster", arguments='{"monster_id": 42, "extra": true}'))

    assert isinstance(request, AttackMonster)
    assert request.monster_id == 42


def test_defaults_and_normalization() -> None:
    skill = parse_tool_call(ToolCall(name="use_skill", arguments='{"skill_name": "Heal"}'))
    talk = parse_tool_call(ToolCall(name="talk_to_npc", arguments='{"npc_id": 5, "sequence": "  "}'))
    travel = parse_tool_call(ToolCall(name="go_to_map", arguments='{"map_name": "prt_fild08.gat"}'))
    stand = parse_tool_call(ToolCall(name="stand", arguments=""))

    assert isinstance(skill, UseSkill) and (skill.target_id, skill.level) == (0, 1)
    assert isinstance(talk, TalkToNpc) and talk.sequence == "c"
    assert isinstance(travel, GoToMap) and travel.map_name == "prt_fild08"
    assert stand.kind == ToolKind.STAND


def test_legacy_zone_names_are_accepted() -> None:
    request = parse_tool_call(ToolCall(name="change_leveling_zone", arguments='{"zone_type": "optimal"}'))

    assert isinstance(request, ChangeLevelingZone)
    assert request.zone_type == "balanced"
