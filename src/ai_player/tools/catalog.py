"""Static, versioned catalog of the actions the oracle may request.

Each tool kind is a pydantic model describing its arguments. The same model
renders the JSON schema sent to the oracle and validates the arguments it
sends back, so the two can never drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ai_player.knowledge import WARP_TOWNS

CATALOG_VERSION = "1.0.0"


class ToolKind(str, Enum):
    ATTACK_MONSTER = "attack_monster"
    MOVE_TO = "move_to"
    USE_SKILL = "use_skill"
    USE_ITEM = "use_item"
    TALK_TO_NPC = "talk_to_npc"
    SIT = "sit"
    STAND = "stand"
    TELEPORT = "teleport"
    WAIT = "wait"
    GO_TO_MAP = "go_to_map"
    USE_STORAGE = "use_storage"
    BUY_ITEMS = "buy_items"
    SELL_ITEMS = "sell_items"
    USE_KAFRA = "use_kafra"
    CHANGE_LEVELING_ZONE = "change_leveling_zone"


def _required_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValueError("name is blank")
    return name


class ToolArguments(BaseModel):
    """Base for typed tool requests; unknown keys from the oracle are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    kind: ClassVar[ToolKind]


class AttackMonster(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.ATTACK_MONSTER

    monster_id: int = Field(description="The monster's ID")
    reason: str = Field(default="", description="Why attacking this monster")


class MoveTo(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.MOVE_TO

    x: int = Field(description="X coordinate")
    y: int = Field(description="Y coordinate")


class UseSkill(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.USE_SKILL

    skill_name: str = Field(min_length=1, description="Name of the skill")
    target_id: int = Field(default=0, description="Target ID (0 for self)")
    level: int = Field(default=1, ge=1, description="Skill level to use")

    @field_validator("skill_name")
    @classmethod
    def _strip_skill_name(cls, value: str) -> str:
        return _required_name(value)


class UseItem(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.USE_ITEM

    item_name: str = Field(min_length=1, description="Name of the item to use")

    @field_validator("item_name")
    @classmethod
    def _strip_item_name(cls, value: str) -> str:
        return _required_name(value)


class TalkToNpc(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.TALK_TO_NPC

    npc_id: int = Field(description="The NPC's ID")
    sequence: str = Field(default="c", description="Dialog sequence (e.g., 'c r0 n')")

    @field_validator("sequence")
    @classmethod
    def _default_sequence(cls, value: str) -> str:
        return value.strip() or "c"


class Sit(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.SIT

    reason: str = Field(default="", description="Why sitting")


class Stand(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.STAND


class Teleport(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.TELEPORT

    type: Literal["random", "savepoint"] = Field(description="Teleport type")


class Wait(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.WAIT

    reason: str = Field(default="", description="Why waiting")


class GoToMap(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.GO_TO_MAP

    map_name: str = Field(description="Target map name (e.g., 'prt_fild01', 'prontera')")
    reason: str = Field(default="", description="Why going to this map")

    @field_validator("map_name")
    @classmethod
    def _strip_extension(cls, value: str) -> str:
        name = value.strip()
        if name.endswith(".gat"):
            name = name[: -len(".gat")]
        if not name:
            raise ValueError("map_name is empty")
        return name


class UseStorage(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.USE_STORAGE

    action: Literal["store_all", "get_item"] = Field(description="Store items or get item")
    item_name: str = Field(default="", description="Item name (for get_item)")
    amount: int = Field(default=1, ge=1, description="Amount to get")

    @field_validator("item_name")
    @classmethod
    def _strip_item_name(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def _item_required_for_get(self) -> UseStorage:
        if self.action == "get_item" and not self.item_name:
            raise ValueError("get_item requires item_name")
        return self


class BuyItems(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.BUY_ITEMS

    item_name: str = Field(min_length=1, description="Item to buy (e.g., 'Red Potion')")
    amount: int = Field(ge=1, description="How many to buy")

    @field_validator("item_name")
    @classmethod
    def _strip_item_name(cls, value: str) -> str:
        return _required_name(value)


class SellItems(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.SELL_ITEMS

    sell_type: Literal["junk", "all_excess"] = Field(description="What to sell")


class UseKafra(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.USE_KAFRA

    destination: str = Field(
        description="Town name (" + ", ".join(WARP_TOWNS) + ")",
        json_schema_extra={"enum": list(WARP_TOWNS)},
    )

    @field_validator("destination")
    @classmethod
    def _known_town(cls, value: str) -> str:
        town = value.strip().lower()
        if town not in WARP_TOWNS:
            raise ValueError(f"unknown warp destination: {value}")
        return town


_ZONE_ALIASES = {"safe": "cautious", "optimal": "balanced"}


class ChangeLevelingZone(ToolArguments):
    kind: ClassVar[ToolKind] = ToolKind.CHANGE_LEVELING_ZONE

    zone_type: Literal["cautious", "balanced", "aggressive"] = Field(description="Zone difficulty preference")

    @field_validator("zone_type", mode="before")
    @classmethod
    def _legacy_names(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _ZONE_ALIASES.get(lowered, lowered)
        return value


ToolRequest = (
    AttackMonster
    | MoveTo
    | UseSkill
    | UseItem
    | TalkToNpc
    | Sit
    | Stand
    | Teleport
    | Wait
    | GoToMap
    | UseStorage
    | BuyItems
    | SellItems
    | UseKafra
    | ChangeLevelingZone
)


@dataclass(frozen=True, slots=True)
class ToolSpec:
    kind: ToolKind
    description: str
    arguments: type[ToolArguments]

    @property
    def name(self) -> str:
        return self.kind.value

    def parameters_schema(self) -> dict[str, Any]:
        schema = _strip_titles(self.arguments.model_json_schema())
        schema.setdefault("properties", {})
        return schema

    def to_openai(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters_schema(),
            },
        }


def _strip_titles(node: Any) -> Any:
    if isinstance(node, dict):
        return {key: _strip_titles(value) for key, value in node.items() if key != "title"}
    if isinstance(node, list):
        return [_strip_titles(value) for value in node]
    return node


class ToolCatalog:
    """Immutable lookup of tool specs by wire name."""

    def __init__(self, specs: tuple[ToolSpec, ...], version: str = CATALOG_VERSION) -> None:
        self._specs = {spec.name: spec for spec in specs}
        self.version = version
        self._rendered = tuple(spec.to_openai() for spec in specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self):
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def get(self, name: str) -> ToolSpec | None:
        return self._specs.get(name)

    def to_openai(self) -> list[dict[str, Any]]:
        """``tools`` array for the chat-completions request."""
        return [dict(tool) for tool in self._rendered]


DEFAULT_CATALOG = ToolCatalog(
    (
        ToolSpec(ToolKind.ATTACK_MONSTER, "Attack a specific monster by its ID", AttackMonster),
        ToolSpec(ToolKind.MOVE_TO, "Move to specific coordinates on the current map", MoveTo),
        ToolSpec(ToolKind.USE_SKILL, "Use a skill on a target or self", UseSkill),
        ToolSpec(ToolKind.USE_ITEM, "Use an item from inventory (like potions)", UseItem),
        ToolSpec(ToolKind.TALK_TO_NPC, "Talk to an NPC to start a conversation or quest", TalkToNpc),
        ToolSpec(ToolKind.SIT, "Sit down to rest and recover HP/SP", Sit),
        ToolSpec(ToolKind.STAND, "Stand up from sitting", Stand),
        ToolSpec(ToolKind.TELEPORT, "Teleport to escape danger (random) or return to save point", Teleport),
        ToolSpec(ToolKind.WAIT, "Do nothing this decision cycle", Wait),
        ToolSpec(ToolKind.GO_TO_MAP, "Travel to a different map for leveling or other purposes", GoToMap),
        ToolSpec(
            ToolKind.USE_STORAGE,
            "Store items or retrieve items from storage (Kafra/storage NPC)",
            UseStorage,
        ),
        ToolSpec(ToolKind.BUY_ITEMS, "Buy items from an NPC shop (potions, supplies, etc.)", BuyItems),
        ToolSpec(ToolKind.SELL_ITEMS, "Sell items to clear inventory weight", SellItems),
        ToolSpec(ToolKind.USE_KAFRA, "Use Kafra services for warping to towns", UseKafra),
        ToolSpec(
            ToolKind.CHANGE_LEVELING_ZONE,
            "Move to an appropriate leveling zone based on current level",
            ChangeLevelingZone,
        ),
    )
)
