"""Tool catalog and typed tool requests."""

from .catalog import (
    CATALOG_VERSION,
    DEFAULT_CATALOG,
    AttackMonster,
    BuyItems,
    ChangeLevelingZone,
    GoToMap,
    MoveTo,
    SellItems,
    Sit,
    Stand,
    TalkToNpc,
    Teleport,
    ToolArguments,
    ToolCatalog,
    ToolKind,
    ToolRequest,
    ToolSpec,
    UseItem,
    UseKafra,
    UseSkill,
    UseStorage,
    Wait,
)
from .requests import ToolCall, parse_tool_call

__all__ = [
    "CATALOG_VERSION",
    "DEFAULT_CATALOG",
    "AttackMonster",
    "BuyItems",
    "ChangeLevelingZone",
    "GoToMap",
    "MoveTo",
    "SellItems",
    "Sit",
    "Stand",
    "TalkToNpc",
    "Teleport",
    "ToolArguments",
    "ToolCall",
    "ToolCatalog",
    "ToolKind",
    "ToolRequest",
    "ToolSpec",
    "UseItem",
    "UseKafra",
    "UseSkill",
    "UseStorage",
    "Wait",
    "parse_tool_call",
]
