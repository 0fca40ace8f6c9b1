"""Host game adapters: state providers and action executors."""

from .console import CommandSink, ConsoleActionExecutor, EchoCommandSink
from .host import (
    ActionExecutor,
    GameStateProvider,
    HostActor,
    HostEntity,
    HostField,
    HostItem,
    HostMission,
    HostQuest,
    HostSkill,
    Posture,
    TeleportKind,
)
from .state_file import HostState, JsonStateProvider, StaticStateProvider, load_host_state

__all__ = [
    "ActionExecutor",
    "CommandSink",
    "ConsoleActionExecutor",
    "EchoCommandSink",
    "GameStateProvider",
    "HostActor",
    "HostEntity",
    "HostField",
    "HostItem",
    "HostMission",
    "HostQuest",
    "HostSkill",
    "HostState",
    "JsonStateProvider",
    "Posture",
    "StaticStateProvider",
    "TeleportKind",
    "load_host_state",
]
