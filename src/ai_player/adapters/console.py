"""Console-command executor.

Translates the :class:`ActionExecutor` surface into the host's console command
language, so the engine can drive any client that exposes a command line
(OpenKore-style ``a``, ``move``, ``ss``, ``talknpc`` ...).
"""

from __future__ import annotations

import logging
from typing import Protocol

from ai_player.adapters.host import Posture, TeleportKind


class CommandSink(Protocol):
    """Anything that accepts one console command string at a time."""

    def send(self, command: str) -> None: ...


class EchoCommandSink:
    """Fallback sink used for CLI dry runs and tests; records every command."""

    def __init__(self) -> None:
        self.commands: list[str] = []

    def send(self, command: str) -> None:
        self.commands.append(command)


class ConsoleActionExecutor:
    """Executor that emits one console command per action."""

    def __init__(self, sink: CommandSink, *, logger: logging.Logger | None = None) -> None:
        self._sink = sink
        self._logger = logger or logging.getLogger("ai_player.adapters.console")

    def _run(self, command: str) -> None:
        self._logger.debug("console_command", extra={"command": command})
        self._sink.send(command)

    def engage(self, target_id: int) -> None:
        self._run(f"a {target_id}")

    def move_to(self, x: int, y: int) -> None:
        self._run(f"move {x} {y}")

    def route_to_map(self, map_name: str) -> None:
        self._run(f"route {map_name}")

    def use_ability(self, handle: str, level: int, target_id: int | None = None) -> None:
        if target_id:
            self._run(f"ss {level} {handle} {target_id}")
        else:
            self._run(f"ss {level} {handle}")

    def use_item(self, item_index: int) -> None:
        self._run(f"i use {item_index}")

    def interact(self, target_id: int, dialog_sequence: str, position: tuple[int, int]) -> None:
        x, y = position
        self._run(f"talknpc {x} {y} {dialog_sequence}")

    def set_posture(self, posture: Posture) -> None:
        self._run("sit" if posture == Posture.SITTING else "stand")

    def teleport(self, kind: TeleportKind) -> None:
        self._run("tele 2" if kind == TeleportKind.SAVEPOINT else "tele 1")

    def storage_op(self, action: str, item: str | None = None, amount: int | None = None) -> None:
        if action == "store_all":
            self._run("storage add all")
        else:
            self._run(f"storage get {item} {amount or 1}")

    def trade_op(self, side: str, item: str | None = None, amount: int | None = None) -> None:
        if side == "buy":
            self._run(f"buy {item} {amount or 1}")
        else:
            self._run("sell")

    def issue_plain_command(self, command: str) -> None:
        self._run(command)
