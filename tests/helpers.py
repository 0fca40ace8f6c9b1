"""Shared stubs for the ai_player test suite."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx

from ai_player.adapters import HostActor, HostEntity, HostField, HostState, StaticStateProvider
from ai_player.oracle import OracleClient, OracleConfig


class RecordingExecutor:
    """Action executor that records each call as ``(method, args...)``."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def engage(self, target_id):
        self.calls.append(("engage", target_id))

    def move_to(self, x, y):
        self.calls.append(("move_to", x, y))

    def route_to_map(self, map_name):
        self.calls.append(("route_to_map", map_name))

    def use_ability(self, handle, level, target_id=None):
        self.calls.append(("use_ability", handle, level, target_id))

    def use_item(self, item_index):
        self.calls.append(("use_item", item_index))

    def interact(self, target_id, dialog_sequence, position):
        self.calls.append(("interact", target_id, dialog_sequence, position))

    def set_posture(self, posture):
        self.calls.append(("set_posture", posture))

    def teleport(self, kind):
        self.calls.append(("teleport", kind))

    def storage_op(self, action, item=None, amount=None):
        self.calls.append(("storage_op", action, item, amount))

    def trade_op(self, side, item=None, amount=None):
        self.calls.append(("trade_op", side, item, amount))

    def issue_plain_command(self, command):
        self.calls.append(("issue_plain_command", command))


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_actor(**overrides: Any) -> HostActor:
    values: dict[str, Any] = {
        "name": "Tester",
        "job_id": 1,
        "level": 25,
        "job_level": 10,
        "hp": 90,
        "hp_max": 100,
        "sp": 40,
        "sp_max": 50,
        "weight": 400,
        "weight_max": 1000,
        "x": 100,
        "y": 100,
    }
    values.update(overrides)
    return HostActor(**values)


def monster(entity_id: int, x: int, y: int, **overrides: Any) -> HostEntity:
    values: dict[str, Any] = {"name": f"Poring{entity_id}", "level": 3, "hp": 50, "hp_max": 50}
    values.update(overrides)
    return HostEntity(entity_id=entity_id, x=x, y=y, **values)


def make_provider(**overrides: Any) -> StaticStateProvider:
    values: dict[str, Any] = {
        "actor": make_actor(),
        "map_field": HostField(name="prt_fild01", width=400, height=400),
        "activity": "idle",
        "monsters": [],
        "npcs": [],
        "players": [],
        "quests": {},
        "inventory": [],
        "skills": [],
    }
    values.update(overrides)
    return StaticStateProvider(HostState(**values))


def tool_call(name: str, arguments: Any = None, call_id: str = "call_1") -> dict[str, Any]:
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


def completion(*tool_calls: dict[str, Any], content: str | None = None) -> dict[str, Any]:
    message: dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = list(tool_calls)
    return {"model": "test-model", "choices": [{"index": 0, "message": message}]}


class OracleStub:
    """``httpx.MockTransport`` handler returning canned responses and keeping requests."""

    def __init__(self, *responses: httpx.Response | dict[str, Any]) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]


def make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    clock: Callable[[], float] | None = None,
    **config: Any,
) -> OracleClient:
    values: dict[str, Any] = {"api_url": "https://oracle.test/v1/chat/completions", "api_key": "test-key"}
    values.update(config)
    kwargs: dict[str, Any] = {"transport": httpx.MockTransport(handler)}
    if clock is not None:
        kwargs["clock"] = clock
    return OracleClient(OracleConfig(**values), **kwargs)
