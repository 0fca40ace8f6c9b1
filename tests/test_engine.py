from __future__ import annotations

import asyncio

import httpx
import pytest

from ai_player.adapters import HostItem
from ai_player.config import Settings
from ai_player.engine import DecisionEngine, DecisionLoop
from ai_player.errors import ConfigurationError
from ai_player.models import CyclePhase, OutcomeKind
from tests.helpers import (
    FakeClock,
    OracleStub,
    RecordingExecutor,
    completion,
    make_actor,
    make_client,
    make_provider,
    monster,
    tool_call,
)


class RecordingTelemetry:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def emit(self, event_name, payload):
        self.events.append((event_name, payload))


class HeldOracle:
    """Async oracle handler that parks every request until released."""

    def __init__(self, body: dict) -> None:
        self._body = body
        self.started: asyncio.Event | None = None
        self.release: asyncio.Event | None = None

    def arm(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.started.set()
        await self.release.wait()
        return httpx.Response(200, json=self._body)


def _settings(**overrides) -> Settings:
    values = {"api_key": "test-key", "decision_interval_seconds": 3.0, "min_call_interval_seconds": 1.0}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def _engine(stub, provider, *, clock=None, settings=None, telemetry=None):
    clock = clock or FakeClock()
    settings = settings or _settings()
    executor = RecordingExecutor()
    engine = DecisionEngine(
        provider,
        executor,
        settings=settings,
        client=make_client(stub, clock=clock, min_call_interval_seconds=settings.min_call_interval_seconds),
        telemetry=telemetry,
        clock=clock,
    )
    engine.open()
    return engine, executor, clock


def _busy_provider(**overrides):
    values = {"activity": "items_take", "monsters": [monster(7, 102, 100), monster(8, 104, 100)]}
    values.update(overrides)
    return make_provider(**values)


def test_low_health_consults_and_dispatches_healing() -> None:
    stub = OracleStub(completion(tool_call("use_item", {"item_name": "Red Potion"})))
    provider = _busy_provider(
        actor=make_actor(hp=15, hp_max=100),
        inventory=[HostItem(index=3, name="Red Potion", amount=10)],
    )
    telemetry = RecordingTelemetry()
    engine, executor, _ = _engine(stub, provider, telemetry=telemetry)

    async def _run():
        try:
            return await engine.run_cycle()
        finally:
            await engine.close()

    report = asyncio.run(_run())

    assert report.phase == CyclePhase.CONSULTING
    assert report.trigger == "critical_health"
    assert report.reason == "dispatched"
    assert report.succeeded is True
    assert executor.calls == [("use_item", 3)]
    assert engine.history.list_recent(5) == [report]
    assert telemetry.events[0][0] == "decision_cycle"
    assert telemetry.events[0][1]["outcomes"] == [("use_item", "dispatched", None)]
    assert "HP: 15%" in stub.payloads[0]["messages"][0]["content"]


def test_protected_activity_skips_without_recording() -> None:
    stub = OracleStub(completion(tool_call("sit")))
    provider = make_provider(activity="route", actor=make_actor(hp=5, hp_max=100))
    engine, executor, _ = _engine(stub, provider)

    report = asyncio.run(engine.run_cycle())

    assert report.reason == "protected activity: route"
    assert stub.requests == []
    assert executor.calls == []
    assert engine.history.list_recent(5) == []
    assert engine.status().last_cycle_at is None


def test_healthy_busy_actor_defers_to_automation() -> None:
    stub = OracleStub(completion(tool_call("sit")))
    engine, executor, clock = _engine(stub, _busy_provider())

    report = asyncio.run(engine.run_cycle())

    assert report.phase == CyclePhase.DEFERRED
    assert report.reason == "automation handles it"
    assert stub.requests == []
    assert engine.status().last_cycle_at == clock.now
    assert len(engine.history.list_recent(5)) == 1


def test_cadence_limits_cycles() -> None:
    stub = OracleStub(completion(tool_call("sit")))
    engine, executor, clock = _engine(stub, make_provider(activity="idle"))

    async def _run():
        first = await engine.run_cycle()
        clock.advance(1.0)
        second = await engine.run_cycle()
        clock.advance(2.0)
        third = await engine.run_cycle()
        return first, second, third

    first, second, third = asyncio.run(_run())

    assert first.reason == "dispatched"
    assert second.reason == "cadence"
    assert third.reason == "dispatched"
    assert len(stub.requests) == 2


def test_disabled_engine_does_nothing() -> None:
    stub = OracleStub(completion(tool_call("sit")))
    engine, executor, _ = _engine(stub, make_provider(), settings=_settings(enabled=False))

    report = asyncio.run(engine.run_cycle())

    assert report.reason == "disabled"
    assert stub.requests == []


def test_not_in_game_skips() -> None:
    stub = OracleStub(completion(tool_call("sit")))
    provider = make_provider()
    provider.state.in_game = False
    engine, _, _ = _engine(stub, provider)

    assert asyncio.run(engine.run_cycle()).reason == "not in game"
    assert stub.requests == []


def test_missing_api_key_refuses_to_open() -> None:
    engine = DecisionEngine(make_provider(), RecordingExecutor(), settings=_settings(api_key=""))

    with pytest.raises(ConfigurationError):
        engine.open()

    assert engine.enable() is False
    assert engine.status().ready is False


def test_text_only_answer_completes_without_dispatch() -> None:
    stub = OracleStub(completion(content="You should rest."))
    engine, executor, clock = _engine(stub, make_provider(activity="idle"))

    report = asyncio.run(engine.run_cycle())

    assert report.phase == CyclePhase.CONSULTING
    assert report.reason == "no decision"
    assert report.succeeded is False
    assert executor.calls == []
    assert engine.status().last_cycle_at == clock.now


def test_oracle_failure_completes_the_cycle() -> None:
    stub = OracleStub(httpx.Response(503, text="unavailable"))
    engine, executor, _ = _engine(stub, make_provider(activity="idle"))

    report = asyncio.run(engine.run_cycle())

    assert report.reason == "no decision"
    assert len(engine.history.list_recent(5)) == 1


def test_rejected_calls_are_recorded_with_reasons() -> None:
    stub = OracleStub(
        completion(
            tool_call("attack_monster", {"monster_id": 999}, "c1"),
            tool_call("fly", {}, "c2"),
        )
    )
    engine, executor, _ = _engine(stub, make_provider(activity="idle"))

    report = asyncio.run(engine.run_cycle())

    assert [(o.kind, o.reason) for o in report.outcomes] == [
        (OutcomeKind.REJECTED, "target not in snapshot"),
        (OutcomeKind.REJECTED, "unknown tool"),
    ]
    assert report.succeeded is False
    assert executor.calls == []


def test_decision_arriving_after_close_is_discarded() -> None:
    held = HeldOracle(completion(tool_call("sit")))
    engine, executor, _ = _engine(held, make_provider(activity="idle"))

    async def _run():
        held.arm()
        cycle = asyncio.create_task(engine.run_cycle())
        await asyncio.wait_for(held.started.wait(), timeout=1)
        await engine.close()
        held.release.set()
        return await cycle

    report = asyncio.run(_run())

    assert report.phase == CyclePhase.CONSULTING
    assert report.reason == "cancelled"
    assert report.outcomes == []
    assert executor.calls == []
    assert engine.status().ready is False


def test_forced_cycle_ignores_gate_and_enabled_state() -> None:
    stub = OracleStub(completion(tool_call("sit")))
    engine, executor, _ = _engine(stub, _busy_provider(activity="attack"))
    engine.disable()

    report = asyncio.run(engine.force_cycle())

    assert report.forced is True
    assert report.phase == CyclePhase.CONSULTING
    assert report.trigger is None
    assert executor.calls[0][0] == "set_posture"


def test_forced_cycle_still_honours_rate_limit() -> None:
    stub = OracleStub(completion(tool_call("sit")))
    engine, executor, _ = _engine(stub, make_provider(activity="idle"))

    async def _run():
        first = await engine.force_cycle()
        second = await engine.force_cycle()
        return first, second

    first, second = asyncio.run(_run())

    assert first.reason == "dispatched"
    assert second.reason == "no decision"
    assert len(stub.requests) == 1


def test_loop_runs_cycles_until_stopped() -> None:
    stub = OracleStub(completion(tool_call("sit")))
    engine, _, _ = _engine(stub, _busy_provider())
    loop = DecisionLoop(engine, tick_seconds=0.01)

    async def _run() -> bool:
        await loop.start()
        await asyncio.sleep(0.05)
        running = loop.running
        await loop.stop()
        return running

    assert asyncio.run(_run()) is True
    assert loop.running is False
    # FakeClock never advances, so cadence lets only the first cycle through.
    assert len(engine.history.list_recent(10)) == 1


def test_stopping_the_loop_abandons_the_request_in_flight() -> None:
    held = HeldOracle(completion(tool_call("sit")))
    engine, executor, _ = _engine(held, make_provider(activity="idle"))
    loop = DecisionLoop(engine, tick_seconds=0.01)

    async def _run() -> None:
        held.arm()
        await loop.start()
        await asyncio.wait_for(held.started.wait(), timeout=1)
        await loop.stop()

    asyncio.run(_run())

    assert loop.running is False
    assert executor.calls == []
    assert [(r.reason, r.phase) for r in engine.history.list_recent(10)] == [("cancelled", CyclePhase.CONSULTING)]


def test_loop_runs_foreground_cycles_with_configured_tick() -> None:
    stub = OracleStub(completion(tool_call("sit")))
    engine, _, clock = _engine(stub, _busy_provider(), settings=_settings(tick_seconds=0.01))
    refreshed: list[float] = []
    loop = DecisionLoop(engine, before_tick=lambda: refreshed.append(clock.now))

    reports = asyncio.run(loop.run(3))

    assert loop.tick_seconds == 0.01
    assert len(refreshed) == 3
    assert [r.reason for r in reports] == ["automation handles it", "cadence", "cadence"]
