"""Decision engine lifecycle and the cadence-driven decision loop."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, TypeVar
from uuid import uuid4

from ai_player.adapters.host import ActionExecutor, GameStateProvider
from ai_player.config import Settings
from ai_player.dispatch import ActionDispatcher
from ai_player.errors import ConfigurationError
from ai_player.game_state import WorldSnapshotBuilder
from ai_player.gating import GateTrigger, evaluate_gate, is_protected_activity
from ai_player.history import CycleHistoryStore, InMemoryCycleHistory
from ai_player.models import CyclePhase, CycleReport
from ai_player.oracle import OracleClient
from ai_player.prompting import assemble
from ai_player.telemetry import LoggingTelemetry, Telemetry

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class EngineStatus:
    enabled: bool
    ready: bool
    model: str
    decision_interval_seconds: float
    last_cycle_at: float | None


class DecisionEngine:
    """Process-wide decision engine.

    Owns the only two pieces of mutable cross-cycle state: the last completed
    cycle timestamp (here) and the oracle rate-limit timestamp (inside the
    client). Cycles are serialised with an ``asyncio.Lock`` so a forced cycle
    cannot interleave with a scheduled one.
    """

    def __init__(
        self,
        provider: GameStateProvider,
        executor: ActionExecutor,
        *,
        settings: Settings,
        client: OracleClient | None = None,
        history: CycleHistoryStore | None = None,
        telemetry: Telemetry | None = None,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._provider = provider
        self._builder = WorldSnapshotBuilder(provider, settings.snapshot_limits())
        self._dispatcher = ActionDispatcher(provider, executor)
        self._client = client
        self._history = history or InMemoryCycleHistory()
        self._telemetry = telemetry or LoggingTelemetry()
        self._clock = clock
        self._logger = logger or logging.getLogger("ai_player.engine")

        self._thresholds = settings.gating_thresholds()
        self._policy = settings.prompt_policy()
        self._lock = asyncio.Lock()
        self._ready = False
        self._closing = False
        self._enabled = False
        self._last_cycle_at: float | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def history(self) -> CycleHistoryStore:
        return self._history

    @property
    def enabled(self) -> bool:
        return self._enabled

    def open(self) -> None:
        """Validate configuration and bring the engine up.

        A missing API key is the one condition that keeps the engine from
        running at all; it is reported here once and the engine stays disabled.
        """
        api_key = self._client.config.api_key if self._client else self._settings.api_key
        if not api_key:
            self._logger.error("engine_not_configured", extra={"missing": "api_key"})
            raise ConfigurationError("No API key configured. Set AI_PLAYER_API_KEY.")

        if self._client is None:
            self._client = OracleClient(self._settings.oracle_config())
        self._ready = True
        self._closing = False
        self._enabled = self._settings.enabled
        self._logger.info(
            "engine_opened",
            extra={"model": self._client.config.model, "enabled": self._enabled},
        )

    async def close(self) -> None:
        self._closing = True
        self._enabled = False
        self._ready = False
        if self._client is not None:
            await self._client.aclose()
        self._logger.info("engine_closed")

    async def __aenter__(self) -> DecisionEngine:
        self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def enable(self) -> bool:
        if not self._ready:
            self._logger.warning("engine_enable_refused", extra={"ready": False})
            return False
        self._enabled = True
        self._logger.info("engine_enabled")
        return True

    def disable(self) -> None:
        self._enabled = False
        self._logger.info("engine_disabled")

    def status(self) -> EngineStatus:
        model = self._client.config.model if self._client else self._settings.model
        return EngineStatus(
            enabled=self._enabled,
            ready=self._ready,
            model=model,
            decision_interval_seconds=self._settings.decision_interval_seconds,
            last_cycle_at=self._last_cycle_at,
        )

    async def run_cycle(self) -> CycleReport:
        """One scheduled tick: guards, gate, and the oracle path when warranted."""
        async with self._lock:
            report = self._new_report(forced=False)
            if not self._enabled or not self._ready:
                return self._skip(report, "disabled")
            if not self._safe(self._provider.in_game) or self._safe(self._provider.actor) is None:
                return self._skip(report, "not in game")

            activity = self._safe(self._provider.current_activity)
            if is_protected_activity(activity):
                return self._skip(report, f"protected activity: {activity}")

            if self._last_cycle_at is not None:
                elapsed = self._clock() - self._last_cycle_at
                if elapsed < self._settings.decision_interval_seconds:
                    return self._skip(report, "cadence")

            gate = evaluate_gate(self._builder.gating_view(), activity, self._thresholds)
            if not gate.needs_oracle:
                report.reason = "automation handles it"
                self._complete(report)
                return report

            await self._consult(report, gate.trigger)
            return report

    async def force_cycle(self) -> CycleReport:
        """Operator-forced cycle: skips guards and gate, still rate-limited by the client."""
        async with self._lock:
            report = self._new_report(forced=True)
            if not self._ready:
                return self._skip(report, "not configured")
            await self._consult(report, None)
            return report

    async def _consult(self, report: CycleReport, trigger: GateTrigger | None) -> None:
        report.phase = CyclePhase.CONSULTING
        report.trigger = trigger.value if trigger else None
        try:
            client = self._client
            if client is None:
                raise ConfigurationError("engine is not open")
            snapshot = self._builder.build()
            instructions, situation = assemble(snapshot, self._policy)
            decision = await client.request_decision(instructions, situation)

            if self._closing:
                report.reason = "cancelled"
                self._logger.info("decision_discarded", extra={"cycle_id": report.id})
            elif decision is None:
                report.reason = "no decision"
            else:
                report.decision_received = True
                report.outcomes = self._dispatcher.execute(decision, snapshot)
                report.reason = "dispatched"
        except Exception:  # noqa: BLE001 - a cycle always completes and records its timestamp.
            report.reason = "error"
            self._logger.exception("cycle_failed", extra={"cycle_id": report.id})
        finally:
            if not report.reason:
                report.reason = "cancelled"
            self._complete(report)

    def _safe(self, getter: Callable[[], T]) -> T | None:
        try:
            return getter()
        except Exception:  # noqa: BLE001
            self._logger.warning("provider_query_failed", exc_info=True)
            return None

    @staticmethod
    def _new_report(*, forced: bool) -> CycleReport:
        return CycleReport(
            id=uuid4().hex,
            started_at=datetime.now(timezone.utc),
            phase=CyclePhase.DEFERRED,
            reason="",
            forced=forced,
        )

    def _skip(self, report: CycleReport, reason: str) -> CycleReport:
        # Skipped cycles are not completed: no timestamp, no history entry.
        report.reason = reason
        report.finished_at = datetime.now(timezone.utc)
        self._logger.debug("cycle_skipped", extra={"reason": reason})
        return report

    def _complete(self, report: CycleReport) -> None:
        report.finished_at = datetime.now(timezone.utc)
        self._last_cycle_at = self._clock()
        self._history.append(report)
        self._telemetry.emit(
            "decision_cycle",
            {
                "cycle_id": report.id,
                "phase": report.phase.value,
                "reason": report.reason,
                "trigger": report.trigger,
                "forced": report.forced,
                "outcomes": [(o.tool, o.kind.value, o.reason) for o in report.outcomes],
            },
        )


class DecisionLoop:
    """Drives :meth:`DecisionEngine.run_cycle` on a fixed tick.

    ``before_tick`` runs ahead of every cycle, e.g. to refresh a file-backed
    state provider. The tick defaults to ``settings.tick_seconds``.
    """

    def __init__(
        self,
        engine: DecisionEngine,
        *,
        tick_seconds: float | None = None,
        before_tick: Callable[[], object] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._engine = engine
        self._tick_seconds = engine.settings.tick_seconds if tick_seconds is None else tick_seconds
        self._before_tick = before_tick
        self._logger = logger or logging.getLogger("ai_player.engine.loop")
        self._task: asyncio.Task[None] | None = None

    @property
    def tick_seconds(self) -> float:
        return self._tick_seconds

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the tick loop once."""
        if self.running:
            return

        self._task = asyncio.create_task(self._tick_loop(), name="decision-loop")
        self._logger.info("decision_loop_started", extra={"tick_seconds": self._tick_seconds})

    async def stop(self) -> None:
        """Cancel the loop; an in-flight oracle request is abandoned."""
        if not self._task:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

        self._logger.info("decision_loop_stopped")

    async def run(self, cycles: int) -> list[CycleReport]:
        """Run ``cycles`` ticks in the foreground and return their reports."""
        reports: list[CycleReport] = []
        for index in range(cycles):
            if index:
                await asyncio.sleep(self._tick_seconds)
            reports.append(await self._tick())
        return reports

    async def _tick(self) -> CycleReport:
        if self._before_tick is not None:
            self._before_tick()
        return await self._engine.run_cycle()

    async def _tick_loop(self) -> None:
        while True:
            try:
                await self._tick()
            except Exception:  # noqa: BLE001 - one failed tick must not end the loop.
                self._logger.exception("decision_tick_failed")
            await asyncio.sleep(self._tick_seconds)
