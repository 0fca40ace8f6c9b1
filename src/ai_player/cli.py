"""Operator control surface mirroring the in-game ``aiplayer`` console command."""

from __future__ import annotations

from dataclasses import dataclass, field

from ai_player.engine import DecisionEngine
from ai_player.models import CycleReport

USAGE = "Usage: aiplayer [on|off|status|decide]"


@dataclass(slots=True)
class ConsoleReply:
    ok: bool
    lines: list[str] = field(default_factory=list)
    report: CycleReport | None = None


def describe_report(report: CycleReport) -> list[str]:
    lines = [f"[aiPlayer] Cycle {report.id[:8]}: {report.phase.value} ({report.reason})"]
    for outcome in report.outcomes:
        suffix = f": {outcome.reason}" if outcome.reason else ""
        lines.append(f"[aiPlayer]   {outcome.tool} -> {outcome.kind.value}{suffix}")
    return lines


class OperatorConsole:
    """Thin facade over the engine for host console plumbing."""

    def __init__(self, engine: DecisionEngine) -> None:
        self._engine = engine

    async def handle(self, args: str = "") -> ConsoleReply:
        command = (args.split() or ["status"])[0].lower()

        if command == "on":
            if not self._engine.enable():
                return ConsoleReply(False, ["[aiPlayer] Cannot enable: engine is not configured"])
            return ConsoleReply(True, ["[aiPlayer] AI Player enabled"])

        if command == "off":
            self._engine.disable()
            return ConsoleReply(True, ["[aiPlayer] AI Player disabled"])

        if command == "status":
            status = self._engine.status()
            return ConsoleReply(
                True,
                [
                    f"[aiPlayer] Status: {'ENABLED' if status.enabled else 'DISABLED'}",
                    f"[aiPlayer] Model: {status.model}",
                    f"[aiPlayer] Decision interval: {status.decision_interval_seconds:g}s",
                ],
            )

        if command == "decide":
            report = await self._engine.force_cycle()
            return ConsoleReply(
                report.succeeded,
                ["[aiPlayer] Forcing decision...", *describe_report(report)],
                report=report,
            )

        return ConsoleReply(False, [USAGE])
