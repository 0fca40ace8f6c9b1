"""CLI entrypoint for the AI player decision engine."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich import print

from ai_player.adapters import ConsoleActionExecutor, EchoCommandSink, JsonStateProvider
from ai_player.cli import OperatorConsole, describe_report
from ai_player.config import settings
from ai_player.engine import DecisionEngine, DecisionLoop
from ai_player.errors import ConfigurationError
from ai_player.history import CycleHistoryStore, InMemoryCycleHistory, JsonlCycleHistory
from ai_player.telemetry import configure_logging

app = typer.Typer(help="AI player decision engine")


def _build_history() -> CycleHistoryStore:
    if settings.history_path:
        return JsonlCycleHistory(settings.history_path)
    return InMemoryCycleHistory()


def _build_engine(provider: JsonStateProvider) -> tuple[DecisionEngine, EchoCommandSink]:
    sink = EchoCommandSink()
    engine = DecisionEngine(
        provider,
        ConsoleActionExecutor(sink),
        settings=settings,
        history=_build_history(),
    )
    return engine, sink


def _open_or_exit(engine: DecisionEngine) -> None:
    try:
        engine.open()
    except ConfigurationError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)


@app.callback()
def _setup() -> None:
    configure_logging(settings.log_level, debug=settings.debug)


@app.command()
def status() -> None:
    """Show engine configuration: enabled state, model and cadence."""
    print(
        {
            "app_name": settings.app_name,
            "enabled": settings.enabled,
            "model": settings.model,
            "api_url": settings.api_url,
            "api_key_configured": bool(settings.api_key),
            "decision_interval_seconds": settings.decision_interval_seconds,
            "min_call_interval_seconds": settings.min_call_interval_seconds,
            "history_path": settings.history_path,
        }
    )


@app.command()
def decide(
    state: Path = typer.Option(..., exists=True, dir_okay=False, help="JSON host-state document"),
) -> None:
    """Force one immediate decision cycle against a captured host state."""
    engine, sink = _build_engine(JsonStateProvider(state))
    _open_or_exit(engine)
    console = OperatorConsole(engine)

    async def _run():
        try:
            return await console.handle("decide")
        finally:
            await engine.close()

    reply = asyncio.run(_run())
    for line in reply.lines:
        print(line)
    print({"commands": sink.commands})
    if not reply.ok:
        raise typer.Exit(code=1)


@app.command()
def run(
    state: Path = typer.Option(..., exists=True, dir_okay=False, help="JSON host-state document"),
    cycles: int = typer.Option(1, min=1, help="How many scheduled cycles to run"),
    tick: float = typer.Option(None, help="Seconds between cycles (defaults to AI_PLAYER_TICK_SECONDS)"),
) -> None:
    """Run scheduled cycles, reloading the state file before each one."""
    provider = JsonStateProvider(state)
    engine, sink = _build_engine(provider)
    _open_or_exit(engine)
    loop = DecisionLoop(engine, tick_seconds=tick, before_tick=provider.reload)

    async def _run() -> list:
        try:
            return await loop.run(cycles)
        finally:
            await engine.close()

    for report in asyncio.run(_run()):
        for line in describe_report(report):
            print(line)
    print({"commands": sink.commands})


@app.command()
def history(limit: int = typer.Option(20, min=1, help="How many cycles to show")) -> None:
    """Show the most recent completed cycles from the JSONL history."""
    if not settings.history_path:
        raise typer.BadParameter("Set AI_PLAYER_HISTORY_PATH to read cycle history")

    for report in JsonlCycleHistory(settings.history_path).list_recent(limit):
        print(
            {
                "id": report.id,
                "started_at": report.started_at.isoformat(),
                "phase": report.phase.value,
                "reason": report.reason,
                "trigger": report.trigger,
                "outcomes": [(o.tool, o.kind.value, o.reason) for o in report.outcomes],
            }
        )


if __name__ == "__main__":
    app()
