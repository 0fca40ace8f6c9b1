"""Persistence for completed decision cycles."""

from __future__ import annotations

import json
from collections import deque
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Protocol

from ai_player.models import ActionOutcome, CyclePhase, CycleReport, OutcomeKind


class CycleHistoryStore(Protocol):
    """Persistence contract for decision-cycle reports."""

    def append(self, report: CycleReport) -> None:
        """Persist a finished cycle."""

    def list_recent(self, limit: int) -> list[CycleReport]:
        """Return up to ``limit`` newest cycles."""


class InMemoryCycleHistory:
    """Bounded in-memory history store."""

    def __init__(self, max_cycles: int = 1_000) -> None:
        self._cycles: deque[CycleReport] = deque(maxlen=max_cycles)

    def append(self, report: CycleReport) -> None:
        self._cycles.appendleft(report)

    def list_recent(self, limit: int) -> list[CycleReport]:
        return list(self._cycles)[:limit]


class JsonlCycleHistory:
    """Simple JSONL-backed cycle history persistence."""

    def __init__(self, file_path: str | Path) -> None:
        self._path = Path(file_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, report: CycleReport) -> None:
        payload = asdict(report)
        payload["phase"] = report.phase.value
        payload["started_at"] = report.started_at.isoformat()
        payload["finished_at"] = report.finished_at.isoformat() if report.finished_at else None
        payload["outcomes"] = [
            {**asdict(outcome), "kind": outcome.kind.value} for outcome in report.outcomes
        ]
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")

    def list_recent(self, limit: int) -> list[CycleReport]:
        if not self._path.exists():
            return []

        reports: list[CycleReport] = []
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                payload = json.loads(line)
                reports.append(
                    CycleReport(
                        id=payload["id"],
                        started_at=datetime.fromisoformat(payload["started_at"]),
                        phase=CyclePhase(payload["phase"]),
                        reason=payload["reason"],
                        trigger=payload.get("trigger"),
                        forced=payload.get("forced", False),
                        decision_received=payload.get("decision_received", False),
                        outcomes=[
                            ActionOutcome(
                                tool=item["tool"],
                                kind=OutcomeKind(item["kind"]),
                                reason=item.get("reason"),
                                detail=item.get("detail"),
                            )
                            for item in payload.get("outcomes", [])
                        ],
                        finished_at=(
                            datetime.fromisoformat(payload["finished_at"]) if payload.get("finished_at") else None
                        ),
                    )
                )

        reports.reverse()
        return reports[:limit]
