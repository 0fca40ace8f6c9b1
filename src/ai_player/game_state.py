"""Builds bounded, ranked world snapshots from the host state provider."""

from __future__ import annotations

import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from ai_player.adapters.host import GameStateProvider, HostActor, HostEntity, HostQuest
from ai_player.gating import GatingView
from ai_player.knowledge import job_name
from ai_player.models import (
    ActorStatus,
    EntityView,
    HostileView,
    InventoryDigest,
    Objective,
    ObjectiveKind,
    WorldSnapshot,
)

T = TypeVar("T")
V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class SnapshotLimits:
    hostile_radius: float = 20.0
    interactive_radius: float = 15.0
    hostile_limit: int = 5
    interactive_limit: int = 4
    peer_limit: int = 4
    healing_keywords: tuple[str, ...] = ("potion", "herb", "juice", "honey")


def percent(current: int | None, maximum: int | None) -> int:
    """``current / maximum * 100`` truncated and clamped to [0, 100].

    A zero or missing maximum is replaced by 1. That keeps the value defined,
    it does not make it meaningful.
    """
    value = max(0, current or 0)
    ceiling = maximum if maximum and maximum > 0 else 1
    return max(0, min(100, int(value / ceiling * 100)))


def _non_negative(value: int | None) -> int:
    return max(0, value or 0)


def _keyword_pattern(keywords: Iterable[str]) -> re.Pattern[str] | None:
    words = [re.escape(word) for word in keywords if word]
    if not words:
        return None
    return re.compile("|".join(words), re.IGNORECASE)


class WorldSnapshotBuilder:
    """Collects host state into a :class:`WorldSnapshot`; never raises."""

    def __init__(
        self,
        provider: GameStateProvider,
        limits: SnapshotLimits | None = None,
        *,
        clock: Callable[[], float] = time.time,
        logger: logging.Logger | None = None,
    ) -> None:
        self._provider = provider
        self._limits = limits or SnapshotLimits()
        self._clock = clock
        self._logger = logger or logging.getLogger("ai_player.game_state")
        self._healing_pattern = _keyword_pattern(self._limits.healing_keywords)

    @property
    def limits(self) -> SnapshotLimits:
        return self._limits

    def _safe(self, getter: Callable[[], T], source: str) -> T | None:
        try:
            return getter()
        except Exception:  # noqa: BLE001 - missing upstream data degrades to empty fields.
            self._logger.warning("snapshot_source_failed", extra={"source": source}, exc_info=True)
            return None

    def build(self) -> WorldSnapshot:
        actor = self._safe(self._provider.actor, "actor")
        status = self._actor_status(actor)
        origin = (status.x, status.y)
        limits = self._limits

        hostiles = self._rank(
            (m for m in self._safe(self._provider.monsters, "monsters") or [] if m and not m.dead),
            origin,
            limits.hostile_radius,
            limits.hostile_limit,
            self._hostile_view,
        )
        interactives = self._rank(
            self._safe(self._provider.npcs, "npcs") or [],
            origin,
            limits.interactive_radius,
            limits.interactive_limit,
            self._entity_view,
        )
        peers = self._rank(
            self._safe(self._provider.players, "players") or [],
            origin,
            limits.interactive_radius,
            limits.peer_limit,
            self._entity_view,
        )

        activity = self._safe(self._provider.current_activity, "activity")
        return WorldSnapshot(
            actor=status,
            hostiles=hostiles,
            interactives=interactives,
            peers=peers,
            objectives=self._objectives(self._safe(self._provider.quests, "quests") or {}),
            inventory=self._inventory_digest(),
            activity=activity or "idle",
            captured_at=self._clock(),
        )

    def gating_view(self) -> GatingView:
        """Cheap counts for the gate: no sorting, no truncation."""
        actor = self._safe(self._provider.actor, "actor")
        origin = (_non_negative(actor.x), _non_negative(actor.y)) if actor else (0, 0)
        hostile_count = 0
        for monster in self._safe(self._provider.monsters, "monsters") or []:
            if not monster or monster.dead:
                continue
            distance = self._distance(origin, monster)
            if distance is not None and distance <= self._limits.hostile_radius:
                hostile_count += 1

        quests = self._safe(self._provider.quests, "quests") or {}
        return GatingView(
            hp_percent=percent(actor.hp, actor.hp_max) if actor else 0,
            weight_percent=percent(actor.weight, actor.weight_max) if actor else 0,
            hostile_count=hostile_count,
            objective_count=sum(1 for quest in quests.values() if quest and quest.active),
        )

    def _actor_status(self, actor: HostActor | None) -> ActorStatus:
        if actor is None:
            return ActorStatus()

        map_field = self._safe(self._provider.field, "field")
        return ActorStatus(
            name=actor.name or "Unknown",
            class_name=job_name(actor.job_id),
            level=_non_negative(actor.level),
            job_level=_non_negative(actor.job_level),
            hp=_non_negative(actor.hp),
            hp_max=_non_negative(actor.hp_max),
            hp_percent=percent(actor.hp, actor.hp_max),
            sp=_non_negative(actor.sp),
            sp_max=_non_negative(actor.sp_max),
            sp_percent=percent(actor.sp, actor.sp_max),
            weight=_non_negative(actor.weight),
            weight_max=_non_negative(actor.weight_max),
            weight_percent=percent(actor.weight, actor.weight_max),
            map_name=map_field.name if map_field else "unknown",
            x=_non_negative(actor.x),
            y=_non_negative(actor.y),
            sitting=bool(actor.sitting),
            dead=bool(actor.dead),
        )

    @staticmethod
    def _distance(origin: tuple[int, int], entity: HostEntity) -> float | None:
        # Entities without a known position cannot be ranked.
        if entity.x is None or entity.y is None:
            return None
        return math.dist(origin, (entity.x, entity.y))

    def _rank(
        self,
        entities: Iterable[HostEntity],
        origin: tuple[int, int],
        radius: float,
        limit: int,
        make_view: Callable[[HostEntity, float], V],
    ) -> tuple[V, ...]:
        measured: list[tuple[float, HostEntity]] = []
        for entity in entities:
            if not entity:
                continue
            distance = self._distance(origin, entity)
            if distance is None or distance > radius:
                continue
            measured.append((distance, entity))

        measured.sort(key=lambda pair: pair[0])
        return tuple(make_view(entity, distance) for distance, entity in measured[:limit])

    @staticmethod
    def _hostile_view(entity: HostEntity, distance: float) -> HostileView:
        return HostileView(
            entity_id=entity.entity_id,
            name=entity.name or "Unknown",
            level=_non_negative(entity.level),
            hp_percent=percent(entity.hp, entity.hp_max) if entity.hp_max else 100,
            distance=distance,
            x=entity.x or 0,
            y=entity.y or 0,
            aggressive=(entity.damage_to_actor or 0) > 0,
        )

    @staticmethod
    def _entity_view(entity: HostEntity, distance: float) -> EntityView:
        return EntityView(
            entity_id=entity.entity_id,
            name=entity.name or "Unknown",
            distance=distance,
            x=entity.x or 0,
            y=entity.y or 0,
        )

    @staticmethod
    def _objectives(quests: dict[int, HostQuest]) -> tuple[Objective, ...]:
        objectives: list[Objective] = []
        for quest_id, quest in quests.items():
            if not quest or not quest.active:
                continue

            name = quest.title or f"Quest {quest_id}"
            pursuit = next(
                (m for m in quest.missions if m and m.mob_id and m.goal is not None),
                None,
            )
            if pursuit is None:
                objectives.append(Objective(objective_id=quest_id, name=name))
                continue

            objectives.append(
                Objective(
                    objective_id=quest_id,
                    name=name,
                    kind=ObjectiveKind.PURSUIT,
                    target=pursuit.mob_name or "Monster",
                    current=_non_negative(pursuit.count),
                    required=_non_negative(pursuit.goal),
                )
            )
        return tuple(objectives)

    def _inventory_digest(self) -> InventoryDigest:
        total = 0
        healing = 0
        for item in self._safe(self._provider.inventory, "inventory") or []:
            if not item:
                continue
            total += 1
            if self._healing_pattern and item.name and self._healing_pattern.search(item.name):
                healing += _non_negative(item.amount) if item.amount is not None else 1
        return InventoryDigest(total_items=total, healing_items=healing)
