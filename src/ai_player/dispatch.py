"""Validates oracle tool calls and dispatches them against the live world.

Target references are resolved against the snapshot the oracle saw; liveness
(target still listed by the host, actor posture, current engagement) is
re-checked against the provider right before the executor is called. Each tool
call is handled on its own: one rejection never stops its siblings.
"""

from __future__ import annotations

import logging
from typing import Callable

from ai_player.adapters.host import ActionExecutor, GameStateProvider, HostEntity, Posture, TeleportKind
from ai_player.errors import ToolValidationError
from ai_player.knowledge import ZonePreference, resolve_leveling_zone
from ai_player.models import ActionOutcome, OutcomeKind, WorldSnapshot
from ai_player.oracle import Decision
from ai_player.tools import (
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
    ToolCall,
    ToolCatalog,
    ToolRequest,
    UseItem,
    UseKafra,
    UseSkill,
    UseStorage,
    Wait,
    parse_tool_call,
)

ENGAGED_ACTIVITY = "attack"


class _Precondition(Exception):
    """Internal signal: a liveness or reference check failed."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class _NoOp(Exception):
    """Internal signal: the request is already satisfied."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ActionDispatcher:
    """Turns validated tool requests into exactly one executor call each."""

    def __init__(
        self,
        provider: GameStateProvider,
        executor: ActionExecutor,
        *,
        catalog: ToolCatalog = DEFAULT_CATALOG,
        logger: logging.Logger | None = None,
    ) -> None:
        self._provider = provider
        self._executor = executor
        self._catalog = catalog
        self._logger = logger or logging.getLogger("ai_player.dispatch")

    def execute(self, decision: Decision, snapshot: WorldSnapshot) -> list[ActionOutcome]:
        """Dispatch every tool call of ``decision`` sequentially, in order."""
        return [self.execute_call(call, snapshot) for call in decision.tool_calls]

    def execute_call(self, call: ToolCall, snapshot: WorldSnapshot) -> ActionOutcome:
        try:
            request = parse_tool_call(call, self._catalog)
        except ToolValidationError as exc:
            return self._record(ActionOutcome.rejected(call.name, exc.reason, exc.detail))

        try:
            action, detail = self._plan(request, snapshot)
        except _Precondition as exc:
            return self._record(ActionOutcome.rejected(call.name, exc.reason))
        except _NoOp as exc:
            return self._record(ActionOutcome.noop(call.name, exc.reason))
        except Exception as exc:  # noqa: BLE001 - a failing host query rejects this call only.
            self._logger.exception("tool_precondition_error", extra={"tool": call.name})
            return self._record(
                ActionOutcome.rejected(call.name, "precondition check failed", f"{type(exc).__name__}: {exc}")
            )

        try:
            action()
        except Exception as exc:  # noqa: BLE001 - executor failures must not escape the cycle.
            self._logger.exception("tool_executor_failed", extra={"tool": call.name})
            return self._record(ActionOutcome.rejected(call.name, "executor failed", f"{type(exc).__name__}: {exc}"))

        return self._record(ActionOutcome.dispatched(call.name, detail))

    def _record(self, outcome: ActionOutcome) -> ActionOutcome:
        extra = {"tool": outcome.tool, "reason": outcome.reason, "detail": outcome.detail}
        if outcome.kind == OutcomeKind.DISPATCHED:
            self._logger.info("tool_dispatched", extra=extra)
        elif outcome.kind == OutcomeKind.NOOP:
            self._logger.debug("tool_noop", extra=extra)
        else:
            self._logger.warning("tool_rejected", extra=extra)
        return outcome

    def _plan(self, request: ToolRequest, snapshot: WorldSnapshot) -> tuple[Callable[[], None], str]:
        """Validate ``request`` and return the deferred executor call plus a log detail."""
        executor = self._executor
        match request:
            case AttackMonster(monster_id=target_id):
                target = snapshot.find_hostile(target_id)
                if target is None:
                    raise _Precondition("target not in snapshot")
                if not self._still_listed(self._provider.monsters, target_id, live_only=True):
                    raise _Precondition("target no longer present")
                if self._activity() == ENGAGED_ACTIVITY:
                    raise _Precondition("already engaged")
                return (lambda: executor.engage(target_id)), f"attacking {target.name}"

            case MoveTo(x=x, y=y):
                if self._provider.is_walkable(x, y) is not True:
                    raise _Precondition("destination not walkable")
                return (lambda: executor.move_to(x, y)), f"moving to ({x}, {y})"

            case UseSkill(skill_name=skill_name, target_id=target_id, level=level):
                skill = next(
                    (s for s in self._provider.skills() or [] if s and s.name.lower() == skill_name.strip().lower()),
                    None,
                )
                if skill is None:
                    raise _Precondition("unknown skill")
                target = target_id or None
                if target is not None:
                    if not snapshot.references(target):
                        raise _Precondition("target not in snapshot")
                    if not self._any_listed(target):
                        raise _Precondition("target no longer present")
                return (lambda: executor.use_ability(skill.handle, level, target)), f"using skill {skill.name}"

            case UseItem(item_name=item_name):
                needle = item_name.strip().lower()
                item = next(
                    (i for i in self._provider.inventory() or [] if i and i.name and needle in i.name.lower()),
                    None,
                )
                if item is None:
                    raise _Precondition("item not in inventory")
                return (lambda: executor.use_item(item.index)), f"using item {item.name}"

            case TalkToNpc(npc_id=npc_id, sequence=sequence):
                npc = snapshot.find_interactive(npc_id)
                if npc is None:
                    raise _Precondition("target not in snapshot")
                if not self._still_listed(self._provider.npcs, npc_id):
                    raise _Precondition("target no longer present")
                position = (npc.x, npc.y)
                return (lambda: executor.interact(npc_id, sequence, position)), f"talking to {npc.name}"

            case Sit():
                if self._sitting():
                    raise _NoOp("already sitting")
                return (lambda: executor.set_posture(Posture.SITTING)), "sitting down"

            case Stand():
                if not self._sitting():
                    raise _NoOp("already standing")
                return (lambda: executor.set_posture(Posture.STANDING)), "standing up"

            case Teleport(type=kind):
                teleport = TeleportKind(kind)
                return (lambda: executor.teleport(teleport)), f"teleport ({teleport.value})"

            case Wait(reason=reason):
                raise _NoOp(reason or "no action needed")

            case GoToMap(map_name=map_name):
                return (lambda: executor.route_to_map(map_name)), f"traveling to {map_name}"

            case UseStorage(action="store_all"):
                return (lambda: executor.storage_op("store_all")), "storing all items"

            case UseStorage(action="get_item", item_name=item_name, amount=amount):
                return (
                    (lambda: executor.storage_op("get_item", item_name, amount)),
                    f"getting {amount} x {item_name} from storage",
                )

            case BuyItems(item_name=item_name, amount=amount):
                return (lambda: executor.trade_op("buy", item_name, amount)), f"buying {amount} x {item_name}"

            case SellItems(sell_type=sell_type):
                return (lambda: executor.trade_op("sell")), f"selling items ({sell_type})"

            case UseKafra(destination=destination):
                # The warp service has no dedicated executor primitive.
                return (lambda: executor.issue_plain_command(f"route {destination}")), f"warping to {destination}"

            case ChangeLevelingZone(zone_type=zone_type):
                level = snapshot.actor.level or 1
                zone = resolve_leveling_zone(level, ZonePreference(zone_type))
                return (
                    (lambda: executor.route_to_map(zone)),
                    f"changing leveling zone to {zone} (Lv{level}, {zone_type})",
                )

        raise TypeError(f"unhandled tool request: {type(request).__name__}")

    def _activity(self) -> str:
        return (self._provider.current_activity() or "idle").strip().lower()

    def _sitting(self) -> bool:
        actor = self._provider.actor()
        return bool(actor and actor.sitting)

    @staticmethod
    def _still_listed(
        source: Callable[[], list[HostEntity] | None],
        entity_id: int,
        *,
        live_only: bool = False,
    ) -> bool:
        for entity in source() or []:
            if entity and entity.entity_id == entity_id:
                return not (live_only and entity.dead)
        return False

    def _any_listed(self, entity_id: int) -> bool:
        return (
            self._still_listed(self._provider.monsters, entity_id, live_only=True)
            or self._still_listed(self._provider.npcs, entity_id)
            or self._still_listed(self._provider.players, entity_id)
        )
