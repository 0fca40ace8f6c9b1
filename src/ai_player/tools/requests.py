"""Validation of untrusted oracle tool calls into typed requests."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import ValidationError

from ai_player.errors import ToolArgumentsError, UnknownToolError
from ai_player.tools.catalog import DEFAULT_CATALOG, ToolCatalog, ToolRequest


@dataclass(frozen=True, slots=True)
class ToolCall:
    """One ``tool_calls[]`` entry exactly as the oracle sent it."""

    name: str
    arguments: str = ""
    call_id: str | None = None


def parse_tool_call(call: ToolCall, catalog: ToolCatalog = DEFAULT_CATALOG) -> ToolRequest:
    """Return the typed request for ``call`` or raise a ``ToolValidationError``."""
    spec = catalog.get(call.name)
    if spec is None:
        raise UnknownToolError(call.name)

    raw = call.arguments.strip() if call.arguments else ""
    try:
        return spec.arguments.model_validate_json(raw or "{}")
    except ValidationError as exc:
        detail = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
        )
        raise ToolArgumentsError(call.name, detail) from exc
