"""Rate-limited client for the external tool-calling oracle.

Speaks the OpenAI-compatible chat-completions contract over ``httpx``. Every
failure mode (rate limit, transport, protocol, text-only answer) collapses to
``None`` so the caller can treat it as "defer to automation".
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx

from ai_player.errors import OracleProtocolError, OracleTransportError
from ai_player.tools import DEFAULT_CATALOG, ToolCall, ToolCatalog


@dataclass(frozen=True, slots=True)
class OracleConfig:
    api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    api_key: str = ""
    model: str = "google/gemini-3-flash-preview"
    max_tokens: int = 300
    timeout_seconds: float = 30.0
    min_call_interval_seconds: float = 1.0
    referer: str | None = None
    app_title: str | None = None


@dataclass(slots=True)
class RateLimitState:
    """Monotonic timestamp of the last permitted oracle call."""

    last_call_at: float | None = None


@dataclass(frozen=True, slots=True)
class Decision:
    """Assistant message carrying one or more tool calls, in received order."""

    tool_calls: tuple[ToolCall, ...]
    content: str | None = None
    model: str | None = None
    usage: dict[str, int] = field(default_factory=dict)


class OracleClient:
    """Issues at most one chat-completions request per permitted call."""

    def __init__(
        self,
        config: OracleConfig,
        *,
        catalog: ToolCatalog = DEFAULT_CATALOG,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._catalog = catalog
        self._clock = clock
        self._logger = logger or logging.getLogger("ai_player.oracle")
        self._rate_limit = RateLimitState()
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds),
            transport=transport,
        )

    @property
    def config(self) -> OracleConfig:
        return self._config

    @property
    def last_call_at(self) -> float | None:
        return self._rate_limit.last_call_at

    async def aclose(self) -> None:
        await self._http.aclose()

    def build_payload(self, instructions: str, situation: str) -> dict[str, Any]:
        return {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": instructions},
                {"role": "user", "content": situation},
            ],
            "tools": self._catalog.to_openai(),
            "tool_choice": "auto",
            "max_tokens": self._config.max_tokens,
        }

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
        }
        if self._config.referer:
            headers["HTTP-Referer"] = self._config.referer
        if self._config.app_title:
            headers["X-Title"] = self._config.app_title
        return headers

    def _acquire_slot(self) -> bool:
        now = self._clock()
        last = self._rate_limit.last_call_at
        if last is not None and (now - last) < self._config.min_call_interval_seconds:
            return False
        self._rate_limit.last_call_at = now
        return True

    async def request_decision(self, instructions: str, situation: str) -> Decision | None:
        """Ask the oracle for a decision; ``None`` means "no decision this cycle"."""
        if not self._acquire_slot():
            self._logger.debug(
                "oracle_rate_limited",
                extra={"min_interval_seconds": self._config.min_call_interval_seconds},
            )
            return None

        try:
            body = await self._post(self.build_payload(instructions, situation))
            return self._parse(body)
        except OracleTransportError as exc:
            self._logger.warning("oracle_request_failed", extra={"error": str(exc)})
        except OracleProtocolError as exc:
            self._logger.warning("oracle_response_malformed", extra={"error": str(exc)})
        return None

    async def _post(self, payload: dict[str, Any]) -> Any:
        try:
            response = await asyncio.wait_for(
                self._http.post(self._config.api_url, json=payload, headers=self._headers()),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise OracleTransportError(f"request timed out after {self._config.timeout_seconds}s") from exc
        except httpx.HTTPError as exc:
            raise OracleTransportError(f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise OracleTransportError(f"HTTP {response.status_code} {response.reason_phrase}")

        try:
            return response.json()
        except ValueError as exc:
            raise OracleProtocolError(f"response body is not JSON: {exc}") from exc

    def _parse(self, body: Any) -> Decision | None:
        if not isinstance(body, dict):
            raise OracleProtocolError("response body is not an object")

        choices = body.get("choices")
        if choices is None:
            raise OracleProtocolError("response has no 'choices'")
        if not isinstance(choices, list):
            raise OracleProtocolError("'choices' is not a list")
        if not choices:
            self._logger.info("oracle_no_choices")
            return None

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise OracleProtocolError("choices[0] has no 'message' object")

        raw_calls = message.get("tool_calls") or []
        if not isinstance(raw_calls, list):
            raise OracleProtocolError("'tool_calls' is not a list")

        content = message.get("content")
        if not isinstance(content, str):
            content = None

        calls = tuple(self._tool_call(raw) for raw in raw_calls)
        if not calls:
            self._logger.info("oracle_text_only", extra={"content": (content or "")[:200]})
            return None

        usage = body.get("usage") if isinstance(body.get("usage"), dict) else {}
        return Decision(
            tool_calls=calls,
            content=content,
            model=body.get("model") if isinstance(body.get("model"), str) else None,
            usage={key: value for key, value in usage.items() if isinstance(value, int)},
        )

    @staticmethod
    def _tool_call(raw: Any) -> ToolCall:
        if not isinstance(raw, dict) or not isinstance(raw.get("function"), dict):
            raise OracleProtocolError("tool call without a 'function' object")

        function = raw["function"]
        name = function.get("name")
        if not isinstance(name, str):
            raise OracleProtocolError("tool call without a function name")

        arguments = function.get("arguments")
        if isinstance(arguments, (dict, list)):
            arguments = json.dumps(arguments)
        elif arguments is None:
            arguments = ""
        elif not isinstance(arguments, str):
            arguments = str(arguments)

        call_id = raw.get("id")
        return ToolCall(name=name, arguments=arguments, call_id=call_id if isinstance(call_id, str) else None)
