"""Runtime configuration for the AI player decision engine."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ai_player.game_state import SnapshotLimits
from ai_player.gating import GatingThresholds
from ai_player.oracle import OracleConfig
from ai_player.prompting import DEFAULT_PRIORITIES, PolicyPriority, PromptPolicy


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="AI_PLAYER_", env_file=".env", extra="ignore")

    app_name: str = "ai-player"
    log_level: str = "INFO"
    debug: bool = False
    enabled: bool = True

    api_url: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        description="OpenAI-compatible chat-completions endpoint used as the oracle.",
    )
    api_key: str = Field(default="", description="Bearer token for the oracle endpoint.")
    model: str = "google/gemini-3-flash-preview"
    max_tokens: int = Field(default=300, ge=1)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    min_call_interval_seconds: float = Field(default=1.0, ge=0)
    referer: str = "https://github.com/openkore"
    app_title: str = "OpenKore aiPlayer Plugin"

    decision_interval_seconds: float = Field(default=3.0, ge=0)
    tick_seconds: float = Field(default=0.5, gt=0)

    max_level_diff: int = Field(default=10, ge=0)
    min_hp_to_attack: int = Field(default=30, ge=0, le=100)
    critical_hp_percent: int = Field(default=20, ge=0, le=100)
    overweight_percent: int = Field(default=70, ge=0, le=100)
    low_supply_threshold: int = Field(default=10, ge=0)

    hostile_radius: float = Field(default=20.0, ge=0)
    interactive_radius: float = Field(default=15.0, ge=0)
    hostile_limit: int = Field(default=5, ge=0)
    interactive_limit: int = Field(default=4, ge=0)
    peer_limit: int = Field(default=4, ge=0)
    healing_item_keywords: list[str] = Field(default_factory=lambda: ["potion", "herb", "juice", "honey"])
    priorities: list[PolicyPriority] = Field(
        default_factory=lambda: list(DEFAULT_PRIORITIES),
        description="Priority order given to the oracle, as a JSON list of priority names.",
    )

    history_path: str | None = Field(
        default=None,
        description="Optional JSONL file receiving one record per completed decision cycle.",
    )

    @field_validator("healing_item_keywords")
    @classmethod
    def _normalize_keywords(cls, value: list[str]) -> list[str]:
        return [keyword.strip().lower() for keyword in value if keyword.strip()]

    @field_validator("priorities")
    @classmethod
    def _unique_priorities(cls, value: list[PolicyPriority]) -> list[PolicyPriority]:
        if not value:
            raise ValueError("priorities must name at least one priority")
        return list(dict.fromkeys(value))

    def gating_thresholds(self) -> GatingThresholds:
        return GatingThresholds(
            critical_hp_percent=self.critical_hp_percent,
            overweight_percent=self.overweight_percent,
        )

    def snapshot_limits(self) -> SnapshotLimits:
        return SnapshotLimits(
            hostile_radius=self.hostile_radius,
            interactive_radius=self.interactive_radius,
            hostile_limit=self.hostile_limit,
            interactive_limit=self.interactive_limit,
            peer_limit=self.peer_limit,
            healing_keywords=tuple(self.healing_item_keywords),
        )

    def prompt_policy(self) -> PromptPolicy:
        return PromptPolicy(
            max_level_diff=self.max_level_diff,
            min_hp_to_attack=self.min_hp_to_attack,
            overweight_percent=self.overweight_percent,
            low_supply_threshold=self.low_supply_threshold,
            priorities=tuple(self.priorities),
        )

    def oracle_config(self) -> OracleConfig:
        return OracleConfig(
            api_url=self.api_url,
            api_key=self.api_key,
            model=self.model,
            max_tokens=self.max_tokens,
            timeout_seconds=self.request_timeout_seconds,
            min_call_interval_seconds=self.min_call_interval_seconds,
            referer=self.referer,
            app_title=self.app_title,
        )


settings = Settings()
