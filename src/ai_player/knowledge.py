"""Static game knowledge: job names, leveling zones and warp towns."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

JOB_NAMES: dict[int, str] = {
    0: "Novice",
    1: "Swordman",
    2: "Mage",
    3: "Archer",
    4: "Acolyte",
    5: "Merchant",
    6: "Thief",
    7: "Knight",
    8: "Priest",
    9: "Wizard",
    10: "Blacksmith",
    11: "Hunter",
    12: "Assassin",
    13: "Knight (Peco)",
    14: "Crusader",
    15: "Monk",
    16: "Sage",
    17: "Rogue",
    18: "Alchemist",
    19: "Bard",
    20: "Dancer",
    21: "Crusader (Peco)",
    23: "Super Novice",
    4001: "High Novice",
    4002: "High Swordman",
    4008: "Lord Knight",
    4009: "High Priest",
    4010: "High Wizard",
    4011: "Whitesmith",
    4012: "Sniper",
    4013: "Assassin Cross",
    4015: "Paladin",
    4016: "Champion",
    4017: "Professor",
    4018: "Stalker",
    4019: "Creator",
    4020: "Clown",
    4021: "Gypsy",
}

# Towns reachable through the warp service, keyed by destination.
WARP_TOWNS: dict[str, str] = {
    "prontera": "prt_in",
    "geffen": "geffen_in",
    "payon": "payon_in02",
    "morroc": "morocc_in",
    "alberta": "alberta_in",
    "aldebaran": "aldeba_in",
}

TERMINAL_ZONE = "gld_dun01"


def job_name(job_id: int | None) -> str:
    if job_id is None:
        return "Unknown"
    return JOB_NAMES.get(job_id, "Unknown")


class ZonePreference(str, Enum):
    """Risk tier used when picking a leveling zone."""

    CAUTIOUS = "cautious"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


@dataclass(frozen=True, slots=True)
class ZoneBand:
    """Maps for levels in ``[min_level, max_level)``."""

    min_level: int
    max_level: int
    tiers: dict[ZonePreference, str] = field(default_factory=dict)

    def contains(self, level: int) -> bool:
        return self.min_level <= level < self.max_level


def _band(lo: int, hi: int, cautious: str, balanced: str, aggressive: str) -> ZoneBand:
    return ZoneBand(
        min_level=lo,
        max_level=hi,
        tiers={
            ZonePreference.CAUTIOUS: cautious,
            ZonePreference.BALANCED: balanced,
            ZonePreference.AGGRESSIVE: aggressive,
        },
    )


LEVELING_ZONES: tuple[ZoneBand, ...] = (
    _band(1, 10, "prt_fild01", "prt_fild02", "prt_fild03"),
    _band(10, 20, "prt_fild03", "moc_fild02", "moc_fild07"),
    _band(20, 30, "moc_fild02", "pay_fild04", "moc_fild07"),
    _band(30, 40, "pay_fild04", "pay_dun00", "orcsdun01"),
    _band(40, 50, "pay_dun00", "orcsdun01", "orcsdun02"),
    _band(50, 60, "orcsdun01", "orcsdun02", "pay_dun03"),
    _band(60, 70, "orcsdun02", "pay_dun03", "alde_dun02"),
    _band(70, 80, "pay_dun03", "alde_dun02", "gld_dun01"),
    _band(80, 99, "alde_dun02", "gld_dun01", "gld_dun02"),
)


def resolve_leveling_zone(
    level: int,
    preference: ZonePreference,
    zones: tuple[ZoneBand, ...] = LEVELING_ZONES,
    terminal_zone: str = TERMINAL_ZONE,
) -> str:
    """Pick the map for ``level``; missing tiers fall back to balanced."""
    for band in zones:
        if band.contains(level):
            return band.tiers.get(preference) or band.tiers[ZonePreference.BALANCED]
    return terminal_zone
