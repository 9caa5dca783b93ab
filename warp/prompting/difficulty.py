"""
Adaptive Difficulty - Chooses the next difficulty from player performance.

All functions are pure: the same stats always produce the same difficulty.
Three independent factors each contribute a small integer delta:
- Deaths (many deaths -> easier)
- Pace (fast completion -> harder, slow -> easier)
- Thoroughness (coin collection ratio)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping

from ..level_schema.level import clamp_difficulty


@dataclass(frozen=True)
class PerformanceStats:
    """
    Player performance on the last level. Supplied per call, never stored.
    """
    deaths: int = 0
    completion_time: float = 60.0  # seconds
    coins_collected: int = 0
    total_coins: int = 1
    current_difficulty: int = 1

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PerformanceStats":
        """Build stats from client JSON (camelCase or snake_case keys)."""
        def pick(snake: str, camel: str, default):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        return cls(
            deaths=pick("deaths", "deaths", 0),
            completion_time=pick("completion_time", "completionTime", 60.0),
            coins_collected=pick("coins_collected", "coinsCollected", 0),
            total_coins=pick("total_coins", "totalCoins", 1),
            current_difficulty=pick("current_difficulty", "currentDifficulty", 1),
        )


def _deaths_delta(deaths: float) -> int:
    if deaths >= 5:
        return -2
    if deaths >= 3:
        return -1
    if deaths == 0:
        return 1
    return 0


def _pace_delta(completion_time: float, current_difficulty: float) -> int:
    time_per_platform = completion_time / max(1, current_difficulty * 3)
    if time_per_platform < 3:
        return 1
    if time_per_platform > 10:
        return -1
    return 0


def _thoroughness_delta(coins_collected: float, total_coins: float) -> int:
    coin_ratio = coins_collected / total_coins if total_coins > 0 else 0
    if coin_ratio > 0.9:
        return 1
    if coin_ratio < 0.3:
        return -1
    return 0


def next_difficulty(stats: PerformanceStats) -> int:
    """
    Calculate the next difficulty from performance on the last level.

    Returns:
        New difficulty clamped to [1, 10]
    """
    delta = (
        _deaths_delta(stats.deaths)
        + _pace_delta(stats.completion_time, stats.current_difficulty)
        + _thoroughness_delta(stats.coins_collected, stats.total_coins)
    )
    return clamp_difficulty(stats.current_difficulty + delta)


def difficulty_to_description(difficulty: int) -> str:
    """Human-readable difficulty band for prompt embedding."""
    if difficulty <= 2:
        return "very easy with wide platforms, few enemies, and short gaps"
    if difficulty <= 4:
        return "beginner-friendly with moderate platform spacing and a few patrolling enemies"
    if difficulty <= 6:
        return "moderate with narrower platforms, larger gaps, and enemies that chase the player"
    if difficulty <= 8:
        return "challenging with small platforms, long gaps, and aggressive enemies"
    return "extremely difficult with tiny platforms, maximum gaps, and many aggressive enemies"
