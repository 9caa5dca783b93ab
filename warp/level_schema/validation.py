"""
Level Validation - Turns untrusted backend output into a playable level.

Validates that:
1. The document is an object with at least one usable platform
2. Spawn point and goal position are present
3. Enemies and coins are well-formed and within their caps
4. Adjacent platforms are reachable (no oversized gaps)

Any error discards the whole document. A partially sane level is never
returned alongside errors.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import math
from typing import Any, Mapping

from ..errors import ValidationFailure
from .level import (
    LevelDocument,
    Platform,
    Coin,
    Enemy,
    Point,
    PlatformType,
    EnemyType,
    EnemyBehavior,
    PLATFORM_TYPES,
    ENEMY_TYPES,
    ENEMY_BEHAVIORS,
    MAX_PLATFORMS,
    MAX_ENEMIES,
    MAX_COINS,
    MIN_PLATFORM_WIDTH,
    MAX_GAP,
    MIN_DIFFICULTY,
    MIN_PLATFORM_Y,
    MAX_PLATFORM_Y,
    FALL_THROUGH_HEIGHT,
    DEFAULT_PLATFORM_HEIGHT,
    DEFAULT_PLATFORM_DEPTH,
    DEFAULT_SPAWN,
    DEFAULT_GOAL,
    clamp_difficulty,
)


@dataclass(frozen=True)
class ValidationResult:
    """Result of validation: either errors or a normalized level."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    data: LevelDocument | None = None


def _is_number(value: Any) -> bool:
    """Finite int/float; bools are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int beyond float range
        return False


def _items(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _is_one_of(value: Any, allowed: frozenset[str]) -> bool:
    return isinstance(value, str) and value in allowed


def validate_level(raw: Any) -> ValidationResult:
    """
    Validate and normalize a candidate level document.

    Never raises; failure is reported through the result.
    """
    if not isinstance(raw, Mapping):
        return ValidationResult(
            valid=False,
            errors=["Level data is not a valid object"],
        )

    errors: list[str] = []

    # Platforms
    raw_platforms = raw.get("platforms")
    if not isinstance(raw_platforms, list) or not raw_platforms:
        errors.append("No platforms defined")
    elif len(raw_platforms) > MAX_PLATFORMS:
        errors.append(
            f"Too many platforms: {len(raw_platforms)} (max {MAX_PLATFORMS})"
        )

    platforms = [p for p in _items(raw_platforms) if _is_usable_platform(p)]
    if not platforms and not errors:
        errors.append("No valid platforms after validation")

    # Spawn and goal
    spawn = raw.get("spawnPoint")
    if not _has_numeric_x(spawn):
        errors.append("Missing or invalid spawn point")

    goal = raw.get("goalPosition")
    if not _has_numeric_x(goal):
        errors.append("Missing or invalid goal position")

    enemies = [
        _normalize_enemy(e) for e in _items(raw.get("enemies")) if _is_usable_enemy(e)
    ][:MAX_ENEMIES]

    coins = [
        Coin(x=c["x"], y=c["y"])
        for c in _items(raw.get("coins"))
        if isinstance(c, Mapping) and _is_number(c.get("x")) and _is_number(c.get("y"))
    ][:MAX_COINS]

    errors.extend(check_reachability(platforms))

    if errors:
        return ValidationResult(valid=False, errors=errors)

    return ValidationResult(
        valid=True,
        errors=[],
        data=LevelDocument(
            platforms=tuple(_normalize_platform(p) for p in platforms),
            coins=tuple(coins),
            enemies=tuple(enemies),
            difficulty=_normalize_difficulty(raw.get("difficulty")),
            spawn_point=_normalize_point(spawn, DEFAULT_SPAWN),
            goal_position=_normalize_point(goal, DEFAULT_GOAL),
        ),
    )


def ensure_valid_level(raw: Any) -> LevelDocument:
    """
    Validate a candidate level, raising on failure.

    Raises:
        ValidationFailure: carrying the validator diagnostics
    """
    result = validate_level(raw)
    if not result.valid or result.data is None:
        raise ValidationFailure(result.errors)
    return result.data


def check_reachability(platforms: list[Mapping[str, Any]]) -> list[str]:
    """
    Report gaps that cannot be jumped between x-adjacent platforms.

    A wide gap is accepted when the height difference is at least
    FALL_THROUGH_HEIGHT, since the player can drop across it.
    """
    errors = []
    ordered = sorted(platforms, key=lambda p: p["x"])
    for i in range(1, len(ordered)):
        prev, curr = ordered[i - 1], ordered[i]
        prev_end = prev["x"] + prev["width"] / 2
        curr_start = curr["x"] - curr["width"] / 2
        gap = curr_start - prev_end
        height_diff = abs(curr["y"] - prev["y"])

        if gap > MAX_GAP and height_diff < FALL_THROUGH_HEIGHT:
            errors.append(
                f"Unreachable gap of {gap:.1f} between platforms {i - 1} and {i}"
            )
    return errors


def _is_usable_platform(p: Any) -> bool:
    if not isinstance(p, Mapping):
        return False
    if not _is_number(p.get("x")) or not _is_number(p.get("y")):
        return False
    if not _is_number(p.get("width")) or p["width"] < MIN_PLATFORM_WIDTH:
        return False
    return MIN_PLATFORM_Y <= p["y"] <= MAX_PLATFORM_Y


def _is_usable_enemy(e: Any) -> bool:
    if not isinstance(e, Mapping):
        return False
    if not _is_number(e.get("x")) or not _is_number(e.get("y")):
        return False
    return _is_one_of(e.get("type"), ENEMY_TYPES)


def _has_numeric_x(point: Any) -> bool:
    return isinstance(point, Mapping) and _is_number(point.get("x"))


def _positive_or(value: Any, default: float) -> float:
    return value if _is_number(value) and value > 0 else default


def _normalize_platform(p: Mapping[str, Any]) -> Platform:
    ptype = p.get("type")
    return Platform(
        x=p["x"],
        y=p["y"],
        width=max(p["width"], MIN_PLATFORM_WIDTH),
        height=_positive_or(p.get("height"), DEFAULT_PLATFORM_HEIGHT),
        depth=_positive_or(p.get("depth"), DEFAULT_PLATFORM_DEPTH),
        type=PlatformType(ptype) if _is_one_of(ptype, PLATFORM_TYPES) else PlatformType.GRASS,
    )


def _normalize_enemy(e: Mapping[str, Any]) -> Enemy:
    behavior = e.get("behavior")
    return Enemy(
        x=e["x"],
        y=e["y"],
        type=EnemyType(e["type"]),
        behavior=(
            EnemyBehavior(behavior) if _is_one_of(behavior, ENEMY_BEHAVIORS)
            else EnemyBehavior.PATROL
        ),
    )


def _normalize_point(point: Mapping[str, Any], default: tuple[float, float]) -> Point:
    y = point.get("y")
    return Point(
        x=point["x"],
        y=y if _is_number(y) else default[1],
    )


def _normalize_difficulty(value: Any) -> int:
    if not _is_number(value):
        return MIN_DIFFICULTY
    return clamp_difficulty(value)
