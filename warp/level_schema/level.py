"""
Level Document - Value types for a validated, playable level.

These types only ever hold normalized data produced by the validator.
Raw backend output is never loaded directly into them.

The wire form (to_dict) matches what the game client renders:
camelCase keys for spawnPoint/goalPosition, z always 0 (2.5D).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# Generation constraints (also embedded in prompts)
MAX_PLATFORMS = 50
MAX_ENEMIES = 15
MAX_COINS = 30
MIN_PLATFORM_WIDTH = 2
MAX_GAP = 8
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10

# Playable vertical band for platforms
MIN_PLATFORM_Y = -5
MAX_PLATFORM_Y = 15

# Height difference above which a wide gap can be crossed by falling
FALL_THROUGH_HEIGHT = 4

# Defaults applied during normalization
DEFAULT_PLATFORM_HEIGHT = 1
DEFAULT_PLATFORM_DEPTH = 4
DEFAULT_SPAWN = (2, 2)
DEFAULT_GOAL = (80, 0)


class PlatformType(str, Enum):
    """Platform surface styles."""
    GRASS = "grass"
    BRICK = "brick"
    STONE = "stone"
    ICE = "ice"
    LAVA = "lava"


class EnemyType(str, Enum):
    """Enemy kinds the client knows how to render."""
    GOOMBA = "goomba"
    KOOPA = "koopa"


class EnemyBehavior(str, Enum):
    """Enemy movement behaviors."""
    PATROL = "patrol"
    CHASE = "chase"


def clamp_difficulty(difficulty: float) -> int:
    """Clamp and round a difficulty into [MIN_DIFFICULTY, MAX_DIFFICULTY]."""
    return int(round(min(MAX_DIFFICULTY, max(MIN_DIFFICULTY, difficulty))))


PLATFORM_TYPES = frozenset(t.value for t in PlatformType)
ENEMY_TYPES = frozenset(t.value for t in EnemyType)
ENEMY_BEHAVIORS = frozenset(b.value for b in EnemyBehavior)


@dataclass(frozen=True)
class Point:
    """A position in level space."""
    x: float
    y: float
    z: float = 0

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


@dataclass(frozen=True)
class Platform:
    x: float
    y: float
    width: float
    z: float = 0
    height: float = DEFAULT_PLATFORM_HEIGHT
    depth: float = DEFAULT_PLATFORM_DEPTH
    type: PlatformType = PlatformType.GRASS

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "width": self.width,
            "height": self.height,
            "depth": self.depth,
            "type": self.type.value,
        }


@dataclass(frozen=True)
class Coin:
    x: float
    y: float
    z: float = 0
    collected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "z": self.z, "collected": self.collected}


@dataclass(frozen=True)
class Enemy:
    x: float
    y: float
    type: EnemyType
    behavior: EnemyBehavior = EnemyBehavior.PATROL
    z: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "type": self.type.value,
            "behavior": self.behavior.value,
        }


@dataclass(frozen=True)
class LevelDocument:
    """
    A fully normalized, guaranteed-playable level.

    Invariants (enforced by validate_level):
    - At least one platform, at most MAX_PLATFORMS
    - Every platform is at least MIN_PLATFORM_WIDTH wide with y in range
    - No unreachable gaps between x-adjacent platforms
    - Enemy and coin counts within their maxima
    """
    platforms: tuple[Platform, ...]
    spawn_point: Point
    goal_position: Point
    coins: tuple[Coin, ...] = field(default_factory=tuple)
    enemies: tuple[Enemy, ...] = field(default_factory=tuple)
    difficulty: int = MIN_DIFFICULTY

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire form consumed by the game client."""
        return {
            "platforms": [p.to_dict() for p in self.platforms],
            "coins": [c.to_dict() for c in self.coins],
            "enemies": [e.to_dict() for e in self.enemies],
            "difficulty": self.difficulty,
            "spawnPoint": self.spawn_point.to_dict(),
            "goalPosition": self.goal_position.to_dict(),
        }
