"""Level schema - playable level types, extraction and validation."""

from .level import (
    LevelDocument,
    Platform,
    Coin,
    Enemy,
    Point,
    PlatformType,
    EnemyType,
    EnemyBehavior,
)
from .extraction import extract_document
from .validation import validate_level, ensure_valid_level, ValidationResult

__all__ = [
    "LevelDocument",
    "Platform",
    "Coin",
    "Enemy",
    "Point",
    "PlatformType",
    "EnemyType",
    "EnemyBehavior",
    "extract_document",
    "validate_level",
    "ensure_valid_level",
    "ValidationResult",
]
