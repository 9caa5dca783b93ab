"""
Prompting - Everything that happens before the backend is called.

1. Player text is sanitized
2. Difficulty is adapted from the last level's performance
3. Deterministic prompts are composed from the parameters

All functions here are pure and safe to call from any number of workers.
"""

from .sanitize import sanitize_input, is_clean_input
from .difficulty import PerformanceStats, next_difficulty, difficulty_to_description
from .prompts import LevelPrompts, build_level_prompt, build_npc_dialog_prompt

__all__ = [
    "sanitize_input",
    "is_clean_input",
    "PerformanceStats",
    "next_difficulty",
    "difficulty_to_description",
    "LevelPrompts",
    "build_level_prompt",
    "build_npc_dialog_prompt",
]
