"""
Generation Prompts - Prompts sent to the generative backend.

Prompts are deterministic string builders: the same parameters always give
the same text. The level prompt asks for a strict JSON schema; conformance is
NOT assumed and is checked by the level validator afterwards.

Player text must be sanitized (see sanitize.py) before it reaches
build_npc_dialog_prompt. The composer embeds it verbatim.
"""

from dataclasses import dataclass

from ..level_schema.level import (
    MAX_PLATFORMS,
    MAX_ENEMIES,
    MAX_COINS,
    MIN_PLATFORM_WIDTH,
    MAX_GAP,
    clamp_difficulty,
)
from .difficulty import difficulty_to_description


LEVEL_THEMES = (
    "Grassy plains with green platforms and blue sky",
    "Underground cave with stone and brick platforms",
    "Sky kingdom with floating platforms high above clouds",
    "Desert canyon with stone platforms and wide gaps",
    "Frost world with ice platforms (slippery!)",
    "Lava castle with dangerous gaps and aggressive enemies",
)

LEVEL_SCHEMA = """{
  "platforms": [{"x": number, "y": number, "z": 0, "width": number, "height": number, "depth": 4, "type": "grass"|"brick"|"stone"|"ice"}],
  "coins": [{"x": number, "y": number, "z": 0, "collected": false}],
  "enemies": [{"x": number, "y": number, "z": 0, "type": "goomba"|"koopa", "behavior": "patrol"|"chase"}],
  "difficulty": %(difficulty)d,
  "spawnPoint": {"x": 2, "y": 2, "z": 0},
  "goalPosition": {"x": number, "y": number, "z": 0}
}"""


@dataclass
class LevelPrompts:
    """
    Collection of prompt builders for level and dialog generation.

    Each level constraint is a simple function of difficulty, capped at the
    validator maxima so the backend is never asked for an invalid level.
    """

    @staticmethod
    def theme_for_level(level_number: int) -> str:
        """Themes cycle with the level number."""
        return LEVEL_THEMES[(max(1, level_number) - 1) % len(LEVEL_THEMES)]

    @staticmethod
    def platform_count(difficulty: int) -> int:
        return min(8 + difficulty * 3, MAX_PLATFORMS)

    @staticmethod
    def max_gap(difficulty: int) -> int:
        return max(3, MAX_GAP - (10 - difficulty))

    @staticmethod
    def enemy_count(difficulty: int) -> int:
        return min(2 + difficulty, MAX_ENEMIES)

    @staticmethod
    def coin_count(difficulty: int) -> int:
        return min(5 + difficulty * 2, MAX_COINS)

    @staticmethod
    def level_length(difficulty: int) -> int:
        return 40 + difficulty * 10

    @classmethod
    def level(cls, difficulty: int, level_number: int) -> str:
        """Prompt requesting a level as JSON."""
        difficulty = clamp_difficulty(difficulty)
        level_number = max(1, int(level_number))

        return f"""You are a Mario-style platformer level designer. Generate a 2.5D side-scrolling level as JSON.

DIFFICULTY: {difficulty}/10 - {difficulty_to_description(difficulty)}
LEVEL NUMBER: {level_number}
THEME: {cls.theme_for_level(level_number)}

CONSTRAINTS:
- Platforms: {cls.platform_count(difficulty)} total, minimum width {MIN_PLATFORM_WIDTH}
- The first platform must start at x=0 and be wide (at least 15 units) as a safe starting area
- Maximum gap between platforms: {cls.max_gap(difficulty)} units
- All platforms must be reachable by jumping (max jump height ~4 units, max jump distance ~6 units)
- Enemies: {cls.enemy_count(difficulty)} total
- Coins: {cls.coin_count(difficulty)} total, placed on or above platforms
- Goal flag at the far right end of the level
- All z-coordinates should be 0 (2.5D game)
- Platform y-coordinates between -1 and 8
- Level should extend from x=0 to approximately x={cls.level_length(difficulty)}

RESPOND WITH ONLY THIS JSON SCHEMA (no markdown, no explanation):
{LEVEL_SCHEMA % {"difficulty": difficulty}}"""

    @staticmethod
    def npc_dialog(npc_name: str, player_message: str, level_number: int) -> str:
        """Prompt for a short in-character NPC reply."""
        return f"""You are {npc_name}, a friendly character in a Mario-style platformer game.
The player is on Level {level_number}. They said: "{player_message}"

Respond in character with a short, helpful, and fun reply (1-2 sentences max).
You may give hints about the level, encourage the player, or share a fun observation.
Stay family-friendly and in the Mario universe context.
Respond with only the dialog text, no quotation marks."""


def build_level_prompt(difficulty: int, level_number: int) -> str:
    """Convenience wrapper around LevelPrompts.level."""
    return LevelPrompts.level(difficulty, level_number)


def build_npc_dialog_prompt(npc_name: str, player_message: str, level_number: int) -> str:
    """Convenience wrapper around LevelPrompts.npc_dialog."""
    return LevelPrompts.npc_dialog(npc_name, player_message, level_number)
