"""
Tests for prompt composition.
"""

import pytest

from ..prompting.prompts import (
    LevelPrompts,
    LEVEL_THEMES,
    build_level_prompt,
    build_npc_dialog_prompt,
)
from ..level_schema.level import MAX_PLATFORMS, MAX_ENEMIES, MAX_COINS


class TestLevelPrompt:
    """Tests for build_level_prompt."""

    def test_is_deterministic(self):
        assert build_level_prompt(4, 2) == build_level_prompt(4, 2)

    def test_embeds_difficulty_and_description(self):
        prompt = build_level_prompt(7, 1)
        assert "DIFFICULTY: 7/10" in prompt
        assert "challenging" in prompt

    def test_theme_cycles_with_level_number(self):
        """Level 1 and level 7 share a theme; 1 through 6 are distinct."""
        themes = [LevelPrompts.theme_for_level(n) for n in range(1, 8)]
        assert themes[0] == themes[6] == LEVEL_THEMES[0]
        assert len(set(themes[:6])) == 6
        assert f"THEME: {LEVEL_THEMES[1]}" in build_level_prompt(3, 2)

    @pytest.mark.parametrize("difficulty, platforms, gap, enemies, coins", [
        (1, 11, 3, 3, 7),
        (5, 23, 3, 7, 15),
        (10, 38, 8, 12, 25),
    ])
    def test_constraints_scale_with_difficulty(self, difficulty, platforms, gap, enemies, coins):
        prompt = build_level_prompt(difficulty, 1)
        assert f"Platforms: {platforms} total" in prompt
        assert f"Maximum gap between platforms: {gap} units" in prompt
        assert f"Enemies: {enemies} total" in prompt
        assert f"Coins: {coins} total" in prompt

    def test_constraints_capped_at_maxima(self):
        for d in range(1, 11):
            assert LevelPrompts.platform_count(d) <= MAX_PLATFORMS
            assert LevelPrompts.enemy_count(d) <= MAX_ENEMIES
            assert LevelPrompts.coin_count(d) <= MAX_COINS

    def test_includes_schema(self):
        prompt = build_level_prompt(2, 1)
        assert '"spawnPoint"' in prompt
        assert '"goalPosition"' in prompt
        assert '"difficulty": 2' in prompt

    def test_out_of_range_difficulty_clamped(self):
        assert "DIFFICULTY: 10/10" in build_level_prompt(42, 1)
        assert "DIFFICULTY: 1/10" in build_level_prompt(-3, 1)


class TestNpcDialogPrompt:
    """Tests for build_npc_dialog_prompt."""

    def test_embeds_message_verbatim(self):
        prompt = build_npc_dialog_prompt("Toad", "where is the flag?", 3)
        assert "You are Toad" in prompt
        assert 'They said: "where is the flag?"' in prompt
        assert "Level 3" in prompt

    def test_frame_is_family_friendly(self):
        prompt = build_npc_dialog_prompt("Toad", "hi", 1)
        assert "family-friendly" in prompt
        assert "1-2 sentences" in prompt
