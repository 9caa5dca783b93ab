"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between the game client and the gateway.
JSON keys are camelCase to match the client; Python attributes are
snake_case.

Status codes:
- 400: Malformed request (missing/oversized prompt, bad fields)
- 429: Rate limit exceeded (body is only an error message)
- 500: Generation failed (fallback payload, never partial data)
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Level Models
# =============================================================================

class PointInfo(CamelModel):
    x: float
    y: float
    z: float = 0


class PlatformInfo(CamelModel):
    x: float
    y: float
    z: float = 0
    width: float
    height: float
    depth: float
    type: str = Field(description="grass, brick, stone, ice, lava")


class CoinInfo(CamelModel):
    x: float
    y: float
    z: float = 0
    collected: bool = False


class EnemyInfo(CamelModel):
    x: float
    y: float
    z: float = 0
    type: str = Field(description="goomba, koopa")
    behavior: str = Field(description="patrol, chase")


class LevelData(CamelModel):
    """A validated, playable level."""
    platforms: list[PlatformInfo]
    coins: list[CoinInfo] = Field(default_factory=list)
    enemies: list[EnemyInfo] = Field(default_factory=list)
    difficulty: int = Field(ge=1, le=10)
    spawn_point: PointInfo
    goal_position: PointInfo


class PerformanceStatsInfo(CamelModel):
    """Player performance on the last level."""
    deaths: float = 0
    completion_time: float = Field(60, description="Seconds to complete the level")
    coins_collected: float = 0
    total_coins: float = 1
    current_difficulty: float = 1


# =============================================================================
# Request Models
# =============================================================================

class GenerateLevelRequest(CamelModel):
    """Request to generate a level from a prompt."""
    prompt: Any = Field(None, description="Level prompt text")


class NpcDialogRequest(CamelModel):
    """Request to generate NPC dialog from a prompt."""
    prompt: Any = Field(None, description="Dialog prompt text")
    cache_key: Optional[Any] = Field(None, description="Key for reusing a previous reply")


class AdaptiveLevelRequest(CamelModel):
    """Request to generate the next level from player performance."""
    stats: PerformanceStatsInfo = Field(default_factory=PerformanceStatsInfo)
    level_number: int = Field(1, ge=1)


class NpcChatRequest(CamelModel):
    """A raw player message to an NPC. Sanitized server-side."""
    npc_name: str = Field(..., description="NPC display name")
    player_message: str = Field(..., description="Untrusted player text")
    level_number: int = Field(1, ge=1)


class DifficultyRequest(CamelModel):
    stats: PerformanceStatsInfo = Field(default_factory=PerformanceStatsInfo)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(CamelModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")


class LevelResponse(CamelModel):
    level_data: LevelData


class LevelErrorResponse(CamelModel):
    """Generation failed; the client should use its built-in level."""
    error: str
    fallback: bool = True


class AdaptiveLevelResponse(CamelModel):
    difficulty: int
    level_data: LevelData


class AdaptiveLevelErrorResponse(LevelErrorResponse):
    difficulty: int


class DialogResponse(CamelModel):
    dialog: str
    cached: bool = False


class DialogErrorResponse(CamelModel):
    """Generation failed; dialog carries a family-safe fallback line."""
    error: str
    dialog: str


class DifficultyResponse(CamelModel):
    difficulty: int
    description: str


class HealthResponse(CamelModel):
    status: str = "ok"
    has_api_key: bool
    timestamp: str
