"""
API Module - Game client interface.

Exposes the gateway via REST API. The game client:
1. Requests levels (raw prompt or adaptive from performance stats)
2. Requests NPC dialog (raw prompt or sanitized player chat)
3. Falls back to built-in content when generation fails

All state is process-scoped. No accounts, no persistence.
"""

from .schemas import (
    # Requests
    GenerateLevelRequest,
    NpcDialogRequest,
    AdaptiveLevelRequest,
    NpcChatRequest,
    DifficultyRequest,
    # Responses
    LevelResponse,
    LevelErrorResponse,
    DialogResponse,
    DialogErrorResponse,
    DifficultyResponse,
    HealthResponse,
    ErrorResponse,
    # Shared
    LevelData,
    PerformanceStatsInfo,
)
from .app import create_app

__all__ = [
    # Requests
    "GenerateLevelRequest",
    "NpcDialogRequest",
    "AdaptiveLevelRequest",
    "NpcChatRequest",
    "DifficultyRequest",
    # Responses
    "LevelResponse",
    "LevelErrorResponse",
    "DialogResponse",
    "DialogErrorResponse",
    "DifficultyResponse",
    "HealthResponse",
    "ErrorResponse",
    # Shared
    "LevelData",
    "PerformanceStatsInfo",
    "create_app",
]
