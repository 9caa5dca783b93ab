"""
Gateway - Mediates all traffic to the generative backend.

The gateway:
1. Admits requests per caller (fixed window)
2. Caches NPC dialog by key (bounded FIFO)
3. Calls the backend once per request
4. Routes level output through extraction and validation

Admission and cache state are process-wide and live for the process
lifetime. Nothing is persisted.
"""

from .admission import AdmissionTable, AdmissionWindow
from .backend import GenerativeBackend, GeminiBackend
from .cache import DialogCache
from .config import GatewayConfig
from .gateway import (
    Gateway,
    GenerationStatus,
    LevelResult,
    DialogResult,
    FALLBACK_DIALOG,
)

__all__ = [
    "AdmissionTable",
    "AdmissionWindow",
    "GenerativeBackend",
    "GeminiBackend",
    "DialogCache",
    "GatewayConfig",
    "Gateway",
    "GenerationStatus",
    "LevelResult",
    "DialogResult",
    "FALLBACK_DIALOG",
]
