"""
Gateway - Orchestrates every request to the generative backend.

For each request the gateway:
1. Applies per-caller admission control
2. Rejects malformed prompts locally
3. Serves dialog from cache when possible
4. Calls the backend once (no retries)
5. Extracts and validates generated levels

Rate limiting and bad input raise (RateLimited, InvalidInput). Anything that
goes wrong after the backend is called becomes a fallback result instead:
callers never see a partially validated level.
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass, field, replace
from enum import Enum
import hashlib
import logging
import time
from typing import Any, Callable, Optional

from ..errors import InvalidInput, RateLimited, ParseError, ValidationFailure, UpstreamError
from ..level_schema import LevelDocument, extract_document, ensure_valid_level
from ..prompting import (
    PerformanceStats,
    next_difficulty,
    sanitize_input,
    build_level_prompt,
    build_npc_dialog_prompt,
)
from .admission import AdmissionTable
from .backend import GenerativeBackend
from .cache import DialogCache
from .config import GatewayConfig


logger = logging.getLogger(__name__)

LEVEL_FAILURE_MESSAGE = "Failed to generate level"
DIALOG_FAILURE_MESSAGE = "Failed to generate dialog"
FALLBACK_DIALOG = "Mama mia! I seem to have lost my words. Try again!"
MAX_NPC_NAME_LENGTH = 40


class GenerationStatus(Enum):
    """Outcome of a generation request."""
    SUCCESS = "success"
    CACHED = "cached"  # Served from the dialog cache
    PARSE_ERROR = "parse_error"
    VALIDATION_FAILED = "validation_failed"
    UPSTREAM_ERROR = "upstream_error"


@dataclass(frozen=True)
class LevelResult:
    """
    Result of a level generation request.

    Either level is set (success) or error/fallback are set. Validator
    diagnostics are kept for logging only and never sent to the caller.
    """
    status: GenerationStatus
    level: LevelDocument | None = None
    error: str | None = None
    fallback: bool = False
    diagnostics: list[str] = field(default_factory=list)
    difficulty: int | None = None

    @property
    def ok(self) -> bool:
        return self.level is not None

    @classmethod
    def failed(cls, status: GenerationStatus, diagnostics: list[str] | None = None) -> "LevelResult":
        return cls(
            status=status,
            error=LEVEL_FAILURE_MESSAGE,
            fallback=True,
            diagnostics=diagnostics or [],
        )

    def to_payload(self) -> dict[str, Any]:
        """Wire form: {levelData} or {error, fallback}."""
        if self.level is not None:
            payload: dict[str, Any] = {"levelData": self.level.to_dict()}
        else:
            payload = {"error": self.error, "fallback": self.fallback}
        if self.difficulty is not None:
            payload["difficulty"] = self.difficulty
        return payload


@dataclass(frozen=True)
class DialogResult:
    """
    Result of a dialog request.
    """
    status: GenerationStatus
    dialog: str
    cached: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, Any]:
        """Wire form: {dialog, cached} or {error, dialog}."""
        if self.error is not None:
            return {"error": self.error, "dialog": self.dialog}
        return {"dialog": self.dialog, "cached": self.cached}


class Gateway:
    """
    Externally facing orchestrator for level and dialog generation.

    Usage:
        gateway = Gateway(GeminiBackend(api_key=key))
        result = await gateway.generate_level(prompt, caller_id="10.0.0.1")
        if result.ok:
            level = result.level
    """

    def __init__(
        self,
        backend: GenerativeBackend,
        config: Optional[GatewayConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.backend = backend
        self.config = config or GatewayConfig()
        self.admission = AdmissionTable(
            window_seconds=self.config.rate_limit_window,
            max_requests=self.config.max_requests,
            clock=clock,
        )
        self.cache = DialogCache(capacity=self.config.cache_capacity)
        self._clock = clock
        self._last_sweep: Optional[float] = None

    # =========================================================================
    # Request operations
    # =========================================================================

    async def generate_level(self, prompt: Any, caller_id: Any) -> LevelResult:
        """
        Generate, extract and validate a level. Levels are never cached.

        Raises:
            RateLimited: caller exceeded its admission window
            InvalidInput: prompt is not acceptable text
        """
        self._admit(caller_id)
        self._check_prompt(prompt)

        try:
            raw = await self._complete(prompt)
            document = extract_document(raw)
            level = ensure_valid_level(document)
        except UpstreamError as e:
            logger.warning("Level generation failed upstream: %s", e)
            return LevelResult.failed(GenerationStatus.UPSTREAM_ERROR)
        except ParseError as e:
            logger.warning("Level generation returned unparseable output: %s", e)
            return LevelResult.failed(GenerationStatus.PARSE_ERROR)
        except ValidationFailure as e:
            logger.info("Generated level rejected: %s", "; ".join(e.errors))
            return LevelResult.failed(GenerationStatus.VALIDATION_FAILED, e.errors)

        return LevelResult(status=GenerationStatus.SUCCESS, level=level)

    async def generate_dialog(
        self,
        prompt: Any,
        cache_key: Optional[str],
        caller_id: Any,
    ) -> DialogResult:
        """
        Generate NPC dialog, serving and filling the cache when keyed.

        Raises:
            RateLimited: caller exceeded its admission window
            InvalidInput: prompt or cache key is not acceptable text
        """
        self._admit(caller_id)
        self._check_prompt(prompt)
        if cache_key is not None and not isinstance(cache_key, str):
            raise InvalidInput("cacheKey must be a string")

        if cache_key:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return DialogResult(status=GenerationStatus.CACHED, dialog=cached, cached=True)

        try:
            raw = await self._complete(prompt)
        except UpstreamError as e:
            logger.warning("Dialog generation failed upstream: %s", e)
            return DialogResult(
                status=GenerationStatus.UPSTREAM_ERROR,
                dialog=FALLBACK_DIALOG,
                error=DIALOG_FAILURE_MESSAGE,
            )

        dialog = raw.strip()
        if cache_key:
            evicted = self.cache.put(cache_key, dialog)
            if evicted:
                logger.debug("Evicted %d dialog cache entries", len(evicted))

        return DialogResult(status=GenerationStatus.SUCCESS, dialog=dialog, cached=False)

    async def generate_adaptive_level(
        self,
        stats: PerformanceStats,
        level_number: int,
        caller_id: Any,
    ) -> LevelResult:
        """
        Pick the next difficulty from stats and generate a level for it.
        """
        difficulty = next_difficulty(stats)
        prompt = build_level_prompt(difficulty, level_number)
        result = await self.generate_level(prompt, caller_id)
        return replace(result, difficulty=difficulty)

    async def converse(
        self,
        npc_name: Any,
        player_message: Any,
        level_number: int,
        caller_id: Any,
    ) -> DialogResult:
        """
        Sanitize player text, compose the dialog prompt and generate a reply.

        Raises:
            InvalidInput: nothing usable is left after sanitization
        """
        name = sanitize_input(npc_name, MAX_NPC_NAME_LENGTH)
        message = sanitize_input(player_message)
        if not name:
            raise InvalidInput("NPC name is required")
        if not message:
            raise InvalidInput("Player message is empty after sanitization")
        if isinstance(level_number, bool) or not isinstance(level_number, int) or level_number < 1:
            raise InvalidInput("Level number must be a positive integer")

        prompt = build_npc_dialog_prompt(name, message, level_number)
        return await self.generate_dialog(
            prompt,
            self._dialog_cache_key(name, message, level_number),
            caller_id,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _admit(self, caller_id: Any):
        identity = str(caller_id) if caller_id else "unknown"
        if len(self.admission) > self.config.sweep_threshold:
            self._maybe_sweep()
        if not self.admission.check_and_increment(identity):
            logger.debug("Request rejected by admission control")
            raise RateLimited()

    def _maybe_sweep(self):
        """Sweep stale windows at most once per admission window."""
        now = self._clock()
        if self._last_sweep is not None and now - self._last_sweep <= self.config.rate_limit_window:
            return
        self._last_sweep = now
        removed = self.admission.sweep_expired()
        logger.debug("Swept %d expired admission windows", removed)

    def _check_prompt(self, prompt: Any):
        if not prompt or not isinstance(prompt, str):
            raise InvalidInput("Prompt is required")
        if len(prompt) > self.config.max_prompt_length:
            raise InvalidInput("Prompt too long")

    async def _complete(self, prompt: str) -> str:
        """Single backend attempt bounded by the configured timeout."""
        try:
            return await asyncio.wait_for(
                self.backend.complete(prompt),
                timeout=self.config.backend_timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamError("Backend call timed out") from e
        except asyncio.CancelledError as e:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                # The caller itself is being cancelled
                raise
            raise UpstreamError("Backend call was cancelled") from e
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(f"Backend call failed: {type(e).__name__}") from e

    @staticmethod
    def _dialog_cache_key(name: str, message: str, level_number: int) -> str:
        """Stable key for a sanitized conversation turn."""
        content = f"{name}|{level_number}|{message.lower()}".encode("utf-8")
        return "npc:" + hashlib.sha256(content).hexdigest()[:16]
