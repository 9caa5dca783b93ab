"""
Pytest fixtures for Warp tests.
"""

import json

import pytest

from ..errors import UpstreamError
from ..gateway import Gateway, GatewayConfig, GenerativeBackend


class FakeBackend(GenerativeBackend):
    """Backend returning scripted completions and recording prompts."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if not self.responses:
            raise UpstreamError("No scripted response left")
        if len(self.responses) == 1:
            return self.responses[0]
        return self.responses.pop(0)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_level(**overrides) -> dict:
    """A small level that passes validation."""
    level = {
        "platforms": [
            {"x": 0, "y": 0, "z": 0, "width": 20, "height": 1, "depth": 4, "type": "grass"},
            {"x": 16, "y": 1, "z": 0, "width": 6, "height": 1, "depth": 4, "type": "brick"},
            {"x": 26, "y": 2, "z": 0, "width": 6, "height": 1, "depth": 4, "type": "stone"},
        ],
        "coins": [
            {"x": 5, "y": 2, "z": 0, "collected": False},
            {"x": 16, "y": 3, "z": 0, "collected": False},
        ],
        "enemies": [
            {"x": 16, "y": 2, "z": 0, "type": "goomba", "behavior": "patrol"},
        ],
        "difficulty": 3,
        "spawnPoint": {"x": 2, "y": 2, "z": 0},
        "goalPosition": {"x": 28, "y": 3, "z": 0},
    }
    level.update(overrides)
    return level


@pytest.fixture
def level_dict() -> dict:
    return make_level()


@pytest.fixture
def level_json(level_dict) -> str:
    return json.dumps(level_dict)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> GatewayConfig:
    return GatewayConfig(rate_limit_window=10, max_requests=5, cache_capacity=3)


@pytest.fixture
def backend(level_json) -> FakeBackend:
    return FakeBackend(responses=[level_json])


@pytest.fixture
def gateway(backend, config, clock) -> Gateway:
    return Gateway(backend, config=config, clock=clock)
