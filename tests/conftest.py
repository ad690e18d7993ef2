from __future__ import annotations

import pytest

from tests._fixtures.github import FakeGitHub


@pytest.fixture
def github() -> FakeGitHub:
    """Provide an empty GitHub double; tests seed files and raw URLs as needed."""
    return FakeGitHub()


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
