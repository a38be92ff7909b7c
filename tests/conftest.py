"""Shared pytest fixtures for the genharness test suite.

Provides reusable fixtures for:
- Isolating the process working directory per test
- Recording generators that log their lifecycle
- Environments pre-loaded with namespace lookups
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from genharness import Environment, Generator, HarnessConfig


# ---------------------------------------------------------------------------
# Working directory
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test from its own tmp dir; the original cwd is restored afterwards.

    ``in_dir`` changes the process working directory, so this keeps tests
    from leaking their cwd into each other.
    """
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------

@pytest.fixture
def event_log() -> list[tuple[str, Any]]:
    """Ordered list of lifecycle events recorded by ``recording_generator``."""
    return []


@pytest.fixture
def recording_generator(event_log: list[tuple[str, Any]]) -> type[Generator]:
    """A generator class that appends ``created`` / ``executed`` to ``event_log``."""

    class RecordingGenerator(Generator):
        namespace = "test:recording"

        def __init__(self, *args: Any, **kwargs: Any) -> None:
            super().__init__(*args, **kwargs)
            event_log.append(("created", self))

        async def execute(self) -> None:
            event_log.append(("executed", self))

    return RecordingGenerator


@pytest.fixture
def failing_generator() -> type[Generator]:
    """A generator whose ``execute`` raises ``ValueError``."""

    class FailingGenerator(Generator):
        namespace = "test:failing"

        async def execute(self) -> None:
            raise ValueError("template missing")

    return FailingGenerator


# ---------------------------------------------------------------------------
# Environments
# ---------------------------------------------------------------------------

@pytest.fixture
def harness_config() -> HarnessConfig:
    return HarnessConfig()


@pytest.fixture
def env_factory(recording_generator: type[Generator], harness_config: HarnessConfig):
    """Factory producing environments that resolve ``my:generator``."""
    created: list[Environment] = []

    def factory() -> Environment:
        env = Environment(
            lookup={
                "my:generator": recording_generator,
                "test:recording": recording_generator,
            },
            config=harness_config,
        )
        created.append(env)
        return env

    factory.created = created  # type: ignore[attr-defined]
    return factory
