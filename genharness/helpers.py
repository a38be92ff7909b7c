"""Test helpers used by run contexts.

- :func:`test_directory` cleans a directory, creates it, and moves the
  process into it before signalling completion.
- :func:`mock_prompt` makes a generator's prompt answer immediately.
- :func:`create_dummy_generator` builds a no-op generator for stubbing
  dependencies.
- :func:`run` is the entry point for building a ``RunContext``.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import DirectoryPreparationError
from .generator import Generator

if TYPE_CHECKING:
    from .run_context import RunContext


# ---------------------------------------------------------------------------
# Working directory
# ---------------------------------------------------------------------------


def _reset_directory(path: Path) -> None:
    if path == Path(path.anchor):
        raise DirectoryPreparationError(
            f"Refusing to clean filesystem root: {path}", path=str(path)
        )
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


async def _prepare_directory(path: Path, on_done: Callable[[], Any]) -> Path:
    target = path.resolve()
    try:
        await asyncio.to_thread(_reset_directory, target)
        os.chdir(target)
    except OSError as exc:
        raise DirectoryPreparationError(
            f"Could not prepare test directory {target}: {exc}", path=str(target)
        ) from exc
    on_done()
    return target


def test_directory(path: str | Path, on_done: Callable[[], Any]) -> asyncio.Task[Path]:
    """Clean *path*, recreate it, ``chdir`` into it, then call ``on_done()``.

    Relative paths are resolved against the current working directory at
    the moment the task runs. Prefer absolute paths.

    Args:
        path: Directory to prepare. Existing contents are deleted.
        on_done: Called with no arguments once the process is inside *path*.

    Returns:
        The task doing the work. On failure the task raises
        ``DirectoryPreparationError`` and ``on_done`` is never called.
    """
    loop = asyncio.get_running_loop()
    return loop.create_task(_prepare_directory(Path(path), on_done))


test_directory.__test__ = False  # type: ignore[attr-defined]


# ---------------------------------------------------------------------------
# Prompt mocking
# ---------------------------------------------------------------------------


def mock_prompt(generator: Any, answers: dict[str, Any] | None = None) -> Any:
    """Replace ``generator.prompt`` with a coroutine answering from *answers*.

    Questions without a configured answer resolve to their ``default`` (or
    ``None``). The real prompt is never reached, so tests never block on
    input.

    Returns:
        The same generator, for chaining.
    """
    canned = dict(answers or {})

    async def prompt(questions: list[dict[str, Any]] | dict[str, Any]) -> dict[str, Any]:
        if isinstance(questions, dict):
            questions = [questions]
        result = {
            question["name"]: canned.get(question["name"], question.get("default"))
            for question in questions
        }
        if isinstance(getattr(generator, "answers", None), dict):
            generator.answers.update(result)
        return result

    generator.prompt = prompt
    return generator


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


def create_dummy_generator(namespace: str | None = None) -> type[Generator]:
    """Return a fresh ``Generator`` subclass that does nothing when run."""

    class DummyGenerator(Generator):
        async def execute(self) -> None:
            return None

    DummyGenerator.namespace = namespace
    return DummyGenerator


def run(generator: Any, **kwargs: Any) -> "RunContext":
    """Build a ``RunContext`` for *generator* (namespace string or factory).

    Keyword arguments are forwarded to ``RunContext``.
    """
    from .run_context import RunContext

    return RunContext(generator, **kwargs)
