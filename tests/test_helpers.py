"""Tests for the test helpers (genharness.helpers).

Covers:
- test_directory(): clean, create, chdir, then callback
- DirectoryPreparationError on failure, callback never called
- mock_prompt(): configured answers, defaults, single-question form
- create_dummy_generator() and run()
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from genharness import (
    DirectoryPreparationError,
    Generator,
    RunContext,
    create_dummy_generator,
    mock_prompt,
    run,
    test_directory,
)

pytestmark = pytest.mark.unit


class TestTestDirectory:
    @pytest.mark.asyncio
    async def test_creates_and_enters_directory(self, tmp_path: Path):
        target = tmp_path / "out" / "nested"
        on_done = MagicMock()

        result = await test_directory(target, on_done)

        assert result == target.resolve()
        assert target.is_dir()
        assert Path(os.getcwd()).resolve() == target.resolve()
        on_done.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_cleans_existing_contents(self, tmp_path: Path):
        target = tmp_path / "out"
        target.mkdir()
        (target / "stale.txt").write_text("old", encoding="utf-8")

        await test_directory(target, lambda: None)

        assert list(target.iterdir()) == []

    @pytest.mark.asyncio
    async def test_callback_runs_after_chdir(self, tmp_path: Path):
        target = tmp_path / "out"
        seen: list[Path] = []

        await test_directory(target, lambda: seen.append(Path.cwd().resolve()))

        assert seen == [target.resolve()]

    @pytest.mark.asyncio
    async def test_failure_raises_and_skips_callback(self, tmp_path: Path, monkeypatch):
        def boom(path: Path) -> None:
            raise PermissionError("read-only")

        monkeypatch.setattr("genharness.helpers._reset_directory", boom)
        on_done = MagicMock()

        with pytest.raises(DirectoryPreparationError, match="read-only") as exc_info:
            await test_directory(tmp_path / "out", on_done)

        assert exc_info.value.path == str((tmp_path / "out").resolve())
        on_done.assert_not_called()

    @pytest.mark.asyncio
    async def test_refuses_filesystem_root(self):
        with pytest.raises(DirectoryPreparationError, match="root"):
            await test_directory(Path(Path.cwd().anchor), lambda: None)


class TestMockPrompt:
    @pytest.mark.asyncio
    async def test_answers_and_defaults(self):
        generator = mock_prompt(Generator(), {"title": "Demo"})
        answers = await generator.prompt([
            {"name": "title", "default": "App"},
            {"name": "docker", "default": True},
            {"name": "license"},
        ])
        assert answers == {"title": "Demo", "docker": True, "license": None}
        assert generator.answers == answers

    @pytest.mark.asyncio
    async def test_single_question(self):
        generator = mock_prompt(Generator())
        assert await generator.prompt({"name": "title", "default": "x"}) == {"title": "x"}

    @pytest.mark.asyncio
    async def test_works_on_plain_objects(self):
        target = MagicMock(spec=["prompt"])
        mock_prompt(target, {"a": 1})
        assert await target.prompt([{"name": "a"}]) == {"a": 1}


class TestGenerators:
    @pytest.mark.asyncio
    async def test_dummy_generator_runs(self):
        dummy = create_dummy_generator("webapp:dummy")
        received = []

        await dummy().run(received.append)

        assert issubclass(dummy, Generator)
        assert dummy.namespace == "webapp:dummy"
        assert received == [None]

    def test_dummy_generators_are_distinct(self):
        assert create_dummy_generator() is not create_dummy_generator()

    def test_run_builds_context(self):
        dummy = create_dummy_generator()
        context = run(dummy, auto_start=False)
        assert isinstance(context, RunContext)
        assert context.generator_descriptor is dummy
