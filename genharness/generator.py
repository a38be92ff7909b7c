"""Base class for generators driven by the harness.

A generator receives command-line style ``args`` and an ``options`` mapping,
may ask the user questions through :meth:`Generator.prompt`, and does its
work in :meth:`Generator.execute`. :meth:`Generator.run` schedules that work
on the running event loop and reports the outcome to a finish callback.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, ClassVar

from rich.prompt import Confirm, Prompt

from .utils import console

FinishCallback = Callable[[BaseException | None], Any]


class Generator:
    """A scaffolding generator.

    Subclasses set ``namespace`` and override :meth:`execute`::

        class AppGenerator(Generator):
            namespace = "webapp:app"

            async def execute(self) -> None:
                answers = await self.prompt([{"name": "title", "default": "App"}])
                ...
    """

    namespace: ClassVar[str | None] = None

    def __init__(
        self,
        args: list[str] | None = None,
        options: dict[str, Any] | None = None,
        *,
        env: Any = None,
        namespace: str | None = None,
    ) -> None:
        self.args: list[str] = list(args or [])
        self.options: dict[str, Any] = dict(options or {})
        self.env = env
        self.resolved_namespace = namespace or type(self).namespace
        self.answers: dict[str, Any] = {}
        self._task: asyncio.Task[None] | None = None

    @property
    def arguments(self) -> list[str]:
        """Alias of ``args``."""
        return self.args

    @arguments.setter
    def arguments(self, value: list[str]) -> None:
        self.args = value

    # -- Interaction -------------------------------------------------------

    async def prompt(self, questions: list[dict[str, Any]]) -> dict[str, Any]:
        """Ask *questions* interactively and return ``{name: answer}``.

        Each question is a dict with ``name`` and optional ``message``,
        ``default`` and ``type`` (``"confirm"`` for yes/no questions).
        """
        answers: dict[str, Any] = {}
        for question in questions:
            name = question["name"]
            message = question.get("message", name)
            default = question.get("default")
            if question.get("type") == "confirm":
                answers[name] = await asyncio.to_thread(
                    Confirm.ask, message, default=bool(default), console=console
                )
            else:
                answers[name] = await asyncio.to_thread(
                    Prompt.ask, message, default=default, console=console
                )
        self.answers.update(answers)
        return answers

    # -- Execution ---------------------------------------------------------

    async def execute(self) -> None:
        """Do the generator's work. The base implementation does nothing."""

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run(self, on_finish: FinishCallback | None = None) -> asyncio.Task[None]:
        """Schedule :meth:`execute` on the running loop.

        Args:
            on_finish: Called once with the exception raised by ``execute``,
                or ``None`` on success.

        Returns:
            The task driving the generator.

        Raises:
            RuntimeError: If the generator has already been run, or no event
                loop is running.
        """
        if self._task is not None:
            raise RuntimeError(f"Generator '{self.resolved_namespace}' has already been run.")
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(
            self._run(on_finish), name=f"generator:{self.resolved_namespace}"
        )
        return self._task

    async def _run(self, on_finish: FinishCallback | None) -> None:
        error: BaseException | None = None
        try:
            await self.execute()
        except Exception as exc:
            error = exc
        except BaseException as exc:
            # Cancellation still reaches on_finish; the task must end cancelled.
            if on_finish is not None:
                on_finish(exc)
            raise
        if on_finish is not None:
            on_finish(error)
