"""Fluent run context for testing a single generator.

``RunContext`` hides the setup needed to test a generator: it collects
arguments, options, prompt answers and dependency generators through a
chainable API, waits for asynchronous preparation (such as entering a clean
working directory) and only then builds an environment, instantiates the
generator and runs it.

Quick usage::

    from genharness import RunContext

    async def test_app(tmp_path):
        generator = await (
            RunContext("webapp:app")
            .in_dir(tmp_path / "out")
            .with_arguments("my-app --force")
            .with_prompt({"title": "My App"})
        )
        assert generator.options["skip-install"] is True

Readiness is a barrier over holds. Construction acquires a "configuring"
hold whose release is scheduled with ``loop.call_soon``, so every
configuration call chained synchronously after the constructor is applied
before the first readiness check. :meth:`RunContext.start` releases it
explicitly. Each asynchronous prerequisite acquires one more hold. The
generator is created the first time the counter reaches zero, and never
again.
"""

from __future__ import annotations

import asyncio
import tempfile
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from .barrier import HoldBarrier, HoldRelease
from .config import HarnessConfig
from .environment import Environment
from .errors import ContextLockedError
from .helpers import mock_prompt, test_directory
from .utils import format_duration, print_error, print_success, print_trace, print_warning

EndCallback = Callable[[BaseException | None], Any]

EVENTS = ("ready", "end")


class RunContext:
    """Configure, then run, one generator under test.

    Args:
        generator: Namespace string resolved through the environment, or a
            generator factory registered under ``config.default_namespace``.
        config: Harness configuration. Defaults to ``HarnessConfig()``.
        env_factory: Zero-argument callable returning a fresh environment.
            Called once, at transition time.
        auto_start: Schedule the initial readiness check on the running event
            loop. When ``False`` (or when no loop is running) the caller must
            call :meth:`start` or await the context.

    Attributes:
        env: The environment, ``None`` until the generator is created.
        generator: The generator instance, ``None`` until created.
        started: ``True`` once the generator has been created.
    """

    def __init__(
        self,
        generator: Any,
        *,
        config: HarnessConfig | None = None,
        env_factory: Callable[[], Environment] | None = None,
        auto_start: bool = True,
    ) -> None:
        self.config = config or HarnessConfig()
        self.generator_descriptor = generator
        self.args: list[str] = []
        self.options: dict[str, Any] = {}
        self.answers: dict[str, Any] | None = None
        self.dependencies: list[Any] = []
        self.target_dir: Path | None = None

        self.started = False
        self.env: Any = None
        self.generator: Any = None

        self._env_factory = env_factory or (lambda: Environment(config=self.config))
        self._end_callback: EndCallback | None = None
        self._listeners: dict[str, list[Callable[[Any], Any]]] = {event: [] for event in EVENTS}
        self._barrier = HoldBarrier(on_release=self._on_ready)
        self._finished = asyncio.Event()
        self._error: BaseException | None = None
        self._started_at = 0.0

        self._configuring = self._hold_exec("configuring")
        if auto_start:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                loop.call_soon(self.start)

    def __repr__(self) -> str:
        state = "running" if self.started else "configuring"
        return (
            f"<RunContext {self.generator_descriptor!r} {state} "
            f"pending={self._barrier.pending}>"
        )

    # ------------------------------------------------------------------
    # Holds & readiness
    # ------------------------------------------------------------------

    @property
    def pending_holds(self) -> int:
        """Number of prerequisites still outstanding."""
        return self._barrier.pending

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def _trace(self, message: str) -> None:
        if self.config.verbose:
            print_trace(f"[run-context] {message}")

    def _hold_exec(self, label: str = "") -> HoldRelease:
        """Hold the transition until the returned handle is called.

        Raises:
            ContextLockedError: If the generator has already been created.
        """
        if self.started:
            raise ContextLockedError("_hold_exec")
        release = self._barrier.acquire(label)
        self._trace(f"hold acquired: {release.label} (pending={self._barrier.pending})")
        return release

    def start(self) -> "RunContext":
        """Signal that configuration is complete.

        Runs the generator immediately when no other hold is pending.
        Calling it more than once is harmless.
        """
        if not self._configuring.released:
            self._configuring()
        return self

    def _on_ready(self) -> None:
        if not self._barrier.is_clear or self.started:
            return
        self.started = True
        self._barrier.close()
        self._started_at = time.monotonic()
        try:
            self._launch()
        except Exception as exc:
            self._finish(exc)
            raise

    def _launch(self) -> None:
        self.env = self._env_factory()

        for dependency in self.dependencies:
            if isinstance(dependency, (tuple, list)):
                stub, namespace = dependency
                self.env.register_stub(stub, namespace)
            else:
                self.env.register(dependency)

        if isinstance(self.generator_descriptor, str):
            namespace = self.env.namespace(self.generator_descriptor)
            self.env.register(self.generator_descriptor)
        else:
            namespace = self.config.default_namespace
            self.env.register_stub(self.generator_descriptor, namespace)

        self._trace(f"creating generator '{namespace}'")
        self.generator = self.env.create(namespace)
        mock_prompt(self.generator, self.answers)

        self.generator.args = self.args
        self.generator.arguments = self.args
        self.generator.options = {self.config.skip_install_option: True, **self.options}

        self._emit("ready", self.generator)
        self.generator.run(self._on_generator_end)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def _on_generator_end(self, error: BaseException | None) -> None:
        self._report(error)

    def _on_directory_done(self, task: asyncio.Task[Path]) -> None:
        if task.cancelled():
            if self.config.verbose:
                print_warning(f"[run-context] preparing {self.target_dir} was cancelled")
            self._report(asyncio.CancelledError(f"Preparing {self.target_dir} was cancelled"))
            return
        error = task.exception()
        if error is not None:
            self._report(error)

    def _report(self, error: BaseException | None) -> None:
        if self.finished:
            return
        outcome = error
        try:
            if self._end_callback is not None:
                self._end_callback(error)
        except Exception as exc:
            # The end callback usually holds the test's assertions.
            outcome = exc
        try:
            self._emit("end", error)
        except Exception as exc:
            if outcome is error:
                outcome = exc
        self._finish(outcome)

    def _finish(self, error: BaseException | None) -> None:
        if self.finished:
            return
        self._error = error
        self._finished.set()
        if not self.config.verbose:
            return
        elapsed = format_duration(time.monotonic() - self._started_at) if self.started else "-"
        if error is None:
            print_success(f"[run-context] {self.generator_descriptor!r} finished in {elapsed}")
        else:
            print_error(f"[run-context] {self.generator_descriptor!r} failed: {error}")

    async def wait(self) -> Any:
        """Start if needed, wait for the generator to finish, and return it.

        Raises:
            Exception: Whatever failed first: directory preparation, the
                transition, the generator itself, or the end callback.
        """
        self.start()
        await self._finished.wait()
        if self._error is not None:
            raise self._error
        return self.generator

    def __await__(self):
        return self.wait().__await__()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: str, handler: Callable[[Any], Any]) -> "RunContext":
        """Subscribe *handler* to ``"ready"`` (generator) or ``"end"`` (error or ``None``)."""
        if event not in self._listeners:
            raise ValueError(f"Unknown event '{event}'. Expected one of: {', '.join(EVENTS)}")
        if event == "ready":
            self._ensure_configurable("on")
        self._listeners[event].append(handler)
        return self

    def _emit(self, event: str, payload: Any) -> None:
        for handler in list(self._listeners[event]):
            handler(payload)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def _ensure_configurable(self, operation: str) -> None:
        if self.started:
            raise ContextLockedError(operation)

    @staticmethod
    def _require_loop(operation: str) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError(f"{operation}() must be called from a running event loop.") from None

    def in_dir(self, path: str | Path) -> "RunContext":
        """Clean *path*, then change directory into it before running.

        Prefer an absolute path: relative paths resolve against the working
        directory at the time preparation runs.
        """
        self._ensure_configurable("in_dir")
        self._require_loop("in_dir")
        self.target_dir = Path(path)
        release = self._hold_exec(f"in_dir:{path}")
        task = test_directory(path, release)
        task.add_done_callback(self._on_directory_done)
        return self

    def in_tmp_dir(self) -> "RunContext":
        """Run inside a fresh temporary directory."""
        self._ensure_configurable("in_tmp_dir")
        self._require_loop("in_tmp_dir")
        return self.in_dir(tempfile.mkdtemp(prefix=self.config.tmp_dir_prefix))

    def with_arguments(self, args: str | Sequence[str]) -> "RunContext":
        """Provide command-line arguments, as a list or a space separated string."""
        self._ensure_configurable("with_arguments")
        self.args = args.split() if isinstance(args, str) else list(args)
        return self

    def with_options(self, options: dict[str, Any] | None) -> "RunContext":
        """Provide options (e.g. ``{"skip-install": False}``)."""
        self._ensure_configurable("with_options")
        self.options = dict(options or {})
        return self

    def with_prompt(self, answers: dict[str, Any] | None) -> "RunContext":
        """Answer prompt questions with *answers* instead of asking."""
        self._ensure_configurable("with_prompt")
        self.answers = dict(answers) if answers is not None else None
        return self

    def with_generators(self, dependencies: Sequence[Any] | None) -> "RunContext":
        """Provide dependency generators.

        Each entry is a namespace string or factory registered under its own
        namespace, or a ``(factory, namespace)`` pair registered as a stub::

            context.with_generators([
                "webapp:common",
                (create_dummy_generator(), "karma:app"),
            ])
        """
        self._ensure_configurable("with_generators")
        self.dependencies = list(dependencies or [])
        return self

    def on_end(self, callback: EndCallback) -> "RunContext":
        """Call *callback* with the generator's error (or ``None``) once it finishes."""
        self._ensure_configurable("on_end")
        self._end_callback = callback
        return self
