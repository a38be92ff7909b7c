"""Per-context generator registry.

An ``Environment`` maps namespaces to generator factories and instantiates
them on demand. Each ``RunContext`` builds its own environment at transition
time, so registrations never leak between tests.

Namespace strings are resolved through an explicit ``lookup`` mapping first
and then through installed entry points::

    [project.entry-points."genharness.generators"]
    "webapp:app" = "my_generators.webapp:AppGenerator"
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from importlib.metadata import entry_points
from typing import Any

from .config import HarnessConfig
from .errors import GeneratorNotFoundError

GeneratorFactory = Callable[..., Any]


class Environment:
    """Registry and factory for generators.

    Attributes:
        config: Harness configuration (entry-point group lives here).
        lookup: Namespace -> factory table consulted by :meth:`register`
            before entry points.
    """

    def __init__(
        self,
        lookup: Mapping[str, GeneratorFactory] | None = None,
        config: HarnessConfig | None = None,
    ) -> None:
        self.config = config or HarnessConfig()
        self.lookup: dict[str, GeneratorFactory] = dict(lookup or {})
        self._registry: dict[str, GeneratorFactory] = {}

    # -- Namespaces --------------------------------------------------------

    def namespace(self, descriptor: str | GeneratorFactory) -> str:
        """Return the namespace a descriptor registers under.

        A string descriptor *is* its namespace. A factory declares its own
        through a ``namespace`` attribute.
        """
        if isinstance(descriptor, str):
            namespace = descriptor.strip()
            if not namespace:
                raise GeneratorNotFoundError("Generator namespace must not be empty.")
            return namespace

        namespace = getattr(descriptor, "namespace", None)
        if not isinstance(namespace, str) or not namespace:
            raise GeneratorNotFoundError(
                f"{descriptor!r} does not declare a namespace; "
                "register it with register_stub() instead."
            )
        return namespace

    # -- Registration ------------------------------------------------------

    def register(self, descriptor: str | GeneratorFactory) -> str:
        """Register a generator under its natural namespace.

        Args:
            descriptor: Namespace string, or a factory declaring ``namespace``.

        Returns:
            The namespace the generator was registered under.

        Raises:
            GeneratorNotFoundError: If a namespace string cannot be resolved.
        """
        namespace = self.namespace(descriptor)
        if isinstance(descriptor, str):
            factory = self._resolve(namespace)
        else:
            factory = descriptor
        self._registry[namespace] = factory
        return namespace

    def register_stub(self, factory: GeneratorFactory, namespace: str) -> str:
        """Register *factory* under an explicit *namespace*, replacing any previous entry."""
        if not callable(factory):
            raise TypeError(f"Stub for '{namespace}' must be callable, got {factory!r}")
        if not namespace:
            raise GeneratorNotFoundError("Stub namespace must not be empty.")
        self._registry[namespace] = factory
        return namespace

    def _resolve(self, namespace: str) -> GeneratorFactory:
        if namespace in self.lookup:
            return self.lookup[namespace]

        for ep in entry_points(group=self.config.entry_point_group):
            if ep.name == namespace:
                return ep.load()

        raise GeneratorNotFoundError(
            f"No generator found for namespace '{namespace}' "
            f"(searched lookup table and entry points '{self.config.entry_point_group}').",
            namespace=namespace,
        )

    # -- Queries -----------------------------------------------------------

    def is_registered(self, namespace: str) -> bool:
        return namespace in self._registry

    def get(self, namespace: str) -> GeneratorFactory:
        """Return the factory registered for *namespace*."""
        try:
            return self._registry[namespace]
        except KeyError:
            raise GeneratorNotFoundError(
                f"Namespace '{namespace}' is not registered. "
                f"Registered: {', '.join(sorted(self._registry)) or '(none)'}",
                namespace=namespace,
            ) from None

    @property
    def namespaces(self) -> list[str]:
        return list(self._registry)

    # -- Instantiation -----------------------------------------------------

    def create(
        self,
        namespace: str,
        args: list[str] | None = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        """Instantiate the generator registered under *namespace*.

        The factory is called as ``factory(args, options, env=self,
        namespace=namespace)``.
        """
        factory = self.get(namespace)
        return factory(list(args or []), dict(options or {}), env=self, namespace=namespace)
