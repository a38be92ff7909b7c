"""Exception taxonomy for the generator test harness.

Misuse errors (``HoldReleaseError``, ``ContextLockedError``) indicate a
broken test setup and are always raised loudly. Collaborator failures
(``GeneratorNotFoundError``, ``DirectoryPreparationError``) are raised by
the environment and directory helpers and propagate unchanged.
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base class for every error raised by ``genharness``."""


class HoldReleaseError(HarnessError):
    """Raised when a hold is released more times than it was acquired."""


class ContextLockedError(HarnessError):
    """Raised when a run context is reconfigured after its generator started."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Cannot call {operation}() after the generator under test has been created."
        )


class GeneratorNotFoundError(HarnessError):
    """Raised when a namespace or descriptor cannot be resolved to a generator."""

    def __init__(self, message: str, namespace: str = "") -> None:
        self.namespace = namespace
        super().__init__(message)


class DirectoryPreparationError(HarnessError):
    """Raised when a test directory cannot be cleaned, created, or entered."""

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(message)
