"""genharness -- fluent run contexts for testing scaffolding generators.

Quick usage::

    from genharness import RunContext, create_dummy_generator

    context = (
        RunContext("webapp:app")
        .in_tmp_dir()
        .with_generators([(create_dummy_generator(), "webapp:common")])
        .with_prompt({"title": "Demo"})
    )
    generator = await context
"""

from genharness.barrier import HoldBarrier, HoldRelease
from genharness.config import HarnessConfig
from genharness.environment import Environment
from genharness.errors import (
    ContextLockedError,
    DirectoryPreparationError,
    GeneratorNotFoundError,
    HarnessError,
    HoldReleaseError,
)
from genharness.generator import Generator
from genharness.helpers import create_dummy_generator, mock_prompt, run, test_directory
from genharness.run_context import RunContext

__all__ = [
    "ContextLockedError",
    "DirectoryPreparationError",
    "Environment",
    "Generator",
    "GeneratorNotFoundError",
    "HarnessConfig",
    "HarnessError",
    "HoldBarrier",
    "HoldRelease",
    "HoldReleaseError",
    "RunContext",
    "create_dummy_generator",
    "mock_prompt",
    "run",
    "test_directory",
]
