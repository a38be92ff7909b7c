"""Harness configuration.

Typed settings for run contexts and their collaborators. Uses a Pydantic v2
model so values are validated at construction time and can be loaded from
environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field


_TRUTHY = {"1", "true", "yes", "on"}


class HarnessConfig(BaseModel):
    """Global ``genharness`` configuration.

    Instances are usually created implicitly by ``RunContext`` (defaults) or
    once per test session via :meth:`from_env` and passed to every context.
    """

    default_namespace: str = Field(
        default="gen:test",
        min_length=1,
        description="Namespace used when the generator under test is given as a factory",
    )
    skip_install_option: str = Field(
        default="skip-install",
        min_length=1,
        description="Option flag merged as True into every generator's options",
    )
    entry_point_group: str = Field(
        default="genharness.generators",
        description="Entry-point group searched when resolving namespace strings",
    )
    tmp_dir_prefix: str = Field(default="genharness-")
    verbose: bool = Field(default=False, description="Print lifecycle traces to the console")

    @classmethod
    def from_env(cls) -> "HarnessConfig":
        """Build a ``HarnessConfig`` from environment variables.

        Recognised variables (all optional):
            GENHARNESS_DEFAULT_NAMESPACE, GENHARNESS_SKIP_INSTALL_OPTION,
            GENHARNESS_ENTRY_POINT_GROUP, GENHARNESS_TMP_DIR_PREFIX,
            GENHARNESS_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("GENHARNESS_DEFAULT_NAMESPACE"):
            kwargs["default_namespace"] = os.environ["GENHARNESS_DEFAULT_NAMESPACE"]
        if os.environ.get("GENHARNESS_SKIP_INSTALL_OPTION"):
            kwargs["skip_install_option"] = os.environ["GENHARNESS_SKIP_INSTALL_OPTION"]
        if os.environ.get("GENHARNESS_ENTRY_POINT_GROUP"):
            kwargs["entry_point_group"] = os.environ["GENHARNESS_ENTRY_POINT_GROUP"]
        if os.environ.get("GENHARNESS_TMP_DIR_PREFIX"):
            kwargs["tmp_dir_prefix"] = os.environ["GENHARNESS_TMP_DIR_PREFIX"]

        verbose = os.environ.get("GENHARNESS_VERBOSE", "")
        kwargs["verbose"] = verbose.strip().lower() in _TRUTHY

        return cls(**kwargs)
