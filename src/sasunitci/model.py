# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Dict, Mapping, Optional, Tuple, Union

SUCCESS = "SUCCESS"
FAILURE = "FAILURE"

TEST_STAGE = "test"
DOC_STAGE = "doc"


@dataclass(frozen=True)
class NodeContext:
    """
    The machine a build step runs on.

    tool_locations maps an installation name to the home directory that
    installation has on this node, overriding the configured home.
    """
    name: str = "master"
    tool_locations: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Installation:
    """A named SASUnit distribution: name + home directory."""
    name: str
    home: str

    def for_node(self, node: NodeContext) -> Installation:
        return Installation(self.name, node.tool_locations.get(self.name, self.home))

    def for_environment(self, env: Mapping[str, str]) -> Installation:
        # $VAR / ${VAR}; unknown placeholders stay as written
        return Installation(self.name, Template(self.home).safe_substitute(env))


@dataclass(frozen=True)
class BuildStep:
    """
    Configuration of one SASUnit build step.

    Batch paths are relative to the build workspace.
    """
    sasunit_batch: str
    sasunit_version: Optional[str]
    doxygen_batch: Optional[str] = None
    create_doxygen_docu: bool = False

    @property
    def use_doxygen(self) -> bool:
        return self.create_doxygen_docu and bool(self.doxygen_batch)


@dataclass(frozen=True)
class CommandInvocation:
    """A single OS-specific command line and the folder it runs in."""
    args: Tuple[str, ...]
    cwd: Path
    stage: str = TEST_STAGE

    def __str__(self) -> str:
        return " ".join(self.args)


# ----------------------------------------------------------------------
# Step results
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Success:
    invocations: Tuple[CommandInvocation, ...] = ()
    ok = True
    build_result = SUCCESS


@dataclass(frozen=True)
class TestFailure:
    exit_code: int
    invocations: Tuple[CommandInvocation, ...] = ()
    ok = False
    build_result = FAILURE

    __test__ = False  # not a pytest class


@dataclass(frozen=True)
class DocFailure:
    exit_code: int
    invocations: Tuple[CommandInvocation, ...] = ()
    ok = False
    build_result = FAILURE


@dataclass(frozen=True)
class ConfigError:
    message: str
    invocations: Tuple[CommandInvocation, ...] = ()
    ok = False
    build_result = FAILURE


@dataclass(frozen=True)
class LaunchError:
    stage: str
    command: str
    error: str
    interrupted: bool = False
    invocations: Tuple[CommandInvocation, ...] = ()
    ok = False
    build_result = FAILURE


StepResult = Union[Success, TestFailure, DocFailure, ConfigError, LaunchError]
