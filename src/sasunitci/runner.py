# runner.py
from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Protocol

from .commands import StepPaths, render_command
from .installation import InstallationStore, resolve_installation
from .model import (
    BuildStep,
    CommandInvocation,
    ConfigError,
    DocFailure,
    LaunchError,
    NodeContext,
    StepResult,
    Success,
    TestFailure,
    DOC_STAGE,
    TEST_STAGE,
)
from .ui.console import Console, get_console


STAGE_NAMES = {
    TEST_STAGE: "SASUnit test suite",
    DOC_STAGE: "Doxygen documentation",
}

LAUNCH_HINT = "Check that the batch file exists in the workspace and is executable."


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class LaunchFailure(Exception):
    """The process could not be started, or waiting for it was interrupted."""
    command: str
    cwd: str
    reason: str
    interrupted: bool = False

    def __str__(self) -> str:
        return f"Execution of {self.command} in {self.cwd} not successful: {self.reason}"


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

class Launcher(Protocol):
    def launch(self, invocation: CommandInvocation, sink: Callable[[str], None]) -> int:
        ...


class ProcessLauncher:
    """Runs a command as a child process and streams its output into a sink."""

    def __init__(self, env: Optional[Mapping[str, str]] = None, is_unix: Optional[bool] = None):
        self.env = dict(env) if env is not None else None
        self.is_unix = os.name != "nt" if is_unix is None else is_unix

    def launch(self, invocation: CommandInvocation, sink: Callable[[str], None]) -> int:
        cwd = str(invocation.cwd)
        try:
            proc = subprocess.Popen(
                render_command(invocation.args, self.is_unix),
                cwd=cwd,
                env=self.env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,  # one log, in order
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise LaunchFailure(command=str(invocation), cwd=cwd, reason=str(e)) from e

        try:
            assert proc.stdout is not None
            for line in proc.stdout:
                sink(line)
            return proc.wait()
        except KeyboardInterrupt as e:
            proc.kill()
            proc.wait()
            raise LaunchFailure(command=str(invocation), cwd=cwd, reason="interrupted", interrupted=True) from e
        except OSError as e:
            proc.kill()
            proc.wait()
            raise LaunchFailure(command=str(invocation), cwd=cwd, reason=str(e)) from e
        finally:
            if proc.stdout is not None:
                proc.stdout.close()


def _exec_cmd(
    invocation: CommandInvocation,
    launcher: Launcher,
    console: Console,
    launched: List[CommandInvocation],
) -> Optional[StepResult]:
    """
    Launch one command. Returns None when it exited 0, else the failure result.
    """
    console.print_command(invocation)
    launched.append(invocation)
    name = STAGE_NAMES[invocation.stage]
    try:
        code = launcher.launch(invocation, console.write_output)
    except LaunchFailure as e:
        console.print_fatal(str(e))
        console.print_failure(name, e.reason, hint=None if e.interrupted else LAUNCH_HINT)
        return LaunchError(
            stage=invocation.stage,
            command=e.command,
            error=e.reason,
            interrupted=e.interrupted,
            invocations=tuple(launched),
        )

    if code == 0:
        return None

    console.print_failure(name, f"{invocation} exited with {code}", exit_code=code)
    if invocation.stage == TEST_STAGE:
        return TestFailure(exit_code=code, invocations=tuple(launched))
    return DocFailure(exit_code=code, invocations=tuple(launched))


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run_build_step(
    step: BuildStep,
    store: InstallationStore,
    workspace: str | Path,
    *,
    node: Optional[NodeContext] = None,
    env: Optional[Mapping[str, str]] = None,
    is_unix: Optional[bool] = None,
    launcher: Optional[Launcher] = None,
    console: Optional[Console] = None,
) -> StepResult:
    """
    Run the SASUnit batch file and, if requested, the Doxygen batch file.

    Commands run one after another in the SASUnit batch file's folder. The
    first non-zero exit code or launch error ends the step.
    """
    console = console or get_console()
    env = dict(os.environ) if env is None else dict(env)
    node = node or NodeContext()
    if is_unix is None:
        is_unix = os.name != "nt"
    if launcher is None:
        launcher = ProcessLauncher(env, is_unix)

    console.print_step_started(step.sasunit_version)

    installation = resolve_installation(store, step.sasunit_version, node, env)
    if installation is None:
        message = f"SASUnit installation not found: {step.sasunit_version!r}"
        console.print_fatal(message)
        result: StepResult = ConfigError(message)
        console.print_result(result)
        return result

    paths = StepPaths.from_workspace(workspace, step)
    console.print_paths(paths, installation)

    launched: List[CommandInvocation] = []

    console.print_stage("Starting SASUnit test suite")
    failure = _exec_cmd(paths.test_invocation(installation.home, is_unix), launcher, console, launched)
    if failure is not None:
        console.print_result(failure)
        return failure

    if step.use_doxygen:
        console.print_stage("Starting Doxygen documentation")
        failure = _exec_cmd(paths.doc_invocation(is_unix), launcher, console, launched)
        if failure is not None:
            console.print_result(failure)
            return failure

    console.print_stage("End of SASUnit test suite")
    result = Success(invocations=tuple(launched))
    console.print_result(result)
    return result
