# commands.py
# Command lines for the SASUnit and Doxygen batch scripts.
# The argument order (including the bare quote tokens on Windows) is what
# existing batch scripts expect; keep it byte for byte.

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .model import BuildStep, CommandInvocation, DOC_STAGE, TEST_STAGE
from .settings import RUN_ALL_LOG


def build_test_command(batch_file: str, home: str, is_unix: bool) -> List[str]:
    if is_unix:
        return ["./" + batch_file, '"' + home + '"']
    # extra pair of quotes after cmd /C handles paths with spaces
    return ["cmd.exe", "/C", '"', batch_file, home, '"']


def build_doc_command(batch_file: str, is_unix: bool) -> List[str]:
    if is_unix:
        return ["./" + batch_file]
    return ["cmd.exe", "/C", batch_file]


def render_command(args: Sequence[str], is_unix: bool) -> Union[List[str], str]:
    """
    What to hand to Popen for this argument list.

    On Windows the command line is built here instead of by
    subprocess.list2cmdline, which would escape the bare quote tokens to \\".
    Arguments with whitespace are quoted; everything else goes through as is.
    """
    if is_unix:
        return list(args)
    return " ".join(_quote_windows(a) for a in args)


def _quote_windows(arg: str) -> str:
    if arg == '"' or not any(c in arg for c in " \t"):
        return arg
    if arg.startswith('"') and arg.endswith('"'):
        return arg
    return '"' + arg + '"'


@dataclass(frozen=True)
class StepPaths:
    """Folders and files a build step works with, resolved against the workspace."""
    workspace: Path
    sasunit_bin: Path
    sasunit_bin_folder: Path
    sasunit_batch_file: str
    doxygen_bin_folder: Optional[Path]
    doxygen_batch_file: Optional[str]
    run_all: Path

    @classmethod
    def from_workspace(cls, workspace: str | Path, step: BuildStep) -> StepPaths:
        ws = Path(workspace)
        sasunit_bin = ws / step.sasunit_batch
        doxygen_bin = ws / step.doxygen_batch if step.doxygen_batch else None
        return cls(
            workspace=ws,
            sasunit_bin=sasunit_bin,
            sasunit_bin_folder=sasunit_bin.parent,
            sasunit_batch_file=sasunit_bin.name,
            doxygen_bin_folder=doxygen_bin.parent if doxygen_bin else None,
            doxygen_batch_file=doxygen_bin.name if doxygen_bin else None,
            run_all=ws / RUN_ALL_LOG,
        )

    def test_invocation(self, home: str, is_unix: bool) -> CommandInvocation:
        return CommandInvocation(
            args=tuple(build_test_command(self.sasunit_batch_file, home, is_unix)),
            cwd=self.sasunit_bin_folder,
            stage=TEST_STAGE,
        )

    def doc_invocation(self, is_unix: bool) -> CommandInvocation:
        if self.doxygen_batch_file is None:
            raise ValueError("No doxygen batch file configured")
        # runs next to the SASUnit batch file, not the doxygen one
        return CommandInvocation(
            args=tuple(build_doc_command(self.doxygen_batch_file, is_unix)),
            cwd=self.sasunit_bin_folder,
            stage=DOC_STAGE,
        )
