"""Console output formatting utilities for sasunitci."""

from __future__ import annotations

import sys
from typing import Optional, TextIO, TYPE_CHECKING

if TYPE_CHECKING:
    from sasunitci.commands import StepPaths
    from sasunitci.model import CommandInvocation, Installation, StepResult


class Console:
    """Centralized build log formatting."""

    def __init__(self, debug: bool = False, stream: Optional[TextIO] = None):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
            stream: Where the build log goes (defaults to stdout at write time)
        """
        self.debug = debug
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream, flush=True)

    def print_header(self, title: str) -> None:
        """Print a section header."""
        self._print(f"\n{title}")
        self._print("-" * len(title))

    def print_step_started(self, version: Optional[str]) -> None:
        """Print build step start information."""
        self._print("\nSTEP STARTED: Starting SASUnit test suite")
        self._print(f"SASUnit version: {version}")

    def print_paths(self, paths: StepPaths, installation: Installation) -> None:
        """Print the folders, files and installation the step will use."""
        self.print_header("Folders")
        self._print(f"Project Workspace:  {paths.workspace}")
        self._print(f"sasUnitRoot:        {installation.home}")
        self._print(f"sasUnitBinFolder:   {paths.sasunit_bin_folder}")
        self._print(f"sasUnitBin:         {paths.sasunit_bin}")
        self._print(f"doxygenBinFolder:   {paths.doxygen_bin_folder or '-'}")
        self.print_header("Files")
        self._print(f"projectRunAll:      {paths.run_all}")
        self._print(f"sasUnitBatchFile:   {paths.sasunit_batch_file}")
        self._print(f"doxygenBatchFile:   {paths.doxygen_batch_file or '-'}")
        self.print_header("SASUnit Version")
        self._print(f"SASUnit Version:    {installation.name}")
        self._print(f"SASUnit Path:       {installation.home}")

    def print_stage(self, message: str) -> None:
        """Print a stage marker (starting test, starting documentation, end)."""
        self._print(f"\n==> {message}")

    def print_command(self, invocation: CommandInvocation) -> None:
        self._print(f"\n$ {invocation}")
        self._print(f"  (in {invocation.cwd})")
        self._print()

    def write_output(self, text: str) -> None:
        """Pass child process output through unchanged."""
        self.stream.write(text)
        self.stream.flush()

    def print_fatal(self, message: str) -> None:
        self._print(f"FATAL: {message}")

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Stage name
            reason: Failure reason/error message
            exit_code: Optional exit code
            hint: Optional hint for user
        """
        self._print(f"STEP FAILED: {name}")
        if exit_code is not None:
            self._print(f"Exit code: {exit_code}")
        if hint:
            self._print(f"Hint: {hint}")
        if self.debug:
            self._print(f"Error details: {reason}")
        else:
            # first line only outside debug mode
            error_line = reason.split('\n')[0] if reason else "Unknown error"
            self._print(f"Error: {error_line}")

    def print_result(self, result: StepResult) -> None:
        """Print the final build result marker."""
        self._print("\n" + "=" * 40)
        self._print(f"RESULT: {result.build_result}")
        self._print("=" * 40)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
