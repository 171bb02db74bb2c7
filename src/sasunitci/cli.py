# cli.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

import click

from sasunitci import settings
from sasunitci.installation import (
    ConfigurationError,
    FormValidation,
    InstallationStore,
    check_batch_path,
    check_home,
    check_name,
)
from sasunitci.model import BuildStep, Installation
from sasunitci.runner import run_build_step
from sasunitci.ui.console import Console, set_console, get_console


class TeeStream:
    """
    Writes build log text to several streams at once (terminal + log file).
    """

    def __init__(self, *streams: TextIO):
        self.streams = streams

    def write(self, text: str) -> int:
        for s in self.streams:
            s.write(text)
        return len(text)

    def flush(self) -> None:
        for s in self.streams:
            s.flush()


def open_store(ctx: click.Context) -> InstallationStore:
    """
    Load the installation store named on the command line.

    Raises:
        SystemExit: If the store file is unreadable or invalid
    """
    console = get_console()
    console.print_debug(f"Installation store: {ctx.obj['config']}")
    try:
        return InstallationStore(ctx.obj["config"])
    except ConfigurationError as e:
        console.print_error(
            "Invalid installation configuration",
            str(e),
            suggestion="Fix or remove the file, or point --config at another one.",
        )
        sys.exit(1)


def _report(validation: FormValidation, label: str) -> None:
    console = get_console()
    if validation.kind == "ok":
        console.print_info(f"{label}: ok")
    else:
        console.print_info(f"{label}: {validation.kind}: {validation.message}")


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--config",
    default=settings.CONFIG_PATH,
    show_default=True,
    help="Installation store (JSON)",
)
@click.pass_context
def cli(ctx, debug, config):
    """sasunitci: run SASUnit test suites (and Doxygen docs) as a build step."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config"] = config


@cli.command()
@click.option("--sasunit-batch", required=True, help="SASUnit batch file, relative to the workspace")
@click.option("--doxygen-batch", default=None, help="Doxygen batch file, relative to the workspace")
@click.option("--sasunit-version", required=True, help="Name of the SASUnit installation to use")
@click.option("--docs/--no-docs", default=False, show_default=True, help="Create Doxygen documentation after the tests")
@click.option("--workspace", default=".", type=click.Path(file_okay=False), help="Build workspace")
@click.option("--node", default=settings.NODE_NAME, show_default=True, help="Name of the node this build runs on")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False), help="Also write the build log to this file")
@click.pass_context
def run(ctx, sasunit_batch, doxygen_batch, sasunit_version, docs, workspace, node, log_file):
    """Run the SASUnit build step."""
    store = open_store(ctx)
    step = BuildStep(
        sasunit_batch=sasunit_batch,
        doxygen_batch=doxygen_batch,
        sasunit_version=sasunit_version,
        create_doxygen_docu=docs,
    )

    log = None
    try:
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            log = open(log_file, "w", encoding="utf-8")
            console = Console(debug=ctx.obj["debug"], stream=TeeStream(sys.stdout, log))
            set_console(console)
        else:
            console = get_console()

        console.print_debug(f"Node: {node}")
        result = run_build_step(
            step,
            store,
            Path(workspace).resolve(),
            node=store.node(node),
            console=console,
        )
    except KeyboardInterrupt:
        get_console().print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        get_console().print_exception(e)
        sys.exit(1)
    finally:
        if log is not None:
            log.close()

    if not result.ok:
        sys.exit(1)


# ----------------------------------------------------------------------
# Installations
# ----------------------------------------------------------------------

@cli.group()
def installation():
    """Manage configured SASUnit installations."""


@installation.command("list")
@click.pass_context
def list_installations(ctx):
    """List configured installations."""
    console = get_console()
    store = open_store(ctx)
    if not store.installations:
        console.print_info("No SASUnit installations configured.")
        return
    for inst in store.installations:
        console.print_info(f"{inst.name}: {inst.home}")


@installation.command("add")
@click.argument("name")
@click.argument("home")
@click.pass_context
def add_installation(ctx, name, home):
    """Add installation NAME with home folder HOME."""
    console = get_console()
    name_check = check_name(name)
    if name_check.is_error:
        console.print_error("Invalid installation", name_check.message)
        sys.exit(1)

    home_check = check_home(home)
    if home_check.is_error:
        console.print_error("Invalid installation", home_check.message)
        sys.exit(1)
    if home_check.kind != "ok":
        console.print_info(f"Warning: {home_check.message}")

    store = open_store(ctx)
    try:
        store.add(Installation(name, home))
    except ConfigurationError as e:
        console.print_error("Could not add installation", str(e))
        sys.exit(1)
    console.print_info(f"Added {name}: {home}")


@installation.command("remove")
@click.argument("name")
@click.pass_context
def remove_installation(ctx, name):
    """Remove installation NAME."""
    console = get_console()
    store = open_store(ctx)
    try:
        store.remove(name)
    except ConfigurationError as e:
        console.print_error("Could not remove installation", str(e))
        sys.exit(1)
    console.print_info(f"Removed {name}")


@installation.command("locate")
@click.argument("node")
@click.argument("name")
@click.argument("home")
@click.pass_context
def locate_installation(ctx, node, name, home):
    """Use HOME for installation NAME when building on NODE."""
    console = get_console()
    store = open_store(ctx)
    try:
        store.set_tool_location(node, name, home)
    except ConfigurationError as e:
        console.print_error(
            "Could not set tool location",
            str(e),
            suggestion=f"Add the installation first:\n  sasunitci installation add {name} <home>",
        )
        sys.exit(1)
    console.print_info(f"{name} on {node}: {home}")


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------

@cli.group()
def check():
    """Validate configuration values."""


@check.command("home")
@click.argument("value")
def check_home_cmd(value):
    """Check an installation home folder."""
    result = check_home(value)
    _report(result, "home")
    if result.is_error:
        sys.exit(1)


@check.command("name")
@click.argument("value", default="")
def check_name_cmd(value):
    """Check an installation name."""
    result = check_name(value)
    _report(result, "name")
    if result.is_error:
        sys.exit(1)


@check.command("batch")
@click.argument("value", default="")
def check_batch_cmd(value):
    """Check a batch file path."""
    result = check_batch_path(value)
    _report(result, "batch")
    if result.is_error:
        sys.exit(1)


if __name__ == "__main__":
    cli()
