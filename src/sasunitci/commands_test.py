from __future__ import annotations

from pathlib import Path

import pytest

from sasunitci.commands import StepPaths, build_doc_command, build_test_command, render_command
from sasunitci.model import BuildStep, DOC_STAGE, TEST_STAGE


def test_unix_test_command():
    paths = StepPaths.from_workspace("/ws", BuildStep("bin/run.sh", "v1"))
    assert build_test_command(paths.sasunit_batch_file, "/opt/sasunit", True) == ["./run.sh", '"/opt/sasunit"']


def test_windows_test_command():
    paths = StepPaths.from_workspace("/ws", BuildStep("bin/run.sh", "v1"))
    assert build_test_command(paths.sasunit_batch_file, "/opt/sasunit", False) == [
        "cmd.exe", "/C", '"', "run.sh", "/opt/sasunit", '"',
    ]


def test_doc_commands():
    assert build_doc_command("doxygen.sh", True) == ["./doxygen.sh"]
    assert build_doc_command("doxygen.cmd", False) == ["cmd.exe", "/C", "doxygen.cmd"]


def test_step_paths():
    step = BuildStep("sasunit/example/bin/sasunit.sh", "v1", "docs/bin/doxygen.sh", True)
    paths = StepPaths.from_workspace(Path("/ws"), step)

    assert paths.sasunit_bin == Path("/ws/sasunit/example/bin/sasunit.sh")
    assert paths.sasunit_bin_folder == Path("/ws/sasunit/example/bin")
    assert paths.sasunit_batch_file == "sasunit.sh"
    assert paths.doxygen_bin_folder == Path("/ws/docs/bin")
    assert paths.doxygen_batch_file == "doxygen.sh"
    assert paths.run_all == Path("/ws/run_all.log")


def test_doc_invocation_runs_in_sasunit_folder():
    step = BuildStep("sasunit/bin/t.sh", "v1", "docs/bin/d.sh", True)
    paths = StepPaths.from_workspace(Path("/ws"), step)

    test_inv = paths.test_invocation("/opt/su", True)
    doc_inv = paths.doc_invocation(True)

    assert test_inv.stage == TEST_STAGE
    assert doc_inv.stage == DOC_STAGE
    assert doc_inv.cwd == test_inv.cwd == Path("/ws/sasunit/bin")
    assert doc_inv.args == ("./d.sh",)


def test_doc_invocation_without_batch():
    paths = StepPaths.from_workspace(Path("/ws"), BuildStep("bin/t.sh", "v1"))
    assert paths.doxygen_batch_file is None
    with pytest.raises(ValueError):
        paths.doc_invocation(True)


def test_windows_command_line_keeps_bare_quotes():
    args = build_test_command("t.bat", r"C:\Program Files\SASUnit", False)

    assert render_command(args, False) == r'cmd.exe /C " t.bat "C:\Program Files\SASUnit" "'


def test_windows_command_line_without_spaces():
    args = build_test_command("t.bat", r"C:\SASUnit", False)
    assert render_command(args, False) == r'cmd.exe /C " t.bat C:\SASUnit "'
    assert render_command(build_doc_command("d.bat", False), False) == "cmd.exe /C d.bat"


def test_unix_command_stays_a_list():
    args = build_test_command("t.sh", "/opt/sas unit", True)
    assert render_command(args, True) == ["./t.sh", '"/opt/sas unit"']
