"""Tests for the command runner."""

import subprocess
from unittest.mock import patch

import pytest

from pipeline_cli.exceptions import ExternalCommandError, TimeoutError as CLITimeoutError
from pipeline_cli.shell import COMMAND_NOT_FOUND, CommandRunner


def completed(argv, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(argv, returncode, stdout, stderr)


def test_run_captures_output():
    with patch("pipeline_cli.shell.subprocess.run", return_value=completed(["git"], 0, "out\n", "")) as run:
        result = CommandRunner(default_timeout=10).run(["git", "status"])

    assert result.success
    assert result.stdout == "out\n"
    assert result.argv == ("git", "status")
    assert run.call_args.kwargs["timeout"] == 10
    assert run.call_args.kwargs["env"] is None


def test_env_layered_over_process_environment(monkeypatch):
    monkeypatch.setenv("PATH", "/usr/bin")
    with patch("pipeline_cli.shell.subprocess.run", return_value=completed(["kubectl"])) as run:
        CommandRunner().run(["kubectl", "version"], env={"KUBECONFIG": "/tmp/config"}, timeout=5)

    env = run.call_args.kwargs["env"]
    assert env["KUBECONFIG"] == "/tmp/config"
    assert env["PATH"] == "/usr/bin"
    assert run.call_args.kwargs["timeout"] == 5


def test_missing_binary_returns_127():
    with patch("pipeline_cli.shell.subprocess.run", side_effect=FileNotFoundError()):
        result = CommandRunner().run(["trivy", "image", "foo"])

    assert result.returncode == COMMAND_NOT_FOUND
    assert "trivy" in result.stderr


def test_timeout_raises():
    with patch("pipeline_cli.shell.subprocess.run", side_effect=subprocess.TimeoutExpired("trivy", 900)):
        with pytest.raises(CLITimeoutError) as exc_info:
            CommandRunner().run(["trivy", "image", "foo"], timeout=900)

    assert "900" in exc_info.value.message


def test_run_checked_raises_on_failure():
    with patch("pipeline_cli.shell.subprocess.run", return_value=completed(["docker"], 1, "", "denied")):
        with pytest.raises(ExternalCommandError) as exc_info:
            CommandRunner().run_checked(["docker", "push", "img"])

    assert exc_info.value.result.returncode == 1
    assert "denied" in exc_info.value.message
