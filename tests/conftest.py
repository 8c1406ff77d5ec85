"""Shared test fixtures."""

from typing import Callable, List, Optional, Tuple

import pytest

from pipeline_cli.models import CommandResult
from pipeline_cli.planner import plan
from pipeline_cli.resolver import resolve
from pipeline_cli.shell import CommandRunner

NOT_FOUND = 'Error from server (NotFound): deployments.apps "{name}" not found'


class FakeRunner(CommandRunner):
    """Command runner that records calls and returns scripted results."""

    def __init__(self, handler: Optional[Callable[[Tuple[str, ...]], Tuple[int, str, str]]] = None):
        super().__init__()
        self.handler = handler or (lambda argv: (0, "", ""))
        self.calls: List[dict] = []

    def run(self, argv, env=None, timeout=None, input=None) -> CommandResult:
        argv = tuple(str(arg) for arg in argv)
        self.calls.append({"argv": argv, "env": env, "timeout": timeout, "input": input})
        returncode, stdout, stderr = self.handler(argv)
        return CommandResult(argv, returncode, stdout, stderr)

    @property
    def commands(self) -> List[Tuple[str, ...]]:
        return [call["argv"] for call in self.calls]

    def kubectl_verbs(self) -> List[str]:
        """Verb of every kubectl call (argv is kubectl -n NS VERB ...)."""
        return [argv[3] for argv in self.commands if argv[0] == "kubectl"]


@pytest.fixture
def springboot_config():
    return resolve({"appName": "foo", "appType": "springboot"})


@pytest.fixture
def springboot_plan(springboot_config):
    return plan(springboot_config, 42)


@pytest.fixture
def nginx_config():
    return resolve({"appName": "bar", "appType": "angular-nginx", "exposePort": "8081"})


@pytest.fixture
def make_runner():
    """Factory for FakeRunner instances with an optional argv handler."""
    return FakeRunner


@pytest.fixture
def not_found():
    return NOT_FOUND
