"""External command execution."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from pipeline_cli.exceptions import ExternalCommandError, TimeoutError as CLITimeoutError
from pipeline_cli.models import CommandResult

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Runs external commands and returns structured results.

    Every build, image, scan, cluster and git action goes through this
    class, so tests substitute a fake runner instead of patching subprocess.
    """

    def __init__(self, cwd: Optional[Path] = None, default_timeout: Optional[float] = None):
        """Initialize the runner.

        Args:
            cwd: Working directory for commands (defaults to the current directory)
            default_timeout: Timeout in seconds for calls that do not pass one.
                None means wait until the command exits.
        """
        self.cwd = cwd
        self.default_timeout = default_timeout

    def run(
        self,
        argv: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        input: Optional[str] = None
    ) -> CommandResult:
        """Execute a command and capture its output.

        Args:
            argv: Command and arguments
            env: Extra environment variables layered over the current environment
            timeout: Timeout in seconds, overriding the default
            input: Text written to the command's stdin

        Returns:
            CommandResult with exit code and captured output

        Raises:
            TimeoutError: If the command exceeds its timeout
        """
        argv = tuple(str(arg) for arg in argv)
        timeout = timeout if timeout is not None else self.default_timeout
        run_env = None
        if env:
            run_env = os.environ.copy()
            run_env.update(env)

        logger.debug("Running: %s", " ".join(argv))
        try:
            completed = subprocess.run(
                list(argv),
                cwd=self.cwd,
                env=run_env,
                input=input,
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except FileNotFoundError:
            logger.debug("Command not found: %s", argv[0])
            return CommandResult(argv, COMMAND_NOT_FOUND, "", f"{argv[0]}: command not found")
        except subprocess.TimeoutExpired:
            raise CLITimeoutError(" ".join(argv), timeout)

        result = CommandResult(argv, completed.returncode, completed.stdout or "", completed.stderr or "")
        logger.debug("Exit code %s: %s", result.returncode, argv[0])
        return result

    def run_checked(
        self,
        argv: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        input: Optional[str] = None
    ) -> CommandResult:
        """Execute a command and raise if it fails.

        Raises:
            ExternalCommandError: If the command exits with a non-zero status
        """
        result = self.run(argv, env=env, timeout=timeout, input=input)
        if not result.success:
            raise ExternalCommandError(result)
        return result
