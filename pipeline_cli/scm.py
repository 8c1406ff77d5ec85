"""Source-control queries for the checked-out repository."""

import logging

from pipeline_cli.models import SourceInfo
from pipeline_cli.shell import CommandRunner

logger = logging.getLogger(__name__)


class SourceControl:
    """Reads repository facts through git."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def remote_url(self) -> str:
        """Get the URL of the origin remote.

        Raises:
            ExternalCommandError: If git cannot read the remote
        """
        result = self.runner.run_checked(["git", "config", "--get", "remote.origin.url"])
        return result.stdout.strip()

    def last_committer_email(self) -> str:
        result = self.runner.run_checked(["git", "log", "-1", "--pretty=format:%ce"])
        return result.stdout.strip()

    def info(self) -> SourceInfo:
        info = SourceInfo(remote_url=self.remote_url(), committer_email=self.last_committer_email())
        logger.info("Git URL: %s", info.remote_url)
        logger.info("Committer email: %s", info.committer_email)
        return info
