"""Per-environment kubeconfig lookup and validation."""

import logging
from pathlib import Path
from typing import Dict, Optional

from kubernetes import config as kube_config

from pipeline_cli.exceptions import ClusterAccessError

logger = logging.getLogger(__name__)


class EnvironmentKubeconfig:
    """Locates and validates the kubeconfig for a deployment environment.

    Kubeconfigs are laid out as ``{kubeconfig_dir}/{environment}/config``.
    The file is handed to kubectl through the KUBECONFIG variable of each
    call rather than copied over ``~/.kube/config``.
    """

    def __init__(self, kubeconfig_dir: Path, environment: str):
        self.kubeconfig_dir = Path(kubeconfig_dir)
        self.environment = environment
        self._context: Optional[str] = None

    @property
    def path(self) -> Path:
        return self.kubeconfig_dir / self.environment / "config"

    def load(self) -> str:
        """Validate the kubeconfig and return its active context name.

        Raises:
            ClusterAccessError: If the file is missing or cannot be parsed
        """
        if not self.path.is_file():
            raise ClusterAccessError(
                f"Kubeconfig for environment '{self.environment}' not found at {self.path}",
                kubeconfig=str(self.path)
            )

        try:
            _, active_context = kube_config.list_kube_config_contexts(config_file=str(self.path))
        except kube_config.ConfigException as e:
            raise ClusterAccessError(
                f"Invalid kubeconfig for environment '{self.environment}': {str(e)}",
                kubeconfig=str(self.path)
            )

        if not active_context:
            raise ClusterAccessError(
                f"Kubeconfig {self.path} has no current context",
                kubeconfig=str(self.path)
            )

        self._context = active_context.get("name", "")
        logger.info("Using kubeconfig %s (context %s)", self.path, self._context)
        return self._context

    def env(self) -> Dict[str, str]:
        """Environment variables that point kubectl at this kubeconfig."""
        return {"KUBECONFIG": str(self.path)}
