"""Deployment reconciliation against the cluster through kubectl."""

import json
import logging
from typing import Dict, List, Mapping, Optional

from pipeline_cli.exceptions import (
    CreateFailedError,
    ExternalCommandError,
    PatchFailedError,
    UpdateFailedError,
)
from pipeline_cli.models import (
    CommandResult,
    DeploymentState,
    PipelineConfig,
    ReconcileResult,
    ReconcileState,
    ReleasePlan,
)
from pipeline_cli.shell import COMMAND_NOT_FOUND, CommandRunner

logger = logging.getLogger(__name__)

DESCRIPTION_ANNOTATION = "field.cattle.io/description"
NOT_FOUND_REASON = "(NotFound)"


def resource_limits(config: PipelineConfig) -> Dict[str, str]:
    """Container limits; cpu is left out entirely when no cpu limit is set."""
    limits = {"memory": config.memory_limit}
    if config.cpu_limit:
        limits["cpu"] = config.cpu_limit
    return limits


def describe_build(build_url: str, source_url: str) -> str:
    return f"Jenkins URL: {build_url}  GIT URL: {source_url}"


class ClusterReconciler:
    """Creates or updates a single deployment so it runs the planned image.

    State machine:

      Unknown  --exists-->  Updated (set image, nothing else)
      Unknown  --absent-->  Creating --> Patching --> Created

    The live deployment state is queried on every reconcile and never cached.
    Failures after a successful create leave the deployment in place.
    """

    def __init__(
        self,
        runner: CommandRunner,
        kube_env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None
    ):
        """Initialize the reconciler.

        Args:
            runner: Command runner used for every kubectl call
            kube_env: Extra environment for kubectl (usually KUBECONFIG)
            timeout: Per-call timeout in seconds
        """
        self.runner = runner
        self.kube_env = dict(kube_env or {})
        self.timeout = timeout

    def _kubectl(self, config: PipelineConfig, *args: str) -> CommandResult:
        argv = ["kubectl", "-n", config.namespace, *args]
        return self.runner.run(argv, env=self.kube_env or None, timeout=self.timeout)

    @staticmethod
    def _deployment_missing(config: PipelineConfig, result: CommandResult) -> bool:
        """True only for the API server's NotFound answer about this deployment."""
        if result.returncode == COMMAND_NOT_FOUND:
            return False
        return (
            NOT_FOUND_REASON in result.stderr
            and f'deployments.apps "{config.app_name}" not found' in result.stderr
        )

    def query_state(self, config: PipelineConfig) -> DeploymentState:
        """Read whether the deployment exists and which image it runs.

        Raises:
            ExternalCommandError: If the query fails for a reason other than NotFound
        """
        result = self._kubectl(
            config, "get", "deployment", config.app_name,
            "-o", "jsonpath={.spec.template.spec.containers[0].image}"
        )
        if result.success:
            return DeploymentState(exists=True, current_image=result.stdout.strip() or None)
        if self._deployment_missing(config, result):
            return DeploymentState(exists=False)
        raise ExternalCommandError(result)

    def reconcile(self, plan: ReleasePlan, config: PipelineConfig) -> ReconcileResult:
        """Bring the deployment to the planned image.

        Args:
            plan: Release plan for this build
            config: Resolved pipeline configuration

        Returns:
            ReconcileResult in state Updated or Created

        Raises:
            UpdateFailedError: If the image of an existing deployment cannot be set
            CreateFailedError: If the deployment or its service cannot be created
            PatchFailedError: If a post-create patch fails
        """
        state = ReconcileState.UNKNOWN
        actions: List[str] = []
        image = plan.image_reference

        observed = self.query_state(config)
        actions.append("query")

        if observed.exists:
            logger.info("Deployment %s/%s exists (image %s), updating image to %s",
                        config.namespace, config.app_name, observed.current_image, image)
            result = self._kubectl(
                config, "set", "image", f"deployment/{config.app_name}", f"{config.app_name}={image}"
            )
            actions.append("set-image")
            if not result.success:
                raise UpdateFailedError(config.app_name, config.namespace, result)
            state = ReconcileState.UPDATED
            logger.info("Reconcile %s -> %s", config.app_name, state.value)
            return ReconcileResult(state, image, observed, actions)

        state = ReconcileState.CREATING
        logger.info("Deployment %s/%s not found, creating", config.namespace, config.app_name)

        result = self._kubectl(config, "create", "deployment", config.app_name, f"--image={image}")
        actions.append("create")
        if not result.success:
            raise CreateFailedError(config.app_name, config.namespace, result)

        result = self._kubectl(
            config, "expose", "deployment", config.app_name,
            f"--name={config.app_name}", f"--port={plan.exposed_port}"
        )
        actions.append("expose")
        if not result.success:
            raise CreateFailedError(config.app_name, config.namespace, result)

        state = ReconcileState.PATCHING
        logger.info("Reconcile %s -> %s", config.app_name, state.value)

        pull_secret_patch = {"spec": {"template": {"spec": {"imagePullSecrets": [{"name": config.harbour_secret}]}}}}
        result = self._kubectl(
            config, "patch", "deployment", config.app_name, "--patch", json.dumps(pull_secret_patch)
        )
        actions.append("patch-image-pull-secret")
        if not result.success:
            raise PatchFailedError(config.app_name, config.namespace, "image pull secret", result)

        limits_patch = [{
            "op": "add",
            "path": "/spec/template/spec/containers/0/resources",
            "value": {"limits": resource_limits(config)}
        }]
        result = self._kubectl(
            config, "patch", "deployment", config.app_name, "--type=json", "-p", json.dumps(limits_patch)
        )
        actions.append("patch-resource-limits")
        if not result.success:
            raise PatchFailedError(config.app_name, config.namespace, "resource limits", result)

        state = ReconcileState.CREATED
        logger.info("Reconcile %s -> %s", config.app_name, state.value)
        return ReconcileResult(state, image, observed, actions)

    def current_annotation(self, config: PipelineConfig, key: str = DESCRIPTION_ANNOTATION) -> str:
        escaped = key.replace(".", "\\.")
        result = self._kubectl(
            config, "get", "deployment", config.app_name,
            "-o", f"jsonpath={{.metadata.annotations.{escaped}}}"
        )
        if not result.success:
            raise ExternalCommandError(result)
        return result.stdout.strip()

    def annotate(
        self,
        config: PipelineConfig,
        build_url: str,
        source_url: str,
        key: str = DESCRIPTION_ANNOTATION
    ) -> bool:
        """Set the description annotation unless the deployment already has one.

        Returns:
            True if the annotation was written, False if it was already present

        Raises:
            ExternalCommandError: If reading or writing the annotation fails
        """
        current = self.current_annotation(config, key)
        if current:
            logger.info("%s already set on %s: %s", key, config.app_name, current)
            return False

        description = describe_build(build_url, source_url)
        logger.info("Setting %s on %s", key, config.app_name)
        result = self._kubectl(
            config, "annotate", "deployment", config.app_name, f"{key}={description}", "--overwrite"
        )
        if not result.success:
            raise ExternalCommandError(result)
        return True
