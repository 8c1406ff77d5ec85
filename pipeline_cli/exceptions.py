"""Custom exceptions for pipeline-cli with detailed error messages and troubleshooting guidance."""

from typing import List, Optional


class PipelineCLIError(Exception):
    """Base exception for all pipeline-cli errors."""

    def __init__(self, message: str, troubleshooting: list = None):
        """Initialize exception with message and optional troubleshooting steps.

        Args:
            message: Error message describing what went wrong
            troubleshooting: List of troubleshooting suggestions
        """
        self.message = message
        self.troubleshooting = troubleshooting or []
        super().__init__(self.message)

    def get_troubleshooting_text(self) -> str:
        """Get formatted troubleshooting text.

        Returns:
            Formatted string with troubleshooting steps
        """
        if not self.troubleshooting:
            return ""

        lines = ["Troubleshooting:"]
        for step in self.troubleshooting:
            lines.append(f"• {step}")
        return "\n".join(lines)


class ValidationError(PipelineCLIError):
    """Raised when pipeline parameters are missing or invalid."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        self.fields = list(fields or [])
        troubleshooting = [
            "Review the command help: pipeline-cli <command> --help",
            "Check the keys and values in your pipeline.yaml",
            "Ensure appName and appType are provided"
        ]
        super().__init__(message, troubleshooting)


class ConfigurationError(PipelineCLIError):
    """Raised when tool configuration is invalid or missing."""

    def __init__(self, message: str, config_path: str = None):
        self.config_path = config_path
        troubleshooting = [
            "Check configuration file format (YAML)",
            "Verify configuration file permissions",
            "Use default configuration: rm ~/.pipeline-cli/config.yaml"
        ]

        if config_path:
            troubleshooting.insert(0, f"Check configuration file: cat {config_path}")

        super().__init__(message, troubleshooting)


class ClusterAccessError(PipelineCLIError):
    """Raised when the environment kubeconfig cannot be used."""

    def __init__(self, message: str = "Cannot access Kubernetes cluster", kubeconfig: str = None):
        self.kubeconfig = kubeconfig
        troubleshooting = [
            "Verify the environment kubeconfig exists: ls <kubeconfig-dir>/<environment>/config",
            "Check kubeconfig contents: kubectl config view --kubeconfig <file>",
            "Verify cluster connectivity: kubectl get nodes"
        ]
        if kubeconfig:
            troubleshooting.insert(0, f"Inspect kubeconfig: kubectl config view --kubeconfig {kubeconfig}")
        super().__init__(message, troubleshooting)


class ExternalCommandError(PipelineCLIError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, result, message: str = None):
        self.result = result
        command = " ".join(result.argv)
        if message is None:
            message = f"Command failed with exit code {result.returncode}: {command}"
            detail = (result.stderr or result.stdout or "").strip()
            if detail:
                message += f"\n{detail}"
        troubleshooting = [
            f"Re-run the command manually: {command}",
            f"Verify '{result.argv[0]}' is installed and on PATH",
            "Re-run with --debug to see every external command"
        ]
        super().__init__(message, troubleshooting)


class TimeoutError(PipelineCLIError):
    """Raised when an external command exceeds its time budget."""

    def __init__(self, operation: str, timeout_seconds: float = None):
        message = f"Operation timed out: {operation}"
        if timeout_seconds:
            message += f" (timeout: {timeout_seconds}s)"

        troubleshooting = [
            "Check cluster and registry responsiveness",
            "Verify network connectivity",
            "Increase the timeout: PIPELINE_COMMAND_TIMEOUT / PIPELINE_SCAN_TIMEOUT"
        ]
        super().__init__(message, troubleshooting)


class ReconcileError(PipelineCLIError):
    """Base class for deployment reconciliation failures."""

    def __init__(self, message: str, app_name: str, namespace: str, result=None):
        self.app_name = app_name
        self.namespace = namespace
        self.result = result
        if result is not None:
            detail = (result.stderr or result.stdout or "").strip()
            if detail:
                message += f": {detail}"
        troubleshooting = [
            f"Inspect the deployment: kubectl -n {namespace} describe deployment {app_name}",
            f"Check recent events: kubectl -n {namespace} get events --sort-by='.lastTimestamp'",
            f"Verify permissions: kubectl auth can-i patch deployments -n {namespace}"
        ]
        super().__init__(message, troubleshooting)


class CreateFailedError(ReconcileError):
    """Raised when the deployment or its service cannot be created."""

    def __init__(self, app_name: str, namespace: str, result=None):
        super().__init__(
            f"Failed to create deployment '{app_name}' in namespace '{namespace}'",
            app_name, namespace, result
        )


class PatchFailedError(ReconcileError):
    """Raised when a post-create patch fails. The deployment is left in place."""

    def __init__(self, app_name: str, namespace: str, patch: str, result=None):
        self.patch = patch
        super().__init__(
            f"Failed to apply {patch} patch to deployment '{app_name}' in namespace '{namespace}'",
            app_name, namespace, result
        )


class UpdateFailedError(ReconcileError):
    """Raised when the image of an existing deployment cannot be updated."""

    def __init__(self, app_name: str, namespace: str, result=None):
        super().__init__(
            f"Failed to update image of deployment '{app_name}' in namespace '{namespace}'",
            app_name, namespace, result
        )


class BuildError(PipelineCLIError):
    """Raised when the image build context cannot be assembled."""

    def __init__(self, message: str, workdir: str = None):
        self.workdir = workdir
        troubleshooting = [
            "Ensure the Dockerfile is committed at the repository root",
            "Check that the build step produced its artifact: ls target/",
            "Re-run with --debug to see the maven output"
        ]
        if workdir:
            troubleshooting.insert(0, f"Inspect the build directory: ls {workdir}")
        super().__init__(message, troubleshooting)
