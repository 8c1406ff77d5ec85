"""pipeline-cli - Build, containerize, scan and deploy pipeline for web and Java applications."""

__version__ = "0.1.0"

from pipeline_cli.models import (
    ApplicationType,
    DeploymentState,
    PipelineConfig,
    ReconcileResult,
    ReconcileState,
    ReleasePlan,
)

__all__ = [
    "ApplicationType",
    "DeploymentState",
    "PipelineConfig",
    "ReconcileResult",
    "ReconcileState",
    "ReleasePlan",
]
