"""Data models for pipeline configuration, release plans and reconciliation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class ApplicationType(str, Enum):
    """Supported application categories."""
    ANGULAR_NGINX = "angular-nginx"
    REACT_NGINX = "react-nginx"
    REACT_NORMAL = "react-normal"
    SPRINGBOOT = "springboot"
    TOMCAT_WAR = "tomcat-war"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]

    @property
    def default_port(self) -> int:
        return DEFAULT_PORTS[self]

    @property
    def requires_compile_step(self) -> bool:
        return self in COMPILED_TYPES


DEFAULT_PORTS = {
    ApplicationType.ANGULAR_NGINX: 80,
    ApplicationType.REACT_NGINX: 80,
    ApplicationType.SPRINGBOOT: 8080,
    ApplicationType.TOMCAT_WAR: 8080,
    ApplicationType.REACT_NORMAL: 3000,
}

COMPILED_TYPES = frozenset({ApplicationType.SPRINGBOOT, ApplicationType.TOMCAT_WAR})

# Maven output copied into the image build context
ARTIFACT_GLOBS = {
    ApplicationType.SPRINGBOOT: "target/*.jar",
    ApplicationType.TOMCAT_WAR: "target/*.war",
}


@dataclass(frozen=True)
class PipelineConfig:
    """Resolved, validated configuration for a single pipeline run."""
    app_name: str
    app_type: ApplicationType
    expose_port: int
    environment: str = "stg"
    project: str = "mobitel_pipeline"
    namespace: str = "intsys"
    harbour_secret: str = "harbor-intsys"
    build_tool_image: str = "maven:3.9.6-amazoncorretto-21"
    scan_tool_image: str = "aquasec/trivy:latest"
    deploy_tool_image: str = "inovadockerimages/cicdtools:latest"
    sonar_enabled: bool = False
    sonar_project_key: str = ""
    sonar_project_name: str = ""
    success_email: str = ""
    failure_email: str = ""
    failure_cc: str = ""
    memory_limit: str = "512Mi"
    cpu_limit: Optional[str] = None
    registry_host_template: str = "{environment}-docker-reg.mobitel.lk"


@dataclass(frozen=True)
class ReleasePlan:
    """Derived release facts for one build of one application."""
    image_reference: str
    registry_host: str
    exposed_port: int
    requires_compile_step: bool
    artifact_glob: Optional[str] = None


@dataclass(frozen=True)
class DeploymentState:
    """Live state of the target deployment as last observed."""
    exists: bool
    current_image: Optional[str] = None


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""
    argv: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ReconcileState(str, Enum):
    """States of the deployment reconciler."""
    UNKNOWN = "Unknown"
    UPDATED = "Updated"
    CREATING = "Creating"
    PATCHING = "Patching"
    CREATED = "Created"


@dataclass
class ReconcileResult:
    """Terminal outcome of a successful reconciliation."""
    state: ReconcileState
    image_reference: str
    observed: DeploymentState
    actions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SourceInfo:
    """Source repository facts used for annotations and notifications."""
    remote_url: str
    committer_email: str


class PipelineStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class StageResult:
    """Outcome of a single pipeline stage."""
    name: str
    status: str  # Succeeded, Failed, Skipped
    message: str = ""


@dataclass
class PipelineResult:
    """Outcome of a full pipeline run."""
    status: PipelineStatus
    stages: List[StageResult] = field(default_factory=list)
    error: Optional[Exception] = None
    plan: Optional[ReleasePlan] = None
