"""Resolution of raw pipeline parameters into a validated PipelineConfig."""

from typing import Any, Dict, Mapping

from pipeline_cli.models import ApplicationType, PipelineConfig
from pipeline_cli.validators import Validator, optional_text


REQUIRED_PARAMETERS = ["appName", "appType"]

DEFAULT_NOTIFICATION_ADDRESS = "cicd-notifications@mobitel.lk"

# Parameter defaults for every optional key; sonar project key/name fall back to appName
DEFAULTS: Dict[str, Any] = {
    "environment": "stg",
    "project": "mobitel_pipeline",
    "namespace": "intsys",
    "harbourSecret": "harbor-intsys",
    "buildToolImage": "maven:3.9.6-amazoncorretto-21",
    "scanToolImage": "aquasec/trivy:latest",
    "deployToolImage": "inovadockerimages/cicdtools:latest",
    "sonarEnabled": False,
    "successEmail": DEFAULT_NOTIFICATION_ADDRESS,
    "failureEmail": DEFAULT_NOTIFICATION_ADDRESS,
    "failureCC": DEFAULT_NOTIFICATION_ADDRESS,
    "memoryLimit": "512Mi",
    "cpuLimit": None,
    "registryHostTemplate": "{environment}-docker-reg.mobitel.lk",
}

RECOGNIZED_PARAMETERS = REQUIRED_PARAMETERS + [
    "environment",
    "project",
    "namespace",
    "exposePort",
    "harbourSecret",
    "buildToolImage",
    "scanToolImage",
    "deployToolImage",
    "sonarEnabled",
    "sonarProjectKey",
    "sonarProjectName",
    "successEmail",
    "failureEmail",
    "failureCC",
    "memoryLimit",
    "cpuLimit",
    "registryHostTemplate",
]


def default_port(app_type: ApplicationType) -> int:
    """Default exposed port for an application type."""
    return app_type.default_port


def resolve(raw_parameters: Mapping[str, Any]) -> PipelineConfig:
    """Merge raw pipeline parameters with defaults into a PipelineConfig.

    Required parameters are checked first and every missing one is reported
    together. The application type is validated before any default that
    depends on it is computed.

    Args:
        raw_parameters: Mapping of camelCase parameter names to values.
            Keys whose value is None are treated as unset.

    Returns:
        The resolved, immutable PipelineConfig

    Raises:
        ValidationError: If parameters are missing, unknown or invalid
    """
    validator = Validator()
    params = {key: value for key, value in dict(raw_parameters).items() if value is not None}

    validator.validate_parameters(REQUIRED_PARAMETERS, params)
    validator.validate_unknown_keys(RECOGNIZED_PARAMETERS, params)
    app_type = validator.validate_app_type(str(params["appType"]).strip())

    def get(key: str) -> Any:
        value = params.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULTS[key]
        return value.strip() if isinstance(value, str) else value

    app_name = validator.validate_name(str(params["appName"]).strip(), "appName")
    namespace = validator.validate_name(str(get("namespace")), "namespace")

    if optional_text(params.get("exposePort")) is None:
        expose_port = default_port(app_type)
    else:
        expose_port = validator.validate_port(params["exposePort"])

    return PipelineConfig(
        app_name=app_name,
        app_type=app_type,
        expose_port=expose_port,
        environment=str(get("environment")),
        project=str(get("project")),
        namespace=namespace,
        harbour_secret=str(get("harbourSecret")),
        build_tool_image=str(get("buildToolImage")),
        scan_tool_image=str(get("scanToolImage")),
        deploy_tool_image=str(get("deployToolImage")),
        sonar_enabled=validator.validate_bool(get("sonarEnabled"), "sonarEnabled"),
        sonar_project_key=str(optional_text(params.get("sonarProjectKey")) or app_name),
        sonar_project_name=str(optional_text(params.get("sonarProjectName")) or app_name),
        success_email=str(get("successEmail")),
        failure_email=str(get("failureEmail")),
        failure_cc=str(get("failureCC")),
        memory_limit=str(get("memoryLimit")),
        cpu_limit=optional_text(params.get("cpuLimit")),
        registry_host_template=validator.validate_registry_template(str(get("registryHostTemplate"))),
    )
