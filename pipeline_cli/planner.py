"""Release planning: image reference and build policy for one build."""

from pipeline_cli.models import ARTIFACT_GLOBS, PipelineConfig, ReleasePlan
from pipeline_cli.validators import Validator


def registry_host(config: PipelineConfig) -> str:
    """Registry host for the configured environment."""
    return config.registry_host_template.format(environment=config.environment)


def image_reference(config: PipelineConfig, build_id: int) -> str:
    """Fully qualified image reference: {registry}/{project}/{app}:{environment}.{build}."""
    return f"{registry_host(config)}/{config.project}/{config.app_name}:{config.environment}.{build_id}"


def plan(config: PipelineConfig, build_id: int) -> ReleasePlan:
    """Derive the release plan for a build.

    Args:
        config: Resolved pipeline configuration
        build_id: Monotonically increasing build number supplied by the caller

    Returns:
        ReleasePlan for this build

    Raises:
        ValidationError: If build_id is not a non-negative integer
    """
    build_id = Validator().validate_build_id(build_id)
    return ReleasePlan(
        image_reference=image_reference(config, build_id),
        registry_host=registry_host(config),
        exposed_port=config.expose_port,
        requires_compile_step=config.app_type.requires_compile_step,
        artifact_glob=ARTIFACT_GLOBS.get(config.app_type),
    )
