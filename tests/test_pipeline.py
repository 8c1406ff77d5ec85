"""Tests for end-to-end pipeline sequencing."""

from unittest.mock import MagicMock

import pytest

from pipeline_cli.exceptions import CreateFailedError, ExternalCommandError
from pipeline_cli.models import (
    CommandResult,
    DeploymentState,
    PipelineStatus,
    ReconcileResult,
    ReconcileState,
    SourceInfo,
)
from pipeline_cli.pipeline import Pipeline
from pipeline_cli.planner import plan


@pytest.fixture
def collaborators(springboot_plan):
    builder = MagicMock()
    builder.scan.return_value = "Total: 0"
    reconciler = MagicMock()
    reconciler.reconcile.return_value = ReconcileResult(
        ReconcileState.CREATED, springboot_plan.image_reference, DeploymentState(exists=False)
    )
    reconciler.annotate.return_value = True
    source_control = MagicMock()
    source_control.info.return_value = SourceInfo("https://git/foo.git", "dev@example.com")
    notifier = MagicMock()
    kubeconfig = MagicMock()
    return {
        "builder": builder,
        "reconciler": reconciler,
        "source_control": source_control,
        "notifier": notifier,
        "kubeconfig": kubeconfig,
    }


def test_successful_run(springboot_config, springboot_plan, collaborators):
    pipeline = Pipeline(springboot_config, springboot_plan, **collaborators)
    result = pipeline.run("foo-deploy", 42, "https://ci/42/")

    assert result.status == PipelineStatus.SUCCESS
    assert [stage.status for stage in result.stages] == [
        "Succeeded", "Skipped", "Succeeded", "Succeeded", "Succeeded", "Succeeded", "Succeeded", "Succeeded"
    ]
    collaborators["kubeconfig"].load.assert_called_once()
    collaborators["reconciler"].annotate.assert_called_once_with(
        springboot_config, "https://ci/42/", "https://git/foo.git"
    )
    collaborators["notifier"].notify.assert_called_once_with(
        PipelineStatus.SUCCESS, springboot_config, "foo-deploy", 42, "https://ci/42/"
    )


def test_static_site_skips_build(nginx_config, collaborators):
    result = Pipeline(nginx_config, plan(nginx_config, 1), **collaborators).run("bar", 1, "https://ci/1/")

    assert result.stages[0].name == "Build & Test"
    assert result.stages[0].status == "Skipped"
    collaborators["builder"].compile.assert_not_called()


def test_failure_stops_remaining_stages(springboot_config, springboot_plan, collaborators):
    collaborators["reconciler"].reconcile.side_effect = CreateFailedError("foo", "intsys")

    result = Pipeline(springboot_config, springboot_plan, **collaborators).run("foo-deploy", 42, "https://ci/42/")

    assert result.status == PipelineStatus.FAILURE
    assert isinstance(result.error, CreateFailedError)
    assert result.stages[-1].name == "Deploy to Kubernetes"
    assert result.stages[-1].status == "Failed"
    collaborators["source_control"].info.assert_not_called()
    collaborators["reconciler"].annotate.assert_not_called()
    collaborators["notifier"].notify.assert_called_once_with(
        PipelineStatus.FAILURE, springboot_config, "foo-deploy", 42, "https://ci/42/"
    )


def test_build_failure_is_reported_once(springboot_config, springboot_plan, collaborators):
    collaborators["builder"].compile.side_effect = ExternalCommandError(CommandResult(("mvn", "test"), 1))

    result = Pipeline(springboot_config, springboot_plan, **collaborators).run("foo-deploy", 42, "https://ci/42/")

    assert result.status == PipelineStatus.FAILURE
    assert len(result.stages) == 1
    collaborators["builder"].build_and_push.assert_not_called()
    assert collaborators["notifier"].notify.call_count == 1


def test_unexpected_error_still_notifies(springboot_config, springboot_plan, collaborators):
    collaborators["builder"].cleanup.side_effect = PermissionError("dockerImage")

    with pytest.raises(PermissionError):
        Pipeline(springboot_config, springboot_plan, **collaborators).run("foo-deploy", 42, "https://ci/42/")

    collaborators["notifier"].notify.assert_called_once_with(
        PipelineStatus.FAILURE, springboot_config, "foo-deploy", 42, "https://ci/42/"
    )
