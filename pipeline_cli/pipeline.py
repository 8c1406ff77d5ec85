"""End-to-end pipeline: build, containerize, scan, deploy, annotate, notify."""

import logging
from typing import Callable, List, Optional, Tuple

from pipeline_cli.builder import ImageBuilder
from pipeline_cli.exceptions import PipelineCLIError
from pipeline_cli.kubeconfig import EnvironmentKubeconfig
from pipeline_cli.models import (
    PipelineConfig,
    PipelineResult,
    PipelineStatus,
    ReleasePlan,
    StageResult,
)
from pipeline_cli.notifier import Notifier
from pipeline_cli.reconciler import ClusterReconciler
from pipeline_cli.scm import SourceControl

logger = logging.getLogger(__name__)


class Pipeline:
    """Runs the pipeline stages in order and reports the outcome once.

    A failing stage stops the run; the remaining stages are not attempted.
    Exactly one notification is sent per run, success or failure.
    """

    def __init__(
        self,
        config: PipelineConfig,
        plan: ReleasePlan,
        builder: ImageBuilder,
        reconciler: ClusterReconciler,
        source_control: SourceControl,
        notifier: Notifier,
        kubeconfig: Optional[EnvironmentKubeconfig] = None
    ):
        self.config = config
        self.plan = plan
        self.builder = builder
        self.reconciler = reconciler
        self.source_control = source_control
        self.notifier = notifier
        self.kubeconfig = kubeconfig
        self.source_info = None
        self.scan_report = ""
        self.reconcile_result = None

    def stages(self, build_url: str) -> List[Tuple[str, Callable[[], str], bool]]:
        """Ordered (name, action, enabled) stage table."""
        return [
            ("Build & Test", self._compile, self.plan.requires_compile_step),
            ("SonarQube Analysis", self._sonar, self.config.sonar_enabled),
            ("Build & Push Docker Image", self._build_and_push, True),
            ("Security Scan", self._scan, True),
            ("Cleanup Local Images", self._cleanup, True),
            ("Deploy to Kubernetes", self._deploy, True),
            ("Extract Git Information", self._git_info, True),
            ("Set Deployment Annotations", lambda: self._annotate(build_url), True),
        ]

    def _compile(self) -> str:
        self.builder.compile(self.plan)
        return "Maven build and tests passed"

    def _sonar(self) -> str:
        self.builder.sonar_analysis(self.config)
        return f"Analysis submitted for {self.config.sonar_project_key}"

    def _build_and_push(self) -> str:
        self.builder.build_and_push(self.plan)
        return f"Pushed {self.plan.image_reference}"

    def _scan(self) -> str:
        self.scan_report = self.builder.scan(self.plan)
        logger.info("Scan report for %s:\n%s", self.plan.image_reference, self.scan_report)
        return "Scan completed"

    def _cleanup(self) -> str:
        self.builder.cleanup(self.plan)
        return "Local image removed"

    def _deploy(self) -> str:
        if self.kubeconfig is not None:
            self.kubeconfig.load()
        self.reconcile_result = self.reconciler.reconcile(self.plan, self.config)
        return f"Deployment {self.reconcile_result.state.value.lower()}"

    def _git_info(self) -> str:
        self.source_info = self.source_control.info()
        return self.source_info.remote_url

    def _annotate(self, build_url: str) -> str:
        written = self.reconciler.annotate(self.config, build_url, self.source_info.remote_url)
        return "Annotation set" if written else "Annotation already present"

    def run(self, job_name: str, build_id: int, build_url: str) -> PipelineResult:
        """Run every enabled stage, then send the status notification.

        Args:
            job_name: Name of the CI job, used in the notification subject
            build_id: Build number this plan was derived from
            build_url: Link to the build's console output

        Returns:
            PipelineResult with per-stage outcomes
        """
        result = PipelineResult(status=PipelineStatus.SUCCESS, plan=self.plan)

        try:
            for name, action, enabled in self.stages(build_url):
                if not enabled:
                    result.stages.append(StageResult(name, "Skipped"))
                    continue

                logger.info("Stage: %s", name)
                try:
                    message = action()
                except PipelineCLIError as e:
                    logger.error("Stage '%s' failed: %s", name, e.message)
                    result.stages.append(StageResult(name, "Failed", e.message))
                    result.status = PipelineStatus.FAILURE
                    result.error = e
                    break
                result.stages.append(StageResult(name, "Succeeded", message))
        except Exception:
            self.notifier.notify(PipelineStatus.FAILURE, self.config, job_name, build_id, build_url)
            raise

        self.notifier.notify(result.status, self.config, job_name, build_id, build_url)
        return result
