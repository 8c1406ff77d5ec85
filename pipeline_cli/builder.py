"""Build, image and scan stages executed through external tools."""

import glob
import logging
import shutil
from pathlib import Path
from typing import List, Optional

from pipeline_cli.exceptions import BuildError
from pipeline_cli.models import PipelineConfig, ReleasePlan
from pipeline_cli.shell import CommandRunner

logger = logging.getLogger(__name__)

STAGING_DIR = "dockerImage"
SCAN_GRACE_SECONDS = 60
CONTAINER_WORKDIR = "/workspace"
DOCKER_SOCKET = "/var/run/docker.sock"


class ImageBuilder:
    """Compiles, containerizes, scans and cleans up one application build."""

    def __init__(
        self,
        runner: CommandRunner,
        workdir: Path,
        registry_user: Optional[str] = None,
        registry_password: Optional[str] = None,
        sonar_scanner: str = "sonar-scanner",
        command_timeout: Optional[float] = None,
        scan_timeout: float = 900,
        build_tool_image: Optional[str] = None,
        scan_tool_image: Optional[str] = None
    ):
        """Initialize the builder.

        Args:
            runner: Command runner for mvn, docker, trivy and sonar-scanner
            workdir: Checked-out source directory
            registry_user: Registry login user; login is skipped when unset
            registry_password: Registry login password, passed on stdin
            sonar_scanner: Path to the sonar-scanner executable
            command_timeout: Timeout in seconds for build and image commands
            scan_timeout: Wall-clock budget in seconds for the vulnerability scan
            build_tool_image: Image that provides mvn when it is not on PATH
            scan_tool_image: Image that provides trivy when it is not on PATH
        """
        self.runner = runner
        self.workdir = Path(workdir)
        self.registry_user = registry_user
        self.registry_password = registry_password
        self.sonar_scanner = sonar_scanner
        self.command_timeout = command_timeout
        self.scan_timeout = scan_timeout
        self.build_tool_image = build_tool_image
        self.scan_tool_image = scan_tool_image

    @property
    def staging_dir(self) -> Path:
        return self.workdir / STAGING_DIR

    def _tool(self, binary: str, image: Optional[str], *args: str, mounts: tuple = ()) -> List[str]:
        """Command line for a build tool, run from its image when it is not installed."""
        if shutil.which(binary) or not image:
            return [binary, *args]

        logger.info("%s not found on PATH, running it from %s", binary, image)
        argv = ["docker", "run", "--rm", "-v", f"{self.workdir.resolve()}:{CONTAINER_WORKDIR}", "-w", CONTAINER_WORKDIR]
        for mount in mounts:
            argv.extend(["-v", f"{mount}:{mount}"])
        return [*argv, "--entrypoint", binary, image, *args]

    def compile(self, plan: ReleasePlan) -> bool:
        """Run the maven build and tests for compiled application types.

        Returns:
            True if a compile step ran, False if the type needs none
        """
        if not plan.requires_compile_step:
            logger.info("No build step required for %s", plan.image_reference)
            return False

        self.runner.run_checked(
            self._tool("mvn", self.build_tool_image, "clean", "install", "-DskipTests"),
            timeout=self.command_timeout
        )
        self.runner.run_checked(self._tool("mvn", self.build_tool_image, "test"), timeout=self.command_timeout)
        return True

    def sonar_analysis(self, config: PipelineConfig) -> bool:
        if not config.sonar_enabled:
            return False

        self.runner.run_checked([
            self.sonar_scanner,
            f"-Dsonar.projectKey={config.sonar_project_key}",
            f"-Dsonar.projectName={config.sonar_project_name}",
            "-Dsonar.junit.reportPaths=target/surefire-reports",
            "-Dsonar.coverage.jacoco.xmlReportPaths=target/site/jacoco/jacoco.xml",
        ], timeout=self.command_timeout)
        return True

    def login(self, plan: ReleasePlan) -> bool:
        if not (self.registry_user and self.registry_password):
            logger.warning("No registry credentials configured, skipping docker login to %s", plan.registry_host)
            return False

        self.runner.run_checked(
            ["docker", "login", "-u", self.registry_user, "--password-stdin", plan.registry_host],
            timeout=self.command_timeout,
            input=self.registry_password
        )
        return True

    def stage_artifact(self, plan: ReleasePlan) -> Path:
        """Copy the Dockerfile and the built artifact into the staging context.

        Raises:
            BuildError: If the Dockerfile or artifact is missing
        """
        dockerfile = self.workdir / "Dockerfile"
        if not dockerfile.is_file():
            raise BuildError(f"Dockerfile not found in {self.workdir}", str(self.workdir))

        artifacts = sorted(glob.glob(str(self.workdir / plan.artifact_glob)))
        if not artifacts:
            raise BuildError(f"No build artifact matching {plan.artifact_glob} in {self.workdir}", str(self.workdir))

        self.staging_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(dockerfile, self.staging_dir)
        for artifact in artifacts:
            shutil.copy2(artifact, self.staging_dir)
        return self.staging_dir

    def build_and_push(self, plan: ReleasePlan) -> None:
        """Build the image for the planned reference and push it."""
        self.login(plan)

        context = self.stage_artifact(plan) if plan.artifact_glob else self.workdir
        self.runner.run_checked(
            ["docker", "build", f"--tag={plan.image_reference}", str(context)],
            timeout=self.command_timeout
        )
        self.runner.run_checked(["docker", "push", plan.image_reference], timeout=self.command_timeout)

    def scan(self, plan: ReleasePlan) -> str:
        """Scan the pushed image and return the report table."""
        argv = self._tool(
            "trivy", self.scan_tool_image,
            "image", "--no-progress", "--timeout", f"{int(self.scan_timeout)}s", "-f", "table", plan.image_reference,
            mounts=(DOCKER_SOCKET,)
        )
        result = self.runner.run_checked(argv, timeout=self.scan_timeout + SCAN_GRACE_SECONDS)
        return result.stdout

    def cleanup(self, plan: ReleasePlan) -> None:
        self.runner.run_checked(["docker", "image", "rm", plan.image_reference], timeout=self.command_timeout)
        shutil.rmtree(self.staging_dir, ignore_errors=True)
