"""Main CLI entry point for pipeline-cli."""

import functools
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from pipeline_cli import __version__
from pipeline_cli.builder import ImageBuilder
from pipeline_cli.config import get_config, load_parameters, parse_overrides
from pipeline_cli.error_handlers import handle_cli_errors, print_error
from pipeline_cli.formatters import Formatters
from pipeline_cli.kubeconfig import EnvironmentKubeconfig
from pipeline_cli.models import PipelineStatus
from pipeline_cli.notifier import Notifier
from pipeline_cli.pipeline import Pipeline
from pipeline_cli.planner import plan as plan_release
from pipeline_cli.reconciler import ClusterReconciler
from pipeline_cli.resolver import resolve
from pipeline_cli.scm import SourceControl
from pipeline_cli.shell import CommandRunner

console = Console()

LOG_FORMAT = "%(message)s"


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration.

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ]
    )

    # kubernetes client is chatty at DEBUG
    logging.getLogger("kubernetes").setLevel(logging.WARNING)


def parameter_options(func):
    """Options shared by every command that resolves pipeline parameters."""
    @click.option(
        "--params-file",
        "-f",
        type=click.Path(dir_okay=False, path_type=Path),
        default="pipeline.yaml",
        show_default=True,
        help="YAML file with pipeline parameters (appName, appType, ...)"
    )
    @click.option(
        "--set",
        "overrides",
        multiple=True,
        metavar="KEY=VALUE",
        help="Override a pipeline parameter, e.g. --set exposePort=8081 (repeatable)"
    )
    @functools.wraps(func)
    def wrapper(*args, params_file: Path, overrides: tuple, **kwargs):
        raw = load_parameters(params_file) if params_file.exists() else {}
        raw.update(parse_overrides(overrides))
        return func(*args, raw_parameters=raw, **kwargs)
    return wrapper


build_id_option = click.option(
    "--build-id",
    envvar="BUILD_NUMBER",
    type=int,
    required=True,
    help="Build number used in the image tag (or set BUILD_NUMBER env var)"
)


@click.group()
@click.version_option(version=__version__, prog_name="pipeline-cli")
@click.option("--verbose", "-v", is_flag=True, help="Show stage progress")
@click.option("--debug", is_flag=True, help="Show every external command")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Tool configuration file (defaults to ~/.pipeline-cli/config.yaml)"
)
@click.pass_context
def cli(ctx, verbose: bool, debug: bool, config_path: Path):
    """pipeline-cli - Build, containerize, scan and deploy web and Java applications.

    Supported application types: angular-nginx, react-nginx, react-normal,
    springboot, tomcat-war.

    Examples:

      # Check the resolved configuration
      pipeline-cli validate -f pipeline.yaml

      # Show the image reference for build 42
      pipeline-cli plan --build-id 42

      # Run the whole pipeline
      pipeline-cli run --build-id 42 --job-name my-app --build-url https://ci/job/my-app/42/
    """
    ctx.ensure_object(dict)
    setup_logging(verbose, debug)
    ctx.obj['config'] = get_config(config_path)


@cli.command()
@handle_cli_errors
@parameter_options
def validate(raw_parameters: dict):
    """Resolve pipeline parameters and show the effective configuration."""
    config = resolve(raw_parameters)
    console.print(Formatters.config_table(config))
    Formatters.print_success("Configuration is valid")


@cli.command()
@handle_cli_errors
@parameter_options
@build_id_option
def plan(raw_parameters: dict, build_id: int):
    """Show the release plan (image reference, port, compile step) for a build."""
    config = resolve(raw_parameters)
    console.print(Formatters.plan_table(plan_release(config, build_id)))


@cli.command()
@handle_cli_errors
@parameter_options
@build_id_option
@click.pass_context
def deploy(ctx, raw_parameters: dict, build_id: int):
    """Create or update the deployment so it runs this build's image.

    An existing deployment only gets its image updated. A missing one is
    created, exposed as a service and patched with the image pull secret
    and resource limits.
    """
    settings = ctx.obj['config']
    config = resolve(raw_parameters)
    release = plan_release(config, build_id)

    kubeconfig = EnvironmentKubeconfig(settings.kubeconfig_dir, config.environment)
    with console.status("[bold yellow]Validating kubeconfig...[/bold yellow]"):
        context = kubeconfig.load()
    Formatters.print_success(f"Using context {context}")

    reconciler = ClusterReconciler(CommandRunner(), kubeconfig.env(), settings.command_timeout)
    with console.status(f"[bold yellow]Reconciling {config.app_name}...[/bold yellow]"):
        result = reconciler.reconcile(release, config)
    Formatters.print_success(Formatters.reconcile_summary(result))


@cli.command()
@handle_cli_errors
@parameter_options
@click.option("--build-url", envvar="BUILD_URL", required=True, help="Build URL (or set BUILD_URL env var)")
@click.option("--git-url", help="Source repository URL (defaults to the origin remote)")
@click.pass_context
def annotate(ctx, raw_parameters: dict, build_url: str, git_url: str):
    """Set the deployment description annotation if it is not already set."""
    settings = ctx.obj['config']
    config = resolve(raw_parameters)
    runner = CommandRunner(default_timeout=settings.command_timeout)

    if not git_url:
        git_url = SourceControl(runner).remote_url()

    kubeconfig = EnvironmentKubeconfig(settings.kubeconfig_dir, config.environment)
    kubeconfig.load()
    reconciler = ClusterReconciler(runner, kubeconfig.env(), settings.command_timeout)

    if reconciler.annotate(config, build_url, git_url):
        Formatters.print_success(f"Annotation set on {config.app_name}")
    else:
        Formatters.print_info(f"Annotation already present on {config.app_name}")


@cli.command()
@handle_cli_errors
@parameter_options
@build_id_option
@click.option("--job-name", envvar="JOB_NAME", required=True, help="CI job name (or set JOB_NAME env var)")
@click.option("--build-url", envvar="BUILD_URL", required=True, help="Build URL (or set BUILD_URL env var)")
@click.option(
    "--workdir",
    type=click.Path(file_okay=False, exists=True, path_type=Path),
    default=".",
    show_default=True,
    help="Checked-out source directory"
)
@click.pass_context
def run(ctx, raw_parameters: dict, build_id: int, job_name: str, build_url: str, workdir: Path):
    """Run the full pipeline and send one status notification.

    Stages: Build & Test (springboot, tomcat-war), SonarQube Analysis (when
    enabled), Build & Push Docker Image, Security Scan, Cleanup Local Images,
    Deploy to Kubernetes, Extract Git Information, Set Deployment Annotations.
    """
    settings = ctx.obj['config']
    config = resolve(raw_parameters)
    release = plan_release(config, build_id)

    runner = CommandRunner(cwd=workdir, default_timeout=settings.command_timeout)
    kubeconfig = EnvironmentKubeconfig(settings.kubeconfig_dir, config.environment)
    pipeline = Pipeline(
        config=config,
        plan=release,
        builder=ImageBuilder(
            runner,
            workdir,
            registry_user=settings.registry_user,
            registry_password=settings.registry_password,
            sonar_scanner=settings.sonar_scanner,
            command_timeout=settings.command_timeout,
            scan_timeout=settings.scan_timeout,
            build_tool_image=config.build_tool_image,
            scan_tool_image=config.scan_tool_image
        ),
        reconciler=ClusterReconciler(runner, kubeconfig.env(), settings.command_timeout),
        source_control=SourceControl(runner),
        notifier=Notifier(settings.smtp_host, settings.smtp_port, settings.smtp_sender),
        kubeconfig=kubeconfig
    )

    console.print(f"\n[bold cyan]Running pipeline for {config.app_name} ({release.image_reference})...[/bold cyan]\n")
    result = pipeline.run(job_name, build_id, build_url)
    console.print(Formatters.stages_table(result.stages))

    if result.status == PipelineStatus.FAILURE:
        print_error(result.error.message, result.error.troubleshooting)
        raise click.ClickException("Pipeline failed")
    Formatters.print_success("Pipeline succeeded")


@cli.group("config")
def config_group():
    """Inspect tool configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx):
    """Show tool settings (secrets are masked)."""
    settings = ctx.obj['config']
    console.print(f"\n[bold cyan]Configuration file:[/bold cyan] {settings.config_path}\n")
    for key in sorted(settings.config):
        value = settings.get(key)
        if value is None:
            console.print(f"{key}: [dim]Not set[/dim]")
        elif "password" in key:
            console.print(f"{key}: [bold]********[/bold]")
        else:
            console.print(f"{key}: [bold]{value}[/bold]")
    console.print()


@config_group.command("set")
@handle_cli_errors
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx, key: str, value: str):
    """Set a tool setting and save it to the configuration file.

    Examples:

      # Use a different kubeconfig directory
      pipeline-cli config set kubeconfig_dir /etc/pipeline/certs

      # Give the vulnerability scan 20 minutes
      pipeline-cli config set scan_timeout 1200
    """
    settings = ctx.obj['config']

    if key not in settings.DEFAULT_CONFIG:
        console.print(f"\n[bold cyan]Valid keys:[/bold cyan] {', '.join(sorted(settings.DEFAULT_CONFIG))}\n")
        raise click.ClickException(f"Invalid configuration key: {key}")

    settings.set(key, value)
    # typed settings raise ConfigurationError on bad values
    if key in ("smtp_port", "command_timeout", "scan_timeout"):
        getattr(settings, key)
    settings.save()

    shown = "********" if "password" in key else value
    Formatters.print_success(f"{key} set to {shown}")
    console.print(f"[dim]Configuration saved to: {settings.config_path}[/dim]")


if __name__ == "__main__":
    cli()
