"""Output formatting and display utilities using rich library."""

from dataclasses import fields
from typing import List

from rich.console import Console
from rich.table import Table
from rich import box

from pipeline_cli.models import PipelineConfig, ReconcileResult, ReleasePlan, StageResult


class Formatters:
    """Output formatters for CLI display."""

    @staticmethod
    def _get_status_color(status: str) -> str:
        """Get color for a stage status.

        Args:
            status: Stage status (Succeeded, Failed, Skipped)

        Returns:
            Color name for rich formatting
        """
        status_colors = {
            "Succeeded": "green",
            "Failed": "red",
            "Skipped": "dim",
        }
        return status_colors.get(status, "white")

    @staticmethod
    def _get_status_icon(status: str) -> str:
        status_icons = {
            "Succeeded": "✓",
            "Failed": "✗",
            "Skipped": "⊘",
        }
        return status_icons.get(status, "•")

    @staticmethod
    def config_table(config: PipelineConfig) -> Table:
        """Build a two-column table of resolved configuration values."""
        table = Table(
            title="Pipeline Configuration",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Setting", style="white", no_wrap=True)
        table.add_column("Value")

        for item in fields(config):
            value = getattr(config, item.name)
            if value is None:
                display = "[dim]not set[/dim]"
            elif hasattr(value, "value"):
                display = str(value.value)
            else:
                display = str(value)
            table.add_row(item.name, display)
        return table

    @staticmethod
    def plan_table(plan: ReleasePlan) -> Table:
        table = Table(title="Release Plan", box=box.ROUNDED, show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Image", plan.image_reference)
        table.add_row("Registry", plan.registry_host)
        table.add_row("Exposed port", str(plan.exposed_port))
        table.add_row("Compile step", "yes" if plan.requires_compile_step else "no")
        table.add_row("Artifact", plan.artifact_glob or "[dim]none[/dim]")
        return table

    @staticmethod
    def stages_table(stages: List[StageResult]) -> Table:
        """Build a table summarizing pipeline stage outcomes."""
        table = Table(
            title="Pipeline Stages",
            box=box.ROUNDED,
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Stage", style="white", no_wrap=True)
        table.add_column("Status", justify="center")
        table.add_column("Message")

        for stage in stages:
            color = Formatters._get_status_color(stage.status)
            icon = Formatters._get_status_icon(stage.status)
            table.add_row(stage.name, f"[{color}]{icon} {stage.status}[/{color}]", stage.message)
        return table

    @staticmethod
    def reconcile_summary(result: ReconcileResult) -> str:
        previous = result.observed.current_image or "none"
        return (
            f"Deployment {result.state.value.lower()}: {result.image_reference} "
            f"(previous image: {previous}; actions: {', '.join(result.actions)})"
        )

    @staticmethod
    def print_success(message: str) -> None:
        """Print a success message.

        Args:
            message: Success message to display
        """
        console = Console()
        console.print(f"[bold green]✓[/bold green] {message}")

    @staticmethod
    def print_info(message: str) -> None:
        console = Console()
        console.print(f"[blue]ℹ[/blue] {message}")
