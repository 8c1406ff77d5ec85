"""Error handling utilities for CLI commands."""

import click
from rich.console import Console
from functools import wraps

from pipeline_cli.exceptions import PipelineCLIError

console = Console(stderr=True)


def handle_cli_errors(func):
    """Decorator to handle CLI errors with consistent formatting.

    This decorator catches all custom exceptions and formats them
    with error messages and troubleshooting guidance.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PipelineCLIError as e:
            console.print(f"\n[bold red]✗ Error[/bold red]\n")
            console.print(f"[red]{e.message}[/red]\n")

            troubleshooting = e.get_troubleshooting_text()
            if troubleshooting:
                console.print(f"[bold yellow]{troubleshooting}[/bold yellow]\n")

            raise click.ClickException(e.message)

        except click.ClickException:
            raise

        except KeyboardInterrupt:
            console.print("\n\n[dim]Operation cancelled by user[/dim]\n")
            raise click.Abort()

    return wrapper


def print_error(message: str, troubleshooting: list = None):
    """Print an error message with optional troubleshooting steps.

    Args:
        message: Error message to display
        troubleshooting: Optional list of troubleshooting suggestions
    """
    console.print(f"\n[bold red]✗ Error[/bold red]\n")
    console.print(f"[red]{message}[/red]\n")

    if troubleshooting:
        console.print("[bold yellow]Troubleshooting:[/bold yellow]")
        for step in troubleshooting:
            console.print(f"• {step}")
        console.print()
