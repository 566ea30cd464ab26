"""
prbot CLI main entry point.

Runs conflict resolution for a single pull request in-process, which is
handy for diagnosing what the queue worker would do.
"""

import asyncio
from typing import Optional

import typer

from prbot import __version__
from prbot.cli.commands import config
from prbot.cli.output import Formatter, OutputFormat
from prbot.config.settings import get_settings
from prbot.gateway.azure_devops import AzureDevOpsGateway
from prbot.gateway.base import HostGatewayError
from prbot.merge.engine import ConflictResolutionEngine
from prbot.telemetry.config import configure_logging, configure_telemetry, shutdown_telemetry

app = typer.Typer(
    name="prbot",
    help="Pull request merge conflict auto-resolution",
    no_args_is_help=True,
)

app.add_typer(config.app, name="config", help="Configuration management")


@app.callback()
def main(
    ctx: typer.Context,
    output: str = typer.Option(
        "human",
        "--output", "-o",
        help="Output format (human, json)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
):
    """prbot - auto-resolves merge conflicts on pull requests."""
    ctx.ensure_object(dict)

    try:
        output_format = OutputFormat(output.lower())
    except ValueError:
        output_format = OutputFormat.HUMAN

    ctx.obj["formatter"] = Formatter(format=output_format, verbose=verbose)
    ctx.obj["verbose"] = verbose


async def _run(
    account_url: str,
    project: Optional[str],
    repository_id: str,
    pull_request_id: int,
    dry_run: bool,
):
    gateway = AzureDevOpsGateway.from_settings(get_settings(), account_url=account_url, project=project)
    try:
        engine = ConflictResolutionEngine(gateway)
        if dry_run:
            return await engine.plan(repository_id, pull_request_id)
        return await engine.run(repository_id, pull_request_id)
    finally:
        await gateway.close()


@app.command()
def resolve(
    ctx: typer.Context,
    account_url: str = typer.Argument(..., help="Organization URL, e.g. https://dev.azure.com/contoso"),
    repository_id: str = typer.Argument(..., help="Repository id"),
    pull_request_id: int = typer.Argument(..., help="Pull request id"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or id"),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="List the conflicts that would be resolved, in order, without changing anything",
    ),
):
    """
    Auto-resolve merge conflicts on a pull request.

    Examples:
        prbot resolve https://dev.azure.com/contoso <repo-id> 42
        prbot resolve https://dev.azure.com/contoso <repo-id> 42 --dry-run
    """
    formatter: Formatter = ctx.obj["formatter"]

    configure_logging("DEBUG" if ctx.obj["verbose"] else None)
    configure_telemetry(service_name=f"{get_settings().otel_service_name}-cli")

    try:
        result = asyncio.run(_run(account_url, project, repository_id, pull_request_id, dry_run))
    except HostGatewayError as e:
        formatter.error(str(e), code=type(e).__name__)
        raise typer.Exit(1)
    finally:
        shutdown_telemetry()

    if dry_run:
        formatter.print_batch(pull_request_id, result)
    else:
        formatter.print_result(pull_request_id, result)


@app.command()
def version():
    """Show prbot version."""
    typer.echo(f"prbot v{__version__}")


if __name__ == "__main__":
    app()
