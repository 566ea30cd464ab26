"""
Config command for prbot CLI.

Shows the effective settings and merge tool configuration.
"""

import typer

from prbot.cli.output import Formatter
from prbot.config.settings import get_settings, load_merge_tool_config

app = typer.Typer()


def _mask(secret: str) -> str:
    if not secret:
        return ""
    return f"{secret[:4]}..." if len(secret) > 8 else "****"


@app.command("show")
def show_config(ctx: typer.Context):
    """
    Show effective configuration.

    Values come from PRBOT_* environment variables and .env; the personal
    access token is masked.
    """
    formatter: Formatter = ctx.obj["formatter"]
    settings = get_settings()

    values = settings.model_dump(exclude={"personal_access_token"})
    values["personal_access_token"] = _mask(settings.token)
    formatter.print_settings(values)

    tools = load_merge_tool_config(settings.tools_config_path)
    formatter.print_settings(
        {category: tool.get("command") or "(not configured)" for category, tool in tools.items()},
        title="Merge tools",
    )
