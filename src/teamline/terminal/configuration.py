# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from teamline import configuration
from teamline.repository.configuration import CONFIGURATION_REPO
from teamline.terminal.custom_typer import AliasedTyperGroup
from teamline.terminal.parse import parse_range_size

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


@app.command("view, v")
def view() -> None:
    """Display current configuration settings."""
    config = CONFIGURATION_REPO.get_config()

    console = Console()
    table = Table()
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("api_url", config["api_url"])
    table.add_row("api_key_env_var", config["api_key_env_var"])
    table.add_row("api_key", "✓ Stored" if config["api_key"] else "✗ Not stored")
    table.add_row("request_timeout", str(config["request_timeout"]))
    table.add_row("member_batch_size", str(config["member_batch_size"]))
    table.add_row("history_batch_size", str(config["history_batch_size"]))
    table.add_row("issues_page_size", str(config["issues_page_size"]))
    table.add_row("history_page_size", str(config["history_page_size"]))
    table.add_row(
        "started_after_lookback_days", str(config["started_after_lookback_days"])
    )
    table.add_row("default_range_size", config["default_range_size"])
    table.add_row("default_team", config.get("default_team") or "None")
    table.add_row("log_level", config.get("log_level", "WARNING"))

    console.print(table)
    console.print()
    console.print(f"Config file: {configuration.APP_CONFIG_PATH}")


@app.command("set, s")
def set(
    api_url: Annotated[
        Optional[str], typer.Option("--api-url", help="GraphQL endpoint")
    ] = None,
    api_key_env_var: Annotated[
        Optional[str],
        typer.Option("--api-key-env-var", help="Environment variable holding the API key"),
    ] = None,
    api_key: Annotated[
        Optional[str],
        typer.Option("--api-key", help="Store an API key (the environment variable wins)"),
    ] = None,
    remove_api_key: Annotated[
        bool, typer.Option("--remove-api-key", help="Remove the stored API key")
    ] = False,
    request_timeout: Annotated[
        Optional[int],
        typer.Option("--request-timeout", help="Seconds to wait for each request"),
    ] = None,
    member_batch_size: Annotated[
        Optional[int],
        typer.Option("--member-batch-size", help="Members fetched concurrently"),
    ] = None,
    history_batch_size: Annotated[
        Optional[int],
        typer.Option("--history-batch-size", help="Item histories fetched concurrently"),
    ] = None,
    issues_page_size: Annotated[
        Optional[int],
        typer.Option("--issues-page-size", help="Work items requested per page"),
    ] = None,
    history_page_size: Annotated[
        Optional[int],
        typer.Option("--history-page-size", help="History entries requested per item"),
    ] = None,
    started_after_lookback_days: Annotated[
        Optional[int],
        typer.Option(
            "--started-after-lookback-days",
            help="Also load items started this many days before the window",
        ),
    ] = None,
    default_range_size: Annotated[
        Optional[str],
        typer.Option("--default-range", help="Default window size: 1w, 2w, 1m or 3m"),
    ] = None,
    default_team: Annotated[
        Optional[str],
        typer.Option("--default-team", help="Team id or name to show by default"),
    ] = None,
    remove_default_team: Annotated[
        bool, typer.Option("--remove-default-team", help="Clear the default team")
    ] = False,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    ] = None,
) -> None:
    """Update configuration settings."""
    try:
        CONFIGURATION_REPO.update_config(
            api_url=api_url,
            api_key_env_var=api_key_env_var,
            api_key=api_key,
            remove_api_key=remove_api_key,
            request_timeout=request_timeout,
            member_batch_size=member_batch_size,
            history_batch_size=history_batch_size,
            issues_page_size=issues_page_size,
            history_page_size=history_page_size,
            started_after_lookback_days=started_after_lookback_days,
            default_range_size=parse_range_size(default_range_size),
            default_team=default_team,
            remove_default_team=remove_default_team,
            log_level=log_level,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))
