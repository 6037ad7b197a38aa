# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer

from teamline.logging_config import setup_logging
from teamline.repository.configuration import CONFIGURATION_REPO
from teamline.terminal import configuration
from teamline.terminal.custom_typer import OrderedAliasedTyperGroup
from teamline.terminal.timeline import teams, timeline
from teamline.view import state as view_state

app = typer.Typer(
    cls=OrderedAliasedTyperGroup,
    help="Teamline - Linear team timelines in the CLI",
    no_args_is_help=True,
)
app.add_typer(configuration.app, name="config, c")
app.command(name="timeline, tl")(timeline)
app.command(name="teams, tm")(teams)


@app.callback()
def main_callback(
    no_header: Annotated[
        bool,
        typer.Option(
            "--no-header",
            "-nh",
            help="Suppress header output",
        ),
    ] = False,
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level",
            help="Override the configured log level (DEBUG, INFO, WARNING, ERROR)",
        ),
    ] = None,
) -> None:
    """
    Teamline - Linear team timelines in the CLI

    Global options that apply to all commands.
    """
    if no_header:
        view_state.set_show_header(False)
    setup_logging(log_level or CONFIGURATION_REPO.get_config().get("log_level"))


def run() -> None:
    app()
