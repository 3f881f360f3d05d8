"""
bpmap CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

from pathlib import Path

import click

from ..config import load_settings
from ..core.exceptions import ConfigError
from .commands import entities, explore, graph, initialize, links, show
from .utils import configure_logging


@click.group()
@click.version_option(package_name="bpmap")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """bpmap: Business Process Map.

    Maps processes and sub-processes to the systems and vendors they
    depend on, and drills down from the overview to any entity.

    \b
    Quick Start:
      bpmap init --demo
      bpmap show
      bpmap show "CRM System"
      bpmap explore
    """
    ctx.ensure_object(dict)["verbose"] = verbose
    # Commands taking -p switch to that project's level in open_workspace.
    try:
        level = load_settings(Path.cwd()).logging.level
    except ConfigError:
        level = "WARNING"
    configure_logging(verbose, level)


# Register commands
main.add_command(initialize.init)
main.add_command(entities.add)
main.add_command(entities.rename)
main.add_command(entities.delete)
main.add_command(entities.list_entities, name="list")
main.add_command(links.links)
main.add_command(show.show)
main.add_command(show.describe)
main.add_command(graph.graph)
main.add_command(explore.explore)

if __name__ == "__main__":
    main()
