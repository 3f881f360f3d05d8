"""
Explore Command - interactive drill-down.

A small prompt loop over a DrillNavigator. Each command re-renders the
current view; deletions made here are saved and reset the focus when the
deleted entity was on the navigation path.
"""

import logging
import shlex
from typing import List, Set

import click
from rich.console import Console

from ...analysis.details import describe as describe_entity
from ...analysis.navigator import DrillNavigator
from ...analysis.projection import GraphProjector
from ...core.exceptions import BpmapError
from ...core.types import ROOT_ID, EntityKind
from ..formatting import details_table, projection_tree
from ..utils import Workspace, echo_error, echo_success, handle_errors, open_workspace, project_option, resolve_entity

logger = logging.getLogger(__name__)
console = Console()

HELP = """\
[bold]Commands[/bold]
  [cyan]<id or name>[/cyan] / [cyan]focus <id>[/cyan]   drill into an entity
  [cyan]up[/cyan]                          back to the previous focus
  [cyan]reset[/cyan] / [cyan]all[/cyan]                 back to the overview
  [cyan]describe [id][/cyan]               details of an entity (default: current)
  [cyan]hide <system|vendor>[/cyan]        leave a kind out of the view
  [cyan]unhide <system|vendor>[/cyan]      bring it back
  [cyan]delete <id>[/cyan]                 delete an entity and save
  [cyan]help[/cyan]                        this text
  [cyan]quit[/cyan] / [cyan]exit[/cyan]                 leave
"""

QUIT_WORDS = {"quit", "exit", "q"}


class ExploreSession:
    """Interprets explore commands against a navigator."""

    def __init__(self, ws: Workspace):
        self.ws = ws
        projector = GraphProjector(ws.store, root_label=ws.settings.view.root_label)
        self.navigator = DrillNavigator(projector)
        self.hidden: Set[EntityKind] = {EntityKind(kind) for kind in ws.settings.view.hide}

    def render(self) -> None:
        projection = self.navigator.view(hide=self.hidden)
        console.print(projection_tree(projection, breadcrumbs=self.navigator.breadcrumbs()))

    def _hide_kind(self, args: List[str]) -> EntityKind:
        if len(args) != 1 or args[0] not in (EntityKind.SYSTEM.value, EntityKind.VENDOR.value):
            raise click.UsageError("expected 'system' or 'vendor'")
        return EntityKind(args[0])

    def execute(self, line: str) -> bool:
        """Run one command line. Returns False when the session should end."""
        try:
            words = shlex.split(line)
        except ValueError as e:
            echo_error(str(e))
            return True
        if not words:
            return True

        command, args = words[0].lower(), words[1:]
        if command in QUIT_WORDS:
            return False

        if command == "help":
            console.print(HELP)
            return True

        try:
            self._dispatch(command, args, words)
        except (BpmapError, click.UsageError) as e:
            echo_error(str(e))
            return True

        self.render()
        return True

    def _dispatch(self, command: str, args: List[str], words: List[str]) -> None:
        store = self.ws.store
        if command == "up":
            self.navigator.drill_up()
        elif command in ("reset", ROOT_ID):
            self.navigator.reset()
        elif command == "describe":
            current = self.navigator.current
            if args:
                ref = resolve_entity(store, " ".join(args))
            elif current is not None:
                ref = current
            else:
                raise click.UsageError("nothing focused; pass an id")
            console.print(details_table(describe_entity(store, ref)))
        elif command == "hide":
            self.hidden.add(self._hide_kind(args))
        elif command == "unhide":
            self.hidden.discard(self._hide_kind(args))
        elif command == "delete":
            if not args:
                raise click.UsageError("delete needs an id")
            ref = resolve_entity(store, " ".join(args))
            name = store.require(ref.kind, ref.id).name
            store.delete(ref.kind, ref.id)
            self.ws.save()
            echo_success(f"Deleted {ref}: {name}")
        else:
            target = " ".join(args) if command == "focus" else " ".join(words)
            if not target:
                raise click.UsageError("focus needs an id")
            ref = resolve_entity(store, target)
            self.navigator.focus_on(ref.id, ref.kind)

    def close(self) -> None:
        self.navigator.detach()


@click.command()
@project_option
@handle_errors
def explore(project_dir: str) -> None:
    """
    Drill through the model interactively.

    Type an id or name to focus it, 'up' to go back and 'help' for the rest.
    """
    ws = open_workspace(project_dir)
    session = ExploreSession(ws)
    session.render()

    try:
        while True:
            try:
                line = click.prompt("bpmap", default="", show_default=False, prompt_suffix="> ")
            except (click.Abort, EOFError):
                click.echo()
                break
            if not session.execute(line):
                break
    finally:
        session.close()
