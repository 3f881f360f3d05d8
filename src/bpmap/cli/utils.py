"""
CLI Utilities - Shared helper functions for command line operations.

This module provides common functionality used across the CLI commands:
formatted printing, workspace loading/saving, entity id resolution and
error handling.
"""

import functools
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from ..config import Settings, load_settings
from ..core.exceptions import BpmapError, NotFoundError, ValidationError
from ..core.storage import StorageAdapter, open_storage
from ..core.store import EntityStore
from ..core.types import EntityKind, EntityRef

logger = logging.getLogger(__name__)

KIND_CHOICE = click.Choice([kind.value for kind in EntityKind])


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    click.echo(click.style(f"   {message}", dim=True))


def configure_logging(verbose: bool, level: str = "WARNING") -> None:
    """Route log records through rich; --verbose forces DEBUG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def apply_project_log_level(settings: Settings) -> None:
    """Switch to a project's logging.level once its settings are known."""
    ctx = click.get_current_context(silent=True)
    if ctx is None:
        return
    if (ctx.find_root().obj or {}).get("verbose"):
        return
    logging.getLogger().setLevel(settings.logging.level)


@dataclass
class Workspace:
    """A loaded project: settings, storage adapter and the entity store."""
    root: Path
    settings: Settings
    storage: StorageAdapter
    store: EntityStore

    def save(self) -> None:
        self.storage.save(self.store.export())
        logger.debug("Saved model to %s", self.storage.describe())


def open_workspace(project_dir: str = ".") -> Workspace:
    """
    Load settings, open storage and hydrate the store.

    An empty storage yields an empty store.
    """
    root = Path(project_dir).resolve()
    settings = load_settings(root)
    apply_project_log_level(settings)
    storage = open_storage(settings, root)
    store = EntityStore.from_snapshot(storage.load())
    return Workspace(root=root, settings=settings, storage=storage, store=store)


def project_option(func: Callable) -> Callable:
    """Shared -p/--project-dir option."""
    return click.option(
        "-p", "--project-dir",
        default=".",
        type=click.Path(file_okay=False),
        help="Project directory containing .bpmap/",
    )(func)


def handle_errors(func: Callable) -> Callable:
    """Turn BpmapError into a red message and exit status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BpmapError as e:
            echo_error(str(e))
            sys.exit(1)
    return wrapper


def resolve_entity(store: EntityStore, raw: str, kind: Optional[str] = None) -> EntityRef:
    """
    Resolve user input to an entity reference.

    Resolution order:
    1. Exact id (within ``kind`` when given)
    2. Exact name, case-insensitive
    3. Name substring, case-insensitive

    Raises:
        NotFoundError: If nothing matches.
        ValidationError: If the input matches several entities.
    """
    kinds: List[EntityKind] = [EntityKind(kind)] if kind else list(EntityKind)

    by_id = [ref for ref in store.find(raw) if ref.kind in kinds]
    if by_id:
        return by_id[0]

    needle = raw.strip().lower()
    candidates = [
        EntityRef(id=entity.id, kind=k)
        for k in kinds
        for entity in store.list(k)
        if needle and needle in entity.name.lower()
    ]
    exact = [ref for ref in candidates if store.get(ref.kind, ref.id).name.lower() == needle]
    for matches in (exact, candidates):
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            listed = ", ".join(str(ref) for ref in matches[:5])
            raise ValidationError(f"'{raw}' matches several entities: {listed}")

    raise NotFoundError(kind or "entity", raw)
