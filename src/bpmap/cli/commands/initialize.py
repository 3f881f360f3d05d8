"""
Init Command - Project bootstrap.

This module handles the `bpmap init` command, which writes
``.bpmap/config.yaml`` for the chosen storage backend and optionally seeds
the demo model.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

from ...config import DATA_DIR, Settings, StorageBackend, config_path
from ...core.demo import DemoManager
from ...core.storage import open_storage
from ..utils import handle_errors, project_option

console = Console()


def create_gitignore(root_dir: Path) -> None:
    """Ensure the .bpmap/ directory is ignored by git."""
    gitignore = root_dir / ".gitignore"
    entry = f"\n# bpmap\n{DATA_DIR}/\n"

    if not gitignore.exists():
        gitignore.write_text(entry)
        return

    content = gitignore.read_text()
    if DATA_DIR not in content:
        with open(gitignore, "a") as f:
            f.write(entry)


def _init_project(root_dir: Path, backend: StorageBackend, demo: bool, force: bool) -> None:
    settings = Settings(project_name=root_dir.name)
    settings.storage.backend = backend

    config_file = config_path(root_dir)
    settings.save(config_file)
    create_gitignore(root_dir)

    console.print("\n✨ [bold green]Initialized successfully![/bold green]")
    console.print(f"   Config created at: [dim]{config_file}[/dim]")
    console.print(f"   Storage: [dim]{settings.storage.resolve_path(root_dir)}[/dim]")

    if not demo:
        return

    storage = open_storage(settings, root_dir)
    if DemoManager(storage).provision(force=force):
        console.print("📂 Seeded the demo model")
    else:
        console.print("[yellow]Storage already holds a model, demo not written (use --force)[/yellow]")

    console.print("\n[bold green]Ready to go! Try these commands:[/bold green]")
    console.print("1. [bold cyan]bpmap show[/bold cyan]")
    console.print("2. [bold cyan]bpmap show sp1[/bold cyan]")
    console.print("3. [bold cyan]bpmap explore[/bold cyan]")


@click.command()
@click.option("--force", is_flag=True, help="Overwrite existing configuration (and model with --demo)")
@click.option("--demo", is_flag=True, help="Seed an example model to try bpmap instantly")
@click.option("--backend", type=click.Choice([b.value for b in StorageBackend]),
              default=StorageBackend.JSON.value, show_default=True, help="Storage backend")
@project_option
@handle_errors
def init(force: bool, demo: bool, backend: str, project_dir: str) -> None:
    """
    Initialize bpmap in the project directory.
    """
    console.print(Panel.fit("🚀 [bold blue]bpmap Initialization[/bold blue]", border_style="blue"))

    root_dir = Path(project_dir).resolve()
    config_file = config_path(root_dir)

    if config_file.exists() and not force:
        console.print(f"[yellow]Configuration already exists at {config_file}[/yellow]")
        if not Confirm.ask("Do you want to overwrite it?", default=False):
            console.print("Aborted.")
            return

    _init_project(root_dir, StorageBackend(backend), demo, force)
