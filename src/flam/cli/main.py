import logging
import typer
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.markup import escape

from ..config import API_URL, CONFIG_FILE, VERSION
from ..credentials import CredentialStore
from ..domain.errors import FlamError
from ..registry.http import HttpRegistry
from ..services.install import InstallService
from ..services.login import LoginService
from ..services.publish import PublishService
from ..services.search import SearchService
from ..ui.progress import ProgressManager

app = typer.Typer(help="Command line client for the Dragon registry.")
console = Console()


def get_registry() -> HttpRegistry:
    return HttpRegistry(API_URL)


def get_store() -> CredentialStore:
    return CredentialStore(CONFIG_FILE)


def _version_callback(value: bool):
    if value:
        console.print(f"flam {VERSION}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log registry traffic to stderr"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
):
    """publish, search and install packages from the Dragon registry."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    )


def _fail(prefix: str, error: Exception):
    console.print(f"[red]{prefix}:[/red] {escape(str(error))}", soft_wrap=True)
    raise typer.Exit(code=1)


@app.command()
def login(email: str, password: str):
    """log in and save your API key."""
    console.print("[yellow]Logging in...[/yellow]")
    progress_manager = ProgressManager(console)

    with get_registry() as registry:
        service = LoginService(registry, get_store(), progress_manager)
        try:
            service.login(email, password)
        except (FlamError, OSError) as e:
            _fail("Login failed", e)

    console.print("[green]✓ Logged in. Your API key has been saved.[/green]")


@app.command()
def publish(file: Path = typer.Argument(..., help="Path to your package .zip")):
    """publish a new package version to the registry."""
    progress_manager = ProgressManager(console)

    with get_registry() as registry:
        service = PublishService(registry, get_store(), Path.cwd(), progress_manager)
        try:
            api_key, descriptor = service.prepare()
        except FlamError as e:
            _fail("Error", e)

        console.print(
            f"[yellow]Publishing [bold]{escape(descriptor.name)}[/bold]"
            f"@[bold]{escape(descriptor.version)}[/bold]...[/yellow]"
        )
        try:
            message = service.upload(file, descriptor, api_key)
        except FlamError as e:
            _fail("Publish failed", e)

    console.print(f"[green]✓ {escape(message)}[/green]")


@app.command()
def search(query: str):
    """search packages in the registry."""
    console.print(f"[yellow]Searching packages for \"{escape(query)}\"...[/yellow]")
    progress_manager = ProgressManager(console)

    with get_registry() as registry:
        service = SearchService(registry, progress_manager)
        try:
            results = service.search(query)
        except FlamError as e:
            _fail("Search failed", e)

    # one result per line, whatever the terminal width
    for line in service.render(results):
        console.print(line, soft_wrap=True)


@app.command()
def install(package_name: str = typer.Argument(..., metavar="PACKAGENAME")):
    """install a package from the registry."""
    console.print(f"[yellow]Looking up [bold]{escape(package_name)}[/bold]...[/yellow]")
    progress_manager = ProgressManager(console)

    with get_registry() as registry:
        service = InstallService(registry, Path.cwd(), progress_manager=progress_manager)
        try:
            version = service.resolve_version(package_name)
            console.print(
                f"[yellow]Downloading [bold]{escape(package_name)}[/bold]"
                f"@[bold]{escape(version)}[/bold]...[/yellow]"
            )
            target = service.install(package_name, version)
        except FlamError as e:
            _fail("Install failed", e)

    console.print(
        f"[green]✓ Package [bold]{escape(package_name)}[/bold] installed to "
        f"`{escape(str(target.parent.name))}`.[/green]"
    )


if __name__ == "__main__":
    app()
