"""Main CLI entry point for file-context."""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
import uvicorn
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.tree import Tree

from .client import DEFAULT_API_BASE, FileContextClient
from .config import Config
from .errors import FileContextError
from .models import QueryRequest
from .server import create_app
from .service import QueryService


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug: bool):
    """file-context - ask language models about files in a sandboxed folder."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s] %(asctime)s - %(name)s - %(message)s",
    )


@cli.command()
@click.option("--host", default=None, help="Interface to bind (default: HOST or 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Port to listen on (default: PORT or 3001)")
@click.option("--storage", type=click.Path(file_okay=False), help="Storage root directory")
def serve(host: Optional[str], port: Optional[int], storage: Optional[str]):
    """Run the HTTP API server."""
    config = Config.from_env()
    if storage:
        config = config.model_copy(update={"storage_root": Path(storage)})

    app = create_app(config)
    uvicorn.run(app, host=host or config.host, port=port or config.port)


@cli.command()
@click.argument("paths", nargs=-1)
@click.option("--query", "-q", required=True, help="Question to ask about the files")
@click.option(
    "--model",
    "-m",
    type=click.Choice(["llamacpp", "ollama", "together"]),
    default=None,
    help="Backend to query (default: DEFAULT_MODEL)",
)
@click.option("--storage", type=click.Path(exists=True, file_okay=False), help="Storage root directory")
def ask(paths: tuple[str, ...], query: str, model: Optional[str], storage: Optional[str]):
    """Ask a question using files below the storage root as context.

    Examples:
        filecontext ask notes.txt src -q "What does this project do?"

        filecontext ask src/app.ts -q "Explain this" --model ollama
    """
    console = Console()
    config = Config.from_env()
    if storage:
        config = config.model_copy(update={"storage_root": Path(storage)})

    service = QueryService(config)
    try:
        with console.status(f"[bold green]Querying {model or config.default_backend}...", spinner="dots"):
            response = service.answer(QueryRequest(paths=list(paths), query=query, model=model))
    except FileContextError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    finally:
        service.close()

    if response.error:
        console.print(Panel(response.error, title=f"{response.model} failed", border_style="red"))
        sys.exit(1)

    console.print(Panel(Markdown(response.text), title=response.model, border_style="green"))


def _add_nodes(tree: Tree, nodes: list[dict[str, Any]]) -> None:
    for node in nodes:
        if node.get("type") == "directory":
            branch = tree.add(f"[bold blue]{node['name']}/")
            _add_nodes(branch, node.get("children") or [])
        else:
            suffix = "" if "content" in node else " [dim](unreadable)"
            tree.add(f"{node['name']}{suffix}")


@cli.command(name="ls")
@click.argument("path", default="")
@click.option("--recursive", "-r", is_flag=True, help="Include subfolders")
@click.option("--server", default=DEFAULT_API_BASE, show_default=True, help="API base URL")
def ls(path: str, recursive: bool, server: str):
    """List a folder on a running file-context server."""
    with FileContextClient(server) as client:
        nodes = client.list_files(path, recursive=recursive)

    tree = Tree(f"[bold]{path or 'storage'}")
    _add_nodes(tree, nodes)
    Console().print(tree)


if __name__ == "__main__":
    cli()
