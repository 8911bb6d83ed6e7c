"""archivepy CLI - Main commands."""
import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.tree import Tree

app = typer.Typer(
    name="archivepy",
    help="Upload exported archives and browse their contents",
    add_completion=False
)
console = Console()

DEFAULT_CHUNK_MB = 5


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def format_size(size: int) -> str:
    mb = size / (1024 * 1024)
    if mb < 1024:
        return f"{mb:.2f} MB"
    return f"{mb / 1024:.2f} GB"


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Global options."""
    if verbose:
        from archivepy import setup_logging
        logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
        setup_logging(logging.DEBUG)


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Archive to upload", exists=True, dir_okay=False),
    endpoint: str = typer.Option(..., "--endpoint", "-e", envvar="ARCHIVEPY_ENDPOINT", help="Upload gateway URL"),
    token: str = typer.Option(None, "--token", "-t", envvar="ARCHIVEPY_TOKEN", help="Bearer token"),
    chunk_mb: int = typer.Option(DEFAULT_CHUNK_MB, "--chunk-size", "-c", help="Part size in MiB"),
    name: str = typer.Option(None, "--name", "-n", help="Custom file name"),
    platform: str = typer.Option(None, "--platform", "-p", help="Platform the archive was exported from"),
    download_date: str = typer.Option(None, "--download-date", help="Export date (YYYY-MM-DD)"),
    notes: str = typer.Option(None, "--notes", help="Free-form notes"),
):
    """Upload an archive through the multipart gateway."""
    from archivepy import ArchiveClient, ArchiveMetadata, ArchiveError
    from archivepy.core.upload.models import UploadProgress

    async def do_upload():
        metadata = ArchiveMetadata(platform=platform, download_date=download_date, notes=notes)

        async with ArchiveClient(endpoint, chunk_size=chunk_mb * 1024 * 1024) as client:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console
            ) as progress:
                task = progress.add_task(f"Uploading {file_path.name}", total=100)

                def on_progress(p: UploadProgress):
                    progress.update(task, completed=p.percentage)

                result = await client.upload(
                    file_path,
                    token=token,
                    file_name=name,
                    metadata=metadata,
                    progress_callback=on_progress
                )

        console.print(f"[green]Uploaded:[/green] {result.file_name}")
        console.print(f"URL: {result.file_url}")
        console.print(f"Size: {format_size(result.file_size)} in {result.part_count} parts")

    try:
        run_async(do_upload())
    except (ArchiveError, ValueError) as e:
        console.print(f"[red]Upload failed: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def tree(
    file_url: str = typer.Argument(..., help="URL of the stored archive"),
    manifest: str = typer.Option(None, "--manifest", "-m", help="Prepared manifest URL"),
    token: str = typer.Option(None, "--token", "-t", envvar="ARCHIVEPY_TOKEN", help="Bearer token"),
    depth: Optional[int] = typer.Option(1, "--depth", "-d", help="Directory levels to expand"),
    strict: bool = typer.Option(False, "--strict", help="Fail on file/directory conflicts"),
):
    """Show the directory tree of a stored archive."""
    from archivepy import ArchiveClient, ArchiveError

    async def do_tree():
        async with ArchiveClient(strict_tree=strict) as client:
            return await client.inspect(file_url, manifest, token=token)

    try:
        trie = run_async(do_tree())
    except ArchiveError as e:
        console.print(f"[red]Failed to read archive: {e}[/red]")
        raise typer.Exit(1)

    view = ArchiveClient.tree_view()
    view.expand_all(trie, depth=depth)

    root = Tree(f"[bold]{file_url.rsplit('/', 1)[-1]}[/bold]")
    branches = {'': root}
    for _, path, node in view.visible_rows(trie):
        parent = branches[path.rsplit('/', 1)[0] if '/' in path else '']
        if node.is_dir:
            label = f"[yellow]{node.name}/[/yellow]"
            if not view.is_expanded(path):
                label += f" [dim]({len(node)} items)[/dim]"
            branches[path] = parent.add(label)
        else:
            parent.add(node.name)

    console.print(root)
    console.print(f"{trie.file_count} files, {trie.directory_count} directories")
    for conflict in trie.conflicts:
        console.print(f"[yellow]warning:[/yellow] {conflict}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
