import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from roast_lens.models import RoastResult, RoastStatus
from roast_lens.analyzers.template import abbreviate

load_dotenv()
app = typer.Typer()
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
    )
    # keep provider SDK chatter out of the roast unless asked
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.DEBUG if verbose else logging.WARNING)


def _profile_table(result: RoastResult) -> Table:
    p = result.profile
    table = Table(show_header=False, box=None)
    table.add_row("[dim]name[/]", f"{p.display_name} (@{p.username})" + (" [blue]✓[/]" if p.verified else ""))
    if p.location:
        table.add_row("[dim]location[/]", p.location)
    table.add_row("[dim]followers[/]", abbreviate(p.followers))
    table.add_row("[dim]following[/]", abbreviate(p.following))
    table.add_row("[dim]ratio[/]", f"{p.follower_ratio:g}:1")
    table.add_row("[dim]posts[/]", abbreviate(p.post_count))
    table.add_row("[dim]source[/]", p.origin_source.value)
    if result.post:
        table.add_row("[dim]latest post[/]", result.post.text)
        table.add_row("[dim]posted[/]", f"{result.last_activity_hours}h ago")
        table.add_row("[dim]engagement[/]", abbreviate(result.avg_engagement or 0))
    return table


@app.command()
def roast(
    handle: str = typer.Argument(help="X handle, with or without @"),
    source: str = typer.Option("primary", "--source", "-s", help="Profile source: 'primary' (X API) or 'fallback' (web search)"),
    audio_out: Optional[Path] = typer.Option(None, "--audio-out", "-a", help="Write the voiced roast to this file"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    if source not in ("primary", "fallback"):
        console.print(f"[bold red]Error:[/] --source must be 'primary' or 'fallback', got '{source}'")
        raise typer.Exit(1)

    _setup_logging(verbose)

    from roast_lens.pipeline import roast_handle

    with console.status("[bold green]Cooking the roast..."):
        result = asyncio.run(roast_handle(handle, source=source))

    if as_json:
        console.print_json(result.model_dump_json(exclude={"audio": {"data"}}))
    elif result.status == RoastStatus.ERROR:
        console.print(f"[bold red]Error:[/] {result.error_message}")
    else:
        console.print(_profile_table(result))
        console.print(Panel(result.roast_text, title=f"@{result.handle}", border_style="red"))
        if result.image_critique:
            console.print(Panel(result.image_critique, title="Profile photo", border_style="magenta"))

    if result.status == RoastStatus.ERROR:
        raise typer.Exit(1)

    if audio_out:
        if result.audio:
            audio_out.write_bytes(result.audio.data)
            console.print(f"[bold green]✓[/] Audio saved to [cyan]{audio_out}[/]")
        else:
            console.print("[dim]No audio this time (voice synthesis unavailable).[/]")


if __name__ == "__main__":
    app()
