"""CLI tool for joining a room and exchanging signaling messages."""
import asyncio
import sys
from typing import List, Optional

import httpx
import typer
from aiortc import RTCIceServer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..exceptions import SignalingError
from ..models import MediaConstraints, SignalingParameters
from ..services import AppRTCClient, HTTPClient, RedirectResolver, RoomParameterFetcher

app = typer.Typer(help="Signaling client for apprtc-style room servers.")
console = Console()


def _format_constraints(constraints: Optional[MediaConstraints]) -> str:
    if constraints is None:
        return "[dim]none[/dim]"
    return escape(str(constraints))


def _format_ice_server(server: RTCIceServer) -> str:
    urls = server.urls if isinstance(server.urls, str) else ", ".join(server.urls)
    if server.username:
        return escape(f"{urls} (user: {server.username})")
    return escape(urls)


def create_parameters_display(parameters: SignalingParameters) -> Table:
    """Create a rich table displaying a room's signaling parameters."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="cyan bold", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Base URL", escape(parameters.base_href))
    table.add_row("Message URL", escape(parameters.message_url))
    table.add_row("Channel token", escape(parameters.channel_token))
    table.add_row(
        "Initiator",
        "[green]yes[/green]" if parameters.initiator else "[yellow]no[/yellow]",
    )
    for i, server in enumerate(parameters.ice_servers, 1):
        table.add_row(f"ICE server {i}", _format_ice_server(server))
    table.add_row("PC constraints", _format_constraints(parameters.pc_constraints))
    table.add_row(
        "Video constraints", _format_constraints(parameters.video_constraints)
    )

    return table


class ConsoleHandler:
    """Prints channel events and ICE servers to the console."""

    def __init__(self):
        self.closed = asyncio.Event()

    def on_open(self) -> None:
        console.print("[green]Channel open[/green]")

    def on_message(self, data: str) -> None:
        console.print(f"[cyan]<<[/cyan] {escape(data)}")

    def on_close(self) -> None:
        console.print("[yellow]Channel closed[/yellow]")
        self.closed.set()

    def on_error(self, code: int, description: str) -> None:
        console.print(f"[red]Channel error {code}: {escape(description)}[/red]")
        self.closed.set()

    def on_ice_servers(self, ice_servers: List[RTCIceServer]) -> None:
        console.print(f"[green]Received {len(ice_servers)} ICE servers[/green]")


async def fetch_parameters(url: str) -> SignalingParameters:
    """Resolve a room URL and scrape its parameters without joining the channel."""
    async with HTTPClient() as http:
        room_url = await RedirectResolver(http).resolve(url)
        return await RoomParameterFetcher(http).fetch(room_url)


async def run_session(url: str) -> None:
    """Join a room, print incoming messages and send stdin lines until EOF."""
    handler = ConsoleHandler()

    async with AppRTCClient(handler, handler) as client:
        parameters = await client.connect_to_room(url)
        console.print(
            Panel(
                create_parameters_display(parameters),
                title="[green]Connected",
                border_style="green",
            )
        )
        console.print("[dim]Type messages to send, Ctrl-D to leave.[/dim]")

        while not handler.closed.is_set():
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            line = line.rstrip("\n")
            if not line:
                continue
            await client.send_message(line)
            await client.flush()
            console.print(f"[magenta]>>[/magenta] {escape(line)}")


@app.command()
def params(url: str = typer.Argument(..., help="Room or room server URL")):
    """
    Show the signaling parameters of a room.

    Examples:

        apprtc-client params "https://apprtc.appspot.com/?r=12345678"
    """
    try:
        parameters = asyncio.run(fetch_parameters(url))
    except (SignalingError, httpx.HTTPError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            create_parameters_display(parameters),
            title="[cyan]Room parameters",
            border_style="cyan",
        )
    )


@app.command()
def connect(url: str = typer.Argument(..., help="Room or room server URL")):
    """
    Join a room and exchange signaling messages over stdin/stdout.

    Examples:

        apprtc-client connect https://apprtc.appspot.com

        apprtc-client connect "https://apprtc.appspot.com/?r=12345678"
    """
    console.print(f"\n[bold cyan]Joining room:[/bold cyan] {escape(url)}\n")

    try:
        asyncio.run(run_session(url))
    except (SignalingError, httpx.HTTPError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
