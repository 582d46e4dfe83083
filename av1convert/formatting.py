"""Rich-based console formatting utilities"""

from rich.console import Console
from rich.progress import (
    BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn
)
from rich.table import Table
from rich.text import Text

console = Console()

# symbol, symbol style, message style
STATUS_STYLES = {
    "check": ("✓", "bold green", "bold"),
    "warning": ("⚠", "bold yellow", "bold"),
    "error": ("✗", "bold red", "bold"),
    "success": ("✓", "green", "green"),
    "info": ("ℹ", "bold blue", "blue"),
}

def print_status(kind: str, message: str) -> None:
    """Print a message prefixed with the symbol for its kind."""
    symbol, symbol_style, message_style = STATUS_STYLES[kind]
    console.print(Text(f"{symbol} ", style=symbol_style) + Text(message, style=message_style))

def print_check(message: str) -> None:
    print_status("check", message)

def print_warning(message: str) -> None:
    print_status("warning", message)

def print_error(message: str) -> None:
    print_status("error", message)

def print_success(message: str) -> None:
    print_status("success", message)

def print_info(message: str) -> None:
    print_status("info", message)

def print_header(title: str, width: int = 80) -> None:
    """Print a title centered between two rules."""
    rule = Text("=" * width, style="bold blue")
    console.print(rule)
    console.print(Text(title.center(width).rstrip(), style="bold blue"))
    console.print(rule)

def print_queue(jobs) -> None:
    """Print the queued files with their probed metadata."""
    table = Table(title="Queued files", header_style="bold blue")
    table.add_column("File")
    table.add_column("Duration")
    table.add_column("Frames", justify="right")
    table.add_column("Codec")
    table.add_column("Size", justify="right")
    for job in jobs:
        media = job.media
        frames = str(media.frame_count) if media.frame_count else "unknown"
        table.add_row(media.path.name, media.duration, frames, media.codec, media.size)
    console.print(table)

def create_progress() -> Progress:
    """Progress bar used to render encoder progress."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("{task.fields[speed]}"),
        TimeElapsedColumn(),
        console=console,
    )
