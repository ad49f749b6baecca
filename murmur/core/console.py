from typing import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme
from rich.traceback import install as install_rich_traceback

# Custom theme
murmur_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "transcript": "bold white",
})

class ConsoleManager:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConsoleManager, cls).__new__(cls)
            cls._instance.initialized = False
        return cls._instance

    def __init__(self):
        if self.initialized:
            return

        self.console = Console(theme=murmur_theme)
        self.output_mode = "standard"
        self.initialized = True

        install_rich_traceback(console=self.console, show_locals=False)

    def configure(self, output_mode: str = "standard", debug: bool = False):
        """
        output_mode: 'standard', 'verbose', 'silent'
        """
        self.output_mode = output_mode.lower()
        if debug:
            self.output_mode = "verbose"

    def print(self, *args, **kwargs):
        if self.output_mode != "silent":
            self.console.print(*args, **kwargs)

    def success(self, message: str):
        if self.output_mode != "silent":
            self.console.print(f"✅ {message}", style="success")

    def warning(self, message: str):
        if self.output_mode != "silent":
            self.console.print(f"⚠️ {message}", style="warning")

    def error_panel(self, message: str, title: str = "Error"):
        if self.output_mode != "silent":
            self.console.print(Panel(Text(message), title=Text(title), border_style="red", expand=False))

    def transcript(self, text: str, title: str = "Transcript"):
        if self.output_mode == "silent":
            return
        # Transcript text and file names are never parsed as markup
        body = Text(text) if text else "[dim](no speech detected)[/dim]"
        self.console.print(Panel(body, title=Text(title), border_style="green", expand=False), style="transcript")

    def key_value_table(self, rows: dict, title: str = "") -> None:
        if self.output_mode == "silent":
            return
        table = Table(title=title or None, show_header=False)
        table.add_column(style="info")
        table.add_column()
        for key, value in rows.items():
            table.add_row(Text(str(key)), Text(str(value)))
        self.console.print(table)

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        """
        Show a spinner status in standard mode.
        In verbose mode, just log start/end.
        In silent mode, do nothing.
        """
        if self.output_mode == "silent":
            yield
            return

        if self.output_mode == "verbose":
            self.console.log(f"Started: {message}")
            try:
                yield
            finally:
                self.console.log(f"Finished: {message}")
            return

        with self.console.status(f"[bold cyan]{message}", spinner="dots"):
            yield

# Global instance
console = ConsoleManager()
