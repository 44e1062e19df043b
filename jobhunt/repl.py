"""Interactive query shell over the local job store."""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging
import os

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .database import Database, QueryError
from .errors import ScrapeError

try:
    import readline
except ImportError:  # Windows
    readline = None

logger = logging.getLogger(__name__)

PROMPT = ">> "
SELECT_PREFIX = "select jobs"

HELP_TEXT = """\
[cyan]select jobs[/cyan] [where ...] [order by ...] [limit ...]   query stored jobs
[cyan]refresh[/cyan]                                              scrape again and replace stored jobs
[cyan]help[/cyan]                                                 show this message
[cyan]exit[/cyan]                                                 leave"""


class Repl:
    """Line-oriented shell accepting SQL-like job queries.

    ``select jobs ...`` is rewritten to ``select * from jobs ...`` and run
    against the store. ``refresh`` calls the given refresh callable, which
    must scrape and replace the stored jobs and return how many were stored.
    """

    def __init__(self, db: Database, refresh: Callable[[], int],
                 console: Optional[Console] = None,
                 history_file: Optional[str] = ".jobhunthistory",
                 input_func: Optional[Callable[[str], str]] = None):
        self.db = db
        self.refresh = refresh
        self.console = console or Console()
        self.history_file = history_file
        self.input_func = input_func or self.console.input

    def run(self) -> None:
        """Read and handle lines until exit, Ctrl-C or Ctrl-D."""
        self._load_history()
        self.console.print("[green]Welcome, please begin your job hunt by entering a query.[/green]")

        while True:
            try:
                line = self.input_func(PROMPT)
            except (EOFError, KeyboardInterrupt):
                break
            if not self.handle(line):
                break

        self._save_history()
        self.console.print("[green]Thank you for using jobhunt. Goodbye![/green]")

    def handle(self, line: str) -> bool:
        """Handle one input line.

        Args:
            line: Raw input line

        Returns:
            False when the shell should stop, True otherwise
        """
        line = line.strip()
        command = line.lower()

        if not line:
            return True
        if command.startswith(SELECT_PREFIX):
            self.select_and_display_jobs(line)
        elif command == "refresh":
            self.refresh_jobs()
        elif command == "help":
            self.console.print(HELP_TEXT)
        elif command in ("exit", "quit"):
            return False
        else:
            self.console.print(f'[red]Does not compute! 🤖 "{escape(line)}" is not a valid query/command.[/red]')
        return True

    def select_and_display_jobs(self, line: str) -> None:
        query = "select * from jobs" + line[len(SELECT_PREFIX):]
        try:
            rows = self.db.query(query)
        except QueryError as e:
            self.console.print(f"[red]Error querying DB. {escape(str(e))}[/red]")
            return

        if rows:
            self.console.print(self._rows_table(rows))
        self.console.print(f"[green]{len(rows)} jobs returned.[/green]")

    def refresh_jobs(self) -> None:
        self.console.print("[green]Refreshing local database...[/green]")
        try:
            count = self.refresh()
        except ScrapeError as e:
            logger.error(f"Refresh failed: {e}")
            self.console.print(f"[red]Refresh failed, keeping previous jobs. {escape(str(e))}[/red]")
            return
        self.console.print(
            f"[green]Refresh completed successfully at "
            f"{datetime.now():%d-%m-%Y %H:%M:%S} ({count} jobs)[/green]"
        )

    @staticmethod
    def _rows_table(rows: List[Dict[str, Any]]) -> Table:
        table = Table(show_lines=False)
        columns = [c for c in rows[0].keys() if c != 'id']
        for column in columns:
            table.add_column(column, overflow="fold")
        for row in rows:
            values = []
            for column in columns:
                value = row.get(column)
                if isinstance(value, list):
                    value = ", ".join(str(v) for v in value)
                values.append("" if value is None else escape(str(value)))
            table.add_row(*values)
        return table

    def _load_history(self) -> None:
        if readline is None or not self.history_file:
            return
        if os.path.exists(self.history_file):
            try:
                readline.read_history_file(self.history_file)
            except OSError as e:
                logger.warning(f"Could not read history from {self.history_file}: {e}")

    def _save_history(self) -> None:
        if readline is None or not self.history_file:
            return
        try:
            readline.write_history_file(self.history_file)
        except OSError as e:
            logger.warning(f"Could not save history to {self.history_file}: {e}")
