from __future__ import annotations

import logging

from rich.console import Console
from rich.text import Text

from mailsearch.sources.models import MailRecord

from .render import build_mail_table
from .search import SearchEngine, SearchQuery

FOOTER = Text.assemble(
    "  ", ("q", "yellow"), ": quit",
    "  ", ("r", "yellow"), ": refresh",
    "  ", ("n", "yellow"), "/", ("p", "yellow"), ": next/previous",
    style="on grey23",
)


class MailViewer:
    """Line-driven browser over the results of one :class:`SearchQuery`."""

    def __init__(
        self,
        engine: SearchEngine,
        query: SearchQuery,
        console: Console | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.engine = engine
        self.query = query
        self.console = console or Console()
        self.logger = logger or logging.getLogger(__name__)
        self.mails: list[MailRecord] = []
        self.selected: int | None = None

    def refresh(self) -> None:
        self.mails = []
        self.selected = None
        self.mails = self.engine.run(self.query)
        self.logger.info("Viewer refreshed: %s mails", len(self.mails))

    def next(self) -> None:
        if not self.mails:
            self.selected = None
            return
        if self.selected is None or self.selected >= len(self.mails) - 1:
            self.selected = 0
        else:
            self.selected += 1

    def previous(self) -> None:
        if not self.mails:
            self.selected = None
            return
        if self.selected is None:
            self.selected = 0
        elif self.selected == 0:
            self.selected = len(self.mails) - 1
        else:
            self.selected -= 1

    def draw(self) -> None:
        self.console.clear()
        self.console.print(build_mail_table(self.mails, selected=self.selected, title="Mails"))
        if self.selected is not None:
            body = self.mails[self.selected].body.strip()
            if body:
                self.console.print(body)
        self.console.print(FOOTER)

    def handle(self, command: str) -> bool:
        """Apply one key command; returns False when the viewer should exit."""
        key = command.strip().lower()[:1]
        if key == "q":
            return False
        if key == "r":
            self.refresh()
        elif key in {"n", "j"}:
            self.next()
        elif key in {"p", "k"}:
            self.previous()
        return True

    def run(self) -> None:
        self.refresh()
        while True:
            self.draw()
            try:
                command = self.console.input("> ")
            except EOFError:
                return
            if not self.handle(command):
                return
