from __future__ import annotations

import uuid
from datetime import date, datetime, time
from pathlib import Path
from typing import NoReturn

import typer
from dateutil import parser as dt_parser
from dateutil import tz
from rich import print
from rich.console import Console

from mailsearch.config import Settings
from mailsearch.core.filters import DateWindow, build_subject_matcher
from mailsearch.core.logging import configure_logging, get_logger
from mailsearch.errors import ConfigError, MailSearchError
from mailsearch.services import (
    MailViewer,
    SearchEngine,
    SearchQuery,
    build_mail_table,
    fetch_attachments,
    mails_to_json,
    save_attachments,
)
from mailsearch.sources.imap import ImapMailSession

app = typer.Typer(no_args_is_help=True, help="Search a mailbox by subject and date window")

START_HELP = "Start of the window: YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS (default: today 00:00, local time)"
END_HELP = "End of the window, same formats (default: no upper bound)"


def _load_settings() -> Settings:
    try:
        settings = Settings.load()
    except ConfigError as exc:
        print(f"[red]Error[/red]: {exc}")
        raise typer.Exit(1) from exc
    settings.ensure_directories()
    return settings


def _start_logging(settings: Settings, name: str):  # noqa: ANN202
    correlation_id = uuid.uuid4().hex
    configure_logging(settings.logs_dir, correlation_id=correlation_id)
    return get_logger(name, correlation_id)


def _open_session(settings: Settings) -> ImapMailSession:
    return ImapMailSession(settings.imap_account())


def _parse_datetime(value: str) -> datetime:
    try:
        parsed = dt_parser.isoparse(value)
    except ValueError as exc:
        raise typer.BadParameter(f"Expected YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS, got {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.tzlocal())
    return parsed


def _today_start() -> datetime:
    return datetime.combine(date.today(), time.min, tzinfo=tz.tzlocal())


def _build_query(
    subject_query: str,
    start_datetime: str | None,
    end_datetime: str | None,
    regex: bool,
    reverse: bool,
    mail_box: str | None,
    settings: Settings,
) -> SearchQuery:
    start = _parse_datetime(start_datetime) if start_datetime else _today_start()
    end = _parse_datetime(end_datetime) if end_datetime else None
    return SearchQuery(
        folder=mail_box or settings.default_mailbox,
        matcher=build_subject_matcher(subject_query, regex=regex),
        window=DateWindow(start=start, end=end),
        reverse=reverse,
    )


def _fail(exc: Exception, logger) -> NoReturn:  # noqa: ANN001
    logger.error("%s: %s", exc.__class__.__name__, exc)
    print(f"[red]Error[/red]: {exc}")
    raise typer.Exit(1)


@app.command("search")
def search_command(
    subject_query: str = typer.Argument(..., help="Text (or regex with --regex) to look for in the subject"),
    start_datetime: str | None = typer.Option(None, "--start-datetime", help=START_HELP),
    end_datetime: str | None = typer.Option(None, "--end-datetime", help=END_HELP),
    regex: bool = typer.Option(False, "--regex", help="Treat the query as a regular expression"),
    reverse: bool = typer.Option(False, "--reverse", help="Oldest first"),
    mail_box: str | None = typer.Option(None, "--mail-box", "-m", help="Folder to search (default INBOX)"),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    settings = _load_settings()
    logger = _start_logging(settings, "mailsearch.search")

    try:
        query = _build_query(subject_query, start_datetime, end_datetime, regex, reverse, mail_box, settings)
        with _open_session(settings) as session:
            mails = SearchEngine(session, logger=logger).run(query)
    except MailSearchError as exc:
        _fail(exc, logger)

    if json_output:
        typer.echo(mails_to_json(mails))
    else:
        Console().print(build_mail_table(mails))


@app.command("browse")
def browse_command(
    subject_query: str = typer.Argument(..., help="Text (or regex with --regex) to look for in the subject"),
    start_datetime: str | None = typer.Option(None, "--start-datetime", help=START_HELP),
    end_datetime: str | None = typer.Option(None, "--end-datetime", help=END_HELP),
    regex: bool = typer.Option(False, "--regex", help="Treat the query as a regular expression"),
    reverse: bool = typer.Option(False, "--reverse", help="Oldest first"),
    mail_box: str | None = typer.Option(None, "--mail-box", "-m", help="Folder to search (default INBOX)"),
) -> None:
    settings = _load_settings()
    logger = _start_logging(settings, "mailsearch.browse")

    try:
        query = _build_query(subject_query, start_datetime, end_datetime, regex, reverse, mail_box, settings)
        with _open_session(settings) as session:
            MailViewer(SearchEngine(session, logger=logger), query, logger=logger).run()
    except MailSearchError as exc:
        _fail(exc, logger)


@app.command("download")
def download_command(
    uid: int = typer.Argument(..., min=1, help="UID of the message"),
    mail_box: str | None = typer.Option(None, "--mail-box", "-m", help="Folder holding the message"),
    out: Path | None = typer.Option(None, help="Target directory (default: current directory)"),
) -> None:
    settings = _load_settings()
    logger = _start_logging(settings, "mailsearch.download")
    out_dir = (out or Path.cwd()).resolve()

    try:
        with _open_session(settings) as session:
            files = fetch_attachments(session, mail_box or settings.default_mailbox, uid)
    except MailSearchError as exc:
        _fail(exc, logger)

    if not files:
        print(f"[yellow]No attachments in UID {uid}[/yellow]")
        return
    for path in save_attachments(files, out_dir):
        print(f"- {path}")


@app.command("folders")
def folders_command() -> None:
    settings = _load_settings()
    logger = _start_logging(settings, "mailsearch.folders")

    try:
        with _open_session(settings) as session:
            folders = session.list_folders()
    except MailSearchError as exc:
        _fail(exc, logger)

    for folder in folders:
        typer.echo(folder.describe())


@app.command("check")
def check_command() -> None:
    settings = _load_settings()
    logger = _start_logging(settings, "mailsearch.check")

    try:
        account = settings.imap_account()
        with _open_session(settings):
            pass
    except MailSearchError as exc:
        _fail(exc, logger)
    print(f"[green]IMAP OK[/green]: {account.username}@{account.host}:{account.port}")


if __name__ == "__main__":
    app()
