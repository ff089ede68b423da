from __future__ import annotations

import json
from typing import Any

from rich.table import Table

from mailsearch.sources.models import MailRecord

COLUMNS = ["id", "Subject", "From", "To", "CC", "Date", "Attachments"]


def mail_to_row(mail: MailRecord) -> dict[str, Any]:
    return {
        "id": mail.uid,
        "subject": mail.subject,
        "from": mail.sender,
        "to": "\n".join(mail.to),
        "cc": "\n".join(mail.cc),
        "date": mail.received_at.isoformat(),
        "attachments": "\n".join(attachment.name for attachment in mail.attachments),
    }


def mails_to_json(mails: list[MailRecord]) -> str:
    return json.dumps([mail_to_row(mail) for mail in mails], ensure_ascii=False)


def build_mail_table(
    mails: list[MailRecord],
    selected: int | None = None,
    title: str | None = None,
) -> Table:
    table = Table(title=title, show_lines=True, header_style="red")
    table.add_column(COLUMNS[0], style="bright_black", no_wrap=True)
    table.add_column(COLUMNS[1], style="green")
    table.add_column(COLUMNS[2])
    table.add_column(COLUMNS[3])
    table.add_column(COLUMNS[4])
    table.add_column(COLUMNS[5], no_wrap=True)
    table.add_column(COLUMNS[6], style="bright_black")

    for index, mail in enumerate(mails):
        row = mail_to_row(mail)
        table.add_row(
            str(row["id"]),
            row["subject"],
            row["from"],
            row["to"],
            row["cc"],
            mail.received_at.strftime("%Y-%m-%dT%H:%M:%S"),
            row["attachments"],
            style="reverse" if index == selected else None,
        )
    return table
