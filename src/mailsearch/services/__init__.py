from .download import fetch_attachments, save_attachments
from .render import build_mail_table, mail_to_row, mails_to_json
from .search import MailTransport, SearchEngine, SearchQuery, resolve_folder
from .viewer import MailViewer

__all__ = [
    "MailTransport",
    "MailViewer",
    "SearchEngine",
    "SearchQuery",
    "build_mail_table",
    "fetch_attachments",
    "mail_to_row",
    "mails_to_json",
    "resolve_folder",
    "save_attachments",
]
