from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import ContextManager, Protocol

from mailsearch.core.filters import DateWindow, SubjectMatcher
from mailsearch.errors import FolderNotFound, InvalidAttachmentMetadata, MalformedMessage, TransportError
from mailsearch.parsers import decode_message, extract_attachments
from mailsearch.sources.models import FetchedMessage, MailBoxInfo, MailRecord


class MailTransport(Protocol):
    def exclusive(self) -> ContextManager[object]: ...

    def list_folders(self) -> list[MailBoxInfo]: ...

    def select_folder(self, name: str) -> MailBoxInfo: ...

    def search_by_date_range(self, since: date, before: date | None) -> list[int]: ...

    def fetch(self, uid: int) -> FetchedMessage | None: ...

    def fetch_raw(self, uid: int) -> bytes | None: ...


@dataclass(frozen=True, slots=True)
class SearchQuery:
    folder: str
    matcher: SubjectMatcher
    window: DateWindow
    reverse: bool = False


def resolve_folder(transport: MailTransport, name: str) -> MailBoxInfo:
    for folder in transport.list_folders():
        if folder.name == name:
            return transport.select_folder(name)
    raise FolderNotFound(name)


class SearchEngine:
    def __init__(
        self,
        transport: MailTransport,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)

    def run(self, query: SearchQuery) -> list[MailRecord]:
        with self.transport.exclusive():
            folder = resolve_folder(self.transport, query.folder)
            self.logger.info("Searching %s (%s messages)", folder.name, folder.exists)

            uids = self._candidate_uids(query.window)
            mails: list[MailRecord] = []
            for uid in uids:
                mail = self._process_candidate(uid, query)
                if mail is not None:
                    mails.append(mail)

        self.logger.info("Search matched %s of %s candidates", len(mails), len(uids))
        return self._order(mails, reverse=query.reverse)

    def _candidate_uids(self, window: DateWindow) -> list[int]:
        if window.is_empty:
            self.logger.info("Date window %s..%s is inverted, nothing to search", window.start, window.end)
            return []
        since, before = window.coarse_query()
        try:
            return list(self.transport.search_by_date_range(since, before))
        except TransportError as exc:
            self.logger.warning("Server search failed, treating as no candidates: %s", exc)
            return []

    def _process_candidate(self, uid: int, query: SearchQuery) -> MailRecord | None:
        try:
            fetched = self.transport.fetch(uid)
        except TransportError as exc:
            self.logger.warning("UID %s skipped: %s", uid, exc)
            return None

        if fetched is None or fetched.internal_date is None or fetched.header is None:
            self.logger.debug("UID %s skipped: fetch returned no date or headers", uid)
            return None

        # SEARCH only has day granularity
        if not query.window.contains(fetched.internal_date):
            return None

        try:
            attachments = extract_attachments(fetched.structure)
            mail = decode_message(
                fetched.header,
                fetched.text,
                uid=uid,
                received_at=fetched.internal_date,
                attachments=attachments,
            )
        except (MalformedMessage, InvalidAttachmentMetadata) as exc:
            self.logger.warning("UID %s skipped: %s", uid, exc)
            return None

        if not query.matcher.matches(mail.subject):
            return None
        return mail

    @staticmethod
    def _order(mails: list[MailRecord], reverse: bool) -> list[MailRecord]:
        ordered = sorted(mails, key=lambda mail: -int(mail.received_at.timestamp()))
        if reverse:
            ordered.reverse()
        return ordered
