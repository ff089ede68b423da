from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Iterator
from datetime import date
from typing import Any

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError

from mailsearch.config import ImapAccountConfig
from mailsearch.errors import FolderNotFound, TransportError
from mailsearch.sources.models import FetchedMessage, MailBoxInfo

from .structure import parse_body_structure

logger = logging.getLogger(__name__)

HEADER_FIELDS = "SUBJECT FROM TO CC CONTENT-TYPE"
FETCH_ITEMS = [
    "INTERNALDATE",
    f"BODY.PEEK[HEADER.FIELDS ({HEADER_FIELDS})]",
    "BODY.PEEK[TEXT]",
    "BODYSTRUCTURE",
]
RAW_FETCH_ITEMS = ["BODY.PEEK[]"]


def _to_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _to_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _find_item(payload: dict, prefix: bytes) -> Any:
    # Servers may echo section names with different case or field order.
    for key, value in payload.items():
        if isinstance(key, bytes) and key.upper().startswith(prefix):
            return value
    return None


def _mailbox_info(name: str, response: dict) -> MailBoxInfo:
    return MailBoxInfo(
        name=name,
        flags=tuple(_to_str(flag) for flag in response.get(b"FLAGS", ())),
        exists=_to_int(response.get(b"EXISTS")) or 0,
        recent=_to_int(response.get(b"RECENT")) or 0,
        unseen=_to_int(response.get(b"UNSEEN")),
        permanent_flags=tuple(_to_str(flag) for flag in response.get(b"PERMANENTFLAGS", ())),
        uid_next=_to_int(response.get(b"UIDNEXT")),
        uid_validity=_to_int(response.get(b"UIDVALIDITY")),
    )


class ImapMailSession:
    """Read-only IMAP session over a single TLS connection.

    Callers that run a multi-step operation hold :meth:`exclusive` for its
    whole duration so two operations never interleave on the connection.
    """

    def __init__(self, config: ImapAccountConfig):
        self.config = config
        self._client: IMAPClient | None = None
        self._lock = threading.RLock()

    def __enter__(self) -> ImapMailSession:
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def connect(self) -> None:
        try:
            client = IMAPClient(
                self.config.host,
                port=self.config.port,
                ssl=True,
                timeout=self.config.timeout_sec,
            )
        except OSError as exc:
            raise TransportError(f"Cannot connect to {self.config.host}:{self.config.port}: {exc}") from exc

        client.normalise_times = False
        try:
            client.login(self.config.username, self.config.password)
        except (IMAPClientError, OSError) as exc:
            with contextlib.suppress(IMAPClientError, OSError):
                client.shutdown()
            raise TransportError(f"Login failed for {self.config.username}: {exc}") from exc

        self._client = client
        logger.info("Connected to %s as %s", self.config.host, self.config.username)

    def close(self) -> None:
        if self._client is None:
            return
        try:
            self._client.logout()
        except (IMAPClientError, OSError) as exc:
            logger.warning("IMAP logout failed: %s", exc)
        finally:
            self._client = None

    @property
    def client(self) -> IMAPClient:
        if self._client is None:
            raise TransportError("IMAP session is not connected")
        return self._client

    @contextlib.contextmanager
    def exclusive(self) -> Iterator[ImapMailSession]:
        with self._lock:
            yield self

    def list_folders(self) -> list[MailBoxInfo]:
        with self._lock:
            try:
                listing = self.client.list_folders()
            except (IMAPClientError, OSError) as exc:
                raise TransportError(f"LIST failed: {exc}") from exc

            folders: list[MailBoxInfo] = []
            for flags, _delimiter, name in listing:
                name = _to_str(name)
                if b"\\Noselect" in flags or b"\\NoSelect" in flags:
                    folders.append(MailBoxInfo(name=name, flags=tuple(_to_str(flag) for flag in flags)))
                    continue
                try:
                    folders.append(self.select_folder(name))
                except FolderNotFound:
                    logger.debug("Folder %s is listed but cannot be examined", name)
                    folders.append(MailBoxInfo(name=name))
            return folders

    def select_folder(self, name: str) -> MailBoxInfo:
        with self._lock:
            try:
                response = self.client.select_folder(name, readonly=True)
            except IMAPClientError as exc:
                raise FolderNotFound(name) from exc
            except OSError as exc:
                raise TransportError(f"EXAMINE {name} failed: {exc}") from exc
            return _mailbox_info(name, response)

    def search_by_date_range(self, since: date, before: date | None) -> list[int]:
        criteria: list[Any] = ["SINCE", since]
        if before is not None:
            criteria.extend(["BEFORE", before])
        with self._lock:
            try:
                return list(self.client.search(criteria))
            except (IMAPClientError, OSError) as exc:
                raise TransportError(f"SEARCH {criteria} failed: {exc}") from exc

    def fetch(self, uid: int) -> FetchedMessage | None:
        with self._lock:
            try:
                response = self.client.fetch([uid], FETCH_ITEMS)
            except (IMAPClientError, OSError) as exc:
                raise TransportError(f"FETCH {uid} failed: {exc}") from exc

        payload = response.get(uid)
        if payload is None:
            return None

        structure_raw = payload.get(b"BODYSTRUCTURE")
        return FetchedMessage(
            uid=uid,
            internal_date=payload.get(b"INTERNALDATE"),
            header=_find_item(payload, b"BODY[HEADER"),
            text=_find_item(payload, b"BODY[TEXT]"),
            structure=parse_body_structure(structure_raw) if structure_raw is not None else None,
        )

    def fetch_raw(self, uid: int) -> bytes | None:
        with self._lock:
            try:
                response = self.client.fetch([uid], RAW_FETCH_ITEMS)
            except (IMAPClientError, OSError) as exc:
                raise TransportError(f"FETCH {uid} failed: {exc}") from exc

        payload = response.get(uid)
        if payload is None:
            return None
        return _find_item(payload, b"BODY[]")
