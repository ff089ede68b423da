from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True, slots=True)
class AttachmentInfo:
    name: str
    size: int | None = None


@dataclass(frozen=True, slots=True)
class MailRecord:
    uid: int
    subject: str
    sender: str
    to: tuple[str, ...]
    cc: tuple[str, ...]
    body: str
    received_at: datetime
    attachments: tuple[AttachmentInfo, ...] = ()


@dataclass(frozen=True, slots=True)
class MailBoxInfo:
    name: str
    flags: tuple[str, ...] = ()
    exists: int = 0
    recent: int = 0
    unseen: int | None = None
    permanent_flags: tuple[str, ...] = ()
    uid_next: int | None = None
    uid_validity: int | None = None

    def describe(self) -> str:
        return (
            f"name: {self.name}, flags: {list(self.flags)}, exists: {self.exists}, recent: {self.recent}, "
            f"unseen: {self.unseen}, permanent_flags: {list(self.permanent_flags)}, "
            f"uid_next: {self.uid_next}, uid_validity: {self.uid_validity}"
        )


class PartKind(str, Enum):
    BASIC = "basic"
    MULTIPART = "multipart"


@dataclass(frozen=True, slots=True)
class Disposition:
    kind: str
    params: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class BodyStructure:
    """One node of a message's MIME tree as described by the server.

    ``content_type`` and ``disposition`` are shared by both kinds; only
    multipart nodes carry ``parts``.
    """

    kind: PartKind
    content_type: str
    disposition: Disposition | None = None
    parts: tuple[BodyStructure, ...] = ()
    size: int | None = None

    @property
    def is_multipart(self) -> bool:
        return self.kind is PartKind.MULTIPART


@dataclass(slots=True)
class FetchedMessage:
    """Data items returned by the transport for a single UID; ``None`` means not returned."""

    uid: int
    internal_date: datetime | None = None
    header: bytes | None = None
    text: bytes | None = None
    structure: BodyStructure | None = None
