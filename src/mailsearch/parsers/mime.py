from __future__ import annotations

import email
import logging
import re
from datetime import datetime
from email.errors import MessageError
from email.header import Header, decode_header
from email.message import Message

from mailsearch.errors import InvalidAttachmentMetadata, MalformedMessage
from mailsearch.sources.models import AttachmentInfo, BodyStructure, MailRecord

logger = logging.getLogger(__name__)

FOLDED_LINE_PATTERN = re.compile(r"\r?\n(?=[ \t])")
SIZE_PATTERN = re.compile(r"[0-9]+")
SURROGATE_PATTERN = re.compile("[\udc80-\udcff]")
UNKNOWN_8BIT = "unknown-8bit"


def _decode_bytes(data: bytes, charset: str | None) -> str:
    if charset is None or charset == UNKNOWN_8BIT:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return data.decode("latin-1")
    try:
        return data.decode(charset, errors="replace")
    except LookupError:
        return data.decode("utf-8", errors="replace")


def _header_text(value: str | Header) -> str:
    # Raw 8-bit header bytes reach us as surrogate escapes (compat32 policy)
    if isinstance(value, Header):
        return "".join(
            _decode_bytes(chunk, charset) if isinstance(chunk, bytes) else chunk
            for chunk, charset in decode_header(value)
        )
    if SURROGATE_PATTERN.search(value):
        return _decode_bytes(value.encode("utf-8", errors="surrogateescape"), None)
    return value


def decode_header_value(value: str | Header | None) -> str:
    if not value:
        return ""
    value = FOLDED_LINE_PATTERN.sub("", _header_text(value))
    if "=?" not in value:
        return value.strip()
    decoded = decode_header(value)
    parts: list[str] = []
    for chunk, encoding in decoded:
        if isinstance(chunk, bytes):
            parts.append(_decode_bytes(chunk, encoding))
        else:
            parts.append(chunk)
    return "".join(parts).strip()


def decode_attachment_name(raw_name: str) -> str:
    # Parsed as the value of a synthetic header so encoded-word file names
    # go through exactly the same path as Subject and From.
    synthetic = email.message_from_string(f"Subject: {raw_name}\n\n")
    return decode_header_value(synthetic.get("Subject"))


def split_addresses(value: str) -> tuple[str, ...]:
    # Naive split: a quoted display name containing a comma is cut in two.
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _decode_part_payload(part: Message) -> str:
    payload = part.get_payload(decode=True)
    if payload is None:
        return ""
    return _decode_bytes(payload, part.get_content_charset())


def _first_subpart_text(message: Message) -> str:
    if not message.is_multipart():
        return ""
    subparts = message.get_payload()
    if not subparts:
        return ""
    part = subparts[0]
    while part.is_multipart():
        nested = part.get_payload()
        if not nested:
            return ""
        part = nested[0]
    return _decode_part_payload(part)


def decode_message(
    header: bytes,
    text: bytes | None,
    *,
    uid: int,
    received_at: datetime,
    attachments: tuple[AttachmentInfo, ...] = (),
) -> MailRecord:
    """Build a :class:`MailRecord` from a header block and the raw text section.

    The header block is expected to carry Content-Type so the multipart
    boundary of the text section can be resolved.
    """
    raw = header.rstrip(b"\r\n") + b"\r\n\r\n" + (text or b"")
    try:
        message = email.message_from_bytes(raw)
        subject = decode_header_value(message.get("Subject"))
        sender = decode_header_value(message.get("From"))
        to = split_addresses(decode_header_value(message.get("To")))
        cc = split_addresses(decode_header_value(message.get("Cc")))
        body = _first_subpart_text(message)
    except (MessageError, ValueError, TypeError) as exc:
        raise MalformedMessage(f"UID {uid}: {exc}") from exc

    return MailRecord(
        uid=uid,
        subject=subject,
        sender=sender,
        to=to,
        cc=cc,
        body=body,
        received_at=received_at,
        attachments=attachments,
    )


def extract_attachments(structure: BodyStructure | None) -> tuple[AttachmentInfo, ...]:
    """List attachment parts directly below a multipart root, in tree order.

    Only the first two disposition parameters are used: the first is the
    file name, the optional second is the size.
    """
    if structure is None or not structure.is_multipart:
        return ()

    attachments: list[AttachmentInfo] = []
    for part in structure.parts:
        if part.is_multipart:
            continue
        disposition = part.disposition
        if disposition is None or disposition.kind.lower() != "attachment" or not disposition.params:
            continue

        name = decode_attachment_name(disposition.params[0][1])
        size = None
        if len(disposition.params) > 1:
            raw_size = disposition.params[1][1]
            if not SIZE_PATTERN.fullmatch(raw_size):
                raise InvalidAttachmentMetadata(f"Attachment {name!r}: size {raw_size!r} is not an unsigned integer")
            size = int(raw_size)

        attachments.append(AttachmentInfo(name=name, size=size))

    return tuple(attachments)


def extract_attachment_files(raw_message: bytes) -> dict[str, bytes]:
    try:
        message = email.message_from_bytes(raw_message)
    except (MessageError, ValueError, TypeError) as exc:
        raise MalformedMessage(str(exc)) from exc

    files: dict[str, bytes] = {}
    for part in message.walk():
        if part is message or part.is_multipart():
            continue
        if part.get("Content-Disposition") is None:
            continue

        filename = decode_header_value(part.get_filename())
        if not filename:
            logger.debug("Part %s has a Content-Disposition without a file name", part.get_content_type())
            continue
        if filename in files:
            logger.warning("Duplicate attachment name %s, keeping the last one", filename)
        files[filename] = part.get_payload(decode=True) or b""

    return files
