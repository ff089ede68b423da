from __future__ import annotations

import logging
from pathlib import Path

from mailsearch.errors import TransportError
from mailsearch.parsers import extract_attachment_files

from .search import MailTransport, resolve_folder

logger = logging.getLogger(__name__)


def fetch_attachments(transport: MailTransport, folder: str, uid: int) -> dict[str, bytes]:
    with transport.exclusive():
        resolve_folder(transport, folder)
        raw = transport.fetch_raw(uid)
    if raw is None:
        raise TransportError(f"Message UID {uid} not found in {folder}")
    files = extract_attachment_files(raw)
    logger.info("UID %s: %s attachment(s) recovered", uid, len(files))
    return files


def save_attachments(files: dict[str, bytes], out_dir: Path) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    saved: list[Path] = []
    for filename, content in files.items():
        # files never leave out_dir
        safe_name = Path(filename.replace("\\", "/")).name
        if safe_name in {"", ".", ".."}:
            safe_name = "attachment"
        target = (out_dir / safe_name).resolve()
        target.write_bytes(content)
        saved.append(target)
    return saved
