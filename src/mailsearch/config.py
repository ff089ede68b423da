from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from mailsearch.errors import ConfigError

DEFAULT_IMAP_HOST = "imap.exmail.qq.com"
DEFAULT_IMAP_PORT = 993
DEFAULT_MAILBOX = "INBOX"


@dataclass(slots=True)
class ImapAccountConfig:
    host: str
    port: int
    username: str
    password: str
    timeout_sec: float = 30.0

    def __repr__(self) -> str:
        return f"ImapAccountConfig(host={self.host!r}, port={self.port}, username={self.username!r})"


@dataclass(slots=True)
class Settings:
    root_dir: Path
    logs_dir: Path
    imap_host: str = DEFAULT_IMAP_HOST
    imap_port: int = DEFAULT_IMAP_PORT
    imap_user: str | None = None
    imap_password: str | None = None
    imap_timeout_sec: float = 30.0
    default_mailbox: str = DEFAULT_MAILBOX

    @classmethod
    def load(cls, base_dir: Path | None = None) -> Settings:
        load_dotenv(override=False)

        root_env = os.getenv("MAILSEARCH_HOME")
        root_dir = Path(root_env).expanduser().resolve() if root_env else (base_dir or Path.cwd()).resolve()
        logs_dir = Path(os.getenv("MAILSEARCH_LOG_DIR", root_dir / "logs")).expanduser().resolve()

        port_raw = os.getenv("MAILSEARCH_IMAP_PORT", str(DEFAULT_IMAP_PORT))
        timeout_raw = os.getenv("MAILSEARCH_IMAP_TIMEOUT_SEC", "30")
        try:
            imap_port = int(port_raw)
            imap_timeout_sec = float(timeout_raw)
        except ValueError as exc:
            raise ConfigError(f"Invalid IMAP port/timeout: {exc}") from exc

        return cls(
            root_dir=root_dir,
            logs_dir=logs_dir,
            imap_host=os.getenv("MAILSEARCH_IMAP_HOST", DEFAULT_IMAP_HOST),
            imap_port=imap_port,
            imap_user=os.getenv("MAILSEARCH_IMAP_USER") or None,
            imap_password=os.getenv("MAILSEARCH_IMAP_PASSWORD") or None,
            imap_timeout_sec=imap_timeout_sec,
            default_mailbox=os.getenv("MAILSEARCH_DEFAULT_MAILBOX", DEFAULT_MAILBOX),
        )

    def imap_account(self) -> ImapAccountConfig:
        if not self.imap_user or not self.imap_password:
            raise ConfigError(
                "IMAP credentials are not configured: set MAILSEARCH_IMAP_USER and MAILSEARCH_IMAP_PASSWORD"
            )
        return ImapAccountConfig(
            host=self.imap_host,
            port=self.imap_port,
            username=self.imap_user,
            password=self.imap_password,
            timeout_sec=self.imap_timeout_sec,
        )

    def ensure_directories(self) -> None:
        for path in [self.root_dir, self.logs_dir]:
            path.mkdir(parents=True, exist_ok=True)
