from __future__ import annotations


class MailSearchError(Exception):
    """Base class for every error raised by mailsearch."""


class ConfigError(MailSearchError):
    pass


class TransportError(MailSearchError):
    pass


class FolderNotFound(MailSearchError):
    def __init__(self, name: str):
        super().__init__(f"Folder not found: {name}")
        self.name = name


class InvalidPattern(MailSearchError):
    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid subject pattern {pattern!r}: {reason}")
        self.pattern = pattern


class MalformedMessage(MailSearchError):
    pass


class InvalidAttachmentMetadata(MailSearchError):
    pass
