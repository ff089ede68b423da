from .mime import (
    decode_attachment_name,
    decode_header_value,
    decode_message,
    extract_attachment_files,
    extract_attachments,
    split_addresses,
)

__all__ = [
    "decode_attachment_name",
    "decode_header_value",
    "decode_message",
    "extract_attachment_files",
    "extract_attachments",
    "split_addresses",
]
