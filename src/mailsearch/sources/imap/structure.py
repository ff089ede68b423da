from __future__ import annotations

from typing import Any

from mailsearch.sources.models import BodyStructure, Disposition, PartKind

# Position of the disposition in the extension data of a single-part body,
# by media type (RFC 3501 BODYSTRUCTURE).
_BASIC_DISPOSITION_INDEX = 8
_TEXT_DISPOSITION_INDEX = 9
_MESSAGE_DISPOSITION_INDEX = 11
_MULTIPART_DISPOSITION_INDEX = 3
_BASIC_SIZE_INDEX = 6


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _item(data: Any, index: int) -> Any:
    if len(data) > index:
        return data[index]
    return None


def _parse_disposition(raw: Any) -> Disposition | None:
    if not isinstance(raw, (tuple, list)) or not raw:
        return None
    kind = _to_str(raw[0])
    if not kind:
        return None
    params: list[tuple[str, str]] = []
    raw_params = raw[1] if len(raw) > 1 else None
    if isinstance(raw_params, (tuple, list)):
        for index in range(0, len(raw_params) - 1, 2):
            params.append((_to_str(raw_params[index]).lower(), _to_str(raw_params[index + 1])))
    return Disposition(kind=kind, params=tuple(params))


def _is_multipart(data: Any) -> bool:
    return bool(data) and isinstance(data[0], list)


def parse_body_structure(data: Any) -> BodyStructure:
    """Convert an ``imapclient`` BODYSTRUCTURE response into :class:`BodyStructure`.

    Multipart responses are ``(parts, subtype, params, disposition, ...)``;
    single parts are ``(type, subtype, params, id, description, encoding,
    size, ...)`` with type-specific fields before the disposition.
    """
    if _is_multipart(data):
        subtype = _to_str(_item(data, 1)).lower()
        return BodyStructure(
            kind=PartKind.MULTIPART,
            content_type=f"multipart/{subtype}",
            disposition=_parse_disposition(_item(data, _MULTIPART_DISPOSITION_INDEX)),
            parts=tuple(parse_body_structure(part) for part in data[0]),
        )

    maintype = _to_str(_item(data, 0)).lower()
    subtype = _to_str(_item(data, 1)).lower()
    if maintype == "text":
        disposition_index = _TEXT_DISPOSITION_INDEX
    elif (maintype, subtype) == ("message", "rfc822"):
        disposition_index = _MESSAGE_DISPOSITION_INDEX
    else:
        disposition_index = _BASIC_DISPOSITION_INDEX

    size = _item(data, _BASIC_SIZE_INDEX)
    return BodyStructure(
        kind=PartKind.BASIC,
        content_type=f"{maintype}/{subtype}",
        disposition=_parse_disposition(_item(data, disposition_index)),
        size=size if isinstance(size, int) else None,
    )
