from .session import FETCH_ITEMS, ImapMailSession
from .structure import parse_body_structure

__all__ = ["FETCH_ITEMS", "ImapMailSession", "parse_body_structure"]
