from .matcher import LiteralMatcher, PatternMatcher, SubjectMatcher, build_subject_matcher
from .window import DateWindow

__all__ = [
    "DateWindow",
    "LiteralMatcher",
    "PatternMatcher",
    "SubjectMatcher",
    "build_subject_matcher",
]
