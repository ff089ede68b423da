from __future__ import annotations

import re
from dataclasses import dataclass, field

from mailsearch.errors import InvalidPattern


@dataclass(frozen=True, slots=True)
class LiteralMatcher:
    pattern: str

    def matches(self, subject: str) -> bool:
        return self.pattern in subject


@dataclass(frozen=True, slots=True)
class PatternMatcher:
    regex: str
    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.regex)
        except re.error as exc:
            raise InvalidPattern(self.regex, str(exc)) from exc
        object.__setattr__(self, "_compiled", compiled)

    def matches(self, subject: str) -> bool:
        return self._compiled.search(subject) is not None


SubjectMatcher = LiteralMatcher | PatternMatcher


def build_subject_matcher(pattern: str, regex: bool = False) -> SubjectMatcher:
    if regex:
        return PatternMatcher(pattern)
    return LiteralMatcher(pattern)
