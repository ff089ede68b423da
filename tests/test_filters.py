from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from mailsearch.core.filters import DateWindow, LiteralMatcher, PatternMatcher, build_subject_matcher
from mailsearch.errors import InvalidPattern

UTC = timezone.utc


def test_window_includes_both_boundaries() -> None:
    start = datetime(2023, 1, 1, 0, 0, tzinfo=UTC)
    end = datetime(2023, 1, 1, 12, 0, tzinfo=UTC)
    window = DateWindow(start=start, end=end)

    assert window.contains(start)
    assert window.contains(end)
    assert window.contains(datetime(2023, 1, 1, 8, 0, tzinfo=UTC))
    assert not window.contains(start - timedelta(seconds=1))
    assert not window.contains(end + timedelta(seconds=1))


def test_window_compares_whole_seconds() -> None:
    end = datetime(2023, 1, 1, 12, 0, tzinfo=UTC)
    window = DateWindow(start=datetime(2023, 1, 1, tzinfo=UTC), end=end)

    assert window.contains(end + timedelta(milliseconds=500))


def test_window_compares_across_offsets() -> None:
    window = DateWindow(
        start=datetime(2023, 1, 1, 8, 0, tzinfo=timezone(timedelta(hours=8))),
        end=datetime(2023, 1, 1, 1, 0, tzinfo=UTC),
    )

    assert window.contains(datetime(2023, 1, 1, 0, 30, tzinfo=UTC))
    assert not window.contains(datetime(2023, 1, 1, 7, 59, tzinfo=timezone(timedelta(hours=8))))


def test_open_ended_window() -> None:
    window = DateWindow(start=datetime(2023, 1, 1, tzinfo=UTC))

    assert window.contains(datetime(9999, 1, 1, tzinfo=UTC))
    assert window.coarse_query() == (date(2022, 12, 31), None)


def test_inverted_window_matches_nothing() -> None:
    window = DateWindow(
        start=datetime(2023, 1, 2, tzinfo=UTC),
        end=datetime(2023, 1, 1, tzinfo=UTC),
    )

    assert window.is_empty
    assert not window.contains(datetime(2023, 1, 1, 12, tzinfo=UTC))


def test_naive_bounds_are_rejected() -> None:
    with pytest.raises(ValueError):
        DateWindow(start=datetime(2023, 1, 1))


def test_coarse_query_is_a_superset_of_the_window() -> None:
    window = DateWindow(
        start=datetime(2023, 1, 1, 0, 0, tzinfo=UTC),
        end=datetime(2023, 1, 1, 12, 0, tzinfo=UTC),
    )

    since, before = window.coarse_query()

    assert (since, before) == (date(2022, 12, 31), date(2023, 1, 3))
    for hour in range(0, 13):
        moment = datetime(2023, 1, 1, hour, tzinfo=UTC)
        assert window.contains(moment)
        assert since <= moment.date() < before


def test_coarse_query_covers_instant_in_earlier_server_day() -> None:
    east = timezone(timedelta(hours=8))
    window = DateWindow(
        start=datetime(2023, 1, 1, 0, 30, tzinfo=east),
        end=datetime(2023, 1, 1, 12, 0, tzinfo=east),
    )
    received = datetime(2022, 12, 31, 17, 0, tzinfo=UTC)

    since, before = window.coarse_query()

    assert window.contains(received)
    assert since <= received.date() < before


def test_coarse_query_covers_instant_in_later_server_day() -> None:
    west = timezone(timedelta(hours=-5))
    window = DateWindow(
        start=datetime(2023, 1, 1, 0, 0, tzinfo=west),
        end=datetime(2023, 1, 1, 23, 0, tzinfo=west),
    )
    received = datetime(2023, 1, 2, 3, 0, tzinfo=UTC)

    since, before = window.coarse_query()

    assert window.contains(received)
    assert since <= received.date() < before


@pytest.mark.parametrize("window_hours", [-12, -5, 0, 8, 14])
@pytest.mark.parametrize("server_hours", [-12, -5, 0, 8, 14])
def test_coarse_query_superset_across_offsets(window_hours: int, server_hours: int) -> None:
    window_tz = timezone(timedelta(hours=window_hours))
    server_tz = timezone(timedelta(hours=server_hours))
    window = DateWindow(
        start=datetime(2023, 1, 1, 0, 0, tzinfo=window_tz),
        end=datetime(2023, 1, 1, 23, 59, 59, tzinfo=window_tz),
    )
    since, before = window.coarse_query()

    moment = window.start
    while moment <= window.end:
        received = moment.astimezone(server_tz)
        assert window.contains(received)
        assert since <= received.date() < before
        moment += timedelta(minutes=30)
    assert since <= window.end.astimezone(server_tz).date() < before


def test_literal_matcher_is_case_sensitive_substring() -> None:
    matcher = LiteralMatcher("foo")

    assert matcher.matches("foobar")
    assert not matcher.matches("bar")
    assert not matcher.matches("FOOBAR")


def test_empty_literal_matches_everything() -> None:
    assert LiteralMatcher("").matches("")
    assert LiteralMatcher("").matches("anything")


def test_pattern_matcher_searches_anywhere() -> None:
    assert PatternMatcher("^Re:").matches("Re: hello")
    assert not PatternMatcher("^Re:").matches("hello Re:")
    assert PatternMatcher(r"report \d+").matches("Weekly report 42 attached")


def test_invalid_pattern_fails_at_construction() -> None:
    with pytest.raises(InvalidPattern):
        build_subject_matcher("([unclosed", regex=True)


def test_build_subject_matcher_selects_variant() -> None:
    assert isinstance(build_subject_matcher("a.b"), LiteralMatcher)
    assert isinstance(build_subject_matcher("a.b", regex=True), PatternMatcher)
    assert not build_subject_matcher("a.b").matches("axb")
    assert build_subject_matcher("a.b", regex=True).matches("axb")
