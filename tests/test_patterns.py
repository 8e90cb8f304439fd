from __future__ import annotations

from campus_planner.patterns import PATTERNS, has_duplicate_words, has_time_token, parse_tag_filter


def test_registry_names() -> None:
    assert set(PATTERNS) == {"TITLE", "DURATION", "DATE", "TAG", "DUPLICATE_WORD", "TAG_FILTER", "TIME_TOKEN"}


def test_duration_shape() -> None:
    duration = PATTERNS["DURATION"]
    assert duration.fullmatch("1")
    assert duration.fullmatch("1440")
    for value in ["0", "007", "", "-5", "1.5", "12a"]:
        assert duration.fullmatch(value) is None, value


def test_tag_shape() -> None:
    tag = PATTERNS["TAG"]
    assert tag.fullmatch("Health-Fitness")
    assert tag.fullmatch("Study Group")
    for value in ["Health  Fitness", "Health -Fitness", " Health", "Health-", "Lab 2"]:
        assert tag.fullmatch(value) is None, value


def test_title_shape() -> None:
    title = PATTERNS["TITLE"]
    assert title.fullmatch("Read chapter 4")
    assert title.fullmatch("Read  chapter") is None
    assert title.fullmatch("Read chapter\n") is None


def test_duplicate_words() -> None:
    assert has_duplicate_words("go go now")
    assert has_duplicate_words("The the end")
    assert not has_duplicate_words("the theory")
    assert not has_duplicate_words("one two one")


def test_time_token() -> None:
    assert has_time_token("meet at 14:30")
    assert not has_time_token("meet at 4:30")
    assert not has_time_token("ratio 123:456")


def test_tag_filter() -> None:
    assert parse_tag_filter("@tag:Academic") == "Academic"
    assert parse_tag_filter("@TAG:lab") == "lab"
    assert parse_tag_filter("@tag:") is None
    assert parse_tag_filter("find @tag:Academic") is None
