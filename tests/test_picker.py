from nuver.picker import VersionPicker, pick_version
from nuver.range import Range
from nuver.version import Version


def parse_all(*versions):
    return [Version.parse(v) for v in versions]


def test_prerelease_candidates_are_skipped_for_stable_ranges():
    candidates = parse_all("1.2.0", "1.2.0-beta", "2.0.0")
    assert pick_version(Range.parse("1.*"), candidates) == Version.parse("1.2.0")


def test_floating_range_picks_highest_match():
    candidates = parse_all("1.0.0", "1.5.0", "1.9.3", "2.0.0")
    assert pick_version(Range.parse("^1.0"), candidates) == Version.parse("1.9.3")


def test_displayed_range_picks_the_same_version():
    candidates = parse_all("1.0.0", "1.5.0", "1.9.3")
    for text in ("^1.0", "1.x", ">=1.0 <1.6", "[1.0,2.0)", "1"):
        original = Range.parse(text)
        assert pick_version(Range.parse(str(original)), candidates) == pick_version(original, candidates), text


def test_pinned_range_picks_lowest_match():
    candidates = parse_all("1.9.3", "1.0.0", "1.5.0")
    assert pick_version(Range.parse("[1.0,2.0)"), candidates) == Version.parse("1.0.0")
    assert pick_version(Range.parse("1.5"), candidates) == Version.parse("1.5.0")


def test_exact_range():
    candidates = parse_all("1.0.0", "1.5.0")
    assert pick_version(Range.parse("1.5.0"), candidates) == Version.parse("1.5.0")


def test_prerelease_allowed_when_range_mentions_one():
    candidates = parse_all("0.9.0", "1.0.0-beta", "1.0.0-rc.1")
    assert pick_version(Range.parse(">=1.0.0-beta"), candidates) == Version.parse("1.0.0-rc.1")


def test_caret_range_does_not_pick_prereleases():
    candidates = parse_all("1.1.0-rc.1", "2.0.0-alpha")
    assert pick_version(Range.parse("^1.0"), candidates) is None


def test_no_match_returns_none():
    assert pick_version(Range.parse("3.x"), parse_all("1.0.0", "2.0.0")) is None
    assert pick_version(Range.parse("*"), []) is None


def test_force_floating_searches_downward():
    candidates = parse_all("1.0.0", "1.5.0", "2.0.0")
    picker = VersionPicker(force_floating=True)
    assert picker.pick(Range.parse("[1.0,2.0)"), candidates) == Version.parse("1.5.0")


def test_candidates_are_sorted():
    picker = VersionPicker()
    candidates = picker.candidates(Range.any(), parse_all("2.0.0", "1.0.0", "1.5.0-beta"))
    assert candidates == parse_all("1.0.0", "2.0.0")
