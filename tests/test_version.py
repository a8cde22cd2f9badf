import pytest
from hypothesis import given, strategies as st

from nuver.errors import MAX_SAFE_INTEGER, SemverError, SemverErrorKind, source_location
from nuver.version import Identifier, Version

alphanumeric = st.text(alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ-", min_size=1, max_size=8)
identifiers = st.one_of(st.integers(min_value=0, max_value=10 ** 6), alphanumeric)
components = st.integers(min_value=0, max_value=MAX_SAFE_INTEGER)

versions = st.builds(
    Version,
    components,
    components,
    components,
    st.integers(min_value=0, max_value=50),
    st.lists(identifiers, max_size=3).map(tuple),
    st.lists(identifiers, max_size=2).map(tuple),
)


def test_parse_full_version():
    version = Version.parse("1.2.34-abc.123+1")
    assert (version.major, version.minor, version.patch, version.revision) == (1, 2, 34, 0)
    assert version.pre_release == (Identifier("abc"), Identifier(123))
    assert version.build == (Identifier(1),)
    assert str(version) == "1.2.34-abc.123+1"


def test_parse_fills_missing_components():
    assert Version.parse("1") == Version(1, 0, 0)
    assert Version.parse("1.2") == Version(1, 2, 0)
    assert str(Version.parse("1.2")) == "1.2.0"


def test_revision_is_shown_only_when_set():
    assert str(Version.parse("1.2.3.4")) == "1.2.3.4"
    assert str(Version.parse("1.2.3.0")) == "1.2.3"
    assert Version.parse("1.2.3.0") == Version.parse("1.2.3")


def test_prerelease_ordering():
    ordered = [
        "1.0.0-alpha",
        "1.0.0-alpha.1",
        "1.0.0-alpha.beta",
        "1.0.0-beta",
        "1.0.0-beta.2",
        "1.0.0-beta.11",
        "1.0.0-rc.1",
        "1.0.0",
        "1.0.0.1",
        "1.0.1",
    ]
    parsed = [Version.parse(v) for v in ordered]
    assert sorted(reversed(parsed)) == parsed


def test_prerelease_labels_compare_case_insensitively():
    assert Version.parse("1.0.0-Beta") == Version.parse("1.0.0-beta")
    assert hash(Version.parse("1.0.0-RC.1")) == hash(Version.parse("1.0.0-rc.1"))


def test_build_metadata_is_ignored_for_equality():
    assert Version.parse("1.0.0+abc") == Version.parse("1.0.0+def")
    assert hash(Version.parse("1.0.0+abc")) == hash(Version.parse("1.0.0"))
    assert Version.parse("1.0.0+abc").without_build().build == ()


def test_is_prerelease():
    assert Version.parse("1.0.0-rc.1").is_prerelease
    assert not Version.parse("1.0.0+build.5").is_prerelease


def test_rejects_negative_components():
    with pytest.raises(ValueError):
        Version(-1)


@pytest.mark.parametrize(
    "text, kind, offset",
    [
        ("", SemverErrorKind.INCOMPLETE_INPUT, 0),
        ("1.2.", SemverErrorKind.INCOMPLETE_INPUT, 3),
        ("1.2.3-", SemverErrorKind.INCOMPLETE_INPUT, 5),
        ("1.2.3+", SemverErrorKind.INCOMPLETE_INPUT, 5),
        ("a.b.c", SemverErrorKind.INVALID_COMPONENT, 0),
        ("1.2.3 ", SemverErrorKind.INVALID_COMPONENT, 5),
        ("1.2.3.4.5", SemverErrorKind.INVALID_COMPONENT, 7),
        ("1.2.3-beta..1", SemverErrorKind.INVALID_COMPONENT, 11),
        ("1.2.99999999999999999999", SemverErrorKind.INTEGER_PARSE, 4),
        ("1.2.900719925474100", SemverErrorKind.INTEGER_TOO_LARGE, 4),
    ],
)
def test_parse_errors(text, kind, offset):
    with pytest.raises(SemverError) as excinfo:
        Version.parse(text)
    assert excinfo.value.kind is kind
    assert excinfo.value.offset == offset
    assert excinfo.value.input == text


def test_too_large_error_carries_value():
    with pytest.raises(SemverError) as excinfo:
        Version.parse("900719925474100.0.0")
    assert excinfo.value.detail == 900719925474100
    assert "larger than MAX_SAFE_INTEGER" in str(excinfo.value)


def test_max_length():
    with pytest.raises(SemverError) as excinfo:
        Version.parse("1.0.0-" + "a" * 251)
    assert excinfo.value.kind is SemverErrorKind.MAX_LENGTH


def test_error_codes_and_location():
    with pytest.raises(SemverError) as excinfo:
        Version.parse("1.x")
    error = excinfo.value
    assert error.code == "nuver::semver::component_parse_error"
    assert error.location() == (0, 2)
    assert error.help is not None
    assert isinstance(error, ValueError)


def test_source_location_counts_lines():
    assert source_location("abc\ndef", 5) == (1, 1)
    assert source_location("abc", 0) == (0, 0)


@given(versions)
def test_display_round_trips(version):
    parsed = Version.parse(str(version))
    assert parsed == version
    assert str(parsed) == str(version)


@given(versions, versions)
def test_ordering_is_total(a, b):
    assert sum([a < b, a == b, a > b]) == 1
    if a == b:
        assert hash(a) == hash(b)


def test_non_string_input_is_rejected():
    with pytest.raises(SemverError) as excinfo:
        Version.parse(123)
    assert excinfo.value.kind is SemverErrorKind.OTHER
    assert excinfo.value.input == "123"
    assert "Expected a string, got int" in str(excinfo.value)
