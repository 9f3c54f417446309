from __future__ import annotations

import pytest
from semantic_version import Version

from jamkit.exceptions import VersionSyntaxError
from jamkit.utils.version_utils import parse_version, strip_version_prefix


@pytest.mark.unit
class TestParseVersion:
    """Tests for parse_version."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1.2.3", "1.2.3"),
            ("v1.2.3", "1.2.3"),
            (" 1.2.3 ", "1.2.3"),
            ("1.2.3-rc.1", "1.2.3-rc.1"),
            ("1.2.3-custom", "1.2.3-custom"),
            ("1.0.0-0.3.7", "1.0.0-0.3.7"),
        ],
    )
    def test_valid_versions(self, value: str, expected: str) -> None:
        """Test valid semantic versions parse, with or without a v prefix."""
        assert parse_version(value) == Version(expected)

    def test_build_metadata_is_ignored(self) -> None:
        """Test versions differing only in build metadata compare equal."""
        assert parse_version("1.2.3+build.4") == parse_version("1.2.3")
        assert str(parse_version("1.2.3-rc.1+build.4")) == "1.2.3-rc.1"

    def test_prerelease_sorts_before_release(self) -> None:
        """Test a pre-release orders before its release."""
        assert parse_version("1.2.3-rc.1") < parse_version("1.2.3")

    def test_numeric_prerelease_sorts_before_release(self) -> None:
        """Test a numeric pre-release identifier is still a pre-release."""
        assert parse_version("1.2.3-1") < parse_version("1.2.3")
        assert parse_version("1.2.3-1") > parse_version("1.2.2")

    def test_numeric_identifiers_compare_numerically(self) -> None:
        """Test numeric pre-release identifiers order by value."""
        assert parse_version("1.2.3-9") < parse_version("1.2.3-10")
        assert parse_version("1.2.3-rc.2") < parse_version("1.2.3-rc.10")

    def test_alphanumeric_identifiers_are_distinct(self) -> None:
        """Test differently spelled pre-release tags are different versions."""
        assert parse_version("1.2.3-alpha") != parse_version("1.2.3-a")
        assert parse_version("1.2.3-a") < parse_version("1.2.3-alpha")

    @pytest.mark.parametrize(
        "value", ["", "latest", "1.2", "1.2.3.x", "1.2.3.4", "not-a-version"]
    )
    def test_invalid_versions_raise(self, value: str) -> None:
        """Test non-semver strings raise VersionSyntaxError."""
        with pytest.raises(VersionSyntaxError) as exc_info:
            parse_version(value)

        assert exc_info.value.version == value
        assert "Invalid Semantic Version" in str(exc_info.value)


@pytest.mark.unit
class TestStripVersionPrefix:
    """Tests for strip_version_prefix."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("v1.0.0", "1.0.0"),
            ("V1.0.0", "1.0.0"),
            ("1.0.0", "1.0.0"),
            ("vv1.0.0", "v1.0.0"),
            ("", ""),
        ],
    )
    def test_strips_single_leading_v(self, value: str, expected: str) -> None:
        """Test only one leading v or V is removed."""
        assert strip_version_prefix(value) == expected
