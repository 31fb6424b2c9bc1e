"""Tests for vlens.core.versions module."""

import pytest

from vlens.core.versions import (
    extract_versions_from_map,
    filter_semver_versions,
    format_with_existing_leading,
    lte_from_array,
    sort_versions,
    split_releases_from_array,
)


class TestFilterSemverVersions:
    """Tests for filter_semver_versions()."""

    def test_drops_non_semver_preserving_order(self):
        raw = ["2.0.0", "~master", "1.0.0", "latest", "1.0", "v1.5.0"]
        assert filter_semver_versions(raw) == ["2.0.0", "1.0.0", "v1.5.0"]

    def test_empty(self):
        assert filter_semver_versions([]) == []


class TestSortVersions:
    """Tests for sort_versions()."""

    def test_sorts_by_precedence(self):
        versions = ["1.10.0", "1.2.0", "1.0.0-rc.1", "1.0.0", "0.9.0"]
        assert sort_versions(versions) == ["0.9.0", "1.0.0-rc.1", "1.0.0", "1.2.0", "1.10.0"]

    def test_sorts_prerelease_identifiers(self):
        versions = ["1.0.0-rc.10", "1.0.0-rc.2", "1.0.0-beta"]
        assert sort_versions(versions) == ["1.0.0-beta", "1.0.0-rc.2", "1.0.0-rc.10"]


class TestSplitReleasesFromArray:
    """Tests for split_releases_from_array()."""

    def test_partitions_preserving_order(self):
        split = split_releases_from_array(["1.0.0", "1.1.0-rc.1", "1.1.0", "2.0.0-beta.1"])
        assert split.releases == ["1.0.0", "1.1.0"]
        assert split.prereleases == ["1.1.0-rc.1", "2.0.0-beta.1"]

    def test_union_is_input(self):
        versions = ["0.1.0", "0.2.0-alpha", "0.2.0"]
        split = split_releases_from_array(versions)
        assert sorted(split.releases + split.prereleases) == sorted(versions)
        assert not set(split.releases) & set(split.prereleases)

    def test_build_metadata_is_not_prerelease(self):
        split = split_releases_from_array(["1.0.0+build.5"])
        assert split.releases == ["1.0.0+build.5"]
        assert split.prereleases == []


class TestLteFromArray:
    """Tests for lte_from_array()."""

    def test_caps_at_ceiling(self):
        assert lte_from_array(["1.0.0", "1.5.0", "2.0.0"], "1.5.0") == ["1.0.0", "1.5.0"]

    def test_unparsable_ceiling_keeps_list(self):
        assert lte_from_array(["1.0.0", "2.0.0"], "latest") == ["1.0.0", "2.0.0"]


class TestExtractVersionsFromMap:
    """Tests for extract_versions_from_map()."""

    def test_returns_keys(self):
        assert extract_versions_from_map({"1.0.0": {}, "1.1.0": {"dist": {}}}) == [
            "1.0.0",
            "1.1.0",
        ]


class TestFormatWithExistingLeading:
    """Tests for format_with_existing_leading()."""

    @pytest.mark.parametrize(
        ("existing", "new", "expected"),
        [
            ("^1.2.3", "1.5.0", "^1.5.0"),
            ("~1.2.3", "1.2.9", "~1.2.9"),
            (">=1.0.0", "2.0.0", ">=2.0.0"),
            ("1.2.3", "1.5.0", "1.5.0"),
        ],
    )
    def test_keeps_leading_operator(self, existing: str, new: str, expected: str):
        assert format_with_existing_leading(existing, new) == expected

    def test_invalid_combination_returns_bare_version(self):
        """A leading prefix that does not form a valid range is dropped."""
        assert format_with_existing_leading("latest", "2.0.0") == "2.0.0"
