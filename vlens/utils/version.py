"""Semantic versioning utilities."""

import re
from dataclasses import dataclass
from functools import total_ordering

import semantic_version


@total_ordering
@dataclass
class SemVer:
    """Semantic version representation."""

    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    _SEMVER_PATTERN = re.compile(
        r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
        r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
        r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
        r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
    )

    # Registries and git tags commonly carry "v1.2.3" or "=1.2.3"
    _LOOSE_PREFIX = re.compile(r"^\s*=?\s*[vV]?")

    @classmethod
    def parse(cls, version_str: str) -> "SemVer":
        """Parse a semver string.

        Args:
            version_str: Version string (e.g., "1.2.3", "2.0.0-beta.1+build.123")

        Returns:
            SemVer instance

        Raises:
            ValueError: If the string is not valid semver
        """
        match = cls._SEMVER_PATTERN.match(version_str)
        if not match:
            raise ValueError(f"Invalid semver: {version_str}")

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease"),
            build=match.group("build"),
        )

    @classmethod
    def parse_loose(cls, version_str: str) -> "SemVer":
        """Parse a semver string, tolerating a leading "v" or "=".

        Raises:
            ValueError: If the remainder is not valid semver
        """
        if not isinstance(version_str, str):
            raise ValueError(f"Invalid semver: {version_str!r}")
        return cls.parse(cls._LOOSE_PREFIX.sub("", version_str, count=1).strip())

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return (
            self.major == other.major
            and self.minor == other.minor
            and self.patch == other.patch
            and self.prerelease == other.prerelease
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented

        # Compare major.minor.patch
        if (self.major, self.minor, self.patch) != (other.major, other.minor, other.patch):
            return (self.major, self.minor, self.patch) < (other.major, other.minor, other.patch)

        # Prerelease versions have lower precedence
        if self.prerelease and not other.prerelease:
            return True
        if not self.prerelease and other.prerelease:
            return False
        if self.prerelease and other.prerelease:
            return self._compare_prerelease(self.prerelease, other.prerelease) < 0

        return False

    @staticmethod
    def _compare_prerelease(a: str, b: str) -> int:
        """Compare two prerelease strings."""
        parts_a = a.split(".")
        parts_b = b.split(".")

        for pa, pb in zip(parts_a, parts_b, strict=False):
            a_numeric, b_numeric = pa.isdigit(), pb.isdigit()
            if a_numeric and b_numeric:
                # Numeric identifiers are compared as integers
                na, nb = int(pa), int(pb)
                if na != nb:
                    return na - nb
            elif a_numeric != b_numeric:
                # Numeric identifiers always sort before alphanumeric ones
                return -1 if a_numeric else 1
            elif pa != pb:
                return -1 if pa < pb else 1

        # Longer prerelease has higher precedence
        return len(parts_a) - len(parts_b)

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))


def compare_loose(a: str, b: str) -> int:
    """Compare two version strings by semver precedence.

    Returns:
        Negative if a < b, zero if equal (build metadata ignored), positive if a > b

    Raises:
        ValueError: If either string is not a loose semver
    """
    va, vb = SemVer.parse_loose(a), SemVer.parse_loose(b)
    if va == vb:
        return 0
    return -1 if va < vb else 1


def is_valid_version(version_str: str) -> bool:
    """Check if a string loosely parses as a semantic version."""
    try:
        SemVer.parse_loose(version_str)
    except ValueError:
        return False
    return True


class VersionRange:
    """A version range specification using npm range grammar.

    Supports carets, tildes, x-ranges, hyphen ranges, comparator sets and
    "||" unions (e.g. "^1.2.3", "1.x", ">=1.0.0 <2.0.0 || 3.0.0").
    """

    _V_PREFIX = re.compile(r"(?<![0-9A-Za-z.])[vV](?=\d)")

    def __init__(self, spec: str):
        """Initialize a version range.

        Args:
            spec: Version specifier (e.g., "^1.2.3", "~2.0.0", ">=1.0.0 <2.0.0")

        Raises:
            ValueError: If the specifier is not a valid range
        """
        self.spec = spec
        expression = self._V_PREFIX.sub("", spec.strip()) or "*"
        try:
            self._spec = semantic_version.NpmSpec(expression)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid version range: {spec}") from e

    def matches(self, version: SemVer | str) -> bool:
        """Check if a version matches this range.

        Prerelease versions only match when the range names a prerelease on
        the same major.minor.patch, following npm semantics.

        Args:
            version: Version to check

        Returns:
            True if the version satisfies the range
        """
        if isinstance(version, str):
            try:
                version = SemVer.parse_loose(version)
            except ValueError:
                return False

        return self._spec.match(semantic_version.Version(str(version)))

    def __str__(self) -> str:
        return self.spec

    def __repr__(self) -> str:
        return f"VersionRange({self.spec!r})"


def is_valid_range(spec: str) -> bool:
    """Check if a string is a valid npm-style version range."""
    try:
        VersionRange(spec)
    except ValueError:
        return False
    return True


def is_compatible(spec: str, version: str) -> bool:
    """Check if a version is compatible with a specifier.

    Args:
        spec: Version specifier (e.g., "^1.2.3", "~2.0.0")
        version: Version string to check

    Returns:
        True if compatible
    """
    try:
        return VersionRange(spec).matches(version)
    except ValueError:
        return False


def max_satisfying(available: list[str], spec: str) -> str | None:
    """Find the highest version in a list that satisfies a range.

    Args:
        available: Version strings (unparsable entries are ignored)
        spec: Version specifier

    Returns:
        The original string of the best match, or None if nothing matches
        or the specifier is not a valid range
    """
    try:
        range_ = VersionRange(spec)
    except ValueError:
        return None

    best: tuple[SemVer, str] | None = None
    for v in available:
        try:
            semver = SemVer.parse_loose(v)
        except ValueError:
            continue
        if range_.matches(semver) and (best is None or best[0] < semver):
            best = (semver, v)

    return best[1] if best else None
