"""Version specifier parsing for each registry family.

Every manifest format writes ranges its own way. The parsers here classify a
specifier (fixed, range, tag, alias, committish) and translate it into the npm
range grammar understood by ``vlens.utils.version.VersionRange``.
"""

import re
from dataclasses import dataclass

from vlens.core.errors import InvalidSpecifierError
from vlens.core.models import VersionType
from vlens.utils.version import is_valid_range, is_valid_version


@dataclass(frozen=True)
class SemverSpec:
    """A classified specifier.

    ``raw_version`` is what the manifest says; ``range`` is its npm-grammar
    equivalent used for matching.
    """

    raw_version: str
    range: str
    type: VersionType


@dataclass(frozen=True)
class GitHubRef:
    """A GitHub-hosted dependency (github:owner/repo#ref)."""

    owner: str
    repo: str
    ref: str
    semver_range: str | None = None


@dataclass(frozen=True)
class NpmSpecifier:
    """A parsed npm dependency specifier."""

    name: str
    raw_spec: str
    type: VersionType
    sub_spec: "NpmSpecifier | None" = None
    github: GitHubRef | None = None

    @property
    def target(self) -> "NpmSpecifier":
        """The specifier that is actually looked up (the aliased one for aliases)."""
        return self.sub_spec if self.sub_spec is not None else self


# =============================================================================
# npm
# =============================================================================

_GITHUB_PATTERNS = [
    re.compile(r"^github:(?P<owner>[^/#]+)/(?P<repo>[^#]+?)(?:\.git)?(?:#(?P<ref>.*))?$"),
    re.compile(
        r"^(?:git\+)?(?:https|ssh|git)://(?:git@)?github\.com[/:]"
        r"(?P<owner>[^/#]+)/(?P<repo>[^#]+?)(?:\.git)?(?:#(?P<ref>.*))?$"
    ),
    re.compile(r"^git@github\.com:(?P<owner>[^/#]+)/(?P<repo>[^#]+?)(?:\.git)?(?:#(?P<ref>.*))?$"),
    # owner/repo shorthand
    re.compile(r"^(?P<owner>[A-Za-z0-9][\w.-]*)/(?P<repo>[\w.-]+?)(?:#(?P<ref>.*))?$"),
]

_UNSUPPORTED_PREFIXES = ("file:", "link:", "./", "../", "/", "~/", "http://", "https://", "git+", "git:", "git@")

_TAG_PATTERN = re.compile(r"^[A-Za-z][\w.-]*$")


def _parse_github(raw: str) -> GitHubRef | None:
    for pattern in _GITHUB_PATTERNS:
        match = pattern.match(raw)
        if match:
            ref = match.group("ref") or ""
            semver_range = ref[len("semver:") :] if ref.startswith("semver:") else None
            return GitHubRef(
                owner=match.group("owner"),
                repo=match.group("repo"),
                ref=ref,
                semver_range=semver_range,
            )
    return None


def _github_type(github: GitHubRef) -> VersionType:
    if github.semver_range is not None:
        return VersionType.RANGE
    if github.ref and is_valid_version(github.ref):
        return VersionType.FIXED
    return VersionType.COMMITTISH


def parse_npm_spec(name: str, version: str) -> NpmSpecifier:
    """Parse an npm dependency specifier.

    Args:
        name: Dependency name
        version: Specifier from package.json (e.g. "^1.0.0", "next",
            "npm:other@^2", "github:owner/repo#v1.0.0")

    Returns:
        The classified specifier

    Raises:
        InvalidSpecifierError: For local paths, tarball URLs, nested aliases
            or strings that are neither ranges nor tag names
    """
    raw = version.strip()

    if raw.startswith("npm:"):
        target = raw[len("npm:") :]
        # a leading "@" belongs to a scope, not to a version separator
        at = target.find("@", 1)
        if at > 0:
            sub_name, sub_version = target[:at], target[at + 1 :]
        else:
            sub_name, sub_version = target, ""
        if not sub_name:
            raise InvalidSpecifierError(name, version, "alias without a package name")

        sub_spec = parse_npm_spec(sub_name, sub_version)
        if sub_spec.type is VersionType.ALIAS or sub_spec.github is not None:
            raise InvalidSpecifierError(name, version, "aliases must point at a registry package")
        return NpmSpecifier(name=name, raw_spec=raw, type=VersionType.ALIAS, sub_spec=sub_spec)

    github = _parse_github(raw)
    if github is not None:
        return NpmSpecifier(name=name, raw_spec=raw, type=_github_type(github), github=github)

    if raw.startswith(_UNSUPPORTED_PREFIXES):
        raise InvalidSpecifierError(name, version)

    if raw == "":
        return NpmSpecifier(name=name, raw_spec="latest", type=VersionType.TAG)
    if is_valid_version(raw):
        return NpmSpecifier(name=name, raw_spec=raw, type=VersionType.FIXED)
    if is_valid_range(raw):
        return NpmSpecifier(name=name, raw_spec=raw, type=VersionType.RANGE)
    if _TAG_PATTERN.match(raw):
        return NpmSpecifier(name=name, raw_spec=raw, type=VersionType.TAG)

    raise InvalidSpecifierError(name, version, "not a version, range or tag")


# =============================================================================
# Plain semver (dub, composer)
# =============================================================================


def parse_semver_spec(raw_version: str, range_: str | None = None) -> SemverSpec:
    """Classify a semver specifier as fixed or range.

    Args:
        raw_version: Specifier as written
        range_: Its npm-grammar translation (defaults to ``raw_version``)
    """
    range_ = raw_version.strip() if range_ is None else range_
    version_type = VersionType.FIXED if is_valid_version(range_) else VersionType.RANGE
    return SemverSpec(raw_version=raw_version, range=range_, type=version_type)


_COMPOSER_STABILITY = re.compile(r"@(?:stable|RC|rc|beta|alpha|dev)\b")


def normalize_composer_range(raw: str) -> str:
    """Translate a Composer constraint into npm range grammar.

    ``,`` joins constraints with AND and ``|``/``||`` with OR; stability
    flags such as ``@dev`` are dropped.
    """
    s = _COMPOSER_STABILITY.sub("", raw)
    s = re.sub(r"\s*\|\|?\s*", " || ", s)
    s = re.sub(r"\s*,\s*", " ", s)
    return re.sub(r"\s+", " ", s).strip()


def parse_composer_spec(raw_version: str) -> SemverSpec:
    """Parse a composer.json constraint."""
    return parse_semver_spec(raw_version, normalize_composer_range(raw_version))


_DUB_APPROX = re.compile(r"^~>\s*(\d+)(?:\.(\d+))?(?:\.(\d+))?(-[0-9A-Za-z.-]+)?$")


def normalize_dub_range(raw: str) -> str:
    """Translate a dub constraint into npm range grammar.

    ``~>1.2.3`` means ``>=1.2.3 <1.3.0`` and ``~>1.2`` means ``>=1.2.0 <2.0.0``;
    ``==1.2.3`` is an exact version.
    """
    s = raw.strip()
    if s.startswith("=="):
        return s[2:].strip()

    match = _DUB_APPROX.match(s)
    if not match:
        return s

    major, minor, patch, prerelease = match.groups()
    lower = f"{major}.{minor or 0}.{patch or 0}{prerelease or ''}"
    if patch is not None:
        upper = f"{major}.{int(minor) + 1}.0"
    else:
        upper = f"{int(major) + 1}.0.0"
    return f">={lower} <{upper}"


def parse_dub_spec(raw_version: str) -> SemverSpec:
    """Parse a dub.json dependency version."""
    return parse_semver_spec(raw_version, normalize_dub_range(raw_version))


# =============================================================================
# NuGet
# =============================================================================

_NUGET_INTERVAL = re.compile(r"^([\[(])\s*([^,\])]*?)\s*(?:,\s*([^\])]*?)\s*)?([\])])$")


def normalize_nuget_version(version: str) -> str:
    """Pad or trim a NuGet version to three numeric parts.

    "1.0" becomes "1.0.0" and "1.2.3.0" becomes "1.2.3"; a non-zero
    fourth part is kept (and will not parse as semver).
    """
    core, sep, prerelease = version.strip().partition("-")
    parts = core.split(".")
    while len(parts) < 3:
        parts.append("0")
    if len(parts) == 4 and parts[3] == "0":
        parts = parts[:3]
    return ".".join(parts) + (sep + prerelease if sep else "")


def parse_nuget_spec(raw_version: str) -> SemverSpec:
    """Parse a NuGet version or interval.

    Supports exact versions (``1.2.3``, ``[1.2.3]``), intervals
    (``[1.0,2.0)``, ``(,1.0]``, ``(1.0,)``) and floating versions (``1.*``).
    """
    s = raw_version.strip()

    match = _NUGET_INTERVAL.match(s)
    if match:
        opening, low, high, closing = match.groups()
        if high is None:
            # "[1.2.3]" pins a single version
            return SemverSpec(raw_version, normalize_nuget_version(low), VersionType.FIXED)

        parts = []
        if low:
            parts.append((">=" if opening == "[" else ">") + normalize_nuget_version(low))
        if high:
            parts.append(("<=" if closing == "]" else "<") + normalize_nuget_version(high))
        return SemverSpec(raw_version, " ".join(parts) or "*", VersionType.RANGE)

    if "*" in s:
        return SemverSpec(raw_version, s, VersionType.RANGE)

    return parse_semver_spec(raw_version, normalize_nuget_version(s))
