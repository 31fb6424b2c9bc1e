"""Suggestion tags computed from a requested range and a registry's versions.

The order of the returned list is part of the contract: a status tag for what
the manifest currently resolves to comes first, then ``latest``, then one
entry per prerelease channel (newest first).
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import IntFlag

from vlens.utils.version import SemVer, max_satisfying


class SuggestionFlags(IntFlag):
    """Independent bits describing a suggestion."""

    RELEASE = 1
    PRERELEASE = 2
    STATUS = 4


class SuggestionStatus:
    """Well-known suggestion names."""

    FIXED = "fixed"
    SATISFIES = "satisfies"
    LATEST = "latest"
    LATEST_IS_PRERELEASE = "latest prerelease"
    NO_MATCH = "no match"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Suggestion:
    """A named candidate version offered to the user."""

    name: str
    version: str
    flags: SuggestionFlags


_CHANNEL_PATTERN = re.compile(r"^[A-Za-z]+")

# channel names that would shadow a status suggestion
_RESERVED_CHANNELS = frozenset(
    {
        SuggestionStatus.FIXED,
        SuggestionStatus.SATISFIES,
        SuggestionStatus.LATEST,
        SuggestionStatus.UNSUPPORTED,
    }
)


def prerelease_channel(version: str) -> str:
    """Name the prerelease channel of a version.

    The channel is the alphabetic head of the first prerelease identifier,
    so ``2.0.0-rc.1`` and ``2.0.0-rc2`` are both "rc" and
    ``4.0.0-preview1-25305-02`` is "preview". Purely numeric prereleases
    fall back to "prerelease", and heads that collide with a status name
    are prefixed (``2.0.0-latest.1`` is "prerelease-latest").
    """
    prerelease = SemVer.parse_loose(version).prerelease or ""
    head = re.split(r"[.-]", prerelease, maxsplit=1)[0]
    match = _CHANNEL_PATTERN.match(head)
    if not match:
        return "prerelease"
    channel = match.group(0).lower()
    if channel in _RESERVED_CHANNELS:
        return f"prerelease-{channel}"
    return channel


def _is_prerelease(version: str) -> bool:
    try:
        return SemVer.parse_loose(version).is_prerelease
    except ValueError:
        return False


def _parse(version: str | None) -> SemVer | None:
    if version is None:
        return None
    try:
        return SemVer.parse_loose(version)
    except ValueError:
        return None


def _add(suggestions: list[Suggestion], suggestion: Suggestion) -> None:
    # first tag with a given name wins
    if any(s.name == suggestion.name for s in suggestions):
        return
    suggestions.append(suggestion)


def _resolve_status(
    requested_range: str,
    releases: Sequence[str],
    prereleases: Sequence[str],
) -> Suggestion | None:
    if requested_range in releases or requested_range in prereleases:
        return Suggestion(SuggestionStatus.FIXED, requested_range, SuggestionFlags.STATUS)

    satisfied = max_satisfying(list(releases), requested_range)
    if satisfied is None and "-" in requested_range:
        satisfied = max_satisfying(list(prereleases), requested_range)
    if satisfied is None:
        return None

    return Suggestion(SuggestionStatus.SATISFIES, satisfied, SuggestionFlags.STATUS)


def _latest_prerelease_channels(
    prereleases: Sequence[str],
    latest: str | None,
    exclude: set[str],
) -> list[tuple[str, str]]:
    latest_version = _parse(latest)
    newest: dict[str, tuple[SemVer, str]] = {}
    for version in prereleases:
        parsed = _parse(version)
        if parsed is None or version in exclude:
            continue
        if latest_version is not None and not latest_version < parsed:
            continue
        channel = prerelease_channel(version)
        if channel not in newest or newest[channel][0] < parsed:
            newest[channel] = (parsed, version)

    ordered = sorted(newest.items(), key=lambda item: item[1][0], reverse=True)
    return [(channel, version) for channel, (_, version) in ordered]


def create_suggestion_tags(
    requested_range: str,
    releases: Sequence[str],
    prereleases: Sequence[str],
    latest_hint: str | None = None,
) -> list[Suggestion]:
    """Compute the ranked suggestion list for a requested range.

    Args:
        requested_range: The specifier to evaluate (a version or range)
        releases: Ascending release versions
        prereleases: Ascending prerelease versions
        latest_hint: The registry's own "latest" tag, when it declares one

    Returns:
        Suggestions in display order, unique by name
    """
    suggestions: list[Suggestion] = []

    status = _resolve_status(requested_range, releases, prereleases)

    latest = latest_hint or (releases[-1] if releases else None)
    latest_is_prerelease = latest is not None and _is_prerelease(latest)
    latest_flag = SuggestionFlags.PRERELEASE if latest_is_prerelease else SuggestionFlags.RELEASE
    latest_name = (
        SuggestionStatus.LATEST_IS_PRERELEASE if latest_is_prerelease else SuggestionStatus.LATEST
    )

    if status is not None:
        if latest is not None and status.version == latest:
            # the requested target already is latest; fold both into one entry
            status = Suggestion(
                latest_name if latest_is_prerelease else status.name,
                status.version,
                status.flags | latest_flag,
            )
        _add(suggestions, status)

    if latest is not None and (status is None or status.version != latest):
        _add(suggestions, Suggestion(latest_name, latest, latest_flag))

    exclude = {s.version for s in suggestions}
    for channel, version in _latest_prerelease_channels(prereleases, latest, exclude):
        _add(suggestions, Suggestion(channel, version, SuggestionFlags.PRERELEASE))

    return suggestions


def create_no_match_suggestions(latest: str | None) -> list[Suggestion]:
    """Suggestions for a specifier that matched nothing in the registry."""
    suggestions = [Suggestion(SuggestionStatus.NO_MATCH, "", SuggestionFlags.STATUS)]
    if latest:
        flag = SuggestionFlags.PRERELEASE if _is_prerelease(latest) else SuggestionFlags.RELEASE
        name = (
            SuggestionStatus.LATEST_IS_PRERELEASE
            if flag is SuggestionFlags.PRERELEASE
            else SuggestionStatus.LATEST
        )
        suggestions.append(Suggestion(name, latest, flag))
    return suggestions


def filter_prerelease_suggestions(suggestions: Iterable[Suggestion]) -> list[Suggestion]:
    """Drop prerelease suggestions unless they flag latest as a prerelease."""
    return [
        s
        for s in suggestions
        if not s.flags & SuggestionFlags.PRERELEASE
        or SuggestionStatus.LATEST_IS_PRERELEASE in s.name
    ]
