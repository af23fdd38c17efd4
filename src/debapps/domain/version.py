"""Version comparison utilities.

Versions come from many places (GitHub tags, dpkg, scraped pages,
`--version` output), so comparison tolerates Debian epochs/revisions and
falls back to numeric comparison when packaging cannot parse a string.
"""

import re
from collections.abc import Iterable
from functools import cmp_to_key

from packaging.version import InvalidVersion, Version

from debapps.constants import (
    BINARY_VERSION_PATTERN,
    VERSION_LATEST,
    VERSION_UNKNOWN,
)

_VERSION_RE = re.compile(BINARY_VERSION_PATTERN)
_DEBIAN_EPOCH_RE = re.compile(r"^\d+:")
_NUMERIC_PARTS_RE = re.compile(r"\d+")


def _split(version: str) -> tuple[str, str]:
    """Strip a leading "v" and a Debian epoch; split off a Debian revision.

    Returns:
        ``(upstream, revision)``; revision is "" when there is none

    """
    cleaned = version.strip().lstrip("vV").lower()
    cleaned = _DEBIAN_EPOCH_RE.sub("", cleaned)
    if "-" in cleaned:
        head, _, tail = cleaned.partition("-")
        # "1.2.3-1ubuntu2" is a Debian revision, "1.2.3-rc1" is not
        if tail[:1].isdigit():
            return head, tail
    return cleaned, ""


def _compare_parts(v1_clean: str, v2_clean: str) -> int:
    v1_parts = [int(p) for p in _NUMERIC_PARTS_RE.findall(v1_clean)]
    v2_parts = [int(p) for p in _NUMERIC_PARTS_RE.findall(v2_clean)]
    max_len = max(len(v1_parts), len(v2_parts))
    v1_parts.extend([0] * (max_len - len(v1_parts)))
    v2_parts.extend([0] * (max_len - len(v2_parts)))
    if v1_parts < v2_parts:
        return -1
    if v1_parts > v2_parts:
        return 1
    return 0


def _compare_upstream(v1_clean: str, v2_clean: str) -> int:
    if v1_clean == v2_clean:
        return 0
    try:
        v1 = Version(v1_clean)
        v2 = Version(v2_clean)
    except InvalidVersion:
        return _compare_parts(v1_clean, v2_clean)
    if v1 < v2:
        return -1
    if v1 > v2:
        return 1
    return 0


def compare_versions(version1: str, version2: str) -> int:
    """Compare two version strings.

    Returns -1 if version1 < version2, 0 if equal, 1 if version1 > version2.
    Debian revisions only break ties between equal upstream versions, and
    only when both sides carry one.

    Example:
        >>> compare_versions("1.9.0", "1.10.0")
        -1
        >>> compare_versions("1.2.3-1ubuntu1", "1.2.3-1ubuntu2")
        -1
    """
    v1_upstream, v1_revision = _split(version1)
    v2_upstream, v2_revision = _split(version2)

    result = _compare_upstream(v1_upstream, v2_upstream)
    if result or not (v1_revision and v2_revision):
        return result
    return _compare_parts(v1_revision, v2_revision)


def is_known_version(version: str | None) -> bool:
    """Return True unless the version is empty or a sentinel."""
    return bool(version) and version not in (VERSION_UNKNOWN, VERSION_LATEST)


def is_upgradeable(installed: str | None, latest: str | None) -> bool:
    """Return True only when both versions are known and installed < latest.

    Example:
        >>> is_upgradeable("2.0.0", "2.0.0")
        False
    """
    if not is_known_version(installed) or not is_known_version(latest):
        return False
    return compare_versions(installed, latest) < 0  # type: ignore[arg-type]


def extract_version(text: str) -> str:
    """Return the first X.Y[.Z] found in text, or "unknown"."""
    match = _VERSION_RE.search(text)
    return match.group(0) if match else VERSION_UNKNOWN


def max_version(versions: Iterable[str]) -> str:
    """Return the highest version in versions, or "" when empty.

    Example:
        >>> max_version(["13.0.9", "13.5", "14.0.1"])
        '14.0.1'
    """
    candidates = [v for v in versions if v]
    if not candidates:
        return ""
    return max(candidates, key=cmp_to_key(compare_versions))
