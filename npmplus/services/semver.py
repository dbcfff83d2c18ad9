"""Minimal npm-style semantic version ordering.

Only ordering is needed here (sorting a registry's version list and checking
advisory ``introduced``/``fixed`` events), not full range syntax.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Iterable, List, Optional, Tuple, Union

_SEMVER_RE = re.compile(
    r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)

# Leading range operators as in "^1.2.3" or ">=1.2.3"
RANGE_PREFIX_RE = re.compile(r"^(?:\^|~|>=?|<=?|=|v)+")

Identifier = Union[int, str]
ParsedVersion = Tuple[int, int, int, Tuple[Identifier, ...]]


def parse_version(version: str) -> Optional[ParsedVersion]:
    """Parse ``1.2.3-beta.1+build`` into comparable parts; None if not a version."""
    match = _SEMVER_RE.match(version.strip())
    if not match:
        return None
    major, minor, patch, pre = match.groups()
    prerelease: Tuple[Identifier, ...] = ()
    if pre:
        prerelease = tuple(int(p) if p.isdigit() else p for p in pre.split("."))
    return int(major), int(minor or 0), int(patch or 0), prerelease


def _compare_prerelease(a: Tuple[Identifier, ...], b: Tuple[Identifier, ...]) -> int:
    # A release outranks any of its prereleases
    if not a and not b:
        return 0
    if not a:
        return 1
    if not b:
        return -1
    for x, y in zip(a, b):
        if x == y:
            continue
        if isinstance(x, int) and isinstance(y, int):
            return -1 if x < y else 1
        if isinstance(x, int):
            return -1
        if isinstance(y, int):
            return 1
        return -1 if x < y else 1
    return (len(a) > len(b)) - (len(a) < len(b))


def exact_version(version: str) -> Optional[str]:
    """Drop a leading range operator (``^1.2.3`` -> ``1.2.3``); None for dist-tags."""
    stripped = RANGE_PREFIX_RE.sub("", version.strip())
    return stripped if parse_version(stripped) is not None else None


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1. Unparseable versions sort below every real one."""
    pa, pb = parse_version(a), parse_version(b)
    if pa is None or pb is None:
        if pa is None and pb is None:
            return (a > b) - (a < b)
        return -1 if pa is None else 1
    if pa[:3] != pb[:3]:
        return -1 if pa[:3] < pb[:3] else 1
    return _compare_prerelease(pa[3], pb[3])


def sort_versions_desc(versions: Iterable[str]) -> List[str]:
    return sorted(versions, key=cmp_to_key(compare_versions), reverse=True)


def in_affected_range(version: str, introduced: Optional[str], fixed: Optional[str]) -> bool:
    """True when ``introduced <= version < fixed`` (either bound may be open)."""
    if introduced and introduced != "0" and compare_versions(version, introduced) < 0:
        return False
    if fixed and compare_versions(version, fixed) >= 0:
        return False
    return True
