"""
Version numbering policy.

Versions are "major.minor.patch" strings. A save bumps the patch of the
currently active version; minor/major bumps happen only when the caller asks
for them explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .errors import ValidationError

INITIAL_VERSION = "1.0.0"

BUMP_KINDS = ("patch", "minor", "major")


@dataclass(frozen=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: str = "patch") -> "Version":
        if kind == "patch":
            return Version(self.major, self.minor, self.patch + 1)
        if kind == "minor":
            return Version(self.major, self.minor + 1, 0)
        if kind == "major":
            return Version(self.major + 1, 0, 0)
        raise ValidationError(f"Unknown version bump '{kind}'. Allowed: {', '.join(BUMP_KINDS)}.")


def parse_version(raw: str) -> Version:
    """
    Parse "major.minor.patch" into a Version.

    Exactly three dot-separated, non-negative decimal integers are accepted;
    anything else raises ValidationError.
    """
    parts = (raw or "").strip().split(".")
    if len(parts) != 3 or not all(part.isdigit() and part.isascii() for part in parts):
        raise ValidationError(f"Malformed template version '{raw}'. Expected 'major.minor.patch'.")
    major, minor, patch = (int(part) for part in parts)
    return Version(major, minor, patch)


def next_version(current: str | None, bump: str = "patch", taken: Iterable[str] = ()) -> str:
    """
    Version string for the next save, given the active version (or None).

    After a rollback the bumped version may already exist further up the
    history; the same bump is repeated until a free version is found.
    """
    if bump not in BUMP_KINDS:
        raise ValidationError(f"Unknown version bump '{bump}'. Allowed: {', '.join(BUMP_KINDS)}.")
    taken = set(taken)
    if current is None:
        if INITIAL_VERSION not in taken:
            return INITIAL_VERSION
        # Versions exist but none is active; continue from the newest-numbered one.
        current = str(max(parse_version(v) for v in taken))

    candidate = parse_version(current).bump(bump)
    while str(candidate) in taken:
        candidate = candidate.bump(bump)
    return str(candidate)
