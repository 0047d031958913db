"""Version parsing, ordering, and version constraints for artifact coordinates.

Versions follow the usual build-tool shape ``major[.minor[.patch]][-qualifier]``
(``1.0``, ``2.3.1``, ``1.0-SNAPSHOT``, ``5.2.0.RELEASE``). Qualified versions
sort before the matching plain release, except for the release-equivalent
qualifiers ``final``, ``ga`` and ``release``.

Constraint syntax
-----------------
- Bare version (exact): ``1.2.0``
- Operators: ``==``, ``!=``, ``>=``, ``<=``, ``>``, ``<``
- Caret (same major): ``^1.2.0``; tilde (same major.minor): ``~1.2.0``
- Wildcard (any version): ``*``
- Compound (comma-separated, all must hold): ``>=1.0,<2.0``
- Ranges: ``[1.0,2.0)``, ``(,1.0]``, ``[1.5]``, ``[1.0,)`` and unions of
  ranges such as ``[1.0,2.0),[3.0,)`` (any range may hold).
"""

from __future__ import annotations

import re
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Version comparison utilities
# ---------------------------------------------------------------------------

_VERSION_PATTERN = (
    r"(?:0|[1-9]\d*)(?:\.(?:0|[1-9]\d*))?(?:\.(?:0|[1-9]\d*))?"
    r"(?:[-.]?[A-Za-z0-9][0-9A-Za-z\-.]*)?"
)

_VERSION_RE = re.compile(
    r"^(?P<major>0|[1-9]\d*)(?:\.(?P<minor>0|[1-9]\d*))?(?:\.(?P<patch>0|[1-9]\d*))?"
    r"(?:[-.]?(?P<qualifier>[A-Za-z0-9][0-9A-Za-z\-.]*))?$"
)

_RELEASE_QUALIFIERS = frozenset({"", "final", "ga", "release"})

VersionKey = tuple[int, int, int, int, str]


def parse_version(version: str) -> VersionKey:
    """Parse a version string into a comparable key.

    Args:
        version: Version string (e.g., "1.2.3", "1.0-SNAPSHOT").

    Returns:
        A ``(major, minor, patch, release_flag, qualifier)`` tuple. The
        release flag is 1 for plain releases and 0 for qualified versions,
        so ``1.0-beta`` sorts before ``1.0``.

    Raises:
        ValueError: If the string is not a recognizable version.
    """
    m = _VERSION_RE.match(version.strip())
    if not m:
        raise ValueError(f"Invalid version: {version!r}")
    qualifier = (m.group("qualifier") or "").lower()
    release = 1 if qualifier in _RELEASE_QUALIFIERS else 0
    return (
        int(m.group("major")),
        int(m.group("minor") or 0),
        int(m.group("patch") or 0),
        release,
        "" if release else qualifier,
    )


def version_key(version: str) -> VersionKey:
    """Sort key for version strings (ascending)."""
    return parse_version(version)


def is_version(text: str) -> bool:
    """Return True if *text* parses as a version."""
    return _VERSION_RE.match(text.strip()) is not None


# ---------------------------------------------------------------------------
# VersionConstraint: Declarative version requirement
# ---------------------------------------------------------------------------

_CONSTRAINT_ATOM_RE = re.compile(
    r"^\s*(?P<op>==|!=|>=|<=|>|<|\^|~)\s*(?P<ver>" + _VERSION_PATTERN + r")\s*$"
)

_RANGE_RE = re.compile(r"([\[(])([^\[\]()]*)([\])])")


def _range_to_atoms(raw: str) -> list[list[str]]:
    """Translate a range expression into a disjunction of atom conjunctions."""
    alternatives: list[list[str]] = []
    consumed = 0
    for m in _RANGE_RE.finditer(raw):
        between = raw[consumed:m.start()].strip().strip(",").strip()
        if between:
            raise ValueError(f"Invalid version range: {raw!r}")
        consumed = m.end()
        opening, body, closing = m.groups()
        bounds = [b.strip() for b in body.split(",")]
        if len(bounds) == 1:
            if opening != "[" or closing != "]" or not bounds[0]:
                raise ValueError(f"Invalid version range: {raw!r}")
            alternatives.append([f"=={bounds[0]}"])
            continue
        if len(bounds) != 2:
            raise ValueError(f"Invalid version range: {raw!r}")
        lower, upper = bounds
        atoms: list[str] = []
        if lower:
            atoms.append((">=" if opening == "[" else ">") + lower)
        if upper:
            atoms.append(("<=" if closing == "]" else "<") + upper)
        alternatives.append(atoms)
    if not alternatives or raw[consumed:].strip():
        raise ValueError(f"Invalid version range: {raw!r}")
    return alternatives


@dataclass(frozen=True)
class VersionConstraint:
    """A version requirement as declared on a dependency.

    Attributes:
        raw: The raw constraint string as authored (e.g., ">=1.0,<2.0").
    """

    raw: str

    @property
    def is_range(self) -> bool:
        """True if this is a bracketed range expression."""
        return self.raw.strip()[:1] in ("[", "(")

    @property
    def exact_version(self) -> str | None:
        """The single version this constraint pins, or None.

        Bare versions, ``==x`` and ``[x]`` pin a version.
        """
        stripped = self.raw.strip()
        if is_version(stripped):
            return stripped
        if stripped.startswith("==") and "," not in stripped:
            candidate = stripped[2:].strip()
            return candidate if is_version(candidate) else None
        if stripped.startswith("[") and stripped.endswith("]") and "," not in stripped:
            candidate = stripped[1:-1].strip()
            return candidate if is_version(candidate) else None
        return None

    def validate(self) -> None:
        """Check the constraint syntax without evaluating it.

        Raises:
            ValueError: If the constraint is malformed.
        """
        stripped = self.raw.strip()
        if stripped == "*" or is_version(stripped):
            return
        if self.is_range:
            atoms = [atom for conjunction in _range_to_atoms(stripped) for atom in conjunction]
        else:
            atoms = [a.strip() for a in stripped.split(",") if a.strip()]
            if not atoms:
                raise ValueError(f"Empty version constraint: {self.raw!r}")
        for atom in atoms:
            if not _CONSTRAINT_ATOM_RE.match(atom):
                raise ValueError(f"Invalid constraint atom: {atom!r}")

    def satisfies(self, version: str) -> bool:
        """Check whether a version string satisfies this constraint.

        Args:
            version: A version string (e.g., "1.2.3").

        Returns:
            True if the version satisfies the constraint.

        Raises:
            ValueError: If *version* or the constraint is malformed.
        """
        stripped = self.raw.strip()
        if stripped == "*":
            return True

        ver_key = parse_version(version)

        if self.is_range:
            return any(
                all(self._atom_satisfies(atom, ver_key) for atom in conjunction)
                for conjunction in _range_to_atoms(stripped)
            )

        if is_version(stripped):
            return ver_key == parse_version(stripped)

        atoms = [a.strip() for a in stripped.split(",") if a.strip()]
        for atom in atoms:
            if not self._atom_satisfies(atom, ver_key):
                return False
        return True

    def select(self, versions: list[str]) -> str | None:
        """Return the highest version from *versions* satisfying this constraint."""
        matching = [v for v in versions if is_version(v) and self.satisfies(v)]
        if not matching:
            return None
        return max(matching, key=version_key)

    @staticmethod
    def _atom_satisfies(atom: str, ver_key: VersionKey) -> bool:
        """Evaluate a single constraint atom against a parsed version key."""
        m = _CONSTRAINT_ATOM_RE.match(atom)
        if not m:
            raise ValueError(f"Invalid constraint atom: {atom!r}")

        op = m.group("op")
        target = parse_version(m.group("ver"))

        if op == "==":
            return ver_key == target
        elif op == "!=":
            return ver_key != target
        elif op == ">=":
            return ver_key >= target
        elif op == "<=":
            return ver_key <= target
        elif op == ">":
            return ver_key > target
        elif op == "<":
            return ver_key < target
        elif op == "^":
            return ver_key[0] == target[0] and ver_key >= target
        elif op == "~":
            return ver_key[:2] == target[:2] and ver_key >= target
        else:  # pragma: no cover
            raise ValueError(f"Unknown operator: {op!r}")

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"VersionConstraint({self.raw!r})"
