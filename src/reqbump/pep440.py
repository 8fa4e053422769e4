""" PEP 440 ordering for the pip grammar, backed by #packaging. Post-releases sort after their release, development
releases before its prereleases, and the special rules of the exclusive comparison operators (`<1.0` does not admit
`1.0rc1`, `>1.0` does not admit `1.0.post1`) apply. """

from __future__ import annotations

import functools

from packaging.specifiers import InvalidSpecifier, Specifier
from packaging.version import InvalidVersion, Version

from reqbump.errors import MalformedVersion, UnrecognizedConstraint
from reqbump.requirement import ConstraintClause, VersionScheme
from reqbump.version import SemanticVersion


def to_pep440(version: SemanticVersion) -> Version:
    """Convert *version* to a #packaging.version.Version. Wildcard segments are cut off, so `2.6.*` sorts like `2.6`.
    Raises a #MalformedVersion if the version is not valid under PEP 440."""

    text = str(version)
    if version.has_wildcard:
        text = ".".join(map(str, version.segments[: version.significant_precision])) or "0"
    try:
        return Version(text)
    except InvalidVersion as exc:
        raise MalformedVersion(str(version), "not a valid PEP 440 version") from exc


@functools.lru_cache(maxsize=512)
def _specifier(text: str) -> Specifier:
    return Specifier(text)


class Pep440Scheme(VersionScheme):
    def key(self, version: SemanticVersion) -> Version:
        return to_pep440(version)

    def validate_version(self, version: SemanticVersion) -> None:
        to_pep440(version)

    def validate_clause(self, clause: ConstraintClause) -> None:
        try:
            _specifier(f"{clause.operator}{clause.version}")
        except InvalidSpecifier as exc:
            raise UnrecognizedConstraint(clause.render(), "python", "not a valid PEP 440 specifier") from exc

    def admits(self, clause: ConstraintClause, version: SemanticVersion) -> bool:
        # Prereleases are admitted wherever the ordering permits them.
        return _specifier(f"{clause.operator}{clause.version}").contains(to_pep440(version), prereleases=True)
