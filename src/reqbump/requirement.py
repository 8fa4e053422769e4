""" The logical model of a requirement: a #Requirement is an ordered list of #ConstraintClause objects that must all
be satisfied by a version (they are joined by a logical AND). The objects in this module know nothing about the
text syntax of any particular ecosystem beyond what is needed to render them back, see #reqbump.grammar for
parsing. """

from __future__ import annotations

import dataclasses
import enum
import typing as t

from reqbump.version import SemanticVersion


class ClauseKind(enum.Enum):
    """The comparison that a clause performs, independent of how the operator is spelled in an ecosystem."""

    #: Matches exactly one version (or all versions sharing a prefix if the version contains a wildcard).
    EXACT = "exact"

    #: The negation of #EXACT.
    EXCLUDE = "exclude"

    GREATER = "greater"
    GREATER_EQUAL = "greater_equal"
    LESS = "less"
    LESS_EQUAL = "less_equal"

    #: The "twiddle-wakka" (`~>` in Ruby, `~=` in Python, `~` in Composer). Permits versions that share all but the
    #: last specified segment.
    COMPATIBLE = "compatible"

    #: The npm tilde, permits patch-level changes if a minor version is given and minor-level changes otherwise.
    TILDE = "tilde"

    #: The caret, permits changes that do not modify the leftmost nonzero segment.
    CARET = "caret"

    @property
    def is_compatible(self) -> bool:
        return self in (ClauseKind.COMPATIBLE, ClauseKind.TILDE, ClauseKind.CARET)

    @property
    def is_upper_bound(self) -> bool:
        return self in (ClauseKind.LESS, ClauseKind.LESS_EQUAL)


class VersionScheme:
    """Decides whether a version satisfies a clause and how the versions of clauses are ordered. The default
    implementation compares #SemanticVersion objects segment by segment and treats clauses marked as
    #ConstraintClause.partial as x-ranges. Ecosystems with their own ordering rules provide a subclass through their
    grammar (see #reqbump.pep440)."""

    def key(self, version: SemanticVersion) -> t.Any:
        """Returns a value to sort versions by."""

        return version

    def validate_version(self, version: SemanticVersion) -> None:
        """Raise a #MalformedVersion if *version* can not be compared under this scheme."""

    def validate_clause(self, clause: ConstraintClause) -> None:
        """Raise an #UnrecognizedConstraint if *clause* can not be evaluated under this scheme."""

    def admits(self, clause: ConstraintClause, version: SemanticVersion) -> bool:
        kind = clause.kind
        if kind in (ClauseKind.EXACT, ClauseKind.EXCLUDE):
            if clause.is_prefix_match:
                n = clause.version.significant_precision
                matched = version.segments_at_precision(n) == clause.version.segments_at_precision(n)
            else:
                matched = version == clause.version
            return matched if kind is ClauseKind.EXACT else not matched
        if clause.partial and kind in (ClauseKind.GREATER, ClauseKind.LESS_EQUAL):
            # `<=1.5` means `<1.6.0` and `>1.5` means `>=1.6.0`.
            n = clause.version.significant_precision
            if n == 0:
                return kind is ClauseKind.LESS_EQUAL
            bound = clause.version.release().bump(n - 1)
            return version < bound if kind is ClauseKind.LESS_EQUAL else version >= bound
        if kind is ClauseKind.GREATER:
            return version > clause.version
        if kind is ClauseKind.GREATER_EQUAL:
            return version >= clause.version
        if kind is ClauseKind.LESS:
            return version < clause.version
        if kind is ClauseKind.LESS_EQUAL:
            return version <= clause.version
        if kind.is_compatible:
            return clause.version <= version < clause.upper_bound()
        raise RuntimeError(f"unhandled clause kind {kind!r}")


#: The scheme used by clauses that are not created by a grammar with its own ordering rules.
DEFAULT_SCHEME = VersionScheme()


@dataclasses.dataclass(frozen=True)
class ConstraintClause:
    """A single comparison inside a requirement."""

    #: The operator as it was written, e.g. `~>`, `~=` or `==`. Empty for a bare version.
    operator: str

    kind: ClauseKind

    version: SemanticVersion

    #: The whitespace between the operator and the version.
    spacing: str = ""

    #: A prefix in front of the version number that is to be preserved (e.g. `v` in npm's `^v1.2.0`).
    prefix: str = ""

    #: Set for versions that have fewer segments than the ecosystem considers complete and that are therefore
    #: matched as an x-range, like npm's `1.2` meaning `1.2.x` and `<=1.2` meaning `<1.3.0`.
    partial: bool = False

    #: The ordering rules of the ecosystem the clause was parsed for.
    scheme: VersionScheme = dataclasses.field(default=DEFAULT_SCHEME, compare=False, repr=False)

    def __str__(self) -> str:
        return self.render()

    def render(self) -> str:
        return f"{self.operator}{self.spacing}{self.prefix}{self.version}"

    @property
    def is_prefix_match(self) -> bool:
        """True for equality and exclusion clauses that only compare the segments before a wildcard."""

        return self.kind in (ClauseKind.EXACT, ClauseKind.EXCLUDE) and (self.version.has_wildcard or self.partial)

    @property
    def is_exact(self) -> bool:
        """True if the clause admits exactly one version."""

        return self.kind is ClauseKind.EXACT and not self.is_prefix_match

    def with_version(
        self,
        version: SemanticVersion,
        operator: str | None = None,
        kind: ClauseKind | None = None,
    ) -> ConstraintClause:
        return dataclasses.replace(
            self,
            version=version,
            operator=self.operator if operator is None else operator,
            kind=self.kind if kind is None else kind,
        )

    def compatible_index(self) -> int:
        """Returns the index of the segment that is bumped to compute the exclusive upper bound of the range that
        this clause admits. Only meaningful for compatible clauses and prefix matches."""

        significant = self.version.significant_precision
        if self.kind is ClauseKind.COMPATIBLE:
            return max(significant - 2, 0)
        if self.kind is ClauseKind.TILDE:
            return 1 if significant >= 2 else 0
        if self.kind is ClauseKind.CARET:
            for index, segment in enumerate(self.version.numeric_segments[:significant]):
                if segment != 0:
                    return index
            return max(significant - 1, 0)
        if self.is_prefix_match:
            return max(significant - 1, 0)
        raise ValueError(f"clause {self} has no compatible range")

    def upper_bound(self) -> SemanticVersion:
        """The exclusive upper bound of a compatible clause."""

        return self.version.release().bump(self.compatible_index())

    def admits(self, version: SemanticVersion) -> bool:
        """Returns `True` if *version* satisfies this clause."""

        return self.scheme.admits(self, version)

    def sort_key(self) -> t.Any:
        return self.scheme.key(self.version)


@dataclasses.dataclass(frozen=True)
class Requirement:
    """An ordered, non-empty sequence of clauses that are joined by a logical AND."""

    clauses: tuple[ConstraintClause, ...]

    #: The text found between each pair of adjacent clauses in the original requirement string. Reproduced when
    #: rendering so that an update does not cause unrelated changes in the formatting.
    separators: tuple[str, ...] = ()

    #: The separator to use when a single clause is turned into more than one.
    default_separator: str = ","

    def __post_init__(self) -> None:
        if not self.clauses:
            raise ValueError("a requirement must consist of at least one clause")
        if len(self.separators) != len(self.clauses) - 1:
            raise ValueError(f"expected {len(self.clauses) - 1} separators, got {len(self.separators)}")

    def __str__(self) -> str:
        return self.render()

    def __iter__(self) -> t.Iterator[ConstraintClause]:
        return iter(self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)

    def render(self) -> str:
        parts = [self.clauses[0].render()]
        for separator, clause in zip(self.separators, self.clauses[1:]):
            parts.append(separator)
            parts.append(clause.render())
        return "".join(parts)

    def admits(self, version: SemanticVersion) -> bool:
        """Returns `True` if *version* satisfies every clause."""

        return all(clause.admits(version) for clause in self.clauses)

    @property
    def is_exact(self) -> bool:
        return len(self.clauses) == 1 and self.clauses[0].is_exact

    @property
    def precision(self) -> int:
        """The number of segments of the least precise clause."""

        return min(clause.version.precision for clause in self.clauses)

    def with_clauses(self, clauses: t.Sequence[ConstraintClause]) -> Requirement:
        """Returns a new requirement with the given clauses. The separators are kept if the number of clauses did
        not change, otherwise the first separator of this requirement (or the default) is used throughout."""

        clauses = tuple(clauses)
        if len(clauses) == len(self.clauses):
            separators = self.separators
        else:
            separator = self.separators[0] if self.separators else self.default_separator
            separators = (separator,) * (len(clauses) - 1)
        return dataclasses.replace(self, clauses=clauses, separators=separators)


def is_exact(requirement: Requirement) -> bool:
    """Returns `True` if the *requirement* denotes exactly one version."""

    return requirement.is_exact
