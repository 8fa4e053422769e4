""" Range arithmetic on constraint clauses: computing new versions and bounds for clauses such that they admit a
target version while keeping the precision and the shape of the original. The functions in this module work on
the logical #ConstraintClause objects only; it is up to the #reqbump.updater to decide which of them to apply. """

from __future__ import annotations

import logging
import typing as t

from reqbump.errors import UnrepresentableUpdate
from reqbump.requirement import ClauseKind, ConstraintClause, Requirement
from reqbump.version import Segment, SemanticVersion

if t.TYPE_CHECKING:
    from reqbump.grammar import ConstraintGrammar

logger = logging.getLogger(__name__)


def at_same_precision(new_version: SemanticVersion, old_version: SemanticVersion, pad: bool = True) -> SemanticVersion:
    """Render *new_version* with the same number of segments as *old_version*. Segments that are wildcards in the
    old version stay wildcards. If *pad* is enabled, missing segments of the new version are filled with zeros,
    otherwise the result may have fewer segments than the old version.

    ```py
    assert str(at_same_precision(SemanticVersion.parse("1.9.3"), SemanticVersion.parse("1.4"))) == "1.9"
    assert str(at_same_precision(SemanticVersion.parse("3.0.0"), SemanticVersion.parse("2.6.*"))) == "3.0.*"
    ```
    """

    count = old_version.precision
    significant = old_version.significant_precision
    segments: list[Segment] = list(new_version.numeric_segments)
    if pad and len(segments) < count:
        segments += [0] * (count - len(segments))
    segments = segments[:count]
    return SemanticVersion(s if i < significant else old_version.segments[i] for i, s in enumerate(segments))


def update_exact(clause: ConstraintClause, target: SemanticVersion, pad: bool = True) -> ConstraintClause:
    """Point an equality clause at the *target*. A true equality takes the target verbatim, a prefix match only
    takes over the significant segments."""

    if clause.is_prefix_match:
        return clause.with_version(at_same_precision(target, clause.version, pad))
    return clause.with_version(target)


def update_compatible(clause: ConstraintClause, target: SemanticVersion, pad: bool = True) -> ConstraintClause:
    """Move a twiddle, tilde or caret clause to the *target*, keeping the precision of the original version."""

    if target.is_prerelease:
        # A truncated release would sort after the prerelease and no longer admit it.
        return clause.with_version(target)
    return clause.with_version(at_same_precision(target, clause.version, pad))


def compatible_range(clause: ConstraintClause, target: SemanticVersion) -> tuple[SemanticVersion, SemanticVersion]:
    """Compute the bounds of a `>=lower,<upper` range that replaces a compatible clause (or an equality prefix match)
    and admits *target*. The lower bound is the original version without trailing zeros, the upper bound is the
    target bumped at the same segment that bounds the original clause. Both are padded to the same length."""

    index = clause.compatible_index()

    upper = list(target.release().numeric_segments)
    while len(upper) <= index:
        upper.append(0)
    upper = upper[: index + 1]  # noqa: E203
    upper[index] += 1

    lower = list(clause.version.release().numeric_segments)
    while len(lower) > 1 and lower[-1] == 0:
        lower.pop()

    length = max(len(lower), len(upper))
    lower += [0] * (length - len(lower))
    upper += [0] * (length - len(upper))
    return SemanticVersion(lower), SemanticVersion(upper)


def compatible_to_range(
    clause: ConstraintClause,
    target: SemanticVersion,
    grammar: ConstraintGrammar,
) -> list[ConstraintClause]:
    """Like #compatible_range(), but returns the two clauses in the syntax of the *grammar*."""

    lower, upper = compatible_range(clause, target)
    return [
        grammar.make_clause(ClauseKind.GREATER_EQUAL, lower, like=clause),
        grammar.make_clause(ClauseKind.LESS, upper, like=clause),
    ]


def update_upper_bound(bound: SemanticVersion, target: SemanticVersion) -> SemanticVersion:
    """Compute a new exclusive upper bound that is greater than *target* and has the same shape as *bound*. The
    segment that is incremented is the last nonzero segment of the original bound; segments before it are taken
    from the target and segments after it are zero.

    ```py
    assert str(update_upper_bound(SemanticVersion.parse("1.0.0"), SemanticVersion.parse("1.5.2"))) == "2.0.0"
    assert str(update_upper_bound(SemanticVersion.parse("1.5.0"), SemanticVersion.parse("1.5.0"))) == "1.6.0"
    ```
    """

    segments = bound.release().numeric_segments
    index = max((i for i, s in enumerate(segments) if s != 0), default=0)
    target_segments = target.release().segments_at_precision(max(len(segments), index + 1))
    new_segments = []
    for i in range(len(segments)):
        if i < index:
            new_segments.append(target_segments[i])
        elif i == index:
            new_segments.append(target_segments[i] + 1)
        else:
            new_segments.append(0)
    return SemanticVersion(new_segments)


def repair_clauses(
    clauses: t.Iterable[ConstraintClause],
    target: SemanticVersion,
    grammar: ConstraintGrammar,
    requirement: Requirement,
    drop_exclusions: bool = True,
) -> list[ConstraintClause]:
    """Make every clause admit *target*. Clauses that already admit it are returned unchanged, upper bounds are
    raised (a `<=` bound is turned into a `<` bound) and exclusions are dropped if *drop_exclusions* is enabled.
    Any other clause that does not admit the target raises #UnrepresentableUpdate."""

    result = []
    for clause in clauses:
        if clause.admits(target):
            result.append(clause)
        elif clause.kind.is_upper_bound:
            new_bound = update_upper_bound(clause.version, target)
            result.append(clause.with_version(new_bound, grammar.operator_for(ClauseKind.LESS), ClauseKind.LESS))
        elif clause.kind is ClauseKind.EXCLUDE:
            if not drop_exclusions:
                raise UnrepresentableUpdate(str(requirement), str(target), f"the clause {clause} excludes it")
            logger.info(
                "Dropping clause %r from requirement %r because it excludes %s", str(clause), str(requirement), target
            )
        else:
            raise UnrepresentableUpdate(
                str(requirement), str(target), f"unexpected operator {clause.operator!r} in unsatisfied clause {clause}"
            )
    return result


def update_range(
    requirement: Requirement,
    target: SemanticVersion,
    grammar: ConstraintGrammar,
    drop_exclusions: bool = True,
) -> Requirement:
    """Update a requirement made of comparison clauses with #repair_clauses() and sort the result by version."""

    clauses = repair_clauses(requirement.clauses, target, grammar, requirement, drop_exclusions)
    if not clauses:
        raise UnrepresentableUpdate(str(requirement), str(target), "no clause would remain")
    clauses.sort(key=lambda clause: clause.sort_key())
    return requirement.with_clauses(clauses)
