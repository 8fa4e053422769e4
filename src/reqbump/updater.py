""" Orchestrates the update of a single requirement string: parses it with the grammar of its ecosystem, decides
which rule of the range arithmetic applies and renders the result. """

from __future__ import annotations

import dataclasses
import enum
import logging
import typing as t

from reqbump.arithmetic import (
    compatible_to_range,
    repair_clauses,
    update_compatible,
    update_exact,
    update_range,
)
from reqbump.configuration import UpdaterConfig
from reqbump.errors import MalformedVersion, UnrepresentableUpdate
from reqbump.grammar import Ecosystem, get_grammar
from reqbump.requirement import ClauseKind, ConstraintClause, Requirement
from reqbump.version import SemanticVersion

logger = logging.getLogger(__name__)

VersionLike = t.Union[SemanticVersion, str]


class UpdateStrategy(enum.Enum):
    #: Move exact and compatible clauses to the target version and raise upper bounds that exclude it. Suitable for
    #: applications, which usually want their manifests to reflect the version that is actually installed.
    BUMP = "bump"

    #: Leave requirements that already admit the target version alone and turn compatible clauses into ranges that
    #: span from the original version to the target. Suitable for library manifests such as `setup.py`.
    WIDEN_RANGES = "widen_ranges"


@dataclasses.dataclass(frozen=True)
class UpdateTarget:
    """The version(s) a requirement should be updated for."""

    #: The latest version that the dependency graph can be resolved with.
    latest_resolvable_version: SemanticVersion | None

    #: The latest version that is available at all, which may be newer than what the dependency graph can resolve.
    #: Only informative; it is carried along for callers but never used to rewrite a requirement.
    latest_version: SemanticVersion | None = None

    @staticmethod
    def of(latest_resolvable_version: VersionLike | None, latest_version: VersionLike | None = None) -> UpdateTarget:
        return UpdateTarget(_coerce_version(latest_resolvable_version), _coerce_version(latest_version))


def _coerce_version(version: VersionLike | None) -> SemanticVersion | None:
    if version is None or isinstance(version, SemanticVersion):
        return version
    return SemanticVersion.parse(version)


class RequirementUpdater:
    """Updates requirement strings of one ecosystem so that they admit a target version.

    Arguments:
      ecosystem: The ecosystem (or package manager name) whose grammar the requirement strings use.
      strategy: How requirements are updated, see #UpdateStrategy.
      config: Policy switches. Uses the defaults of #UpdaterConfig if not specified.
    """

    def __init__(
        self,
        ecosystem: Ecosystem | str,
        strategy: UpdateStrategy = UpdateStrategy.BUMP,
        config: UpdaterConfig | None = None,
    ) -> None:
        self.grammar = get_grammar(ecosystem)
        self.strategy = strategy
        self.config = config or UpdaterConfig()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(ecosystem={self.grammar.ecosystem.value!r}, strategy={self.strategy.name})"

    @t.overload
    def update(
        self,
        requirement_text: str,
        latest_resolvable_version: VersionLike | None,
        current_version: VersionLike | None = None,
    ) -> str: ...

    @t.overload
    def update(
        self,
        requirement_text: None,
        latest_resolvable_version: VersionLike | None,
        current_version: VersionLike | None = None,
    ) -> None: ...

    def update(
        self,
        requirement_text: str | None,
        latest_resolvable_version: VersionLike | None,
        current_version: VersionLike | None = None,
    ) -> str | None:
        """Returns the updated requirement string. The input is returned unchanged if there is no
        *latest_resolvable_version* or if the requirement does not need to change.

        The *current_version* (the version that is installed right now, if known) is informative only. It shows up
        in the debug log but has no influence on the result.

        Raises:
          MalformedVersion: If a version in the requirement or the target version cannot be parsed.
          UnrecognizedConstraint: If the requirement does not match the grammar of the ecosystem.
          UnrepresentableUpdate: If no requirement in the shape of the original can admit the target.
        """

        if requirement_text is None or latest_resolvable_version is None:
            return requirement_text

        target = _coerce_version(latest_resolvable_version)
        assert target is not None
        if target.has_wildcard:
            raise MalformedVersion(str(target), "the target version must not contain wildcards")
        self.grammar.scheme.validate_version(target)

        logger.debug(
            "Updating %s requirement %r (current version: %s) to admit %s",
            self.grammar.ecosystem.value,
            requirement_text,
            current_version,
            target,
        )

        stripped = requirement_text.strip()
        alternatives = [self.grammar.parse(text) for text in self.grammar.split_alternatives(stripped)]
        if len(alternatives) > 1:
            if any(alternative.admits(target) for alternative in alternatives):
                return requirement_text
            raise UnrepresentableUpdate(requirement_text, str(target), "none of the alternatives admits it")

        requirement = alternatives[0]
        updated = self.update_requirement(requirement, target)
        rendered = updated.render()
        if rendered == requirement.render():
            return requirement_text
        if not updated.admits(target):
            raise UnrepresentableUpdate(
                requirement_text, str(target), f"the rewritten requirement {rendered!r} would not admit it"
            )

        start = requirement_text.index(stripped)
        result = requirement_text[:start] + rendered + requirement_text[start + len(stripped) :]  # noqa: E203
        logger.debug("Updated requirement %r to %r", requirement_text, result)
        return result

    def update_requirement(self, requirement: Requirement, target: SemanticVersion) -> Requirement:
        """Compute the updated #Requirement. The requirement object is returned as-is if it is kept."""

        if self.strategy is UpdateStrategy.WIDEN_RANGES:
            return self._widen_ranges(requirement, target)
        return self._bump(requirement, target)

    def _bump(self, requirement: Requirement, target: SemanticVersion) -> Requirement:
        clauses = requirement.clauses
        pad = self.config.pad_precision

        index = _find(clauses, lambda c: c.kind is ClauseKind.EXACT)
        if index is not None:
            logger.debug("Rewriting equality clause %r", str(clauses[index]))
            return self._replace_clause(requirement, index, [update_exact(clauses[index], target, pad)], target)

        index = _find(clauses, lambda c: c.kind.is_compatible)
        if index is not None:
            logger.debug("Rewriting compatible clause %r at its original precision", str(clauses[index]))
            return self._replace_clause(requirement, index, [update_compatible(clauses[index], target, pad)], target)

        if requirement.admits(target):
            return requirement

        return update_range(requirement, target, self.grammar, self.config.drop_unsatisfiable_exclusions)

    def _widen_ranges(self, requirement: Requirement, target: SemanticVersion) -> Requirement:
        if requirement.admits(target):
            return requirement

        clauses = requirement.clauses
        index = _find(clauses, lambda c: c.is_exact)
        if index is not None:
            return self._replace_clause(requirement, index, [update_exact(clauses[index], target)], target)

        index = _find(clauses, lambda c: c.kind.is_compatible or (c.kind is ClauseKind.EXACT and c.is_prefix_match))
        if index is not None:
            logger.debug("Converting clause %r into a range", str(clauses[index]))
            new_clauses = compatible_to_range(clauses[index], target, self.grammar)
            return self._replace_clause(requirement, index, new_clauses, target)

        return update_range(requirement, target, self.grammar, self.config.drop_unsatisfiable_exclusions)

    def _replace_clause(
        self,
        requirement: Requirement,
        index: int,
        replacement: list[ConstraintClause],
        target: SemanticVersion,
    ) -> Requirement:
        """Replace the clause at *index* and repair all other clauses of the requirement."""

        new_clauses: list[ConstraintClause] = []
        for i, clause in enumerate(requirement.clauses):
            if i == index:
                new_clauses += replacement
            else:
                new_clauses += repair_clauses(
                    [clause], target, self.grammar, requirement, self.config.drop_unsatisfiable_exclusions
                )
        return requirement.with_clauses(new_clauses)


def _find(clauses: t.Sequence[ConstraintClause], predicate: t.Callable[[ConstraintClause], bool]) -> int | None:
    for index, clause in enumerate(clauses):
        if predicate(clause):
            return index
    return None


def update_requirement(
    requirement_text: str | None,
    ecosystem: Ecosystem | str,
    latest_resolvable_version: VersionLike | None,
    current_version: VersionLike | None = None,
    strategy: UpdateStrategy = UpdateStrategy.BUMP,
    config: UpdaterConfig | None = None,
) -> str | None:
    """Shortcut for #RequirementUpdater.update(). As there, the *current_version* only appears in the debug log."""

    return RequirementUpdater(ecosystem, strategy, config).update(
        requirement_text, latest_resolvable_version, current_version
    )
