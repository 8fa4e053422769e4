""" Per-ecosystem constraint grammars. Each supported ecosystem has exactly one #ConstraintGrammar, an immutable value
that describes the operator vocabulary, which wildcards are permitted and how clauses are separated. Use
#get_grammar() to look one up by its #Ecosystem and #parse_requirement() to turn a requirement string into a
#Requirement. """

from __future__ import annotations

import dataclasses
import enum
import logging
import re
import typing as t

from reqbump.errors import UnrecognizedConstraint
from reqbump.pep440 import Pep440Scheme
from reqbump.requirement import DEFAULT_SCHEME, ClauseKind, ConstraintClause, Requirement, VersionScheme
from reqbump.version import SemanticVersion

logger = logging.getLogger(__name__)


class Ecosystem(enum.Enum):
    """The constraint grammar variants. Several package managers can share one variant (npm and Yarn both use
    #JAVASCRIPT)."""

    PYTHON = "python"
    RUBY = "ruby"
    JAVASCRIPT = "javascript"
    PHP = "php"

    @staticmethod
    def parse(name: str) -> Ecosystem:
        """Returns the ecosystem for the given ecosystem or package manager name, e.g. `python`, `pip` or `yarn`."""

        key = name.strip().lower()
        if key in PACKAGE_MANAGERS:
            return PACKAGE_MANAGERS[key]
        try:
            return Ecosystem(key)
        except ValueError:
            raise ValueError(f"unknown ecosystem or package manager: {name!r}") from None


#: Maps the name of a package manager to the grammar used by its manifests.
PACKAGE_MANAGERS: dict[str, Ecosystem] = {
    "pip": Ecosystem.PYTHON,
    "bundler": Ecosystem.RUBY,
    "npm": Ecosystem.JAVASCRIPT,
    "yarn": Ecosystem.JAVASCRIPT,
    "composer": Ecosystem.PHP,
}


@dataclasses.dataclass(frozen=True)
class ConstraintGrammar:
    """Describes how requirement strings of one ecosystem are written."""

    ecosystem: Ecosystem

    #: Maps every accepted operator spelling to the kind of clause it produces. When an operator needs to be
    #: synthesized for a kind, the first spelling in this mapping is used.
    operators: t.Mapping[str, ClauseKind]

    #: The kind of clause produced by a version without an operator, or `None` if that is not permitted.
    bare_kind: ClauseKind | None

    #: Matches the text between two clauses.
    separator: t.Pattern[str]

    #: The separator used when a clause has to be turned into two and the input gives no example to follow.
    default_separator: str

    #: The characters that are accepted as wildcard segments.
    wildcards: str = ""

    #: The clause kinds that may contain a wildcard. `None` permits all kinds.
    wildcard_kinds: t.FrozenSet[ClauseKind] | None = None

    #: If enabled, a wildcard may only appear as the very last segment (like in PEP 440 prefix matching).
    trailing_wildcard_only: bool = False

    #: Matches the text between two alternatives of a disjunction, if the ecosystem supports them.
    disjunction: t.Pattern[str] | None = None

    #: Whether versions may be prefixed with a `v`.
    version_prefix: bool = False

    #: Exact and comparison clauses with fewer segments than this are treated as x-ranges (npm's `1.2` is `1.2.x`
    #: and `<=1.2` is `<1.3.0`).
    partial_precision: int | None = None

    #: Compares versions and decides whether a clause admits a version.
    scheme: VersionScheme = DEFAULT_SCHEME

    clause_pattern: t.Pattern[str] = dataclasses.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        operators = "|".join(re.escape(op) for op in sorted(self.operators, key=len, reverse=True))
        prefix = "[vV]?" if self.version_prefix else ""
        pattern = rf"^(?P<operator>{operators})?(?P<spacing>\s*)(?P<prefix>{prefix})(?P<version>\S+)$"
        object.__setattr__(self, "clause_pattern", re.compile(pattern))

    def operator_for(self, kind: ClauseKind) -> str:
        for operator, operator_kind in self.operators.items():
            if operator_kind is kind:
                return operator
        raise ValueError(f"{self.ecosystem.value} has no operator for {kind.name}")

    def split(self, text: str) -> tuple[list[str], list[str]]:
        """Split *text* into the clause strings and the separators between them."""

        pieces: list[str] = []
        separators: list[str] = []
        pos = 0
        for match in self.separator.finditer(text):
            pieces.append(text[pos : match.start()])  # noqa: E203
            separators.append(match.group(0))
            pos = match.end()
        pieces.append(text[pos:])
        return pieces, separators

    def split_alternatives(self, text: str) -> list[str]:
        if self.disjunction is None:
            return [text]
        return self.disjunction.split(text)

    def parse_clause(self, text: str) -> ConstraintClause:
        """Parse a single clause. Raises #UnrecognizedConstraint if it does not match the grammar."""

        ecosystem = self.ecosystem.value
        match = self.clause_pattern.match(text)
        if not match:
            raise UnrecognizedConstraint(text, ecosystem)

        operator = match.group("operator") or ""
        if operator:
            kind = self.operators[operator]
        elif self.bare_kind is not None:
            kind = self.bare_kind
        else:
            raise UnrecognizedConstraint(text, ecosystem, "missing operator")

        version = SemanticVersion.parse(match.group("version"))
        wildcard_index = version.wildcard_index
        if wildcard_index is not None:
            wildcards = {s for s in version.segments if isinstance(s, str)}
            if not wildcards.issubset(self.wildcards):
                raise UnrecognizedConstraint(text, ecosystem, "wildcards are not supported")
            if self.wildcard_kinds is not None and kind not in self.wildcard_kinds:
                raise UnrecognizedConstraint(text, ecosystem, f"wildcards are not supported with {operator!r}")
            if self.trailing_wildcard_only and (
                wildcard_index == 0 or wildcard_index != version.precision - 1 or version.is_prerelease
            ):
                raise UnrecognizedConstraint(text, ecosystem, "a wildcard is only permitted as the last segment")

        clause = ConstraintClause(
            operator=operator,
            kind=kind,
            version=version,
            spacing=match.group("spacing"),
            prefix=match.group("prefix"),
            partial=self._is_partial(kind, version),
            scheme=self.scheme,
        )
        self.scheme.validate_clause(clause)
        return clause

    def _is_partial(self, kind: ClauseKind, version: SemanticVersion) -> bool:
        if self.partial_precision is None or kind.is_compatible or kind is ClauseKind.EXCLUDE:
            return False
        if kind is ClauseKind.EXACT:
            return not version.has_wildcard and version.precision < self.partial_precision
        return version.significant_precision < self.partial_precision

    def parse(self, text: str) -> Requirement:
        """Parse a requirement string that consists of one or more clauses (but no alternatives)."""

        stripped = text.strip()
        if not stripped:
            raise UnrecognizedConstraint(text, self.ecosystem.value, "empty requirement")

        pieces, separators = self.split(stripped)
        clauses = []
        for piece in pieces:
            if not piece.strip():
                raise UnrecognizedConstraint(text, self.ecosystem.value, "empty clause")
            clauses.append(self.parse_clause(piece.strip()))

        assert clauses, f"no clauses parsed from {text!r}"
        logger.debug("Parsed %s requirement %r into %d clause(s)", self.ecosystem.value, text, len(clauses))
        return Requirement(tuple(clauses), tuple(separators), self.default_separator)

    def make_clause(self, kind: ClauseKind, version: SemanticVersion, like: ConstraintClause) -> ConstraintClause:
        """Create a new clause of the given *kind*, borrowing the formatting of an existing clause."""

        operator = self.operator_for(kind)
        spacing = like.spacing if like.operator else ""
        return ConstraintClause(
            operator,
            kind,
            version,
            spacing,
            like.prefix,
            partial=self._is_partial(kind, version),
            scheme=self.scheme,
        )


_COMMA = re.compile(r"\s*,\s*")

# NOTE: Whitespace only separates two clauses if it follows the end of a version and precedes the start of the
#   next clause, so that `>= 1.0 <2.0` is not split between the operator and its version.
_COMMA_OR_WHITESPACE = re.compile(r"\s*,\s*|(?<=[0-9A-Za-z*])\s+(?=[<>=!~^vV0-9*xX])")

_GRAMMARS: dict[Ecosystem, ConstraintGrammar] = {
    Ecosystem.PYTHON: ConstraintGrammar(
        ecosystem=Ecosystem.PYTHON,
        operators={
            "==": ClauseKind.EXACT,
            "===": ClauseKind.EXACT,
            "!=": ClauseKind.EXCLUDE,
            ">=": ClauseKind.GREATER_EQUAL,
            "<=": ClauseKind.LESS_EQUAL,
            ">": ClauseKind.GREATER,
            "<": ClauseKind.LESS,
            "~=": ClauseKind.COMPATIBLE,
        },
        bare_kind=None,
        separator=_COMMA,
        default_separator=",",
        wildcards="*",
        wildcard_kinds=frozenset([ClauseKind.EXACT, ClauseKind.EXCLUDE]),
        trailing_wildcard_only=True,
        scheme=Pep440Scheme(),
    ),
    Ecosystem.RUBY: ConstraintGrammar(
        ecosystem=Ecosystem.RUBY,
        operators={
            "=": ClauseKind.EXACT,
            "!=": ClauseKind.EXCLUDE,
            ">=": ClauseKind.GREATER_EQUAL,
            "<=": ClauseKind.LESS_EQUAL,
            ">": ClauseKind.GREATER,
            "<": ClauseKind.LESS,
            "~>": ClauseKind.COMPATIBLE,
        },
        bare_kind=ClauseKind.EXACT,
        separator=_COMMA,
        default_separator=", ",
    ),
    Ecosystem.JAVASCRIPT: ConstraintGrammar(
        ecosystem=Ecosystem.JAVASCRIPT,
        operators={
            "=": ClauseKind.EXACT,
            ">=": ClauseKind.GREATER_EQUAL,
            "<=": ClauseKind.LESS_EQUAL,
            ">": ClauseKind.GREATER,
            "<": ClauseKind.LESS,
            "~": ClauseKind.TILDE,
            "^": ClauseKind.CARET,
        },
        bare_kind=ClauseKind.EXACT,
        separator=_COMMA_OR_WHITESPACE,
        default_separator=" ",
        wildcards="*xX",
        disjunction=re.compile(r"\s*\|\|\s*"),
        version_prefix=True,
        partial_precision=3,
    ),
    Ecosystem.PHP: ConstraintGrammar(
        ecosystem=Ecosystem.PHP,
        operators={
            "==": ClauseKind.EXACT,
            "=": ClauseKind.EXACT,
            "!=": ClauseKind.EXCLUDE,
            "<>": ClauseKind.EXCLUDE,
            ">=": ClauseKind.GREATER_EQUAL,
            "<=": ClauseKind.LESS_EQUAL,
            ">": ClauseKind.GREATER,
            "<": ClauseKind.LESS,
            "~": ClauseKind.COMPATIBLE,
            "^": ClauseKind.CARET,
        },
        bare_kind=ClauseKind.EXACT,
        separator=_COMMA_OR_WHITESPACE,
        default_separator=",",
        wildcards="*x",
        wildcard_kinds=frozenset([ClauseKind.EXACT, ClauseKind.EXCLUDE]),
        disjunction=re.compile(r"\s*\|\|?\s*"),
        version_prefix=True,
    ),
}


def get_grammar(ecosystem: Ecosystem | str) -> ConstraintGrammar:
    if isinstance(ecosystem, str):
        ecosystem = Ecosystem.parse(ecosystem)
    return _GRAMMARS[ecosystem]


def parse_requirement(text: str, ecosystem: Ecosystem | str) -> Requirement:
    """Parse a requirement string of the given ecosystem. Raises #UnrecognizedConstraint for text that does not
    match the grammar (including disjunctions, see #parse_alternatives()) and #MalformedVersion for bad version
    numbers."""

    grammar = get_grammar(ecosystem)
    alternatives = grammar.split_alternatives(text.strip())
    if len(alternatives) > 1:
        raise UnrecognizedConstraint(text, grammar.ecosystem.value, "alternatives are not supported here")
    return grammar.parse(text)


def parse_alternatives(text: str, ecosystem: Ecosystem | str) -> list[Requirement]:
    """Parse a requirement string that may consist of multiple alternatives (e.g. `^1.0 || ^2.0`)."""

    grammar = get_grammar(ecosystem)
    return [grammar.parse(alternative) for alternative in grammar.split_alternatives(text.strip())]


def render_requirement(requirement: Requirement) -> str:
    return requirement.render()
