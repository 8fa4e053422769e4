""" Locates the requirement of a dependency in the text of a manifest file and splices an updated requirement into
it. Only the bytes of the located requirement are replaced, everything else in the file is left as it is. """

from __future__ import annotations

import dataclasses
import fnmatch
import logging
import re
import typing as t
from pathlib import PurePath

from reqbump.grammar import Ecosystem, get_grammar

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class RequirementRef:
    """Represents a reference to the requirement of a dependency in a file."""

    #: The name of the file that contains the reference.
    file: str

    #: The offsets of the requirement in the file content.
    start: int
    end: int

    #: The requirement text, i.e. `content[start:end]`.
    value: str

    #: The text of the whole declaration that contains the requirement.
    content: str


class ManifestFormat(t.NamedTuple):
    patterns: tuple[str, ...]
    find: t.Callable[[str, str, str], t.List[RequirementRef]]
    render: t.Callable[[RequirementRef, str], str]
    normalize: t.Callable[[str], str]


def _squash(text: str) -> str:
    return re.sub(r"\s+", "", text)


def _python_name(name: str) -> str:
    # PEP 503: runs of `-`, `_` and `.` are equivalent and names are case insensitive.
    return "(?i:" + r"[-_.]+".join(re.escape(part) for part in re.split(r"[-_.]+", name)) + ")"


def _refs(file_name: str, pattern: t.Pattern[str], content: str) -> list[RequirementRef]:
    return [
        RequirementRef(file_name, m.start("version"), m.end("version"), m.group("version"), m.group(0))
        for m in pattern.finditer(content)
    ]


def _find_requirements_txt(file_name: str, content: str, name: str) -> list[RequirementRef]:
    pattern = re.compile(
        rf"^[ \t]*{_python_name(name)}[ \t]*(?:\[[^\]\n]*\])?[ \t]*"
        r"(?P<version>[<>=!~][^;#\n]*?)[ \t]*(?=;|#|--|\\|$)",
        re.M,
    )
    return _refs(file_name, pattern, content)


def _find_setup_py(file_name: str, content: str, name: str) -> list[RequirementRef]:
    pattern = re.compile(
        rf"(?P<quote>['\"])[ \t]*{_python_name(name)}[ \t]*(?:\[[^\]'\"]*\])?[ \t]*"
        r"(?P<version>[<>=!~][^'\";\n]*?)[ \t]*(?:;[^\n]*?)?(?P=quote)"
    )
    return _refs(file_name, pattern, content)


def _find_json(file_name: str, content: str, name: str) -> list[RequirementRef]:
    pattern = re.compile(rf'"{re.escape(name)}"\s*:\s*"(?P<version>[^"]*)"')
    return _refs(file_name, pattern, content)


_RUBY_STRING = r"""(?:"[^"\n]*"|'[^'\n]*'|%[qQ]?\([^)\n]*\))"""
_RUBY_ITEM = rf"(?:{_RUBY_STRING}|\[\s*{_RUBY_STRING}(?:\s*,\s*{_RUBY_STRING})*\s*\])"
_RUBY_LITERAL = re.compile(r""""(?P<dq>[^"\n]*)"|'(?P<sq>[^'\n]*)'|(?P<pct>%[qQ]?)\((?P<pq>[^)\n]*)\)""")
_RUBY_OPERATOR = re.compile(r"(?P<operator>[<>=!~]+)?(?P<spacing>\s*)(?P<version>.*)", re.S)


class _RubyLiteral(t.NamedTuple):
    opener: str
    body: str

    @property
    def closer(self) -> str:
        return ")" if self.opener.endswith("(") else self.opener


def _find_gemfile(file_name: str, content: str, name: str) -> list[RequirementRef]:
    pattern = re.compile(
        r"\b(?:gem|add_dependency|add_runtime_dependency|add_development_dependency)\b[ \t]*\(?[ \t]*"
        rf"(?P<quote>[\"']){re.escape(name)}(?P=quote)\s*,\s*(?P<version>{_RUBY_ITEM}(?:\s*,\s*{_RUBY_ITEM})*)"
    )
    return _refs(file_name, pattern, content)


def _gemfile_literals(value: str) -> list[_RubyLiteral]:
    """Returns the string literals in the requirement part of a Gemfile declaration, with arrays flattened."""

    result = []
    for match in _RUBY_LITERAL.finditer(value):
        if match.group("dq") is not None:
            result.append(_RubyLiteral('"', match.group("dq")))
        elif match.group("sq") is not None:
            result.append(_RubyLiteral("'", match.group("sq")))
        else:
            result.append(_RubyLiteral(match.group("pct") + "(", match.group("pq")))
    return result


def _render_gemfile(ref: RequirementRef, updated_requirement: str) -> str:
    """Render the *updated_requirement* as a comma separated list of Ruby string literals, using the quote style and
    the operator spacing of the first requirement in the original declaration."""

    literals = _gemfile_literals(ref.value)
    first = literals[0] if literals else _RubyLiteral('"', "")
    original = _RUBY_OPERATOR.fullmatch(first.body.strip())
    spacing = original["spacing"] if original["operator"] else " "

    pieces, _separators = get_grammar(Ecosystem.RUBY).split(updated_requirement.strip())
    result = []
    for piece in pieces:
        operator, _spacing, clause = _RUBY_OPERATOR.fullmatch(piece.strip()).groups()
        if operator:
            clause = operator + spacing + clause
        result.append(first.opener + clause + first.closer)
    return ", ".join(result)


def _normalize_gemfile(value: str) -> str:
    return ",".join(_squash(literal.body) for literal in _gemfile_literals(value))


def _render_verbatim(ref: RequirementRef, updated_requirement: str) -> str:
    return updated_requirement


_FORMATS: list[ManifestFormat] = [
    ManifestFormat(
        ("*requirements*.txt", "*constraints*.txt"), _find_requirements_txt, _render_verbatim, _squash
    ),
    ManifestFormat(("setup.py",), _find_setup_py, _render_verbatim, _squash),
    ManifestFormat(("package.json", "composer.json"), _find_json, _render_verbatim, _squash),
    ManifestFormat(("Gemfile", "gems.rb", "*.gemspec"), _find_gemfile, _render_gemfile, _normalize_gemfile),
]


def get_manifest_format(file_name: str) -> ManifestFormat:
    """Returns the format of the manifest with the given name. Raises a #ValueError for unsupported files."""

    base_name = PurePath(file_name).name
    for manifest_format in _FORMATS:
        if any(fnmatch.fnmatch(base_name, pattern) for pattern in manifest_format.patterns):
            return manifest_format
    raise ValueError(f"unsupported manifest file: {file_name!r}")


def find_requirement_refs(file_name: str, content: str, dependency_name: str) -> list[RequirementRef]:
    """Returns the references to the requirement of the given dependency in the *content* of a manifest file, in the
    order in which they appear. Declarations without a requirement are not included."""

    return get_manifest_format(file_name).find(file_name, content, dependency_name)


def replace_requirement(
    file_name: str,
    content: str,
    dependency_name: str,
    updated_requirement: str,
    previous_requirement: str | None = None,
) -> str:
    """Replace the requirement of the given dependency in the *content* of a manifest file with the
    *updated_requirement*. If *previous_requirement* is specified, only the declarations whose requirement is equal
    to it (ignoring whitespace) are updated. The content is returned unchanged if no declaration matches.

    Raises:
      ValueError: If the *file_name* is not a supported manifest file.
    """

    manifest_format = get_manifest_format(file_name)
    refs = manifest_format.find(file_name, content, dependency_name)
    if previous_requirement is not None:
        expected = _squash(previous_requirement)
        refs = [ref for ref in refs if manifest_format.normalize(ref.value) == expected]

    if not refs:
        logger.debug("No requirement for %s found in %s", dependency_name, file_name)
        return content

    for ref in reversed(refs):
        replacement = manifest_format.render(ref, updated_requirement)
        logger.debug("Replacing %r with %r in %s", ref.value, replacement, file_name)
        content = content[: ref.start] + replacement + content[ref.end :]  # noqa: E203
    return content
