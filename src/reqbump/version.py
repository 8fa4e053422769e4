""" A version model that is loose enough to represent the version numbers found in requirement strings of the
supported ecosystems: dotted numeric segments, wildcard segments (`*`, `x` or `X`), a prerelease tag and build
metadata. Versions are ordered segment by segment, missing trailing segments count as zero and a prerelease sorts
before the release it belongs to. """

from __future__ import annotations

import functools
import re
import typing as t

from reqbump.errors import MalformedVersion

#: The characters that are accepted as a wildcard segment.
WILDCARDS = "*xX"

Segment = t.Union[int, str]

_VERSION_REGEX = re.compile(
    r"""
    ^
    (?P<release>(?:\d+|[*xX])(?:\.(?:\d+|[*xX]))*)
    (?P<pre>[-.]?[0-9A-Za-z]+(?:[.\-][0-9A-Za-z]+)*)?
    (?:\+(?P<build>[0-9A-Za-z]+(?:[.\-][0-9A-Za-z]+)*))?
    $
    """,
    re.VERBOSE,
)

_PRERELEASE_TOKEN = re.compile(r"\d+|[A-Za-z]+")


@functools.total_ordering
class SemanticVersion:
    """An immutable version number. Use #parse() to construct one from a string; the original string is retained so
    that an unchanged version renders exactly as it was written.

    Arguments:
      segments: The release segments. Each segment is a non-negative integer or one of the #WILDCARDS characters.
        Once a wildcard appears, all following segments must be wildcards as well.
      prerelease: The prerelease tag without its leading separator, e.g. `rc1` or `beta.2`.
      build: Build metadata (the part after a `+`). It is ignored for ordering.
      pre_separator: The character that introduced the prerelease tag (`-`, `.` or empty).
    """

    __slots__ = ("segments", "prerelease", "build", "pre_separator", "_text")

    segments: tuple[Segment, ...]
    prerelease: str | None
    build: str | None
    pre_separator: str

    def __init__(
        self,
        segments: t.Iterable[Segment],
        prerelease: str | None = None,
        build: str | None = None,
        pre_separator: str = "-",
        _text: str | None = None,
    ) -> None:
        segments = tuple(segments)
        if not segments:
            raise MalformedVersion("", "no segments")
        seen_wildcard = False
        for segment in segments:
            if isinstance(segment, int):
                if segment < 0:
                    raise MalformedVersion(_text or repr(segments), "negative segment")
                if seen_wildcard:
                    raise MalformedVersion(_text or repr(segments), "numeric segment after a wildcard")
            elif segment in WILDCARDS and len(segment) == 1:
                seen_wildcard = True
            else:
                raise MalformedVersion(_text or repr(segments), f"invalid segment {segment!r}")

        object.__setattr__(self, "segments", segments)
        object.__setattr__(self, "prerelease", prerelease or None)
        object.__setattr__(self, "build", build or None)
        object.__setattr__(self, "pre_separator", pre_separator)
        object.__setattr__(self, "_text", _text)

    def __setattr__(self, name: str, value: t.Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """Parse a version string. Raises a #MalformedVersion if *text* is empty or contains anything other than
        digits, dots, letters, hyphens, wildcards and `+` build metadata."""

        if not isinstance(text, str):
            raise TypeError(f"expected str, got {type(text).__name__}")
        stripped = text.strip()
        if not stripped:
            raise MalformedVersion(text, "empty")
        match = _VERSION_REGEX.match(stripped)
        if not match:
            raise MalformedVersion(text)

        segments: list[Segment] = [int(x) if x.isdigit() else x for x in match.group("release").split(".")]
        pre = match.group("pre")
        pre_separator = ""
        if pre and pre[0] in "-.":
            pre_separator, pre = pre[0], pre[1:]
        return cls(segments, pre, match.group("build"), pre_separator, _text=stripped)

    def __str__(self) -> str:
        if self._text is not None:
            return self._text
        result = ".".join(map(str, self.segments))
        if self.prerelease:
            result += self.pre_separator + self.prerelease
        if self.build:
            result += "+" + self.build
        return result

    def __repr__(self) -> str:
        return f"SemanticVersion({str(self)!r})"

    def __eq__(self, other: t.Any) -> bool:
        if isinstance(other, SemanticVersion):
            return self._key() == other._key()
        return NotImplemented

    def __lt__(self, other: t.Any) -> bool:
        if isinstance(other, SemanticVersion):
            return self._key() < other._key()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._key())

    def _key(self) -> tuple[t.Any, ...]:
        release = list(self.numeric_segments)
        while len(release) > 1 and release[-1] == 0:
            release.pop()
        if self.prerelease is None:
            pre: tuple[t.Any, ...] = (1,)
        else:
            pre = (
                0,
                tuple(
                    (0, int(token), "") if token.isdigit() else (1, 0, token)
                    for token in _PRERELEASE_TOKEN.findall(self.prerelease)
                ),
            )
        return (tuple(release), pre)

    @property
    def precision(self) -> int:
        """The number of release segments, including wildcards."""

        return len(self.segments)

    @property
    def wildcard_index(self) -> int | None:
        """The index of the first wildcard segment, or `None`."""

        for index, segment in enumerate(self.segments):
            if isinstance(segment, str):
                return index
        return None

    @property
    def has_wildcard(self) -> bool:
        return self.wildcard_index is not None

    @property
    def significant_precision(self) -> int:
        """The number of segments before the first wildcard."""

        index = self.wildcard_index
        return self.precision if index is None else index

    @property
    def numeric_segments(self) -> tuple[int, ...]:
        """The release segments with wildcards replaced by zero."""

        return tuple(s if isinstance(s, int) else 0 for s in self.segments)

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def release(self) -> SemanticVersion:
        """Returns the version without its prerelease tag and build metadata."""

        if self.prerelease is None and self.build is None:
            return self
        return SemanticVersion(self.segments)

    def segments_at_precision(self, n: int) -> tuple[int, ...]:
        """Returns the first *n* numeric segments, padded with zeros if the version has fewer."""

        segments = self.numeric_segments[:n]
        return segments + (0,) * (n - len(segments))

    def trimmed(self) -> SemanticVersion:
        """Returns the numeric release with trailing zero segments removed (at least one segment is kept)."""

        segments = list(self.numeric_segments)
        while len(segments) > 1 and segments[-1] == 0:
            segments.pop()
        return SemanticVersion(segments)

    def bump(self, index: int) -> SemanticVersion:
        """Increment the segment at *index*, keeping the segments before it and zeroing all segments after it. The
        result has at least `index + 1` segments. Wildcards are treated as zero."""

        if index < 0:
            raise ValueError(f"index must be non-negative, got {index}")
        segments = list(self.segments_at_precision(max(index + 1, self.precision)))
        segments[index] += 1
        for i in range(index + 1, len(segments)):
            segments[i] = 0
        return SemanticVersion(segments)


def compare(a: SemanticVersion, b: SemanticVersion) -> int:
    """Returns `-1`, `0` or `1` if *a* is less than, equal to or greater than *b*."""

    if a < b:
        return -1
    if a == b:
        return 0
    return 1
