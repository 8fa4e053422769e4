""" Exceptions raised while parsing and updating requirement strings. All of them are #ValueError subclasses, and
callers that process many dependencies should catch #RequirementError for a single dependency and move on. """

from __future__ import annotations


class RequirementError(ValueError):
    """Base class for errors that concern a single requirement string or version."""


class MalformedVersion(RequirementError):
    """Raised when a version string cannot be parsed into segments."""

    def __init__(self, text: str, reason: str | None = None) -> None:
        super().__init__(text)
        self.text = text
        self.reason = reason

    def __str__(self) -> str:
        message = f"malformed version: {self.text!r}"
        if self.reason:
            message += f" ({self.reason})"
        return message


class UnrecognizedConstraint(RequirementError):
    """Raised when a clause of a requirement string does not match the grammar of the ecosystem."""

    def __init__(self, text: str, ecosystem: str, reason: str | None = None) -> None:
        super().__init__(text)
        self.text = text
        self.ecosystem = ecosystem
        self.reason = reason

    def __str__(self) -> str:
        message = f"unrecognized {self.ecosystem} constraint: {self.text!r}"
        if self.reason:
            message += f" ({self.reason})"
        return message


class UnrepresentableUpdate(RequirementError):
    """Raised when no requirement can be constructed that admits the target version while keeping the shape of the
    original requirement, e.g. because a lower bound already excludes it."""

    def __init__(self, requirement: str, version: str, reason: str) -> None:
        super().__init__(requirement)
        self.requirement = requirement
        self.version = version
        self.reason = reason

    def __str__(self) -> str:
        return f"cannot update requirement {self.requirement!r} to admit {self.version}: {self.reason}"
