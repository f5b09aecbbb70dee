"""Exception hierarchy for rulegate."""

from __future__ import annotations


class RuleGateError(Exception):
    """Base exception for all rulegate errors."""


class RuleDefinitionError(RuleGateError):
    """Raised when a rule definition cannot be turned into the in-memory model."""


class ExtractionError(RuleGateError):
    """Raised when an operand cannot be read from a target object.

    ``value_type`` is set when the raw value was obtained but could not be
    coerced to the declared type.
    """

    def __init__(self, message: str, *, reason: str = "", value_type: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.value_type = value_type


class CheckInvocationError(RuleGateError):
    """Raised when a check cannot be resolved or its invocation fails."""


class CheckNotFoundError(CheckInvocationError):
    """No check is registered or importable under the given name."""


class NoMatchingSignatureError(CheckInvocationError):
    """A function exists but none of its overloads accepts the supplied arguments."""


class ActionInvocationError(RuleGateError):
    """Raised when an action cannot be resolved, invoked, or its result written back."""


class ValidityParseError(RuleGateError):
    """Raised when a group's validity window holds a malformed date."""


class TemplateError(RuleGateError):
    """Raised internally when a message template cannot be rendered."""


__all__ = [
    "RuleGateError",
    "RuleDefinitionError",
    "ExtractionError",
    "CheckInvocationError",
    "CheckNotFoundError",
    "NoMatchingSignatureError",
    "ActionInvocationError",
    "ValidityParseError",
    "TemplateError",
]
