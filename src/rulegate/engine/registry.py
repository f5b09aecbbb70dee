"""Name-keyed registries of checks and actions with typed overload resolution.

A name maps to one or more implementations. At call time the registry picks
the overload whose arity and annotated parameter types fit the arguments::

    registry = CheckRegistry()
    registry.register("equals", equals_str)
    registry.register("equals", equals_number)
    registry.invoke("equals", 3, 3.0)   # -> equals_number

Names that are not registered may be dotted paths (``package.module:function``
or ``package.module.function``); they are imported on first use and cached.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import types
import typing
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from rulegate.exceptions import (
    ActionInvocationError,
    CheckInvocationError,
    CheckNotFoundError,
    NoMatchingSignatureError,
    RuleGateError,
)

log = logging.getLogger(__name__)

# Per-argument match scores; higher is better.
_EXACT = 3
_WIDENED = 2
_UNTYPED = 1


@dataclass(frozen=True)
class Overload:
    """One implementation registered under a name, with its resolved signature."""

    fn: Callable[..., Any]
    param_types: tuple[Any, ...]
    required: int

    @classmethod
    def from_callable(cls, fn: Callable[..., Any]) -> Overload:
        sig = inspect.signature(fn)
        try:
            hints = typing.get_type_hints(fn)
        except (NameError, TypeError):
            hints = {}
        param_types: list[Any] = []
        required = 0
        for param in sig.parameters.values():
            if param.kind not in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
                continue
            param_types.append(hints.get(param.name))
            if param.default is param.empty:
                required += 1
        return cls(fn=fn, param_types=tuple(param_types), required=required)

    @property
    def name(self) -> str:
        return getattr(self.fn, "__qualname__", repr(self.fn))

    def score(self, args: Sequence[Any]) -> int | None:
        """Return the match score for ``args``, or None if they do not fit."""
        if not self.required <= len(args) <= len(self.param_types):
            return None
        total = 0
        for arg, annotation in zip(args, self.param_types):
            arg_score = _score_argument(arg, annotation)
            if arg_score is None:
                return None
            total += arg_score
        return total


def _score_argument(arg: Any, annotation: Any) -> int | None:
    if annotation is None or annotation is Any or annotation is object:
        return _UNTYPED

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        scores = [_score_argument(arg, member) for member in typing.get_args(annotation)]
        matched = [s for s in scores if s is not None]
        return max(matched) if matched else None
    if origin is not None:
        annotation = origin

    if arg is None:
        return _EXACT if annotation is type(None) else None
    if not isinstance(annotation, type):
        return _UNTYPED
    if isinstance(arg, bool):
        return _EXACT if annotation is bool else None
    if isinstance(arg, annotation):
        return _EXACT
    if annotation is float and isinstance(arg, int):
        return _WIDENED
    return None


def _import_dotted_path(dotted: str) -> Any:
    """Import ``module.path:name`` or ``module.path.name``."""
    if ":" in dotted:
        module_path, obj_name = dotted.rsplit(":", 1)
    else:
        module_path, obj_name = dotted.rsplit(".", 1)
    mod = importlib.import_module(module_path)
    return getattr(mod, obj_name)


class FunctionRegistry:
    """Registry of overloaded functions addressed by name.

    Subclasses choose the exception types raised for unknown names,
    unmatched signatures and failing implementations.
    """

    kind: ClassVar[str] = "function"
    not_found_error: ClassVar[type[RuleGateError]] = RuleGateError
    no_match_error: ClassVar[type[RuleGateError]] = RuleGateError
    invocation_error: ClassVar[type[RuleGateError]] = RuleGateError

    def __init__(self) -> None:
        self._overloads: dict[str, list[Overload]] = {}
        self._imported: dict[str, list[Overload]] = {}
        self._selection_cache: dict[tuple[str, tuple[type, ...]], Overload] = {}

    def register(self, name: str, fn: Callable[..., Any]) -> None:
        """Add ``fn`` as an overload of ``name``. Earlier overloads win ties."""
        self._overloads.setdefault(name, []).append(Overload.from_callable(fn))
        self._selection_cache.clear()
        log.debug("Registered %s overload %s -> %s", self.kind, name, fn)

    def register_all(self, entries: Sequence[tuple[str, Callable[..., Any]]]) -> None:
        for name, fn in entries:
            self.register(name, fn)

    def has(self, name: str) -> bool:
        return name in self._overloads

    def names(self) -> list[str]:
        """Return all registered names, sorted."""
        return sorted(self._overloads)

    def overloads(self, name: str) -> list[Overload]:
        """Return the overloads for ``name``, importing a dotted path if needed.

        Raises:
            The subclass's ``not_found_error`` if nothing can be resolved.
        """
        if name in self._overloads:
            return self._overloads[name]
        if name in self._imported:
            return self._imported[name]
        if "." not in name and ":" not in name:
            raise self.not_found_error(
                f"No {self.kind} registered as {name!r}. Available: {self.names()}"
            )
        try:
            fn = _import_dotted_path(name)
        except (ImportError, AttributeError, ValueError) as exc:
            raise self.not_found_error(f"Cannot import {self.kind} {name!r}: {exc}") from exc
        if not callable(fn):
            raise self.not_found_error(f"{name!r} does not resolve to a callable")
        resolved = [Overload.from_callable(fn)]
        self._imported[name] = resolved
        log.debug("Imported %s %s", self.kind, name)
        return resolved

    def select(self, name: str, args: Sequence[Any]) -> Overload:
        """Pick the best-scoring overload of ``name`` for ``args``."""
        key = (name, tuple(type(a) for a in args))
        cached = self._selection_cache.get(key)
        if cached is not None:
            return cached

        best: Overload | None = None
        best_score = -1
        for overload in self.overloads(name):
            score = overload.score(args)
            if score is not None and score > best_score:
                best, best_score = overload, score
        if best is None:
            arg_types = ", ".join(type(a).__name__ for a in args)
            raise self.no_match_error(
                f"No overload of {self.kind} {name!r} accepts ({arg_types})"
            )
        self._selection_cache[key] = best
        return best

    def call(self, name: str, *args: Any) -> Any:
        """Resolve and invoke ``name`` with ``args``."""
        overload = self.select(name, args)
        try:
            return overload.fn(*args)
        except Exception as exc:
            raise self.invocation_error(
                f"{self.kind.capitalize()} {name!r} ({overload.name}) raised "
                f"{type(exc).__name__}: {exc}"
            ) from exc


class CheckRegistry(FunctionRegistry):
    """Boolean checks used by rules. Read-only once populated."""

    kind = "check"
    not_found_error = CheckNotFoundError
    no_match_error = NoMatchingSignatureError
    invocation_error = CheckInvocationError

    def invoke(self, name: str, *args: Any) -> bool:
        """Invoke check ``name`` and return its boolean outcome.

        Raises:
            CheckNotFoundError: Unknown name.
            NoMatchingSignatureError: No overload accepts ``args``.
            CheckInvocationError: The implementation raised.
        """
        return bool(self.call(name, *args))


class ActionRegistry(FunctionRegistry):
    """Value-transforming functions used by group actions."""

    kind = "action"
    not_found_error = ActionInvocationError
    no_match_error = ActionInvocationError
    invocation_error = ActionInvocationError
