"""Action execution: run a group's follow-up functions once its verdict is known."""

from __future__ import annotations

import logging
from typing import Any

from rulegate.engine.extractor import ValueExtractor
from rulegate.engine.registry import ActionRegistry
from rulegate.exceptions import ActionInvocationError, ExtractionError
from rulegate.models import Action, ActionObject, ExecuteIf, RuleGroup, Verdict

log = logging.getLogger(__name__)


def is_eligible(action: Action, verdict: Verdict) -> bool:
    """Whether ``action`` should run for a group that ended with ``verdict``."""
    if action.execute_if == ExecuteIf.ALWAYS:
        return True
    if action.execute_if == ExecuteIf.PASSED:
        return verdict == Verdict.PASSED
    return verdict == Verdict.FAILED


def _accessor_args(action_object: ActionObject) -> list[Any]:
    args: list[Any] = []
    if action_object.selector is not None:
        args.append(action_object.selector)
    args.extend(p.typed_value for p in action_object.parameters)
    return args


class ActionExecutor:
    """Invokes group actions and writes their results back to the target."""

    def __init__(self, extractor: ValueExtractor, actions: ActionRegistry) -> None:
        self._extractor = extractor
        self._actions = actions

    def run_actions(self, group: RuleGroup, verdict: Verdict, target: Any) -> tuple[int, int]:
        """Run the eligible actions of ``group`` in order.

        A failing action is logged and counted; later actions still run.

        Returns:
            ``(executed, failed)`` counts.
        """
        executed = failed = 0
        for action in group.actions:
            if not is_eligible(action, verdict):
                log.debug(
                    "Action %s of group %s not eligible (execute_if=%s, verdict=%d)",
                    action.id, group.id, action.execute_if.value, verdict,
                )
                continue
            try:
                self.execute(action, target)
            except ActionInvocationError as exc:
                failed += 1
                log.warning("Action %s of group %s failed: %s", action.id, group.id, exc)
                continue
            executed += 1
        return executed, failed

    def execute(self, action: Action, target: Any) -> Any:
        """Read getters, invoke the action function and apply the setter.

        Raises:
            ActionInvocationError: On any getter, invocation or setter failure.
        """
        args: list[Any] = []
        for getter in action.getters:
            try:
                args.append(
                    self._extractor.read(target, getter.accessor, _accessor_args(getter), getter.value_type)
                )
            except ExtractionError as exc:
                raise ActionInvocationError(
                    f"Getter {getter.accessor!r} of action {action.id!r}: {exc}"
                ) from exc
        args.extend(p.typed_value for p in action.parameters)

        value = self._actions.call(action.function, *args)
        if action.setter is not None:
            self.apply_setter(action, action.setter, target, value)
        return value

    def apply_setter(self, action: Action, setter: ActionObject, target: Any, value: Any) -> None:
        """Write ``value`` through ``setter``.

        The value takes the slot of the parameter flagged ``is_setter_value``,
        or is appended after the selector and parameters.
        """
        try:
            value = self._extractor.coerce(value, setter.value_type, source=setter.selector)
        except ExtractionError as exc:
            raise ActionInvocationError(
                f"Result of action {action.id!r} does not fit setter type: {exc}"
            ) from exc

        args: list[Any] = []
        if setter.selector is not None:
            args.append(setter.selector)
        placed = False
        for param in setter.parameters:
            if param.is_setter_value and not placed:
                args.append(value)
                placed = True
            else:
                args.append(param.typed_value)
        if not placed:
            args.append(value)

        try:
            self._extractor.call_accessor(target, setter.accessor, args)
        except ExtractionError as exc:
            raise ActionInvocationError(
                f"Setter {setter.accessor!r} of action {action.id!r}: {exc}"
            ) from exc
        log.debug("Action %s wrote %r via %s(%s)", action.id, value, setter.accessor, setter.selector)
