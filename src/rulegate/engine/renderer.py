"""Message rendering: fill a rule's pass/fail template from an execution result.

Templates use ``$1`` for the first operand and ``$0`` for the expected literal
(or the second operand)::

    "value $1 matched $0"  ->  "value [4] matched [4]"

Substitution is a single regex pass, so a ``$`` inside an operand value is
copied literally and never re-read as a placeholder.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any

from rulegate.core.coercion import DATE_FORMAT
from rulegate.exceptions import TemplateError
from rulegate.models import InvalidConversion, RuleExecutionResult

log = logging.getLogger(__name__)

UNDEFINED_MESSAGE = "[undefined message]"

_PLACEHOLDER = re.compile(r"\$([01])")


def format_operand(value: Any) -> str:
    """Stringify an operand for display inside a message."""
    if value is None:
        text = "null"
    elif isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, (datetime, date)):
        text = value.strftime(DATE_FORMAT)
    elif isinstance(value, InvalidConversion):
        text = str(value)
    else:
        try:
            text = str(value)
        except Exception as exc:
            raise TemplateError(f"Cannot stringify {type(value).__name__}: {exc}") from exc
    return text.replace("\\", "/")


class MessageRenderer:
    """Renders ``RuleExecutionResult`` messages. Stateless and safe to share."""

    def render(self, result: RuleExecutionResult) -> str:
        """Return the message for the result's verdict, or the undefined sentinel.

        Never raises.
        """
        template = result.rule.message_for(result.verdict)
        if template is None:
            return UNDEFINED_MESSAGE
        try:
            substitutions = self.substitutions(result)
        except TemplateError as exc:
            log.warning("Cannot render message of rule %s: %s", result.rule_id, exc)
            return UNDEFINED_MESSAGE
        return _PLACEHOLDER.sub(
            lambda m: substitutions.get(m.group(1), m.group(0)),
            template,
        )

    @staticmethod
    def substitutions(result: RuleExecutionResult) -> dict[str, str]:
        """Map placeholder digits to bracketed replacement text.

        Only placeholders backed by a configured object or literal appear.
        """
        rule = result.rule
        objects = rule.objects
        mapping: dict[str, str] = {}
        if rule.expected is not None:
            if objects and objects[0].selector is not None:
                mapping["1"] = f"[{format_operand(result.operand1)}]"
            # Raw literal text, not the coerced value
            mapping["0"] = f"[{format_operand(rule.expected.value)}]"
            return mapping

        if objects and objects[0].selector is not None:
            mapping["1"] = f"[{format_operand(result.operand1)}]"
        if len(objects) > 1 and objects[1].selector is not None:
            mapping["0"] = f"[{format_operand(result.operand2)}]"
        return mapping
