"""
Attribute expression evaluation.

Expressions reference flow unit attributes as ``${name}``; ``$$`` is a
literal dollar sign. Missing attributes evaluate to the empty string.
"""

import re
from typing import Optional

from ...schema.flow import FlowUnit

_EXPRESSION_RE = re.compile(r"\$\$|\$\{([^}]*)\}")


class AttributeExpressionEvaluator:
    """Substitutes ``${attribute}`` references with the unit's attribute values."""

    def evaluate(self, expression: Optional[str], unit: FlowUnit) -> Optional[str]:
        if expression is None:
            return None

        def replace(match: "re.Match[str]") -> str:
            name = match.group(1)
            if name is None:
                return "$"
            return unit.attributes.get(name.strip(), "")

        return _EXPRESSION_RE.sub(replace, expression)
