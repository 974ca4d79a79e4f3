"""Message templating for constraint violations.

Templates reference rule parameters with ``{paramName}`` tokens, e.g.
``"size must be between {min} and {max}"``. Every token must resolve
against the rule's own parameters; an unresolved token is a
ConfigurationError, detected when metadata is built.
"""

import re
from decimal import Decimal
from enum import Enum
from typing import Any

from constraintforge.validation.types import ConfigurationError


class MessageInterpolator:
    """Interpolates rule parameters into violation messages.

    Supports:
    - {paramName} - Stringified parameter value
    - {{ and }} - Literal braces

    Any other brace (``{a.b}``, ``{ max }``, a lone ``{`` or ``}``) is a
    malformed token and a ConfigurationError.
    """

    PATTERN = re.compile(r"\{\{|\}\}|\{(?P<param>[^{}]*)\}|(?P<stray>[{}])")
    IDENTIFIER = re.compile(r"\w+")

    def tokens(self, template: str) -> list[str]:
        """List the parameter names referenced by a template.

        Raises:
            ConfigurationError: If the template holds a malformed token
        """
        names = []
        for match in self.PATTERN.finditer(template):
            names.extend(self._token_name(match, template))
        return names

    def _token_name(self, match: re.Match, template: str) -> tuple[str, ...]:
        if match.group("stray") is not None:
            raise ConfigurationError(
                f"Unbalanced {match.group('stray')!r} at position {match.start()} "
                f"in message template {template!r}; use {{{{ or }}}} for a literal brace"
            )
        name = match.group("param")
        if name is None:
            return ()
        if not self.IDENTIFIER.fullmatch(name):
            raise ConfigurationError(
                f"Malformed token {match.group(0)!r} in message template {template!r}"
            )
        return (name,)

    def check(self, template: str, params: dict[str, Any]) -> None:
        """Ensure every token in the template resolves.

        Raises:
            ConfigurationError: If the template is empty, holds a malformed
                token or references a missing parameter
        """
        if not template:
            raise ConfigurationError("Message template must not be empty")
        missing = [name for name in self.tokens(template) if name not in params]
        if missing:
            raise ConfigurationError(
                f"Message template {template!r} references unknown parameter(s): "
                + ", ".join(sorted(set(missing)))
            )

    def interpolate(self, template: str, params: dict[str, Any]) -> str:
        """Substitute parameter values into a template.

        Args:
            template: Message template with {param} placeholders
            params: The rule's declaration parameters

        Returns:
            Message with placeholders replaced
        """

        def replace(match: re.Match) -> str:
            token = match.group(0)
            if token == "{{":
                return "{"
            if token == "}}":
                return "}"
            (name,) = self._token_name(match, template)
            if name not in params:
                raise ConfigurationError(
                    f"Unresolved token {{{name}}} in message template {template!r}"
                )
            return self._format_value(params[name])

        return self.PATTERN.sub(replace, template)

    def _format_value(self, value: Any) -> str:
        """Format a parameter value for display."""
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, type) and issubclass(value, Enum):
            return ", ".join(member.name for member in value)
        if isinstance(value, Enum):
            return value.name
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, Decimal):
            return format(value.normalize(), "f")
        if isinstance(value, (list, tuple)):
            return ", ".join(self._format_value(v) for v in value)
        if isinstance(value, (set, frozenset)):
            return ", ".join(sorted(self._format_value(v) for v in value))
        return str(value)
