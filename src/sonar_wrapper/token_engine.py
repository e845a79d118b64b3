"""Token engine for expanding $VAR and ${VAR} references in configuration values."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import EnvMap


class TokenEngine:
    """Engine for expanding variable references against an environment mapping."""

    # ${NAME} or bare $NAME; dots only inside braces
    TOKEN_PATTERN = re.compile(
        r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_.]*)\}|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))"
    )

    def __init__(self, env: EnvMap):
        self.env = env

    def expand(self, template: str) -> str:
        """Expand all references in a template string."""
        value, _warnings = self.try_expand(template)
        return value

    def try_expand(self, template: str) -> tuple[str, list[str]]:
        """Expand references and return value with warnings.

        Unknown names are left verbatim. Substituted text is not expanded again.
        """
        warnings: list[str] = []

        def _replace(match: re.Match[str]) -> str:
            name = match.group("braced") or match.group("bare")
            value = self.env.get(name)
            if value is None:
                warnings.append(f"Variable '{name}' not found")
                return match.group(0)
            return value

        return self.TOKEN_PATTERN.sub(_replace, template), warnings
