"""
Utilities for interpolating environment variables into recipe text.
"""
import re
from typing import Mapping

from ..errors import RecipeError

# ${VAR}, ${VAR:-default} or ${VAR:+value}; $${...} is an escaped literal
_PATTERN = re.compile(r'\$(\$)?\{([A-Za-z_][A-Za-z0-9_]*)(?::(-|\+)([^}]*))?\}')


class EnvironmentInterpolator:
    """
    Replaces ${VAR}, ${VAR:-default} and ${VAR:+value} with values from a context.
    Write $${VAR} to keep a literal ${VAR}, e.g. for the build tool's own ARG expansion.
    """

    @staticmethod
    def interpolate(template: str, context: Mapping[str, str]) -> str:
        """
        Interpolates variables in the template string using the provided context.

        :param template: The string containing ${VAR} placeholders.
        :param context: The variables available for substitution.
        :return: The interpolated string.
        :raises RecipeError: If a plain ${VAR} is not set in the context.
        """
        def replace(match):
            escaped, var_name, modifier, alt_value = match.groups()
            if escaped:
                return match.group(0)[1:]

            value = context.get(var_name)
            if modifier == '-':
                return value if value else alt_value
            if modifier == '+':
                return alt_value if value else ''
            if value is None:
                raise RecipeError(f"Variable {var_name} is not set")
            return value

        return _PATTERN.sub(replace, template)
