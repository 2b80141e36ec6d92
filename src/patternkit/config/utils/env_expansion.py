"""Environment variable expansion for configuration values."""

import os
import re
from typing import Any

# $VAR, ${VAR} and ${VAR:default}, matched in a single pass
_VAR_PATTERN = re.compile(
    r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)(?::(?P<default>[^}]*))?\}"
    r"|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))"
)


def _substitute(match: "re.Match[str]") -> str:
    name = match.group("braced") or match.group("bare")
    value = os.environ.get(name)
    if value is not None:
        return value
    if match.group("default") is not None:
        return match.group("default")
    return match.group(0)


def expand_env_vars(value: Any) -> Any:
    """
    Expand environment variables in strings, recursing into dicts and lists.

    Substituted values are not expanded again. Unset variables without a
    default are left as written.
    """
    if isinstance(value, str):
        return _VAR_PATTERN.sub(_substitute, value)
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value
