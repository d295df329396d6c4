"""``${VAR}`` expansion over parsed configuration data.

Supported forms:

* ``${VAR}``: replaced by the variable's value; left as-is when unset.
* ``${VAR:-fallback}``: replaced by *fallback* when ``VAR`` is unset or empty.
"""

from __future__ import annotations

import os
import re
from typing import Any, Mapping, Optional

_ENV_REF_RE = re.compile(r"\$\{(?P<name>\w+)(?::-(?P<fallback>[^}]*))?\}")


def _substitute(text: str, environ: Mapping[str, str]) -> str:
    def _one(match: re.Match[str]) -> str:
        value = environ.get(match.group("name"))
        fallback = match.group("fallback")
        if fallback is not None and not value:
            return fallback
        return match.group(0) if value is None else value

    return _ENV_REF_RE.sub(_one, text)


def expand_env_vars(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Return a copy of *value* with env references in every string expanded.

    Mappings and lists are walked recursively; keys are not expanded.
    """
    env = os.environ if environ is None else environ
    if isinstance(value, str):
        return _substitute(value, env)
    if isinstance(value, dict):
        return {key: expand_env_vars(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item, env) for item in value]
    return value
