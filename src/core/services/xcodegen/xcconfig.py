"""
Xcode build-setting merge — pure, no I/O.

Configuration layers are merged left to right (lowest precedence
first).  A later value normally replaces an earlier one, except when
the earlier value contains ``$(inherited)``: then the two are
concatenated behind a single leading ``$(inherited)``.

Only the *previous* value is inspected.  A new value carrying
``$(inherited)`` over a plain previous value replaces it verbatim.
"""

from __future__ import annotations

import re
from typing import Any

INHERITED = "$(inherited)"

_INHERITED_RE = re.compile(r"\s*\$\(inherited\)\s*")


def merge_xcode_config_value(prev_value: Any, next_value: Any) -> Any:
    """Merge one setting value on top of the previous one."""
    if prev_value and isinstance(prev_value, str) and INHERITED in prev_value:
        joined = _INHERITED_RE.sub(" ", f"{prev_value} {next_value}").strip()
        return f"{INHERITED} {joined}".rstrip()
    return next_value


def merge_xcode_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge Xcode configs from left to right.

    >>> merge_xcode_configs({"A": "$(inherited) x"}, {"A": "y"})
    {'A': '$(inherited) x y'}
    """
    result: dict[str, Any] = {}

    for config in configs:
        for key, value in config.items():
            result[key] = merge_xcode_config_value(result.get(key), value)
    return result
