"""
Error base — the root of every exception raised on purpose by prebuildkit.

Concrete errors live next to the code that raises them
(``ConfigError`` in the config loader, ``PodspecError`` in the
podspec model, ``ProcessError`` in the subprocess seam).  The CLI
catches this base class and turns it into a red message + exit 1.
"""

from __future__ import annotations


class PrebuildKitError(Exception):
    """Base class for expected, user-facing failures."""
