"""Category gated diagnostics for the memcfg codecs and parsers.

Set ``MEMCFG_DEBUG`` to a comma separated list of categories (``hex``,
``bin``, ``uf2``, ``memmap``, ``config``, ``image``, ``cli``) or to ``all``
to get ``[MEMCFG][category]`` lines on stderr.
"""

from __future__ import annotations

import os
import sys

ENV_VAR = "MEMCFG_DEBUG"

_enabled: frozenset[str] | None = None


def parse_categories(value: str) -> frozenset[str]:
    return frozenset(part.strip().lower() for part in value.split(",") if part.strip())


def _categories() -> frozenset[str]:
    global _enabled
    if _enabled is None:
        _enabled = parse_categories(os.environ.get(ENV_VAR, ""))
    return _enabled


def reset_categories() -> None:
    """Forget the cached ``MEMCFG_DEBUG`` value so it is read again."""

    global _enabled
    _enabled = None


def debug_enabled(category: str | None = None) -> bool:
    enabled = _categories()
    if category is None or "all" in enabled:
        return bool(enabled)
    return category.lower() in enabled


def debug_log(category: str, message: str, *args) -> None:
    if not debug_enabled(category):
        return
    if args:
        try:
            message = message % args
        except (TypeError, ValueError):
            message = f"{message} {args!r}"
    sys.stderr.write(f"[MEMCFG][{category}] {message}\n")
