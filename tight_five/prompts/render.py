"""Handlebars prompt rendering."""

from collections.abc import Callable
from typing import Any

import pybars


_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a prompt cannot be built: bad template, unknown structure or part."""


# ── Custom Handlebars helpers ────────────────────────────


def _helper_numbered(this, options, items):
    """{{#numbered array}}...{{/numbered}}: iterate with a 1-based ``n`` on each item."""
    result = []
    for n, item in enumerate(items, start=1):
        result.extend(options["fn"]({**item, "n": n}))
    return result


_HELPERS: dict[str, Callable] = {
    "numbered": _helper_numbered,
}


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e
