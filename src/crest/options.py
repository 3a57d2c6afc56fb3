"""Option categories and their conversion into request options.

A resolved option tree holds ``headers``, ``params`` and ``query`` mappings
whose values are literals or zero-argument callables. Processing evaluates
the callables, drops suppressed headers and query entries, and turns the
query mapping into a query string.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping
from urllib.parse import quote

CATEGORIES = ("headers", "params", "query")
PASSTHROUGH = ("content", "data", "auth", "timeout", "follow_redirects")

# Characters left unescaped by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"

OptionValue = Any
LazyOption = Callable[[], OptionValue]


def empty_options() -> dict[str, dict[str, Any]]:
    """Return a fresh option tree with every category present."""
    return {category: {} for category in CATEGORIES}


def evaluate(value: OptionValue | LazyOption) -> OptionValue:
    """Invoke lazy option values, pass literals through."""
    if callable(value):
        return value()
    return value


def _is_suppressed(value: Any) -> bool:
    return value is None or value is False


def _evaluate_category(
    values: Mapping[str, Any], *, drop_suppressed: bool
) -> dict[str, Any]:
    evaluated: dict[str, Any] = {}
    for key, value in values.items():
        resolved = evaluate(value)
        if drop_suppressed and _is_suppressed(resolved):
            continue
        evaluated[key] = resolved
    return evaluated


def process_options(options: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build the request options handed to a transport.

    Args:
        options: A resolved option tree.

    Returns:
        A dict with ``headers`` and ``params`` mappings, a serialized
        ``query`` string, and every passthrough field that is set (not
        ``None``). Unknown keys are discarded.

    Raises:
        TypeError: If the ``query`` category is not a mapping.
    """
    options = options or {}
    processed: dict[str, Any] = {
        "headers": _evaluate_category(
            options.get("headers") or {}, drop_suppressed=True
        ),
        "params": _evaluate_category(
            options.get("params") or {}, drop_suppressed=False
        ),
    }
    query = options.get("query", {})
    if not isinstance(query, Mapping):
        raise TypeError(
            "query options must be a mapping; they are serialized to a "
            "query string"
        )
    processed["query"] = serialize_query(
        _evaluate_category(query, drop_suppressed=True)
    )

    for name in PASSTHROUGH:
        if options.get(name) is not None:
            processed[name] = options[name]
    return processed


def _encode(value: Any) -> str:
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return _encode(value)


def serialize_query(query: Mapping[str, Any]) -> str:
    """Serialize a query mapping into a query string.

    >>> serialize_query({"key": "value", "flag": True, "ids": [1, 2]})
    'key=value&flag&ids[]=1&ids[]=2'
    """
    if not isinstance(query, Mapping):
        raise TypeError(
            "query options must be a mapping; they are serialized to a "
            "query string"
        )

    pairs: list[str] = []
    for key, value in query.items():
        name = _encode(key)
        if isinstance(value, (list, tuple)):
            pairs.extend(f"{name}[]={_format_value(item)}" for item in value)
        elif value is True:
            pairs.append(name)
        elif _is_suppressed(value):
            continue
        else:
            # Dates and numbers are stringified with str().
            pairs.append(f"{name}={_encode(value)}")
    return "&".join(pairs).replace("%20", "+")
