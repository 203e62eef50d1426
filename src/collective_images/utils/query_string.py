from typing import Any
from urllib.parse import urlencode


def stringify_params(params: dict[str, Any]) -> str:
    """Serialize parameters as a sorted query string, skipping None values.

    Booleans are written as ``true``/``false`` so keys look like the
    request query strings they come from.
    """
    items = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        items.append((key, value))
    return urlencode(items)
