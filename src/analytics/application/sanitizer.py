from typing import Any, Dict, Optional

# Top-level keys that could identify a visitor
DENYLIST = frozenset({"ip", "userAgent", "user_agent", "email", "name"})


def sanitize(data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Returns a copy of data without denylisted keys. Nested values are kept as-is."""
    if data is None:
        return None
    return {k: v for k, v in data.items() if k not in DENYLIST}
