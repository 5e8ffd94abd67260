"""Header helpers shared by the raw ASGI middleware."""

import re

# Safe for logging: alphanumeric, hyphen, underscore, dot, colon; bounded length.
HEADER_VALUE_MAX_LENGTH = 64
HEADER_VALUE_ALLOWED_PATTERN = re.compile(
    r"^[a-zA-Z0-9_.:-]{1," + str(HEADER_VALUE_MAX_LENGTH) + r"}$"
)


def get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def safe_header_value(raw: str | None) -> str | None:
    """Return the stripped value if it is safe to log and store, else None."""
    if raw is None:
        return None
    value = raw.strip()
    if not HEADER_VALUE_ALLOWED_PATTERN.match(value):
        return None
    return value
