"""Identifier helpers."""
import re
import secrets

# Store-assigned record identifiers are 24 lower-case hex chars
INTERNAL_ID_RE = re.compile(r"^[0-9a-f]{24}$")


def new_record_id() -> str:
    """Generate an opaque 24-hex record identifier."""
    return secrets.token_hex(12)


def looks_like_record_id(value) -> bool:
    return isinstance(value, str) and bool(INTERNAL_ID_RE.match(value))
