"""
Utilities for converting byte-level tokens to displayable strings.
"""

import unicodedata

# byte-level symbol standing for the space byte (0x20)
SPACE_MARKER = "Ġ"


def _escape_ctrl_chars(s: str) -> str:
    """Replace all Unicode control characters with their escape sequences."""
    cleaned = []
    for c in s:
        # control category codes vary: Cc, Cf, Cn etc.
        # so check via first character
        if unicodedata.category(c)[0] != "C":
            cleaned.append(c)
        else:
            cleaned.append(f"\\u{ord(c):04x}")
    return "".join(cleaned)


def render_token(token: str) -> str:
    """Render a byte-level token for display, showing the space marker as a space."""
    return _escape_ctrl_chars(token.replace(SPACE_MARKER, " "))


def render_tokens(tokens: list[str]) -> list[str]:
    return [render_token(token) for token in tokens]
