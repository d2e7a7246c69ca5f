"""Pure-function CSP header value parsing."""

from __future__ import annotations

_PERCENT_DECODE = (("%3B", ";"), ("%2C", ","))


def _decode_source(token: str) -> str:
    if len(token) >= 2 and token.startswith("'") and token.endswith("'"):
        return token[1:-1]
    for encoded, char in _PERCENT_DECODE:
        token = token.replace(encoded, char)
    return token


def parse_policy(value: str) -> dict[str, list[str]]:
    """Parse a CSP header value into {directive: [sources]}.

    Quoted keywords and nonce/hash expressions are returned without their
    quotes and percent-encoded separators are decoded. Keywords without
    sources (upgrade-insecure-requests) map to an empty list.

    Example:
        >>> parse_policy("default-src 'self'; img-src 'self' data:")
        {"default-src": ["self"], "img-src": ["self", "data:"]}
    """
    result: dict[str, list[str]] = {}
    if not value or not value.strip():
        return result
    for part in value.split(";"):
        tokens = part.split()
        if not tokens:
            continue
        directive = tokens[0].lower()
        # first occurrence wins, as in browsers
        if directive in result:
            continue
        result[directive] = [_decode_source(t) for t in tokens[1:]]
    return result
