"""CSP directive, token and hash algorithm definitions.

The string values are the wire names used in Content-Security-Policy
headers and must not change.
"""

from __future__ import annotations

import enum

from cspolicy.policy.exceptions import InvalidAlgorithm, InvalidDirective


class Directive(str, enum.Enum):
    # Document directives
    BASE_URI = "base-uri"
    PLUGIN_TYPES = "plugin-types"
    SANDBOX = "sandbox"

    # Fetch directives
    CHILD_SRC = "child-src"
    CONNECT_SRC = "connect-src"
    DEFAULT_SRC = "default-src"
    FONT_SRC = "font-src"
    FRAME_SRC = "frame-src"
    IMG_SRC = "img-src"
    MEDIA_SRC = "media-src"
    OBJECT_SRC = "object-src"
    SCRIPT_SRC = "script-src"
    STYLE_SRC = "style-src"

    # Navigation directives
    FORM_ACTION = "form-action"
    FRAME_ANCESTORS = "frame-ancestors"

    @classmethod
    def coerce(cls, value: object) -> Directive:
        """Return the Directive for ``value`` or raise InvalidDirective."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidDirective(value) from None


class Token(str, enum.Enum):
    """Source keywords that must be single-quoted on the wire."""

    SELF = "self"
    UNSAFE_EVAL = "unsafe-eval"
    UNSAFE_HASHES = "unsafe-hashes"
    UNSAFE_INLINE = "unsafe-inline"
    NONE = "none"
    STRICT_DYNAMIC = "strict-dynamic"


class HashAlgorithm(str, enum.Enum):
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @classmethod
    def coerce(cls, value: object) -> HashAlgorithm:
        """Return the HashAlgorithm for ``value`` or raise InvalidAlgorithm."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidAlgorithm(value) from None


TOKEN_NONE = Token.NONE.value
TOKEN_STRICT_DYNAMIC = Token.STRICT_DYNAMIC.value

SOURCE_TOKENS: frozenset[str] = frozenset(t.value for t in Token)

HEADER_NAME = "Content-Security-Policy"
HEADER_NAME_REPORT_ONLY = "Content-Security-Policy-Report-Only"

# Length of a base64-encoded digest -> algorithm that produces it
DIGEST_LENGTHS: dict[int, HashAlgorithm] = {
    44: HashAlgorithm.SHA256,
    64: HashAlgorithm.SHA384,
    88: HashAlgorithm.SHA512,
}

# Fetch directives that start from another directive's sources on first write.
# Navigation and document directives have no fallback.
FALLBACKS: dict[Directive, Directive] = {
    Directive.CHILD_SRC: Directive.DEFAULT_SRC,
    Directive.CONNECT_SRC: Directive.DEFAULT_SRC,
    Directive.FONT_SRC: Directive.DEFAULT_SRC,
    Directive.IMG_SRC: Directive.DEFAULT_SRC,
    Directive.MEDIA_SRC: Directive.DEFAULT_SRC,
    Directive.OBJECT_SRC: Directive.DEFAULT_SRC,
    Directive.SCRIPT_SRC: Directive.DEFAULT_SRC,
    Directive.STYLE_SRC: Directive.DEFAULT_SRC,
    Directive.FRAME_SRC: Directive.CHILD_SRC,
}

# Directives where a nonce or hash makes 'unsafe-inline' redundant
INLINE_DIRECTIVES: tuple[Directive, ...] = (Directive.SCRIPT_SRC, Directive.STYLE_SRC)
