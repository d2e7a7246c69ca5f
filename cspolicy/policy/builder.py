"""Content-Security-Policy builder.

Accumulates per-directive source lists and renders them as a CSP Level 2
header value. One builder is meant to live for one response: the nonce it
generates is shared by every directive it is added to, so the nonce
attribute on a script or style tag matches all of them.

Example:
    policy = PolicyBuilder()
    policy.add_source([Directive.SCRIPT_SRC, Directive.STYLE_SRC], "self")
    policy.add_source(Directive.IMG_SRC, "self", "data:", "https://www.gravatar.com/avatar/")
    policy.add_nonce(Directive.SCRIPT_SRC).add_nonce(Directive.STYLE_SRC)
    policy.send_header(response)

Note on 'strict-dynamic' (CSP Level 3): a script trusted through its nonce
or hash may load further scripts, and browsers that support the token ignore
allow-list entries as well as 'self', 'unsafe-inline' and 'unsafe-eval'.
"""

from __future__ import annotations

import base64
import hashlib
import html
import re
import secrets
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from starlette.responses import Response

from cspolicy.policy.constants import (
    DIGEST_LENGTHS,
    FALLBACKS,
    HEADER_NAME,
    HEADER_NAME_REPORT_ONLY,
    INLINE_DIRECTIVES,
    SOURCE_TOKENS,
    TOKEN_NONE,
    TOKEN_STRICT_DYNAMIC,
    Directive,
    HashAlgorithm,
    Token,
)
from cspolicy.policy.exceptions import InvalidAlgorithm, InvalidDirective, InvalidMethod, MissingReportUri

DirectiveArg = Union[Directive, str, Iterable[Union[Directive, str]]]

_BASE64_RE = re.compile(r"^([A-Za-z0-9+/]{4})*([A-Za-z0-9+/]{3}=|[A-Za-z0-9+/]{2}==)?$")

# Quoted nonce-source or hash-source as stored in a source list
_NONCE_OR_HASH_RE = re.compile(r"^'(nonce|sha256|sha384|sha512)-")

_UNSAFE_INLINE = Token.UNSAFE_INLINE.value

_FLAG_SETTERS = ("block_all_mixed_content", "upgrade_insecure_requests", "report_uri")


@dataclass(frozen=True)
class PolicyState:
    """Read-only snapshot of a builder."""

    directives: dict[str, tuple[str, ...]] = field(default_factory=dict)
    nonce: str | None = None
    report_uri: str | None = None
    block_all_mixed_content: bool = False
    upgrade_insecure_requests: bool = False


def encode_source(value: str) -> str:
    """Encode a single source expression for the header value."""
    if value in SOURCE_TOKENS:
        return f"'{value}'"
    return value.strip().replace(";", "%3B").replace(",", "%2C")


def _source_value(source: Any) -> str | None:
    if isinstance(source, Token):
        return source.value
    if isinstance(source, str):
        source = source.strip()
    return source or None


def _directive_list(directives: DirectiveArg) -> list[Directive]:
    """Validate one directive or a collection of directives."""
    if isinstance(directives, str):
        return [Directive.coerce(directives)]
    if not isinstance(directives, Iterable):
        raise InvalidDirective(directives)
    return [Directive.coerce(d) for d in directives]


def _is_base64_digest(data: str) -> bool:
    return len(data) in DIGEST_LENGTHS and _BASE64_RE.match(data) is not None


class PolicyBuilder:
    """Builds a Content-Security-Policy header.

    Navigation directives (form-action, frame-ancestors) do not fall back
    on default-src in browsers, so they are seeded explicitly with
    ``default_source``.
    """

    def __init__(
        self,
        base_uri: str = TOKEN_NONE,
        default_source: str = Token.SELF.value,
        block_less_secure: bool = True,
    ) -> None:
        self._directives: dict[Directive, list[str]] = {}
        self._nonce: str | None = None
        self._report_uri: str | None = None
        self._block_all_mixed_content = False
        self._upgrade_insecure_requests = False

        self.add_source(Directive.BASE_URI, base_uri)
        self.add_source(Directive.DEFAULT_SRC, default_source)
        self.add_source([Directive.FORM_ACTION, Directive.FRAME_ANCESTORS], default_source)

        # prevent loading any assets over HTTP when the page uses HTTPS
        self.block_all_mixed_content(block_less_secure)

    def __str__(self) -> str:
        return self.get_header() or ""

    def __repr__(self) -> str:
        return f"<PolicyBuilder {self.render()!r}>"

    # ── Source management ────────────────────────────────────────────────

    def _fallback(self, directive: Directive) -> list[str]:
        parent = FALLBACKS.get(directive)
        if parent is None:
            return []
        if parent in self._directives:
            return list(self._directives[parent])
        return self._fallback(parent)

    def add_source(self, directives: DirectiveArg, *sources: Any) -> PolicyBuilder:
        """Add sources to one or more directives.

        A directive written for the first time starts with a copy of its
        fallback's sources. Use ``set_source`` to skip that.
        """
        values = [v for v in (_source_value(s) for s in sources) if v]
        for directive in _directive_list(directives):
            if directive not in self._directives:
                self._directives[directive] = self._fallback(directive)

            current = self._directives[directive]
            for value in values:
                if value in current:
                    continue
                if value == TOKEN_NONE or (current and current[0] == TOKEN_NONE):
                    # 'none' cannot be combined with other sources
                    current[:] = [value]
                else:
                    current.append(value)
        return self

    def set_source(self, directives: DirectiveArg, *sources: Any) -> PolicyBuilder:
        """Replace the sources of one or more directives."""
        targets = _directive_list(directives)
        return self.remove_all_sources(targets, initialize=True).add_source(targets, *sources)

    def remove_source(self, directives: DirectiveArg, *sources: Any) -> PolicyBuilder:
        values = [v for v in (_source_value(s) for s in sources) if v]
        for directive in _directive_list(directives):
            current = self._directives.get(directive)
            if not current:
                continue
            for value in values:
                if value in current:
                    current.remove(value)
        return self

    def remove_all_sources(self, directives: DirectiveArg, initialize: bool = False) -> PolicyBuilder:
        """Clear one or more directives.

        With ``initialize`` the directive stays defined with no sources and
        is left out of the header. Without it the directive is dropped and
        its fallback applies again on the next ``add_source``.
        """
        for directive in _directive_list(directives):
            if initialize:
                self._directives[directive] = []
            else:
                self._directives.pop(directive, None)
        return self

    def add_hash(
        self,
        directives: DirectiveArg,
        data: str | bytes,
        algo: HashAlgorithm | str | None = None,
        strict_dynamic: bool = False,
    ) -> PolicyBuilder:
        """Add a hash-source for inline content or an already encoded digest.

        A string of 44, 64 or 88 base64 characters is taken to be a sha256,
        sha384 or sha512 digest and is used as-is. Passing an ``algo`` that
        does not produce a digest of that length raises InvalidAlgorithm.
        """
        algorithm = HashAlgorithm.coerce(algo) if algo is not None else None
        hashed = isinstance(data, str) and _is_base64_digest(data)

        if algorithm is None:
            algorithm = DIGEST_LENGTHS[len(data)] if hashed else HashAlgorithm.SHA256
        elif hashed and DIGEST_LENGTHS[len(data)] is not algorithm:
            # a digest labelled with another algorithm can never match
            raise InvalidAlgorithm(algorithm.value)

        if hashed:
            digest = data
        else:
            payload = data.encode("utf-8") if isinstance(data, str) else data
            digest = base64.b64encode(hashlib.new(algorithm.value, payload).digest()).decode("ascii")

        return self.add_source(
            directives,
            f"'{algorithm.value}-{digest}'",
            TOKEN_STRICT_DYNAMIC if strict_dynamic else None,
        )

    def add_nonce(
        self,
        directive: Directive | str,
        nonce: str | None = None,
        strict_dynamic: bool = False,
    ) -> PolicyBuilder:
        """Add the builder's nonce to a single directive."""
        directive = Directive.coerce(directive)
        value = self.nonce(nonce)
        return self.add_source(
            directive,
            f"'nonce-{value}'",
            TOKEN_STRICT_DYNAMIC if strict_dynamic else None,
        )

    def nonce(self, value: str | None = None) -> str:
        """Set or get the nonce, generating a random one on first use."""
        if value:
            self._nonce = value
        elif not self._nonce:
            self._nonce = secrets.token_hex(8)
        return self._nonce

    def nonce_attribute(self) -> str:
        """Return ` nonce="..."` for a script or style tag, or "" without a nonce."""
        if self._nonce:
            return f' nonce="{html.escape(self._nonce, quote=True)}"'
        return ""

    # ── Flags ────────────────────────────────────────────────────────────

    def block_all_mixed_content(self, enabled: bool = True) -> PolicyBuilder:
        self._block_all_mixed_content = bool(enabled)
        return self

    def upgrade_insecure_requests(self, enabled: bool = True) -> PolicyBuilder:
        self._upgrade_insecure_requests = bool(enabled)
        return self

    def report_uri(self, uri: str | None) -> PolicyBuilder:
        """Set where browsers send violation reports. Non-strings unset it."""
        self._report_uri = uri if isinstance(uri, str) and uri else None
        return self

    def apply_flags(self, flags: Mapping[str, Any]) -> PolicyBuilder:
        """Apply setter values by name, e.g. from a policy file."""
        for name, value in flags.items():
            if name not in _FLAG_SETTERS:
                raise InvalidMethod(name)
            getattr(self, name)(value)
        return self

    # ── Output ───────────────────────────────────────────────────────────

    def sources(self, directive: Directive | str) -> list[str] | None:
        """Return a copy of a directive's sources, or None if it is unset."""
        current = self._directives.get(Directive.coerce(directive))
        return None if current is None else list(current)

    @property
    def state(self) -> PolicyState:
        return PolicyState(
            directives={
                d.value: tuple(sources)
                for d, sources in sorted(self._directives.items(), key=lambda item: item[0].value)
            },
            nonce=self._nonce,
            report_uri=self._report_uri,
            block_all_mixed_content=self._block_all_mixed_content,
            upgrade_insecure_requests=self._upgrade_insecure_requests,
        )

    def _rendered_sources(self, directive: Directive) -> list[str]:
        sources = self._directives[directive]
        if directive in INLINE_DIRECTIVES and any(_NONCE_OR_HASH_RE.match(s) for s in sources):
            # 'unsafe-inline' is only kept for CSP Level 1 browsers
            return [s for s in sources if s != _UNSAFE_INLINE]
        return sources

    def render(self, report_only: bool = False) -> str | None:
        """Return the header value, or None when the policy is empty."""
        parts: list[str] = []

        for directive in sorted(self._directives, key=lambda d: d.value):
            sources = self._rendered_sources(directive)
            # an empty list would be read as 'none'; add 'none' explicitly for that
            if sources:
                parts.append(f"{directive.value} {' '.join(encode_source(s) for s in sources)}")

        # upgrade-insecure-requests is evaluated first, which makes
        # block-all-mixed-content a no-op when both are set
        if self._upgrade_insecure_requests:
            parts.append("upgrade-insecure-requests")
        elif self._block_all_mixed_content:
            parts.append("block-all-mixed-content")

        # report-uri is deprecated for the enforcing header
        if report_only and self._report_uri:
            parts.append(f"report-uri {self._report_uri}")

        if not parts:
            return None
        return "; ".join(parts)

    def get_header(self, report_only: bool = False) -> str | None:
        value = self.render(report_only)
        if value is None:
            return None
        name = HEADER_NAME_REPORT_ONLY if report_only else HEADER_NAME
        return f"{name}: {value}"

    def _attach(self, response: Response, report_only: bool, replace: bool) -> None:
        value = self.render(report_only)
        if value is None:
            return
        name = HEADER_NAME_REPORT_ONLY if report_only else HEADER_NAME
        if replace:
            response.headers[name] = value
        else:
            response.headers.append(name, value)

    def send_header(self, response: Response, replace: bool = True) -> None:
        """Set the enforcing Content-Security-Policy header on ``response``."""
        self._attach(response, report_only=False, replace=replace)

    def send_report_only_header(self, response: Response, replace: bool = True) -> None:
        """Set the report-only header on ``response``.

        Raises MissingReportUri when no report URI is configured, since the
        browser would have nowhere to send violations.
        """
        if not self._report_uri:
            raise MissingReportUri()
        self._attach(response, report_only=True, replace=replace)

    def debug_info(self) -> dict[str, Any]:
        info: dict[str, Any] = {d: list(s) for d, s in self.state.directives.items()}
        info.update({
            "block_all_mixed_content": self._block_all_mixed_content,
            "nonce": self._nonce,
            "policy": self.render(),
            "report_uri": self._report_uri,
            "upgrade_insecure_requests": self._upgrade_insecure_requests,
        })
        return info
