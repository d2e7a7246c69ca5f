"""Tests for CSP header value parsing."""

from __future__ import annotations

from cspolicy.policy.parser import parse_policy


class TestParsePolicy:
    def test_simple_policy(self):
        result = parse_policy("default-src 'self'; script-src 'self' https:")
        assert result == {
            "default-src": ["self"],
            "script-src": ["self", "https:"],
        }

    def test_empty_string(self):
        assert parse_policy("") == {}

    def test_whitespace_only(self):
        assert parse_policy("   ") == {}

    def test_bare_keyword(self):
        assert parse_policy("upgrade-insecure-requests") == {"upgrade-insecure-requests": []}

    def test_trailing_semicolons(self):
        result = parse_policy("default-src 'self';;; script-src 'self';")
        assert result == {"default-src": ["self"], "script-src": ["self"]}

    def test_case_insensitive_directives(self):
        assert "default-src" in parse_policy("Default-Src 'self'")

    def test_duplicate_directive_first_wins(self):
        result = parse_policy("script-src 'self'; script-src https://evil.example.com")
        assert result == {"script-src": ["self"]}

    def test_nonce_and_hash_unquoted(self):
        result = parse_policy("script-src 'nonce-abc123' 'sha256-dGVzdA=='")
        assert result["script-src"] == ["nonce-abc123", "sha256-dGVzdA=="]

    def test_percent_encoded_separators_decoded(self):
        result = parse_policy("img-src https://a.com/x%3By%2Cz")
        assert result["img-src"] == ["https://a.com/x;y,z"]

    def test_tab_characters(self):
        assert parse_policy("default-src\t'self'")["default-src"] == ["self"]
