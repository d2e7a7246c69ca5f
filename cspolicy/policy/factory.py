"""Build a request-scoped PolicyBuilder from settings and the policy file."""

from __future__ import annotations

from typing import Any

from cspolicy.config.loader import CSPSettings, get_policy_file, get_settings
from cspolicy.policy.builder import PolicyBuilder


def _as_list(value: Any, section: str) -> list[Any]:
    """Normalize a policy file entry; a single string is one item."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    raise ValueError(f"policy file entry {section} must be a string or a list")


def _as_mapping(value: Any, section: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"policy file section {section} must be a mapping")
    return value


def build_policy(settings: CSPSettings | None = None, policy: dict[str, Any] | None = None) -> PolicyBuilder:
    """Create a new builder configured from ``settings`` and ``policy``.

    ``policy`` defaults to the cached policy file. Each call returns a fresh
    builder with its own nonce.
    """
    settings = settings or get_settings()
    if policy is None:
        policy = get_policy_file(settings)

    builder = PolicyBuilder(
        base_uri=settings.base_uri,
        default_source=settings.default_source,
        block_less_secure=settings.block_less_secure,
    )
    builder.upgrade_insecure_requests(settings.upgrade_insecure_requests)
    builder.report_uri(settings.report_uri or None)

    for directive, sources in _as_mapping(policy.get("directives"), "directives").items():
        builder.add_source(directive, *_as_list(sources, f"directives.{directive}"))

    strict_dynamic = bool(policy.get("strict_dynamic", False))
    for directive, hashes in _as_mapping(policy.get("hashes"), "hashes").items():
        for value in _as_list(hashes, f"hashes.{directive}"):
            builder.add_hash(directive, value, strict_dynamic=strict_dynamic)

    for directive in _as_list(policy.get("nonce"), "nonce"):
        builder.add_nonce(directive, strict_dynamic=strict_dynamic)

    builder.apply_flags(_as_mapping(policy.get("flags"), "flags"))
    return builder
