"""Content-Security-Policy construction."""

from cspolicy.policy.builder import PolicyBuilder, PolicyState, encode_source
from cspolicy.policy.constants import (
    HEADER_NAME,
    HEADER_NAME_REPORT_ONLY,
    SOURCE_TOKENS,
    TOKEN_NONE,
    TOKEN_STRICT_DYNAMIC,
    Directive,
    HashAlgorithm,
    Token,
)
from cspolicy.policy.exceptions import (
    CSPError,
    InvalidAlgorithm,
    InvalidDirective,
    InvalidMethod,
    MissingReportUri,
)
from cspolicy.policy.parser import parse_policy

__all__ = [
    "CSPError",
    "Directive",
    "HEADER_NAME",
    "HEADER_NAME_REPORT_ONLY",
    "HashAlgorithm",
    "InvalidAlgorithm",
    "InvalidDirective",
    "InvalidMethod",
    "MissingReportUri",
    "PolicyBuilder",
    "PolicyState",
    "SOURCE_TOKENS",
    "TOKEN_NONE",
    "TOKEN_STRICT_DYNAMIC",
    "Token",
    "encode_source",
    "parse_policy",
]
