"""Errors raised by the policy builder."""

from __future__ import annotations


class CSPError(Exception):
    """Base class for policy construction errors."""


class InvalidDirective(CSPError):
    def __init__(self, directive: object) -> None:
        self.directive = directive
        super().__init__(f"{directive} is an invalid directive.")


class InvalidAlgorithm(CSPError):
    def __init__(self, algo: object) -> None:
        self.algo = algo
        super().__init__(f"Invalid hash algorithm: {algo}")


class InvalidMethod(CSPError):
    def __init__(self, method: object) -> None:
        self.method = method
        super().__init__(f"{method} is an invalid method.")


class MissingReportUri(CSPError):
    def __init__(self) -> None:
        super().__init__("The report-uri has not been set. CSP cannot report violations of this policy.")
