"""
cspolicy - Content-Security-Policy header builder and violation report collector
"""

__version__ = "0.1.0"

from cspolicy.policy.builder import PolicyBuilder
from cspolicy.policy.constants import Directive, HashAlgorithm, Token
from cspolicy.reports.parser import ParsedReport, parse_report

__all__ = ['PolicyBuilder', 'Directive', 'HashAlgorithm', 'Token', 'ParsedReport', 'parse_report']
