"""
Utility functions and helpers
"""

from .helpers import (
    ensure_scheme,
    extract_domain,
    round_half_up,
    percentage,
    to_float,
    parse_datetime,
    contains_any,
    strip_code_fences
)

__all__ = [
    "ensure_scheme",
    "extract_domain",
    "round_half_up",
    "percentage",
    "to_float",
    "parse_datetime",
    "contains_any",
    "strip_code_fences"
]
