#!/usr/bin/env python3
"""
Administrative code arithmetic.

Codes are strings of decimal digits: the first 2 identify the province,
the first 4 the city, the first 6 the county. They are compared as
opaque strings since leading-zero codes exist.

Examples:
    >>> city_prefix('110105')
    '1101'
    >>> province_prefix(4101)
    '41'
    >>> is_direct_administration('31')
    True
"""

from typing import Any, Iterable, Optional, Sequence, Tuple

from .constants import (
    CITY_CODE_LENGTH,
    COUNTY_CODE_LENGTH,
    DIRECT_ADMINISTRATION_CODES,
    PROVINCE_CODE_LENGTH,
)
from .errors import MalformedCodeError


def normalize_code(value: Any) -> Optional[str]:
    """Return a code as a stripped string; numeric codes are stringified."""
    if value is None:
        return None
    code = str(value).strip()
    return code or None


def _prefix(code: Any, length: int) -> str:
    code_str = normalize_code(code)
    if code_str is None or len(code_str) < length:
        raise MalformedCodeError(code, length)
    return code_str[:length]


def province_prefix(code: Any) -> str:
    """First 2 characters of a code."""
    return _prefix(code, PROVINCE_CODE_LENGTH)


def city_prefix(code: Any) -> str:
    """First 4 characters of a code."""
    return _prefix(code, CITY_CODE_LENGTH)


def county_prefix(code: Any) -> str:
    """First 6 characters of a code."""
    return _prefix(code, COUNTY_CODE_LENGTH)


def is_direct_administration(province_code: Any,
                             direct_codes: Iterable[str] = DIRECT_ADMINISTRATION_CODES) -> bool:
    """
    Check whether a province has no intermediate city tier.

    Args:
        province_code: Two-digit province code
        direct_codes: Configured municipalities and special administrative regions

    Returns:
        True if the code is in the configured set
    """
    return normalize_code(province_code) in set(direct_codes)


def province_name_for_code(code: Any, table: Sequence[Tuple[str, str]]) -> Optional[str]:
    """Look up a province name in a (code, name) table."""
    code_str = normalize_code(code)
    for table_code, name in table:
        if table_code == code_str:
            return name
    return None


def province_code_for_name(name: str, table: Sequence[Tuple[str, str]]) -> Optional[str]:
    """
    Resolve a province name or code to its code.

    Accepts the code itself, the full name ('内蒙古自治区') or a short
    name that the full name starts with ('内蒙古', '北京').

    Returns:
        Province code, or None if nothing matches
    """
    query = (name or '').strip()
    if not query:
        return None

    for code, full_name in table:
        if query == code or query == full_name:
            return code

    for code, full_name in table:
        if full_name.startswith(query):
            return code

    return None
