#!/usr/bin/env python3
"""
Validate a merged hierarchy.

Walks the tree in order (provinces, then their cities, then counties) and
collects errors (incomplete records, broken totals) and warnings (code
prefix mismatches, empty child sets). The walk never stops early and
never raises; geometry is not inspected.
"""

import logging

from .codes import city_prefix, province_prefix
from .errors import MalformedCodeError
from .models import MergeResult, Region, ValidationOutcome

logger = logging.getLogger(__name__)


def _label(region: Region) -> str:
    return region.name or region.code or '?'


def _check_province(province: Region, outcome: ValidationOutcome) -> None:
    if not province.code or not province.name:
        outcome.errors.append(f"Incomplete province: {province.code} - {province.name}")

    for city in province.children:
        _check_city(province, city, outcome)

    if not province.children:
        outcome.warnings.append(f"{_label(province)} has no city data")


def _check_city(province: Region, city: Region, outcome: ValidationOutcome) -> None:
    if not city.code or not city.name:
        outcome.errors.append(
            f"Incomplete city: {_label(province)} - {city.code} - {city.name}"
        )

    if city.code and province.code:
        try:
            if province_prefix(city.code) != province.code:
                outcome.warnings.append(
                    f"Code hierarchy mismatch: {province.name}({province.code}) - "
                    f"{city.name}({city.code})"
                )
        except MalformedCodeError as e:
            outcome.errors.append(f"Malformed city code in {_label(province)}: {e}")

    for county in city.children:
        _check_county(province, city, county, outcome)

    if not city.children:
        outcome.warnings.append(f"{_label(province)} - {_label(city)} has no county data")


def _check_county(province: Region, city: Region, county: Region,
                  outcome: ValidationOutcome) -> None:
    if not county.code or not county.name:
        outcome.errors.append(
            f"Incomplete county: {_label(province)} - {_label(city)} - "
            f"{county.code} - {county.name}"
        )

    if city.code and county.code:
        try:
            if city_prefix(county.code) != city.code:
                outcome.warnings.append(
                    f"Code hierarchy mismatch: {city.name}({city.code}) - "
                    f"{county.name}({county.code})"
                )
        except MalformedCodeError as e:
            outcome.errors.append(
                f"Malformed county code in {_label(province)} - {_label(city)}: {e}"
            )


def _check_totals(result: MergeResult, outcome: ValidationOutcome) -> None:
    counted = result.recount()
    recorded = result.totals
    for label, expected, actual in (
        ('provinceCount', recorded.province_count, counted.province_count),
        ('cityCount', recorded.city_count, counted.city_count),
        ('countyCount', recorded.county_count, counted.county_count),
    ):
        if expected != actual:
            outcome.errors.append(f"Totals mismatch: {label} recorded {expected}, counted {actual}")


def validate(result: MergeResult) -> ValidationOutcome:
    """
    Check required fields and parent/child code consistency.

    Args:
        result: Merged hierarchy (not modified)

    Returns:
        ValidationOutcome with errors and warnings in traversal order
    """
    outcome = ValidationOutcome()

    for province in result.provinces:
        try:
            _check_province(province, outcome)
        except Exception as e:
            outcome.errors.append(f"Cannot validate province {_label(province)}: {e}")

    _check_totals(result, outcome)

    for error in outcome.errors:
        logger.error(error)
    for warning in outcome.warnings:
        logger.warning(warning)
    logger.info(f"Validation: {len(outcome.errors)} errors, {len(outcome.warnings)} warnings")

    return outcome
