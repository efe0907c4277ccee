#!/usr/bin/env python3
"""
Tests for hierarchy validation.
"""

from admin_hierarchy.models import MergeResult, Region, Totals
from admin_hierarchy.validate import validate


def county(code, name, parent_code='1101'):
    return Region('county', code, name, parent_code=parent_code)


def city(code, name, counties, parent_code='11'):
    return Region('city', code, name, parent_code=parent_code, children=list(counties))


def province(code, name, cities):
    return Region('province', code, name, children=list(cities))


def result_of(*provinces) -> MergeResult:
    result = MergeResult(provinces=list(provinces))
    result.totals = result.recount()
    return result


def create_clean_result() -> MergeResult:
    return result_of(
        province('11', '北京市', [
            city('1101', '市辖区', [county('110101', '东城区'), county('110105', '朝阳区')]),
        ]),
        province('41', '河南省', [
            city('4101', '郑州市', [county('410102', '中原区', '4101')], '41'),
            city('4102', '开封市', [county('410202', '龙亭区', '4102')], '41'),
        ]),
    )


def test_clean_result_has_no_findings():
    outcome = validate(create_clean_result())
    assert outcome.errors == []
    assert outcome.warnings == []
    assert outcome.ok


def test_seeded_prefix_violation_gives_one_warning():
    result = create_clean_result()
    result.provinces[0].children[0].children.append(county('120101', '和平区'))
    result.totals = result.recount()

    outcome = validate(result)

    assert outcome.errors == []
    assert len(outcome.warnings) == 1
    assert '市辖区' in outcome.warnings[0]
    assert '和平区' in outcome.warnings[0]
    # Reporting pass only: the county is kept
    assert len(result.provinces[0].children[0].children) == 3


def test_city_outside_province_is_flagged_and_kept():
    result = create_clean_result()
    result.provinces[1].children.append(city('4301', '长沙市', [county('430102', '芙蓉区', '4301')], '41'))
    result.totals = result.recount()

    outcome = validate(result)

    assert outcome.errors == []
    assert len(outcome.warnings) == 1
    assert '河南省' in outcome.warnings[0] and '长沙市' in outcome.warnings[0]


def test_missing_code_or_name_is_an_error():
    result = result_of(
        province('11', None, [
            city('1101', '市辖区', [county('110101', ''), county(None, '朝阳区')]),
        ]),
        province('41', '河南省', [
            city(None, '郑州市', [county('410102', '中原区', None)], '41'),
        ]),
    )

    outcome = validate(result)

    assert len(outcome.errors) == 4
    assert outcome.errors[0].startswith('Incomplete province')
    assert outcome.errors[1].startswith('Incomplete county')
    assert outcome.errors[2].startswith('Incomplete county')
    assert outcome.errors[3].startswith('Incomplete city')
    assert '河南省' in outcome.errors[3]
    assert '郑州市' in outcome.errors[3]


def test_empty_child_sets_are_warnings():
    result = result_of(
        province('41', '河南省', [city('4101', '郑州市', [], '41')]),
        province('71', '台湾省', []),
    )

    outcome = validate(result)

    assert outcome.errors == []
    assert outcome.warnings == [
        '河南省 - 郑州市 has no county data',
        '台湾省 has no city data',
    ]


def test_warnings_follow_tree_order():
    result = result_of(
        province('11', '北京市', [city('1101', '市辖区', [])]),
        province('12', '天津市', []),
        province('41', '河南省', [city('4101', '郑州市', [county('420102', '江岸区', '4101')], '41')]),
    )

    outcome = validate(result)

    assert len(outcome.warnings) == 3
    assert '北京市' in outcome.warnings[0]
    assert '天津市' in outcome.warnings[1]
    assert '江岸区' in outcome.warnings[2]


def test_malformed_codes_become_errors():
    result = result_of(
        province('11', '北京市', [
            city('1101', '市辖区', [county('110', '短代码')]),
        ]),
    )

    outcome = validate(result)

    assert len(outcome.errors) == 1
    assert 'Malformed county code' in outcome.errors[0]


def test_totals_mismatch_is_an_error():
    result = create_clean_result()
    result.totals = Totals(province_count=2, city_count=3, county_count=9)

    outcome = validate(result)

    assert outcome.errors == ['Totals mismatch: countyCount recorded 9, counted 4']


def test_geometry_is_not_inspected():
    result = create_clean_result()
    result.provinces[0].geometry = {'type': 'Point', 'coordinates': 'garbage'}

    assert validate(result).ok


def test_validate_does_not_modify_result():
    result = create_clean_result()
    before = result.to_document()
    validate(result)
    assert result.to_document() == before
