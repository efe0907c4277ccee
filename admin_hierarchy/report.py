"""
Summary report of a merged hierarchy.
"""

from .models import MergeResult, SummaryReport, Totals


def generate_report(result: MergeResult) -> SummaryReport:
    """Per-province and per-city counts, with grand totals recounted from the tree."""
    report = SummaryReport(summary=Totals())

    for province in result.provinces:
        province_info = {
            'code': province.code,
            'name': province.name,
            'cityCount': len(province.children),
            'countyCount': 0,
            'cities': [],
        }

        for city in province.children:
            province_info['cities'].append({
                'code': city.code,
                'name': city.name,
                'countyCount': len(city.children),
            })
            province_info['countyCount'] += len(city.children)

        report.provinces.append(province_info)
        report.summary.province_count += 1
        report.summary.city_count += province_info['cityCount']
        report.summary.county_count += province_info['countyCount']

    return report
