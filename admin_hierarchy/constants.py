"""
Centralized constants for the administrative hierarchy merge.

Default tables and file names used when no YAML config overrides them.
Import from here to ensure consistency.
"""

# Code prefix lengths
PROVINCE_CODE_LENGTH = 2
CITY_CODE_LENGTH = 4
COUNTY_CODE_LENGTH = 6

# Region levels, top-down
LEVEL_PROVINCE = 'province'
LEVEL_CITY = 'city'
LEVEL_COUNTY = 'county'
LEVELS = (LEVEL_PROVINCE, LEVEL_CITY, LEVEL_COUNTY)

# Property key holding a node's children, per level
CHILD_KEYS = {LEVEL_PROVINCE: 'cities', LEVEL_CITY: 'counties'}

# National province table, in output order
PROVINCE_TABLE = (
    ('11', '北京市'),
    ('12', '天津市'),
    ('13', '河北省'),
    ('14', '山西省'),
    ('15', '内蒙古自治区'),
    ('21', '辽宁省'),
    ('22', '吉林省'),
    ('23', '黑龙江省'),
    ('31', '上海市'),
    ('32', '江苏省'),
    ('33', '浙江省'),
    ('34', '安徽省'),
    ('35', '福建省'),
    ('36', '江西省'),
    ('37', '山东省'),
    ('41', '河南省'),
    ('42', '湖北省'),
    ('43', '湖南省'),
    ('44', '广东省'),
    ('45', '广西壮族自治区'),
    ('46', '海南省'),
    ('50', '重庆市'),
    ('51', '四川省'),
    ('52', '贵州省'),
    ('53', '云南省'),
    ('54', '西藏自治区'),
    ('61', '陕西省'),
    ('62', '甘肃省'),
    ('63', '青海省'),
    ('64', '宁夏回族自治区'),
    ('65', '新疆维吾尔自治区'),
    ('71', '台湾省'),
    ('81', '香港特别行政区'),
    ('82', '澳门特别行政区'),
)

# Municipalities and special administrative regions (no city tier)
DIRECT_ADMINISTRATION_CODES = frozenset(['11', '12', '31', '50', '81', '82'])

# Name of the single synthesized city of a direct-administration unit
MUNICIPAL_DISTRICT_NAME = '市辖区'

# Suffix appended to a province code to form its synthesized city code
MUNICIPAL_DISTRICT_SUFFIX = '01'

# Input layout, relative to the data directory
ROOT_DOCUMENT = 'china.json'
PROVINCE_DIR = 'geometryProvince'
COUNTY_DIR = 'geometryCouties'

# Output artifacts
OUTPUT_NAME = 'china_administrative_hierarchy.json'
REPORT_NAME = 'administrative_report.json'

# Output metadata
DOCUMENT_TITLE = '中国行政区划数据'
DOCUMENT_DESCRIPTION = '省-市-区/县三级行政区划数据'
DOCUMENT_VERSION = '1.0'

# Geometry types accepted as region boundaries
BOUNDARY_TYPES = ('Polygon', 'MultiPolygon')

# Decimal places kept for label points
CENTER_PRECISION = 6
