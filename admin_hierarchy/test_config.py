#!/usr/bin/env python3
"""
Tests for merge configuration loading.
"""

import tempfile
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from admin_hierarchy.config import MergeConfig, config_from_dict, load_config
from admin_hierarchy.constants import PROVINCE_TABLE
from admin_hierarchy.errors import ConfigError


def write_config(tmpdir: Path, text: str) -> Path:
    path = tmpdir / 'config.yaml'
    path.write_text(text, encoding='utf-8')
    return path


def test_defaults():
    config = MergeConfig()
    assert config.provinces == PROVINCE_TABLE
    assert config.province_codes[0] == '11'
    assert len(config.province_codes) == 34
    assert '50' in config.direct_administration
    assert config.municipal_district_name == '市辖区'
    assert config.workers == 1


def test_load_yaml_pairs():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_config(Path(tmpdir), """
provinces:
  - ["41", 河南省]
  - ["11", 北京市]
direct_administration: ["11"]
workers: 3
compute_centers: false
output_name: merged.json
""")
        config = load_config(path)

    assert config.provinces == (('41', '河南省'), ('11', '北京市'))
    assert config.direct_administration == frozenset(['11'])
    assert config.workers == 3
    assert config.compute_centers is False
    assert config.output_name == 'merged.json'
    assert config.report_name == MergeConfig().report_name


def test_load_yaml_mapping_with_numeric_codes():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_config(Path(tmpdir), "provinces:\n  11: 北京市\n  12: 天津市\n")
        config = load_config(path)

    assert config.province_codes == ('11', '12')


def test_empty_yaml_gives_defaults():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_config(Path(tmpdir), "")
        assert load_config(path) == MergeConfig()


def test_invalid_configs():
    bad = [
        {'unknown_field': 1},
        {'workers': 0},
        {'workers': 'many'},
        {'compute_centers': 'yes'},
        {'provinces': 'all'},
        {'provinces': [['11']]},
        {'provinces': [['11', '北京市'], ['11', '北京']]},
        {'direct_administration': '11'},
        {'root_document': ''},
    ]
    for data in bad:
        with pytest.raises(ConfigError):
            config_from_dict(data)


def test_missing_and_malformed_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        with pytest.raises(ConfigError):
            load_config(tmpdir / 'missing.yaml')
        with pytest.raises(ConfigError):
            load_config(write_config(tmpdir, "provinces: [unclosed\n"))
        with pytest.raises(ConfigError):
            load_config(write_config(tmpdir, "- just\n- a list\n"))


def test_restricted_to_keeps_table_order():
    config = MergeConfig().restricted_to(['41', '11', '44'])
    assert config.province_codes == ('11', '41', '44')

    with pytest.raises(ConfigError):
        MergeConfig().restricted_to(['99'])


def test_config_is_immutable():
    config = MergeConfig()
    with pytest.raises(FrozenInstanceError):
        config.workers = 8
