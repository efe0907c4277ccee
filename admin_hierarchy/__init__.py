"""
Administrative hierarchy merge.

Consolidates province, city and county boundary documents into one
three-level tree, validates code-prefix containment, and writes the
merged tree plus a summary report.
"""

from .builder import HierarchyBuilder
from .codes import (
    city_prefix,
    county_prefix,
    is_direct_administration,
    province_code_for_name,
    province_name_for_code,
    province_prefix,
)
from .config import MergeConfig, load_config
from .documents import directory_lookup, load_document, memory_lookup
from .errors import (
    ConfigError,
    DocumentParseError,
    DocumentReadError,
    HierarchyError,
    MalformedCodeError,
)
from .models import MergeResult, Region, SummaryReport, Totals, ValidationOutcome
from .pipeline import MergePipeline, PipelineRun, PipelineState, inspect_inputs, run_pipeline
from .report import generate_report
from .validate import validate

__version__ = "1.0.0"
__all__ = [
    "HierarchyBuilder",
    "city_prefix",
    "county_prefix",
    "is_direct_administration",
    "province_code_for_name",
    "province_name_for_code",
    "province_prefix",
    "MergeConfig",
    "load_config",
    "directory_lookup",
    "load_document",
    "memory_lookup",
    "ConfigError",
    "DocumentParseError",
    "DocumentReadError",
    "HierarchyError",
    "MalformedCodeError",
    "MergeResult",
    "Region",
    "SummaryReport",
    "Totals",
    "ValidationOutcome",
    "MergePipeline",
    "PipelineRun",
    "PipelineState",
    "inspect_inputs",
    "run_pipeline",
    "generate_report",
    "validate",
]
