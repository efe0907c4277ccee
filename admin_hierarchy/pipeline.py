#!/usr/bin/env python3
"""
Administrative hierarchy merge pipeline.

Runs the full batch:
1. Load - read the nationwide root document (fatal if unavailable)
2. Build - assemble province -> city -> county tree
3. Persist - write the merged hierarchy document
4. Reload - re-read the written document (fatal if unusable)
5. Validate - collect errors and warnings
6. Report - write the summary report

Usage:
    python -m admin_hierarchy merge --data-dir src/assets/json
    python -m admin_hierarchy merge --data-dir data --output-dir out --only 北京 河南 --workers 4
    python -m admin_hierarchy inspect --data-dir data
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import geojson

from .builder import HierarchyBuilder
from .codes import province_code_for_name
from .config import MergeConfig, load_config
from .documents import directory_lookup, feature_code, feature_list, feature_name, load_document
from .errors import HierarchyError
from .models import MergeResult, SummaryReport, ValidationOutcome
from .report import generate_report
from .validate import validate

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """Pipeline states, in run order. FAILED is absorbing."""
    IDLE = "idle"
    LOADING = "loading"
    BUILDING = "building"
    PERSISTING = "persisting"
    RELOADING = "reloading"
    VALIDATING = "validating"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineRun:
    """Outcome of one pipeline run."""
    state: PipelineState = PipelineState.IDLE
    history: List[PipelineState] = field(default_factory=list)
    result: Optional[MergeResult] = None
    outcome: Optional[ValidationOutcome] = None
    report: Optional[SummaryReport] = None
    output_path: Optional[Path] = None
    report_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1


def write_json(path: Path, data: Any) -> None:
    """Write a document as indented UTF-8 JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        geojson.dump(data, f, ensure_ascii=False, indent=2)
        f.write('\n')


class MergePipeline:
    """Drives load -> build -> persist -> reload -> validate -> report."""

    def __init__(self, config: Optional[MergeConfig] = None,
                 data_dir: Path = Path('.'),
                 output_dir: Optional[Path] = None):
        self.config = config or MergeConfig()
        self.data_dir = Path(data_dir)
        self.output_dir = Path(output_dir) if output_dir else self.data_dir

    @property
    def output_path(self) -> Path:
        return self.output_dir / self.config.output_name

    @property
    def report_path(self) -> Path:
        return self.output_dir / self.config.report_name

    def _enter(self, run: PipelineRun, state: PipelineState) -> None:
        logger.debug(f"Pipeline state: {run.state.value} -> {state.value}")
        run.state = state
        run.history.append(state)

    def _fail(self, run: PipelineRun, message: str) -> PipelineRun:
        logger.error(message)
        run.error = message
        self._enter(run, PipelineState.FAILED)
        return run

    def run(self) -> PipelineRun:
        """Run the pipeline to DONE or FAILED."""
        run = PipelineRun()

        # Load
        self._enter(run, PipelineState.LOADING)
        root_path = self.data_dir / self.config.root_document
        try:
            root_document = load_document(root_path)
            root_features = feature_list(root_document, root_path)
        except HierarchyError as e:
            return self._fail(run, f"Root document unavailable: {e}")
        logger.info(f"Loaded root document {root_path}: {len(root_features)} entries")

        province_docs = directory_lookup(self.data_dir / self.config.province_dir)
        county_docs = directory_lookup(self.data_dir / self.config.county_dir)

        # Build
        self._enter(run, PipelineState.BUILDING)
        builder = HierarchyBuilder(self.config)
        run.result = builder.build(root_document, province_docs, county_docs)

        # Persist
        self._enter(run, PipelineState.PERSISTING)
        run.output_path = self.output_path
        persisted = False
        try:
            write_json(run.output_path, run.result.to_document(self.config.metadata()))
            persisted = True
            logger.info(f"Wrote merged hierarchy to {run.output_path}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write {run.output_path}: {e}")

        # Reload
        self._enter(run, PipelineState.RELOADING)
        if not persisted:
            return self._fail(run, f"Merged document was not written: {run.output_path}")
        try:
            reloaded = MergeResult.from_document(load_document(run.output_path), run.output_path)
        except HierarchyError as e:
            return self._fail(run, f"Merged document failed to reload: {e}")

        # Validate
        self._enter(run, PipelineState.VALIDATING)
        run.outcome = validate(reloaded)

        # Report
        self._enter(run, PipelineState.REPORTING)
        run.report = generate_report(reloaded)
        report_document = run.report.to_dict()
        report_document['validation'] = run.outcome.to_dict()
        run.report_path = self.report_path
        try:
            write_json(run.report_path, report_document)
            logger.info(f"Wrote report to {run.report_path}")
        except OSError as e:
            message = f"Failed to write report {run.report_path}: {e}"
            logger.error(message)
            run.outcome.errors.append(message)

        self._enter(run, PipelineState.DONE)
        return run


def run_pipeline(config: Optional[MergeConfig] = None, data_dir: Path = Path('.'),
                 output_dir: Optional[Path] = None) -> PipelineRun:
    """Run the merge pipeline once."""
    return MergePipeline(config, data_dir, output_dir).run()


def _describe_features(document: Dict, limit: int = 3) -> Dict[str, Any]:
    features = feature_list(document)
    return {
        'type': document.get('type'),
        'name': document.get('name'),
        'featureCount': len(features),
        'samples': [
            {'code': feature_code(f), 'name': feature_name(f)} for f in features[:limit]
        ],
    }


def inspect_inputs(config: Optional[MergeConfig] = None, data_dir: Path = Path('.'),
                   province_code: str = '11', county_key: str = '110100') -> Dict[str, Any]:
    """
    Describe the input documents without merging them.

    The root document must be readable; the sample province and county
    documents are reported as None when absent.

    Returns:
        Dict with 'root', 'province' and 'county' descriptions
    """
    config = config or MergeConfig()
    data_dir = Path(data_dir)

    summary = {'root': _describe_features(load_document(data_dir / config.root_document))}

    for label, path in (
        ('province', data_dir / config.province_dir / f'{province_code}.json'),
        ('county', data_dir / config.county_dir / f'{county_key}.json'),
    ):
        try:
            summary[label] = _describe_features(load_document(path))
            summary[label]['path'] = str(path)
        except HierarchyError as e:
            logger.warning(f"Cannot inspect {label} document: {e}")
            summary[label] = None

    return summary


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure logging to console and, optionally, a file."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    root_logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        root_logger.addHandler(file_handler)

    return root_logger


def _print_summary(run: PipelineRun) -> None:
    print(f"\n{'='*60}")
    if not run.succeeded:
        print(f"MERGE FAILED: {run.error}")
        print('='*60)
        return

    totals = run.result.totals
    print("MERGE COMPLETE")
    print('='*60)
    print(f"  Provinces: {totals.province_count}")
    print(f"  Cities:    {totals.city_count}")
    print(f"  Counties:  {totals.county_count}")
    print(f"  Validation: {len(run.outcome.errors)} errors, {len(run.outcome.warnings)} warnings")
    print(f"  Output: {run.output_path}")
    print(f"  Report: {run.report_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='admin-hierarchy',
        description='Merge province, city and county boundary documents into one hierarchy',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--config', type=Path, help='YAML config overriding the defaults')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', type=Path, help='Also write logs to this file')

    subparsers = parser.add_subparsers(dest='command', required=True)

    merge = subparsers.add_parser('merge', help='Run the merge pipeline')
    merge.add_argument('--data-dir', type=Path, required=True,
                       help='Directory holding the root document and input folders')
    merge.add_argument('--output-dir', type=Path,
                       help='Where to write outputs (default: the data directory)')
    merge.add_argument('--only', nargs='+', metavar='PROVINCE',
                       help='Restrict the run to these provinces (code or name)')
    merge.add_argument('--workers', type=int, help='Parallel document loaders')
    merge.add_argument('--no-centers', action='store_true',
                       help='Skip label point computation')
    merge.add_argument('--progress', action='store_true', help='Show a progress bar')

    inspect = subparsers.add_parser('inspect', help='Describe the input documents')
    inspect.add_argument('--data-dir', type=Path, required=True)
    inspect.add_argument('--province', default='11', help='Sample province code (default: 11)')
    inspect.add_argument('--county', default='110100', help='Sample county document key')

    return parser


def _apply_overrides(config: MergeConfig, args: argparse.Namespace,
                     parser: argparse.ArgumentParser) -> MergeConfig:
    overrides = {}
    if args.workers is not None:
        if args.workers < 1:
            parser.error("--workers must be at least 1")
        overrides['workers'] = args.workers
    if args.no_centers:
        overrides['compute_centers'] = False
    if args.progress:
        overrides['show_progress'] = True
    if overrides:
        config = replace(config, **overrides)

    if args.only:
        codes = []
        for query in args.only:
            code = province_code_for_name(query, config.provinces)
            if code is None:
                parser.error(f"Unknown province: {query}")
            codes.append(code)
        config = config.restricted_to(codes)

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        config = load_config(args.config) if args.config else MergeConfig()
    except HierarchyError as e:
        logger.error(str(e))
        return 1

    if args.command == 'inspect':
        try:
            summary = inspect_inputs(config, args.data_dir, args.province, args.county)
        except HierarchyError as e:
            logger.error(str(e))
            return 1
        print(json.dumps(summary, ensure_ascii=False, indent=2))
        return 0

    config = _apply_overrides(config, args, parser)
    run = run_pipeline(config, args.data_dir, args.output_dir)
    _print_summary(run)
    return run.exit_code


if __name__ == '__main__':
    sys.exit(main())
