#!/usr/bin/env python3
"""
Document loading and lookup.

A document lookup maps a key (a province code, or a county document key
such as '410100') to a zero-argument loader. The builder only sees the
mapping, so tests can hand it in-memory fixtures and the pipeline can
hand it a directory of GeoJSON files.
"""

import json
import logging
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from .codes import normalize_code
from .errors import DocumentParseError, DocumentReadError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
DocumentLookup = Mapping[str, Callable[[], Document]]


def load_document(path: Path) -> Document:
    """
    Read and parse a JSON document.

    Raises:
        DocumentReadError: the file is missing or unreadable
        DocumentParseError: the content is not a well-formed JSON object
    """
    path = Path(path)
    try:
        with open(path, encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentReadError(path, str(e)) from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise DocumentParseError(path, str(e)) from e

    if not isinstance(data, dict):
        raise DocumentParseError(path, f"expected a JSON object, got {type(data).__name__}")

    return data


def feature_list(document: Document, source: Any = '<document>') -> List[Dict]:
    """Return the features of a FeatureCollection document."""
    features = document.get('features')
    if not isinstance(features, list):
        raise DocumentParseError(source, "missing 'features' list")
    return [f for f in features if isinstance(f, dict)]


def feature_code(feature: Dict) -> Optional[str]:
    """Identifying code of a feature: properties.id, else properties.code."""
    props = _properties(feature)
    code = props.get('id')
    if code is None or code == '':
        code = props.get('code')
    return normalize_code(code)


def feature_name(feature: Dict) -> Optional[str]:
    props = _properties(feature)
    name = props.get('name')
    if name is None:
        return None
    return str(name).strip() or None


def _properties(feature: Dict) -> Dict:
    props = feature.get('properties')
    return props if isinstance(props, dict) else {}


def directory_lookup(directory: Path, suffix: str = '.json') -> Dict[str, Callable[[], Document]]:
    """
    Map every document in a directory to a loader, keyed by file stem.

    A missing directory yields an empty lookup: every child set it would
    have supplied is treated as absent.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(f"Document directory not found: {directory}")
        return {}

    lookup = {}
    for path in sorted(directory.glob(f'*{suffix}')):
        lookup[path.stem] = partial(load_document, path)

    logger.debug(f"Found {len(lookup)} documents in {directory}")
    return lookup


def memory_lookup(documents: Mapping[str, Document]) -> Dict[str, Callable[[], Document]]:
    """Wrap in-memory documents as a lookup, keyed in sorted order."""
    return {key: partial(_identity, documents[key]) for key in sorted(documents)}


def _identity(document: Document) -> Document:
    return document


def keys_with_prefix(lookup: DocumentLookup, prefix: str) -> List[str]:
    """Keys of a lookup that start with a code prefix, in sorted order."""
    return sorted(key for key in lookup if key.startswith(prefix))
