#!/usr/bin/env python3
"""
Build the province -> city -> county tree.

For each configured province (in table order, never input-file order):
1. Take the province boundary from the nationwide root document
2. Direct-administration units get one synthesized city ('1101' for '11');
   other provinces get one city per feature of their province document
3. Attach every county record whose 4-digit prefix equals the city code

Document loads for different provinces are independent and may run on a
thread pool; assembly happens afterwards over a slot list indexed by
province position, so output order never depends on load completion.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from tqdm import tqdm

from .codes import city_prefix, is_direct_administration
from .config import MergeConfig
from .constants import LEVEL_CITY, LEVEL_COUNTY, LEVEL_PROVINCE, MUNICIPAL_DISTRICT_SUFFIX
from .documents import (
    Document,
    DocumentLookup,
    feature_code,
    feature_list,
    feature_name,
    keys_with_prefix,
)
from .errors import HierarchyError, MalformedCodeError
from .geometry import clean_geometry, label_point
from .models import MergeResult, Region, Totals

logger = logging.getLogger(__name__)


@dataclass
class ProvinceSources:
    """Documents loaded for one province, before assembly."""
    code: str
    city_features: Optional[List[Dict]] = None
    county_documents: List[Tuple[str, List[Dict]]] = field(default_factory=list)


class HierarchyBuilder:
    """Assembles a MergeResult from root, province and county documents."""

    def __init__(self, config: Optional[MergeConfig] = None):
        self.config = config or MergeConfig()

    def build(self, root_document: Document,
              province_docs: DocumentLookup,
              county_docs: DocumentLookup) -> MergeResult:
        """
        Merge the documents into a three-level tree.

        Args:
            root_document: Nationwide FeatureCollection, one feature per province
            province_docs: Lookup of per-province documents by province code
            county_docs: Lookup of county documents by 6-digit key

        Returns:
            MergeResult with running totals
        """
        root_index = self._index_root(root_document)
        sources = self._load_all(province_docs, county_docs)

        result = MergeResult(totals=Totals())
        names = self.config.province_names

        for province_sources in sources:
            code = province_sources.code
            name = names[code]
            logger.info(f"Processing province: {name} ({code})")

            root_feature = root_index.get(code)
            if root_feature is None:
                logger.warning(f"No boundary for province {name} ({code}) in root document")
                geometry = None
            else:
                geometry = clean_geometry(root_feature.get('geometry'), f"province {code}")

            province = self._region(LEVEL_PROVINCE, code, name, geometry, None)

            if is_direct_administration(code, self.config.direct_administration):
                province.children = [self._municipal_district(code, province_sources)]
            else:
                province.children = self._cities(code, province_sources)

            county_count = sum(len(city.children) for city in province.children)
            if not province.children:
                logger.warning(f"Province {name} ({code}) has no cities")

            result.provinces.append(province)
            result.totals.province_count += 1
            result.totals.city_count += len(province.children)
            result.totals.county_count += county_count

        logger.info(
            f"Merged {result.totals.province_count} provinces, "
            f"{result.totals.city_count} cities, {result.totals.county_count} counties"
        )
        return result

    def _index_root(self, root_document: Document) -> Dict[str, Dict]:
        """Index root features by province code; the first entry wins."""
        index = {}
        for feature in feature_list(root_document, 'root document'):
            code = feature_code(feature)
            if code and code not in index:
                index[code] = feature
        return index

    def _load_all(self, province_docs: DocumentLookup,
                  county_docs: DocumentLookup) -> List[ProvinceSources]:
        """Load every province's documents into slots ordered by table position."""
        codes = self.config.province_codes
        slots: List[Optional[ProvinceSources]] = [None] * len(codes)
        workers = max(1, self.config.workers)

        with tqdm(total=len(codes), desc="Loading provinces",
                  disable=not self.config.show_progress) as pbar:
            if workers == 1:
                for i, code in enumerate(codes):
                    slots[i] = self._load_province(code, province_docs, county_docs)
                    pbar.update(1)
            else:
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    futures = {
                        executor.submit(self._load_province, code, province_docs, county_docs): i
                        for i, code in enumerate(codes)
                    }
                    for future in as_completed(futures):
                        slots[futures[future]] = future.result()
                        pbar.update(1)

        return slots

    def _load_province(self, code: str, province_docs: DocumentLookup,
                       county_docs: DocumentLookup) -> ProvinceSources:
        """Load the province document and every county document under it."""
        sources = ProvinceSources(code=code)

        if not is_direct_administration(code, self.config.direct_administration):
            loader = province_docs.get(code)
            if loader is None:
                logger.warning(f"Province document not found: {code}")
            else:
                sources.city_features = self._load_features(loader, f"province document {code}")

        for key in keys_with_prefix(county_docs, code):
            features = self._load_features(county_docs[key], f"county document {key}")
            if features is not None:
                sources.county_documents.append((key, features))

        return sources

    def _load_features(self, loader, label: str) -> Optional[List[Dict]]:
        """Run a loader; read and parse failures become None plus a warning."""
        try:
            return feature_list(loader(), label)
        except HierarchyError as e:
            logger.warning(f"Skipping {label}: {e}")
            return None

    def _municipal_district(self, province_code: str, sources: ProvinceSources) -> Region:
        """Synthesize the single city of a direct-administration unit."""
        city_code = province_code + MUNICIPAL_DISTRICT_SUFFIX
        city = self._region(LEVEL_CITY, city_code, self.config.municipal_district_name,
                            None, province_code)
        city.children = self._counties(city_code, province_code, sources.county_documents)
        if not city.children:
            logger.warning(f"No counties found for {province_code} {city.name}")
        return city

    def _cities(self, province_code: str, sources: ProvinceSources) -> List[Region]:
        """
        One city per feature of the province document, in document order.

        A repeated city code replaces the earlier city but keeps its
        position, so its counties are attached once.
        """
        if sources.city_features is None:
            return []

        cities: List[Region] = []
        positions: Dict[str, int] = {}
        for feature in sources.city_features:
            city_code = feature_code(feature)
            city_name = feature_name(feature)
            geometry = clean_geometry(feature.get('geometry'), f"city {city_code}")
            city = self._region(LEVEL_CITY, city_code, city_name, geometry, province_code)

            if city_code:
                documents = [(key, features) for key, features in sources.county_documents
                             if key.startswith(city_code)]
                city.children = self._counties(city_code, province_code, documents)
            if not city.children:
                logger.warning(f"No counties found for {city_name} ({city_code})")

            if city_code in positions:
                logger.warning(f"Duplicate city {city_code} in province {province_code}, "
                               f"keeping the later record")
                cities[positions[city_code]] = city
                continue
            if city_code:
                positions[city_code] = len(cities)
            cities.append(city)
        return cities

    def _counties(self, city_code: str, province_code: str,
                  documents: List[Tuple[str, List[Dict]]]) -> List[Region]:
        """
        Collect county records whose code's city prefix equals city_code.

        Records are keyed by exact code: a later document replaces an
        earlier record with the same code but keeps its position.
        """
        counties: Dict[str, Region] = {}
        skipped = 0

        for key, features in documents:
            for feature in features:
                code = feature_code(feature)
                try:
                    matched = city_prefix(code) == city_code
                except MalformedCodeError:
                    matched = False
                if not matched:
                    skipped += 1
                    continue

                if code in counties:
                    logger.debug(f"County {code} from {key} replaces an earlier record")
                geometry = clean_geometry(feature.get('geometry'), f"county {code}")
                counties[code] = self._region(LEVEL_COUNTY, code, feature_name(feature),
                                              geometry, city_code)

        if skipped:
            logger.warning(f"Skipped {skipped} county records not under city {city_code} "
                           f"(province {province_code})")
        return list(counties.values())

    def _region(self, level: str, code: Optional[str], name: Optional[str],
                geometry: Optional[Dict], parent_code: Optional[str]) -> Region:
        center = label_point(geometry) if self.config.compute_centers else None
        return Region(level=level, code=code, name=name, geometry=geometry,
                      parent_code=parent_code, center=center)
