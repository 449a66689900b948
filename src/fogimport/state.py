"""MapState: holder of the current coverage map and imported tracks.

The importer only talks to the MapStateHolder protocol; MapState is the
in-memory implementation used by the CLI and the tests.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from loguru import logger

from fogimport.feature import Feature, FeatureCollection
from fogimport.tiles.fogmap import FogMap


class MapStateHolder(Protocol):
    """What the importer needs from whoever owns the map."""

    @property
    def is_empty(self) -> bool: ...

    def replace_coverage_map(self, fog_map: FogMap) -> None: ...

    def merge_feature_collections(
        self, collections: Iterable[FeatureCollection]
    ) -> None: ...


class MapState:
    """In-memory owner of a FogMap and an aggregate FeatureCollection."""

    def __init__(self, fog_map: FogMap | None = None) -> None:
        self._fog_map = fog_map or FogMap.empty()
        self._features: list[Feature] = []

    @property
    def fog_map(self) -> FogMap:
        return self._fog_map

    @property
    def is_empty(self) -> bool:
        """True while no coverage map has been imported."""
        return self._fog_map.is_empty

    @property
    def features(self) -> FeatureCollection:
        return FeatureCollection(features=list(self._features))

    def replace_coverage_map(self, fog_map: FogMap) -> None:
        """Replace the whole coverage map (no merge)."""
        self._fog_map = fog_map
        logger.info(f"Coverage map replaced: {fog_map.tile_count} tiles")

    def merge_feature_collections(
        self, collections: Iterable[FeatureCollection]
    ) -> None:
        """Append every feature of *collections*, in order."""
        merged = FeatureCollection.concat(collections)
        self._features.extend(merged.features)
        logger.info(
            f"Merged {len(merged)} features ({len(self._features)} total)"
        )

    def reset(self) -> None:
        self._fog_map = FogMap.empty()
        self._features = []
