"""Command-line importer: load files into an in-memory map and summarize.

Usage:
    python -m fogimport Sync.zip morning.gpx trail.kml --geojson tracks.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from loguru import logger

from fogimport.config import settings
from fogimport.files import PathFile
from fogimport.importer import Importer
from fogimport.report import LogReporter
from fogimport.state import MapState


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fogimport",
        description="Import Fog of World sync data, GPX and KML tracks",
    )
    parser.add_argument("files", nargs="+", type=Path, help="Files to import")
    parser.add_argument("--geojson", type=Path, default=None,
                        help="Write imported tracks as GeoJSON to this path")
    parser.add_argument("--log-level", type=str, default=settings.log_level,
                        help="Log level (DEBUG, INFO, WARNING, ...)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    state = MapState()
    importer = Importer(state, LogReporter())
    result = asyncio.run(importer.import_files([PathFile(p) for p in args.files]))

    fog_map = state.fog_map
    print(f"status:   {result.state.value}")
    print(f"tiles:    {fog_map.tile_count}")
    print(f"blocks:   {fog_map.block_count}")
    print(f"features: {len(state.features)}")
    if result.skipped_files:
        print(f"skipped:  {', '.join(result.skipped_files)}")

    if args.geojson is not None and result.ok:
        args.geojson.write_text(json.dumps(state.features.to_geojson()), encoding="utf-8")
        logger.info(f"Wrote {len(state.features)} features to {args.geojson}")

    return 0 if result.ok else 1
