"""Importer: runs one batch of user files through the decoders.

Lifecycle of a batch:
  CLASSIFYING -> DISPATCHING(group) -> AGGREGATING -> ... -> DONE | FAILED

Groups are visited in a fixed order: archives, loose tiles, GPX, KML.
Archive and loose-tile groups replace the coverage map and require it to
be empty beforehand; a violation fails the whole batch at once.  Track
files that fail to decode are dropped one by one without failing the
group.  If no group completes, the batch fails as unrecognized.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from loguru import logger

from fogimport.classify import PROCESSING_ORDER, FileGroup, GroupKind, classify, file_extension
from fogimport.config import Settings, settings as default_settings
from fogimport.errors import AlreadyImportedError, DecodeError, ErrorKind
from fogimport.feature import FeatureCollection
from fogimport.files import FileEntry, FileHandle, read_entries
from fogimport.report import ErrorReporter
from fogimport.state import MapStateHolder
from fogimport.tiles.archive import unpack_archive
from fogimport.tiles.fogmap import FogMap, decode_tiles
from fogimport.tracks.decoder import TrackDecoder


class BatchState(Enum):
    CLASSIFYING = "classifying"
    DISPATCHING = "dispatching"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ImportResult:
    """Outcome of one import batch."""
    state: BatchState
    error: ErrorKind | None = None
    groups_done: list[GroupKind] = field(default_factory=list)
    feature_count: int = 0
    skipped_files: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is BatchState.DONE


@dataclass
class _TrackOutcome:
    name: str
    collection: FeatureCollection | None
    fog_map: FogMap | None = None
    error: DecodeError | None = None


def _probe_tile_bundle(data: bytes) -> FogMap:
    return decode_tiles(unpack_archive(data))


class ImportBatch:
    """Working set of one import: groups, progress and shared decoders."""

    def __init__(self, encoding: str) -> None:
        self.state = BatchState.CLASSIFYING
        self.groups: dict[GroupKind, FileGroup] = {}
        self.ignored: list[FileGroup] = []
        self.groups_done: list[GroupKind] = []
        self.feature_count = 0
        self.skipped_files: list[str] = []
        self._encoding = encoding
        self._track_decoder: TrackDecoder | None = None

    def add_groups(self, groups: list[FileGroup]) -> None:
        for group in groups:
            if group.kind is GroupKind.UNRECOGNIZED:
                self.ignored.append(group)
            else:
                self.groups[group.kind] = group

    @property
    def track_decoder(self) -> TrackDecoder:
        if self._track_decoder is None:
            self._track_decoder = TrackDecoder(self._encoding)
        return self._track_decoder

    def transition(self, state: BatchState, detail: str = "") -> None:
        logger.debug(f"Batch {self.state.value} -> {state.value} {detail}".rstrip())
        self.state = state

    def mark_done(self, kind: GroupKind) -> None:
        self.groups_done.append(kind)
        logger.info(f"Import group {kind.value} done")

    def result(self, error: ErrorKind | None = None) -> ImportResult:
        return ImportResult(
            state=self.state,
            error=error,
            groups_done=list(self.groups_done),
            feature_count=self.feature_count,
            skipped_files=list(self.skipped_files),
        )


class Importer:
    """Imports batches of files into a map-state holder.

    Args:
        map_state: Owner of the coverage map and imported tracks.
        reporter: Channel for user-facing errors.
        settings: Import settings; defaults to the module-level settings.
    """

    def __init__(
        self,
        map_state: MapStateHolder,
        reporter: ErrorReporter,
        settings: Settings | None = None,
    ) -> None:
        self.map_state = map_state
        self.reporter = reporter
        self.settings = settings or default_settings
        self._handlers: dict[GroupKind, Callable] = {
            GroupKind.ARCHIVE: self._import_archives,
            GroupKind.LOOSE_TILES: self._import_loose_tiles,
            GroupKind.GPX: self._import_gpx,
            GroupKind.KML: self._import_kml,
        }

    async def import_files(self, files: list[FileHandle]) -> ImportResult:
        """Run one import batch.

        Returns:
            The batch outcome.  Errors meant for the user have already been
            sent to the reporter.
        """
        batch = ImportBatch(self.settings.text_encoding)
        semaphore = asyncio.Semaphore(max(1, self.settings.read_concurrency))

        batch.add_groups(classify(files))
        for group in batch.ignored:
            logger.info(
                f"Ignoring {len(group.files)} file(s) with extension '{group.extension}'"
            )

        try:
            for kind in PROCESSING_ORDER:
                group = batch.groups.get(kind)
                if group is None:
                    continue
                batch.transition(BatchState.DISPATCHING, f"({kind.value})")
                await self._handlers[kind](batch, group, semaphore)
        except AlreadyImportedError as exc:
            return self._fail(batch, exc.kind)

        if not batch.groups_done:
            return self._fail(batch, ErrorKind.UNRECOGNIZED_FORMAT)

        batch.transition(BatchState.DONE)
        return batch.result()

    def _fail(self, batch: ImportBatch, kind: ErrorKind) -> ImportResult:
        batch.transition(BatchState.FAILED, f"({kind.value})")
        logger.warning(f"Import failed: {kind.value}")
        self.reporter.show("error", kind.message_key)
        return batch.result(kind)

    def _require_empty_map(self) -> None:
        if not self.map_state.is_empty:
            raise AlreadyImportedError()

    # ------------------------------------------------------------------
    # Coverage map groups
    # ------------------------------------------------------------------

    async def _import_archives(
        self, batch: ImportBatch, group: FileGroup, semaphore: asyncio.Semaphore
    ) -> None:
        self._require_empty_map()
        archives = await read_entries(group.files, semaphore)
        try:
            tile_entries: list[FileEntry] = []
            for archive in archives:
                tile_entries.extend(await asyncio.to_thread(unpack_archive, archive.data))
            fog_map = await asyncio.to_thread(decode_tiles, tile_entries)
        except DecodeError as exc:
            logger.warning(f"Archive group failed ({exc.kind.value}): {exc}")
            return
        self._commit_map(batch, group, fog_map)

    async def _import_loose_tiles(
        self, batch: ImportBatch, group: FileGroup, semaphore: asyncio.Semaphore
    ) -> None:
        if not all(file_extension(f.name) == "" for f in group.files):
            logger.warning("Loose tile group contains files with an extension; skipped")
            return
        self._require_empty_map()
        entries = await read_entries(group.files, semaphore)
        try:
            fog_map = await asyncio.to_thread(decode_tiles, entries)
        except DecodeError as exc:
            logger.warning(f"Loose tile group failed ({exc.kind.value}): {exc}")
            return
        self._commit_map(batch, group, fog_map)

    def _commit_map(self, batch: ImportBatch, group: FileGroup, fog_map: FogMap) -> None:
        batch.transition(BatchState.AGGREGATING, f"({group.kind.value})")
        self.map_state.replace_coverage_map(fog_map)
        batch.mark_done(group.kind)

    # ------------------------------------------------------------------
    # Track groups
    # ------------------------------------------------------------------

    async def _import_gpx(
        self, batch: ImportBatch, group: FileGroup, semaphore: asyncio.Semaphore
    ) -> None:
        decoder = batch.track_decoder

        async def _decode(handle: FileHandle) -> _TrackOutcome:
            async with semaphore:
                data = await handle.read_bytes()
            # A .gpx upload may also be a zip bundle carrying sync tiles.
            fog_map = None
            try:
                fog_map = await asyncio.to_thread(_probe_tile_bundle, data)
            except DecodeError as exc:
                logger.debug(f"{handle.name} is not a tile bundle ({exc.kind.value})")
            try:
                return _TrackOutcome(handle.name, decoder.decode_gpx(data), fog_map)
            except DecodeError as exc:
                return _TrackOutcome(handle.name, None, fog_map, exc)

        outcomes = await asyncio.gather(*(_decode(f) for f in group.files))

        batch.transition(BatchState.AGGREGATING, f"({group.kind.value})")
        for outcome in outcomes:
            if outcome.fog_map is not None and not outcome.fog_map.is_empty:
                self.map_state.replace_coverage_map(outcome.fog_map)
        self._merge_tracks(batch, group, outcomes)

    async def _import_kml(
        self, batch: ImportBatch, group: FileGroup, semaphore: asyncio.Semaphore
    ) -> None:
        decoder = batch.track_decoder

        async def _decode(handle: FileHandle) -> _TrackOutcome:
            async with semaphore:
                data = await handle.read_bytes()
            try:
                return _TrackOutcome(handle.name, decoder.decode_kml(data))
            except DecodeError as exc:
                return _TrackOutcome(handle.name, None, error=exc)

        outcomes = await asyncio.gather(*(_decode(f) for f in group.files))

        batch.transition(BatchState.AGGREGATING, f"({group.kind.value})")
        self._merge_tracks(batch, group, outcomes)

    def _merge_tracks(
        self, batch: ImportBatch, group: FileGroup, outcomes: list[_TrackOutcome]
    ) -> None:
        collections: list[FeatureCollection] = []
        for outcome in outcomes:
            if outcome.collection is None:
                logger.warning(
                    f"Dropping {outcome.name} ({outcome.error.kind.value}): {outcome.error}"
                )
                batch.skipped_files.append(outcome.name)
                continue
            collections.append(outcome.collection)

        self.map_state.merge_feature_collections(collections)
        batch.feature_count += sum(len(c) for c in collections)
        batch.mark_done(group.kind)
