"""
glossary_engine/manifest.py -- Batch manifest upsert and canonical ordering.

The manifest (``data/manifest.json``) indexes every merged batch::

    {
      "batches": [
        {"id": "2025-10-30-batch-001", "path": "data/batches/2025-10-30-batch-001.json",
         "createdAt": "2025-10-30T12:00:00.000Z", "termCount": 12,
         "categories": ["Navigation", "Weather"]}
      ]
    }

It is the only persistent state the engine owns.  Entries are never
deleted: a merge either appends a new entry or replaces the entry with
the same id in place, then the whole list is stably re-sorted newest
first and the file is rewritten atomically.

Concurrent merges against one manifest are last-write-wins; batches are
expected to be serialized by the caller.

Usage::

    from glossary_engine.manifest import ManifestMerger

    merger = ManifestMerger.from_config(config)
    result = merger.merge("data/batches/2025-10-30-batch-001.json")
    result.replaced        # -> True if the batch was already listed
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from glossary_engine.batch_file import batch_id_from_path, load_batch_file
from glossary_engine.config import (
    TIMESTAMP_FILENAME_DATE,
    TIMESTAMP_MERGE_TIME,
    TIMESTAMP_SOURCES,
    EngineConfig,
)
from glossary_engine.errors import ConfigError, ManifestError
from glossary_engine.models.glossary import Batch, Manifest, ManifestEntry
from glossary_engine.utils import (
    date_from_name,
    format_timestamp,
    parse_timestamp,
    read_json,
    safe_write_json,
    utc_now,
)

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class MergeResult:
    """What a merge did to the manifest."""
    entry: ManifestEntry
    replaced: bool
    total_batches: int
    manifest_path: Path


class ManifestMerger:
    """Upserts batch summaries into the manifest file.

    Parameters
    ----------
    manifest_path : str or pathlib.Path
        Location of ``manifest.json``.  Created on first merge.
    project_root : str or pathlib.Path, optional
        Entry paths are recorded relative to this directory.  Defaults to
        the current working directory.
    timestamp_source : str, optional
        ``"merge-time"`` stamps entries with the time of the merge, so
        re-merging an unchanged batch moves it to the top of the order.
        ``"filename-date"`` uses the date prefix of the batch id instead.
    clock : callable, optional
        Returns the current time as an aware datetime.
    """

    def __init__(
        self,
        manifest_path,
        project_root=None,
        timestamp_source: str = TIMESTAMP_MERGE_TIME,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if timestamp_source not in TIMESTAMP_SOURCES:
            raise ConfigError(
                f"Unknown manifest timestamp source '{timestamp_source}'. "
                f"Expected one of: {', '.join(TIMESTAMP_SOURCES)}."
            )
        self.manifest_path = Path(manifest_path)
        self.project_root = Path(project_root or Path.cwd()).resolve()
        self.timestamp_source = timestamp_source
        self._clock = clock or utc_now

    @classmethod
    def from_config(cls, config: EngineConfig, clock=None) -> "ManifestMerger":
        return cls(
            manifest_path=config.manifest_path,
            project_root=config.project_root,
            timestamp_source=config.manifest_timestamp_source,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self) -> Manifest:
        """Load the manifest; a missing file is an empty manifest.

        Raises
        ------
        ManifestError
            If the file exists but cannot be read or does not match the
            manifest shape.
        """
        if not self.manifest_path.exists():
            logger.info("Manifest not found at %s, starting a new one", self.manifest_path)
            return Manifest()
        try:
            data = read_json(self.manifest_path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ManifestError(
                f"Could not read manifest at {self.manifest_path}: {exc}"
            ) from exc
        try:
            return Manifest.model_validate(data)
        except ValidationError as exc:
            details = "; ".join(
                f"{'/'.join(str(p) for p in err['loc']) or '(root)'}: {err['msg']}"
                for err in exc.errors()
            )
            raise ManifestError(
                f"Manifest at {self.manifest_path} is invalid: {details}"
            ) from exc

    def save(self, manifest: Manifest) -> None:
        safe_write_json(self.manifest_path, manifest.to_json_dict())
        logger.info(
            "Manifest saved to %s (%d batch(es))",
            self.manifest_path, len(manifest.batches),
        )

    # ------------------------------------------------------------------
    # Entry construction
    # ------------------------------------------------------------------

    def build_entry(self, batch: Batch, batch_path) -> ManifestEntry:
        """Summarize *batch* as a manifest entry."""
        batch_id = batch_id_from_path(batch_path)
        return ManifestEntry(
            id=batch_id,
            path=self.relative_path(batch_path),
            createdAt=self.entry_timestamp(batch_id),
            termCount=len(batch.terms),
            categories=batch.categories,
        )

    def relative_path(self, batch_path) -> str:
        """*batch_path* relative to the project root, with forward slashes."""
        path = Path(batch_path)
        try:
            return path.resolve().relative_to(self.project_root).as_posix()
        except ValueError:
            return path.as_posix()

    def entry_timestamp(self, batch_id: str) -> str:
        if self.timestamp_source == TIMESTAMP_FILENAME_DATE:
            stamped = date_from_name(batch_id)
            if stamped is not None:
                return format_timestamp(stamped)
            logger.warning(
                "Batch id '%s' has no YYYY-MM-DD prefix; using the merge time instead",
                batch_id,
            )
        return format_timestamp(self._clock())

    # ------------------------------------------------------------------
    # Upsert and ordering
    # ------------------------------------------------------------------

    @staticmethod
    def upsert(manifest: Manifest, entry: ManifestEntry) -> tuple[Manifest, bool]:
        """Replace the entry with the same id in place, or append.

        Returns the new (re-sorted) manifest and whether an existing entry
        was replaced.  *manifest* itself is not modified.
        """
        batches = list(manifest.batches)
        index = manifest.find(entry.id)
        replaced = index >= 0
        if replaced:
            batches[index] = entry
        else:
            batches.append(entry)
        return Manifest(batches=sort_entries(batches)), replaced

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge_batch(self, batch: Batch, batch_path) -> MergeResult:
        """Upsert an already-parsed batch and persist the manifest."""
        manifest = self.load()
        entry = self.build_entry(batch, batch_path)
        if manifest.find(entry.id) >= 0:
            logger.info("Batch %s already exists, updating", entry.id)
        else:
            logger.info("Adding new batch %s to manifest", entry.id)

        updated, replaced = self.upsert(manifest, entry)
        self.save(updated)
        return MergeResult(
            entry=entry,
            replaced=replaced,
            total_batches=len(updated.batches),
            manifest_path=self.manifest_path,
        )

    def merge(self, batch_path) -> MergeResult:
        """Load the batch file at *batch_path* and merge it.

        Raises
        ------
        BatchLoadError
            If the batch file cannot be read.
        ManifestError
            If the batch does not parse as a glossary batch or the
            manifest is unreadable.  The manifest file is left untouched.
        """
        payload = load_batch_file(batch_path)
        try:
            batch = Batch.model_validate(payload)
        except ValidationError as exc:
            raise ManifestError(
                f"Batch {batch_path} is not a valid glossary batch "
                f"({exc.error_count()} error(s)); run validate first."
            ) from exc
        return self.merge_batch(batch, batch_path)


def sort_entries(entries: list[ManifestEntry]) -> list[ManifestEntry]:
    """Stable sort, newest ``createdAt`` first."""
    return sorted(entries, key=_entry_time, reverse=True)


def _entry_time(entry: ManifestEntry) -> datetime:
    try:
        return parse_timestamp(entry.created_at)
    except ValueError:
        return _OLDEST
