"""
Tests for glossary_engine/manifest.py -- manifest upsert, ordering and
atomic persistence.

Validates:
    - merging the same batch twice leaves exactly one entry
    - entries are always sorted newest createdAt first
    - an invalid batch or corrupt manifest raises ManifestError and leaves
      the manifest file untouched
    - entry paths are relative to the project root
    - both timestamp sources
"""

import json

import pytest

from glossary_engine.batch_file import batch_id_from_path
from glossary_engine.config import TIMESTAMP_FILENAME_DATE, EngineConfig
from glossary_engine.errors import BatchLoadError, ConfigError, ManifestError
from glossary_engine.manifest import ManifestMerger, sort_entries
from glossary_engine.models.glossary import Manifest, ManifestEntry

BATCH_NAME = "2025-10-30-batch-001"


def _entry(batch_id, created_at):
    return ManifestEntry.model_validate({
        "id": batch_id,
        "path": f"data/batches/{batch_id}.json",
        "createdAt": created_at,
        "termCount": 1,
        "categories": ["Navigation"],
    })


@pytest.fixture
def merger(config, fixed_clock):
    return ManifestMerger.from_config(config, clock=fixed_clock)


# ======================================================================
# Upsert and ordering
# ======================================================================


class TestUpsert:
    def test_new_entry_is_appended(self):
        manifest = Manifest(batches=[_entry("a", "2025-01-01T00:00:00.000Z")])
        updated, replaced = ManifestMerger.upsert(manifest, _entry("b", "2025-02-01T00:00:00.000Z"))
        assert replaced is False
        assert [e.id for e in updated.batches] == ["b", "a"]

    def test_existing_entry_replaced_in_place(self):
        manifest = Manifest(batches=[_entry("a", "2025-01-01T00:00:00.000Z")])
        replacement = _entry("a", "2025-03-01T00:00:00.000Z")
        updated, replaced = ManifestMerger.upsert(manifest, replacement)
        assert replaced is True
        assert len(updated.batches) == 1
        assert updated.batches[0].created_at == "2025-03-01T00:00:00.000Z"

    def test_upsert_does_not_mutate_input(self):
        manifest = Manifest(batches=[_entry("a", "2025-01-01T00:00:00.000Z")])
        ManifestMerger.upsert(manifest, _entry("b", "2025-02-01T00:00:00.000Z"))
        assert [e.id for e in manifest.batches] == ["a"]

    def test_out_of_order_entries_are_resorted(self):
        manifest = Manifest(batches=[
            _entry("jan", "2025-01-01T00:00:00.000Z"),
            _entry("mar", "2025-03-01T00:00:00.000Z"),
        ])
        updated, _ = ManifestMerger.upsert(manifest, _entry("feb", "2025-02-01T00:00:00.000Z"))
        assert [e.id for e in updated.batches] == ["mar", "feb", "jan"]

    def test_sort_is_stable_for_equal_timestamps(self):
        same = "2025-01-01T00:00:00.000Z"
        entries = [_entry("first", same), _entry("second", same), _entry("third", same)]
        assert [e.id for e in sort_entries(entries)] == ["first", "second", "third"]

    def test_sort_compares_instants_not_strings(self):
        entries = [
            _entry("no-millis", "2025-01-01T00:00:00Z"),
            _entry("later", "2025-01-01T00:00:00.500Z"),
        ]
        assert [e.id for e in sort_entries(entries)] == ["later", "no-millis"]


# ======================================================================
# Merging batch files
# ======================================================================


class TestMerge:
    def test_first_merge_creates_manifest(self, project, merger, sample_batch):
        path = project.write_batch(BATCH_NAME, sample_batch)
        result = merger.merge(path)

        assert result.replaced is False
        assert result.total_batches == 1
        data = project.read_manifest()
        assert data == {"batches": [{
            "id": BATCH_NAME,
            "path": f"data/batches/{BATCH_NAME}.json",
            "createdAt": "2025-06-01T12:00:00.000Z",
            "termCount": 2,
            "categories": ["Navigation"],
        }]}

    def test_merging_twice_keeps_one_entry(self, project, merger, fixed_clock, sample_batch):
        path = project.write_batch(BATCH_NAME, sample_batch)
        merger.merge(path)
        fixed_clock.advance(hours=1)
        result = merger.merge(path)

        assert result.replaced is True
        batches = project.read_manifest()["batches"]
        assert [b["id"] for b in batches] == [BATCH_NAME]
        assert batches[0]["createdAt"] == "2025-06-01T13:00:00.000Z"

    def test_remerge_moves_batch_to_top(self, project, merger, fixed_clock, sample_batch):
        first = project.write_batch("2025-10-01-batch-001", sample_batch)
        second = project.write_batch("2025-10-02-batch-001", sample_batch)
        merger.merge(first)
        fixed_clock.advance(minutes=5)
        merger.merge(second)
        fixed_clock.advance(minutes=5)
        merger.merge(first)
        ids = [b["id"] for b in project.read_manifest()["batches"]]
        assert ids == ["2025-10-01-batch-001", "2025-10-02-batch-001"]

    def test_existing_entries_are_kept_and_resorted(self, project, merger, sample_batch):
        project.write_manifest({"batches": [
            _entry("jan", "2025-01-01T00:00:00.000Z").to_json_dict(),
            _entry("mar", "2025-03-01T00:00:00.000Z").to_json_dict(),
            _entry("feb", "2025-02-01T00:00:00.000Z").to_json_dict(),
        ]})
        merger.merge(project.write_batch(BATCH_NAME, sample_batch))
        ids = [b["id"] for b in project.read_manifest()["batches"]]
        assert ids == [BATCH_NAME, "mar", "feb", "jan"]

    def test_categories_in_first_appearance_order(self, project, merger, make_term, make_batch):
        payload = make_batch(
            make_term("a", "Weather"),
            make_term("b", "Navigation"),
            make_term("c", "Weather"),
        )
        result = merger.merge(project.write_batch(BATCH_NAME, payload))
        assert [c.value for c in result.entry.categories] == ["Weather", "Navigation"]
        assert result.entry.term_count == 3

    def test_file_has_trailing_newline_and_two_space_indent(self, project, merger, sample_batch):
        merger.merge(project.write_batch(BATCH_NAME, sample_batch))
        text = project.manifest_path.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert text.startswith('{\n  "batches": [')

    def test_no_temp_files_left_behind(self, project, merger, sample_batch):
        merger.merge(project.write_batch(BATCH_NAME, sample_batch))
        leftovers = list(project.manifest_path.parent.glob("*.tmp"))
        assert leftovers == []

    def test_path_outside_root_kept_as_given(self, tmp_path, merger, sample_batch):
        outside = tmp_path / "elsewhere" / f"{BATCH_NAME}.json"
        outside.parent.mkdir()
        outside.write_text(json.dumps(sample_batch), encoding="utf-8")
        result = merger.merge(outside)
        assert result.entry.path == outside.as_posix()


class TestMergeFailures:
    def test_invalid_batch_leaves_manifest_untouched(self, project, merger, make_term, make_batch):
        original = {"batches": []}
        project.write_manifest(original)
        before = project.manifest_path.read_text(encoding="utf-8")

        path = project.write_batch(BATCH_NAME, make_batch(make_term("Flight_Level")))
        with pytest.raises(ManifestError, match="not a valid glossary batch"):
            merger.merge(path)
        assert project.manifest_path.read_text(encoding="utf-8") == before

    def test_invalid_batch_does_not_create_manifest(self, project, merger, make_term, make_batch):
        path = project.write_batch(BATCH_NAME, make_batch(make_term("Flight_Level")))
        with pytest.raises(ManifestError):
            merger.merge(path)
        assert not project.manifest_path.exists()

    def test_missing_batch_file(self, project, merger):
        with pytest.raises(BatchLoadError, match="file not found"):
            merger.merge(project.batches_dir / "nope.json")

    def test_corrupt_manifest_raises(self, project, merger, sample_batch):
        project.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        project.manifest_path.write_text("{broken", encoding="utf-8")
        with pytest.raises(ManifestError, match="Could not read manifest"):
            merger.merge(project.write_batch(BATCH_NAME, sample_batch))
        assert project.manifest_path.read_text(encoding="utf-8") == "{broken"

    def test_non_utf8_manifest_raises(self, project, merger, sample_batch):
        project.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        project.manifest_path.write_bytes(b"\xff\xfe{}")
        with pytest.raises(ManifestError, match="Could not read manifest"):
            merger.merge(project.write_batch(BATCH_NAME, sample_batch))
        assert project.manifest_path.read_bytes() == b"\xff\xfe{}"

    def test_manifest_with_wrong_shape_raises(self, project, merger, sample_batch):
        project.write_manifest({"batches": [{"id": "x"}]})
        with pytest.raises(ManifestError, match="is invalid"):
            merger.merge(project.write_batch(BATCH_NAME, sample_batch))


# ======================================================================
# Timestamp sources
# ======================================================================


class TestTimestampSource:
    def test_filename_date(self, project, fixed_clock, sample_batch):
        config = EngineConfig(project_root=project.root, manifest_timestamp_source=TIMESTAMP_FILENAME_DATE)
        merger = ManifestMerger.from_config(config, clock=fixed_clock)
        result = merger.merge(project.write_batch(BATCH_NAME, sample_batch))
        assert result.entry.created_at == "2025-10-30T00:00:00.000Z"

    def test_filename_date_is_stable_across_remerges(self, project, fixed_clock, sample_batch):
        config = EngineConfig(project_root=project.root, manifest_timestamp_source=TIMESTAMP_FILENAME_DATE)
        merger = ManifestMerger.from_config(config, clock=fixed_clock)
        path = project.write_batch(BATCH_NAME, sample_batch)
        merger.merge(path)
        fixed_clock.advance(days=3)
        merger.merge(path)
        assert project.read_manifest()["batches"][0]["createdAt"] == "2025-10-30T00:00:00.000Z"

    def test_filename_without_date_falls_back_to_clock(self, project, fixed_clock, sample_batch):
        config = EngineConfig(project_root=project.root, manifest_timestamp_source=TIMESTAMP_FILENAME_DATE)
        merger = ManifestMerger.from_config(config, clock=fixed_clock)
        result = merger.merge(project.write_batch("hotfix-batch", sample_batch))
        assert result.entry.created_at == "2025-06-01T12:00:00.000Z"

    def test_unknown_source_rejected(self, project):
        with pytest.raises(ConfigError, match="timestamp source"):
            ManifestMerger(project.manifest_path, timestamp_source="mtime")


class TestBatchId:
    def test_json_suffix_is_stripped(self, project, merger, sample_batch):
        result = merger.merge(project.write_batch(BATCH_NAME, sample_batch))
        assert result.entry.id == BATCH_NAME

    @pytest.mark.parametrize("name,expected", [
        ("data/batches/2025-10-30-batch-001.json", "2025-10-30-batch-001"),
        ("2025-10-30-batch-001.txt", "2025-10-30-batch-001.txt"),
        ("batch.v2.json", "batch.v2"),
        ("batch", "batch"),
    ])
    def test_only_json_suffix_removed(self, name, expected):
        assert batch_id_from_path(name) == expected

    def test_non_json_extension_kept_in_manifest(self, project, merger, sample_batch):
        path = project.batches_dir / "2025-10-30-batch-001.txt"
        path.write_text(json.dumps(sample_batch), encoding="utf-8")
        result = merger.merge(path)
        assert result.entry.id == "2025-10-30-batch-001.txt"
        assert project.read_manifest()["batches"][0]["id"] == "2025-10-30-batch-001.txt"
