"""
Shared pytest fixtures for the glossary engine test suite.

Provides:
    - make_term: factory for valid term dicts (wire format)
    - make_batch: factory wrapping terms into a batch payload
    - project: a temporary project root with corpus/manifest helpers
    - config: an EngineConfig pointing at the temporary project
    - fixed_clock: a controllable clock for manifest timestamps
"""

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Ensure glossary_engine/ is importable regardless of where pytest is invoked
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from glossary_engine.config import EngineConfig  # noqa: E402

# 157 characters: inside the 100-240 advisory band, no markup.
DEFAULT_CONTENT = (
    "A standard altitude referenced to the 29.92 inHg pressure datum, used "
    "above the transition altitude so that every aircraft shares the same "
    "altimeter setting."
)


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_term():
    """Return a factory producing a valid term dict.

    Keyword arguments override top-level fields; ``content`` replaces the
    ``whatItIs`` content.
    """
    def _make(term_id="flight-level", category="Navigation", content=DEFAULT_CONTENT, **overrides):
        term = {
            "id": term_id,
            "title": term_id.replace("-", " ").title(),
            "category": category,
            "sections": {"whatItIs": {"content": content}},
            "synonyms": [],
            "tags": ["altimetry"],
            "relationships": [],
            "createdAt": "2025-01-01T00:00:00Z",
            "updatedAt": "2025-01-02T00:00:00.000Z",
        }
        term.update(overrides)
        return term
    return _make


@pytest.fixture
def make_batch():
    """Return a factory wrapping term dicts into a batch payload."""
    def _make(*terms):
        return {"terms": list(terms)}
    return _make


@pytest.fixture
def sample_batch(make_term, make_batch):
    """A valid two-term batch where one term references the other."""
    return make_batch(
        make_term("flight-level"),
        make_term(
            "transition-altitude",
            relationships=[{
                "termId": "flight-level",
                "type": "related",
                "description": "Flight levels are used above the transition altitude.",
            }],
        ),
    )


# ---------------------------------------------------------------------------
# Temporary project
# ---------------------------------------------------------------------------

class TempProject:
    """A temporary project root with conventional file locations."""

    def __init__(self, root: Path):
        self.root = root
        self.corpus_path = root / "packages" / "web" / "src" / "features" / "glossary" / "glossaryData.json"
        self.manifest_path = root / "data" / "manifest.json"
        self.batches_dir = root / "data" / "batches"
        self.batches_dir.mkdir(parents=True)

    def write_corpus(self, terms):
        self.corpus_path.parent.mkdir(parents=True, exist_ok=True)
        self.corpus_path.write_text(json.dumps({"terms": terms}, indent=2), encoding="utf-8")
        return self.corpus_path

    def write_batch(self, name, payload):
        path = self.batches_dir / f"{name}.json"
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    def write_manifest(self, data):
        self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        self.manifest_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return self.manifest_path

    def read_manifest(self):
        return json.loads(self.manifest_path.read_text(encoding="utf-8"))


@pytest.fixture
def project(tmp_path):
    return TempProject(tmp_path / "glossary-project")


@pytest.fixture
def config(project):
    return EngineConfig(project_root=project.root)


@pytest.fixture
def corpus_terms(make_term):
    """Five published Navigation terms."""
    return [make_term(f"nav-term-{i}", "Navigation") for i in range(5)]


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fixed_clock():
    return FixedClock(datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc))
