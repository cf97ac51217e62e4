"""
glossary_engine/config.py -- Engine configuration and path resolution.

Resolves where the corpus, the manifest and the bundled batch schema
live, plus the thresholds the advisory checks use.  Every value can be
overridden from the environment so the external orchestrator can point
the engine at a checkout without code changes.

Usage::

    from glossary_engine.config import EngineConfig

    config = EngineConfig.from_env()
    config.manifest_path   # -> <root>/data/manifest.json
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from glossary_engine.errors import ConfigError

logger = logging.getLogger(__name__)

_PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_CORPUS_RELPATH = Path("packages/web/src/features/glossary/glossaryData.json")
DEFAULT_MANIFEST_RELPATH = Path("data/manifest.json")
DEFAULT_SCHEMA_PATH = _PACKAGE_DIR / "schemas" / "batch.schema.json"

# Quiz generation needs one correct answer plus three distractors.
MIN_TERMS_PER_CATEGORY = 4
TRUNCATION_THRESHOLD = 240
ADVISORY_MIN_LENGTH = 100

TIMESTAMP_MERGE_TIME = "merge-time"
TIMESTAMP_FILENAME_DATE = "filename-date"
TIMESTAMP_SOURCES = (TIMESTAMP_MERGE_TIME, TIMESTAMP_FILENAME_DATE)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class EngineConfig:
    """Paths and thresholds for one engine invocation.

    Parameters
    ----------
    project_root : pathlib.Path
        Repository checkout the batch lives in.  Manifest entry paths are
        written relative to it.
    corpus_path, manifest_path : pathlib.Path, optional
        Default to the conventional locations under *project_root*.
    """

    project_root: Path = field(default_factory=Path.cwd)
    corpus_path: Path | None = None
    manifest_path: Path | None = None
    schema_path: Path = DEFAULT_SCHEMA_PATH
    min_terms_per_category: int = MIN_TERMS_PER_CATEGORY
    truncation_threshold: int = TRUNCATION_THRESHOLD
    advisory_min_length: int = ADVISORY_MIN_LENGTH
    manifest_timestamp_source: str = TIMESTAMP_MERGE_TIME
    strict_global_ids: bool = False

    def __post_init__(self):
        self.project_root = Path(self.project_root).resolve()
        if self.corpus_path is None:
            self.corpus_path = self.project_root / DEFAULT_CORPUS_RELPATH
        if self.manifest_path is None:
            self.manifest_path = self.project_root / DEFAULT_MANIFEST_RELPATH
        self.corpus_path = Path(self.corpus_path)
        self.manifest_path = Path(self.manifest_path)
        self.schema_path = Path(self.schema_path)

        if self.manifest_timestamp_source not in TIMESTAMP_SOURCES:
            raise ConfigError(
                f"Unknown manifest timestamp source "
                f"'{self.manifest_timestamp_source}'. "
                f"Expected one of: {', '.join(TIMESTAMP_SOURCES)}."
            )
        if self.min_terms_per_category < 1:
            raise ConfigError("min_terms_per_category must be at least 1.")

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "EngineConfig":
        """Build a config from ``GLOSSARY_*`` environment variables.

        Keyword *overrides* win over the environment; ``None`` values
        are ignored so CLI flags that were not given fall through.
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        root = env.get("GLOSSARY_PROJECT_ROOT")
        if root:
            values["project_root"] = Path(root)
        corpus = env.get("GLOSSARY_CORPUS_PATH")
        if corpus:
            values["corpus_path"] = Path(corpus)
        manifest = env.get("GLOSSARY_MANIFEST_PATH")
        if manifest:
            values["manifest_path"] = Path(manifest)
        minimum = env.get("GLOSSARY_MIN_TERMS_PER_CATEGORY")
        if minimum:
            try:
                values["min_terms_per_category"] = int(minimum)
            except ValueError:
                raise ConfigError(
                    f"GLOSSARY_MIN_TERMS_PER_CATEGORY must be an integer, got '{minimum}'."
                ) from None
        source = env.get("GLOSSARY_MANIFEST_TIMESTAMP")
        if source:
            values["manifest_timestamp_source"] = source
        strict = env.get("GLOSSARY_STRICT_GLOBAL_IDS")
        if strict is not None:
            values["strict_global_ids"] = _parse_bool("GLOSSARY_STRICT_GLOBAL_IDS", strict)

        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls(**values)
        logger.debug("Engine config: %s", config)
        return config

    def with_overrides(self, **overrides) -> "EngineConfig":
        """Return a copy with the non-``None`` *overrides* applied.

        A new ``project_root`` re-derives the corpus and manifest paths
        unless those are overridden too.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "project_root" in changes:
            changes.setdefault("corpus_path", None)
            changes.setdefault("manifest_path", None)
        return replace(self, **changes)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean flag, got '{raw}'.")
