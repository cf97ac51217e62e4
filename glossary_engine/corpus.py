"""
glossary_engine/corpus.py -- Read-only access to the published glossary.

The corpus is every term that has already been accepted.  It is context
for the cross-batch checks (reference resolution, quiz readiness) and is
never written by the engine.

A missing or unreadable corpus is not fatal: a batch that introduces a
self-consistent new vocabulary should still be assessable.  The accessor
returns an empty corpus and a ``CorpusWarning`` instead.

Usage::

    from glossary_engine.corpus import CorpusAccessor

    corpus = CorpusAccessor(config.corpus_path).load()
    corpus.term_ids            # -> {"flight-level", ...}
    corpus.category_counts     # -> Counter({"Navigation": 12, ...})
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from glossary_engine.issues import CorpusWarning
from glossary_engine.utils import read_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorpusTerm:
    """The parts of a published term the cross-batch checks need."""
    id: str
    category: str


@dataclass
class Corpus:
    """Published terms keyed by id.

    ``available`` is ``False`` when the corpus could not be loaded and the
    engine is running in degraded mode.
    """
    terms: dict[str, CorpusTerm] = field(default_factory=dict)
    available: bool = True
    source: str = ""
    warning: Optional[CorpusWarning] = None

    @classmethod
    def empty(cls, source: str = "", warning: Optional[CorpusWarning] = None) -> "Corpus":
        return cls(terms={}, available=False, source=source, warning=warning)

    @classmethod
    def from_terms(cls, raw_terms, source: str = "") -> "Corpus":
        """Build a corpus from raw term dicts, skipping unusable entries."""
        terms: dict[str, CorpusTerm] = {}
        for index, raw in enumerate(raw_terms):
            if not isinstance(raw, dict) or not isinstance(raw.get("id"), str):
                logger.debug("Skipping corpus entry %d without a string id", index)
                continue
            category = raw.get("category")
            terms[raw["id"]] = CorpusTerm(
                id=raw["id"],
                category=category if isinstance(category, str) else "",
            )
        return cls(terms=terms, available=True, source=source)

    @property
    def term_ids(self) -> set[str]:
        return set(self.terms)

    @property
    def categories(self) -> set[str]:
        return {term.category for term in self.terms.values() if term.category}

    @property
    def category_counts(self) -> Counter:
        return Counter(term.category for term in self.terms.values() if term.category)

    def __contains__(self, term_id) -> bool:
        return term_id in self.terms

    def __len__(self) -> int:
        return len(self.terms)


class CorpusAccessor:
    """Loads the corpus file.

    Parameters
    ----------
    path : str or pathlib.Path
        JSON file holding ``{"terms": [...]}`` or a bare list of terms.
    """

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Corpus:
        """Load the corpus, degrading to an empty one on any failure."""
        source = str(self.path)
        if not self.path.exists():
            return self._degraded(f"Could not find existing corpus at {source}")

        try:
            data = read_json(self.path)
        except json.JSONDecodeError as exc:
            return self._degraded(f"Corpus at {source} is not valid JSON ({exc})")
        except (OSError, UnicodeDecodeError) as exc:
            return self._degraded(f"Could not read corpus at {source} ({exc})")

        if isinstance(data, dict):
            raw_terms = data.get("terms")
        else:
            raw_terms = data
        if not isinstance(raw_terms, list):
            found = "nothing" if raw_terms is None else type(raw_terms).__name__
            return self._degraded(
                f"Corpus at {source} has no 'terms' list (found {found})"
            )

        corpus = Corpus.from_terms(raw_terms, source=source)
        logger.info("Loaded %d corpus term(s) from %s", len(corpus), source)
        return corpus

    def _degraded(self, reason: str) -> Corpus:
        message = (
            f"{reason}. Treating the corpus as empty; cross-batch checks are "
            f"running in degraded mode."
        )
        logger.warning(message)
        return Corpus.empty(
            source=str(self.path),
            warning=CorpusWarning(message=message, path=str(self.path)),
        )
