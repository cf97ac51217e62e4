"""
glossary_engine/cross_reference.py -- Relationship target resolution.

Every relationship in a batch must point at a term that exists, either
in the same batch or in the published corpus.  A dangling target is a
hard failure.

Not checked here:
    - cycles in the relationship graph
    - mirroring of inverse types (broader A->B does not require
      narrower B->A)

Batch ids that already exist in the corpus are reported as
``IdCollisionWarning``; with ``strict=True`` they block the batch.
"""

from __future__ import annotations

import logging

from glossary_engine.corpus import Corpus
from glossary_engine.issues import CrossReferenceError, IdCollisionWarning, Severity
from glossary_engine.models.glossary import Batch

logger = logging.getLogger(__name__)


class CrossReferenceResolver:
    """Resolves relationship targets against batch ids and corpus ids.

    Parameters
    ----------
    corpus : Corpus
        Published terms.  An empty corpus is valid (degraded mode).
    strict : bool, optional
        Make corpus id collisions blocking.
    """

    def __init__(self, corpus: Corpus, strict: bool = False):
        self.corpus = corpus
        self.strict = strict

    def known_ids(self, batch: Batch) -> set[str]:
        """The identifier universe: batch ids plus corpus ids."""
        return set(batch.term_ids) | self.corpus.term_ids

    def resolve(self, batch: Batch) -> list[CrossReferenceError]:
        """Return one error per relationship whose target does not resolve."""
        universe = self.known_ids(batch)
        errors: list[CrossReferenceError] = []

        for term_index, term in enumerate(batch.terms):
            for rel_index, rel in enumerate(term.relationships):
                if rel.term_id in universe:
                    continue
                errors.append(CrossReferenceError(
                    message=(
                        f'Term "{term.id}" references unknown term '
                        f'"{rel.term_id}" in relationships'
                    ),
                    path=f"/terms/{term_index}/relationships/{rel_index}/termId",
                    term_id=term.id,
                    missing_target=rel.term_id,
                ))

        if errors:
            logger.info("%d unresolved relationship target(s)", len(errors))
        return errors

    def find_collisions(self, batch: Batch) -> list[IdCollisionWarning]:
        """Report batch term ids that are already published in the corpus."""
        severity = Severity.ERROR if self.strict else Severity.WARNING
        return [
            IdCollisionWarning(
                message=(
                    f'Term "{term.id}" already exists in the corpus; merging '
                    f"this batch would publish a second term with the same id."
                ),
                path=f"/terms/{index}/id",
                term_id=term.id,
                severity=severity,
            )
            for index, term in enumerate(batch.terms)
            if term.id in self.corpus
        ]

    def check(self, batch: Batch) -> list:
        """Run reference resolution and collision detection together."""
        return [*self.resolve(batch), *self.find_collisions(batch)]
