"""
glossary_engine/quiz_readiness.py -- Category population advisories.

The quiz generator needs a correct answer plus three distractors from the
same category, so a category is quiz-ready once it holds at least four
terms.  Population is expected to converge over several batches, so
every finding here is advisory and never blocks a batch.

Two warning kinds:
    - a category (anywhere in corpus + batch) below the minimum
    - a category the batch introduces for the first time whose
      batch-local count is below the minimum (``new_category=True``)
"""

from __future__ import annotations

import logging
from collections import Counter

from glossary_engine.config import MIN_TERMS_PER_CATEGORY
from glossary_engine.corpus import Corpus
from glossary_engine.issues import QuizReadinessWarning
from glossary_engine.models.glossary import Batch

logger = logging.getLogger(__name__)


class QuizReadinessAuditor:
    """Counts terms per category and flags under-populated categories.

    Parameters
    ----------
    corpus : Corpus
        Published terms.
    minimum : int
        Terms a category needs before quizzes can be generated from it.
    """

    def __init__(self, corpus: Corpus, minimum: int = MIN_TERMS_PER_CATEGORY):
        self.corpus = corpus
        self.minimum = minimum

    def category_counts(self, batch: Batch) -> Counter:
        """Terms per category over corpus and batch, counting each id once.

        A batch term that re-publishes a corpus id is counted under the
        batch's category.
        """
        by_id = {
            term_id: term.category
            for term_id, term in self.corpus.terms.items()
            if term.category
        }
        for term in batch.terms:
            by_id[term.id] = term.category.value
        return Counter(by_id.values())

    def new_categories(self, batch: Batch) -> list[str]:
        """Batch categories that do not appear anywhere in the corpus."""
        existing = self.corpus.categories
        return [
            category.value
            for category in batch.categories
            if category.value not in existing
        ]

    def audit(self, batch: Batch) -> list[QuizReadinessWarning]:
        warnings: list[QuizReadinessWarning] = []

        for category, count in self.category_counts(batch).items():
            if count >= self.minimum:
                continue
            needed = self.minimum - count
            warnings.append(QuizReadinessWarning(
                message=(
                    f'Category "{category}" has only {count} term(s) - need '
                    f"{self.minimum}+ for quiz generation. Add {needed} more term(s)."
                ),
                category=category,
                count=count,
                needed=needed,
            ))

        batch_counts = Counter(term.category.value for term in batch.terms)
        for category in self.new_categories(batch):
            count = batch_counts[category]
            if count >= self.minimum:
                continue
            needed = self.minimum - count
            warnings.append(QuizReadinessWarning(
                message=(
                    f'NEW category "{category}" introduced with only {count} '
                    f"term(s) - add {needed} more in this batch or next."
                ),
                category=category,
                count=count,
                needed=needed,
                new_category=True,
            ))

        logger.debug("Quiz readiness produced %d warning(s)", len(warnings))
        return warnings
