"""
glossary_engine/semantic_checker.py -- Content-quality rules for accepted batches.

Runs after structural validation has passed.  Every finding is a
``SemanticWarning``: these rules never reject a batch.

Rules:
    plain-text             markup sequences in section content
    truncation             content longer than the downstream cut-off
    short-content          content below the recommended length band
    duplicate-tag          a tag repeated within one term
    synonym-matches-title  a synonym that just repeats the title
    self-reference         a relationship pointing at its own term
    timestamp-order        updatedAt earlier than createdAt

The plain-text sweep repeats a check the structural pass already turns
into a hard error, so on an accepted batch it should find nothing.  It
stays in place so that a gap in either structural pass still surfaces.
"""

from __future__ import annotations

import logging

from glossary_engine.config import ADVISORY_MIN_LENGTH, TRUNCATION_THRESHOLD
from glossary_engine.issues import SemanticWarning
from glossary_engine.models.glossary import Batch, Term
from glossary_engine.models.validators import describe_markup, find_markup
from glossary_engine.utils import parse_timestamp

logger = logging.getLogger(__name__)

RULE_PLAIN_TEXT = "plain-text"
RULE_TRUNCATION = "truncation"
RULE_SHORT_CONTENT = "short-content"
RULE_DUPLICATE_TAG = "duplicate-tag"
RULE_SYNONYM_TITLE = "synonym-matches-title"
RULE_SELF_REFERENCE = "self-reference"
RULE_TIMESTAMP_ORDER = "timestamp-order"


class SemanticRuleChecker:
    """Applies the content-quality rules to a structurally valid batch.

    Parameters
    ----------
    truncation_threshold : int
        Content longer than this many characters is flagged.
    advisory_min_length : int
        Content shorter than this many characters is flagged.
    """

    def __init__(
        self,
        truncation_threshold: int = TRUNCATION_THRESHOLD,
        advisory_min_length: int = ADVISORY_MIN_LENGTH,
    ):
        self.truncation_threshold = truncation_threshold
        self.advisory_min_length = advisory_min_length

    def check(self, batch: Batch) -> list[SemanticWarning]:
        warnings: list[SemanticWarning] = []
        for index, term in enumerate(batch.terms):
            warnings.extend(self.check_sections(term, index))
            warnings.extend(self.check_tags(term, index))
            warnings.extend(self.check_synonyms(term, index))
            warnings.extend(self.check_relationships(term, index))
            warnings.extend(self.check_timestamps(term, index))
        logger.debug("Semantic rules produced %d warning(s)", len(warnings))
        return warnings

    # ------------------------------------------------------------------
    # Section content
    # ------------------------------------------------------------------

    def check_sections(self, term: Term, index: int) -> list[SemanticWarning]:
        warnings: list[SemanticWarning] = []
        for name, section in term.sections.present():
            content = section.content
            path = f"/terms/{index}/sections/{name.value}/content"

            found = find_markup(content)
            if found:
                logger.warning(
                    "Markup found in accepted term %s (%s); structural passes missed it",
                    term.id, name.value,
                )
                warnings.append(SemanticWarning(
                    message=(
                        f'Term "{term.id}" section "{name.value}" contains '
                        f"{describe_markup(found)} - plain text only!"
                    ),
                    path=path,
                    rule=RULE_PLAIN_TEXT,
                    term_id=term.id,
                    section=name.value,
                ))

            length = len(content)
            if length > self.truncation_threshold:
                warnings.append(SemanticWarning(
                    message=(
                        f'Term "{term.id}" section "{name.value}" is {length} '
                        f"characters; content beyond {self.truncation_threshold} "
                        f"characters is truncated downstream."
                    ),
                    path=path,
                    rule=RULE_TRUNCATION,
                    term_id=term.id,
                    section=name.value,
                ))
            elif length < self.advisory_min_length:
                warnings.append(SemanticWarning(
                    message=(
                        f'Term "{term.id}" section "{name.value}" is only {length} '
                        f"characters; {self.advisory_min_length}-"
                        f"{self.truncation_threshold} characters is recommended."
                    ),
                    path=path,
                    rule=RULE_SHORT_CONTENT,
                    term_id=term.id,
                    section=name.value,
                ))
        return warnings

    # ------------------------------------------------------------------
    # Tags and synonyms
    # ------------------------------------------------------------------

    def check_tags(self, term: Term, index: int) -> list[SemanticWarning]:
        warnings: list[SemanticWarning] = []
        seen: set[str] = set()
        for tag_index, tag in enumerate(term.tags):
            if tag in seen:
                warnings.append(SemanticWarning(
                    message=f'Term "{term.id}" lists the tag "{tag}" more than once.',
                    path=f"/terms/{index}/tags/{tag_index}",
                    rule=RULE_DUPLICATE_TAG,
                    term_id=term.id,
                ))
            seen.add(tag)
        return warnings

    def check_synonyms(self, term: Term, index: int) -> list[SemanticWarning]:
        title = term.title.strip().casefold()
        return [
            SemanticWarning(
                message=(
                    f'Term "{term.id}" lists its own title "{synonym}" as a synonym.'
                ),
                path=f"/terms/{index}/synonyms/{syn_index}",
                rule=RULE_SYNONYM_TITLE,
                term_id=term.id,
            )
            for syn_index, synonym in enumerate(term.synonyms)
            if synonym.strip().casefold() == title
        ]

    # ------------------------------------------------------------------
    # Relationships and timestamps
    # ------------------------------------------------------------------

    def check_relationships(self, term: Term, index: int) -> list[SemanticWarning]:
        return [
            SemanticWarning(
                message=(
                    f'Term "{term.id}" has a {rel.type.value} relationship '
                    f"pointing at itself."
                ),
                path=f"/terms/{index}/relationships/{rel_index}",
                rule=RULE_SELF_REFERENCE,
                term_id=term.id,
            )
            for rel_index, rel in enumerate(term.relationships)
            if rel.term_id == term.id
        ]

    def check_timestamps(self, term: Term, index: int) -> list[SemanticWarning]:
        try:
            created = parse_timestamp(term.created_at)
            updated = parse_timestamp(term.updated_at)
        except ValueError:
            # Matches the timestamp pattern but is not a calendar date.
            return [SemanticWarning(
                message=(
                    f'Term "{term.id}" has a timestamp that is not a real '
                    f"calendar date ({term.created_at} / {term.updated_at})."
                ),
                path=f"/terms/{index}",
                rule=RULE_TIMESTAMP_ORDER,
                term_id=term.id,
            )]
        if updated >= created:
            return []
        return [SemanticWarning(
            message=(
                f'Term "{term.id}" was updated ({term.updated_at}) before it '
                f"was created ({term.created_at})."
            ),
            path=f"/terms/{index}/updatedAt",
            rule=RULE_TIMESTAMP_ORDER,
            term_id=term.id,
        )]
