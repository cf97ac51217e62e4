"""
glossary_engine/pipeline.py -- Batch validation pipeline.

Runs the phases in order and aggregates their findings into one report:

    1. structure        JSON Schema + model passes (fail-fast)
    2. semantic         content-quality advisories
    3. corpus           load published terms (degrades to empty)
    4. cross-reference  relationship targets must resolve (blocking)
    5. quiz-readiness   category population advisories

If phase 1 fails no later phase runs.  Validation is a pure function of
(batch, corpus): nothing is written.

Usage::

    from glossary_engine.pipeline import BatchValidationPipeline

    pipeline = BatchValidationPipeline(EngineConfig.from_env())
    report = pipeline.validate_file("data/batches/2025-10-30-batch-001.json")
    report.passed            # -> True/False
    print(report.format_human())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from glossary_engine.batch_file import load_batch_file
from glossary_engine.config import EngineConfig
from glossary_engine.corpus import Corpus, CorpusAccessor
from glossary_engine.cross_reference import CrossReferenceResolver
from glossary_engine.errors import BatchLoadError
from glossary_engine.issues import Severity, StructuralError, ValidationIssue
from glossary_engine.quiz_readiness import QuizReadinessAuditor
from glossary_engine.semantic_checker import SemanticRuleChecker
from glossary_engine.structural_validator import StructuralValidator

logger = logging.getLogger(__name__)

PHASE_STRUCTURE = "structure"
PHASE_SEMANTIC = "semantic"
PHASE_CORPUS = "corpus"
PHASE_CROSS_REFERENCE = "cross-reference"
PHASE_QUIZ_READINESS = "quiz-readiness"
PHASES = (
    PHASE_STRUCTURE,
    PHASE_SEMANTIC,
    PHASE_CORPUS,
    PHASE_CROSS_REFERENCE,
    PHASE_QUIZ_READINESS,
)


@dataclass
class ValidationReport:
    """Aggregated result of one pipeline run.

    ``phases`` maps each phase name to ``True`` (ran clean of blocking
    issues), ``False`` (found blocking issues) or ``None`` (skipped).
    """
    source: str
    issues: list[ValidationIssue] = field(default_factory=list)
    phases: dict[str, Optional[bool]] = field(
        default_factory=lambda: dict.fromkeys(PHASES)
    )
    term_count: int = 0
    categories: list[str] = field(default_factory=list)
    corpus_available: Optional[bool] = None

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    @property
    def passed(self) -> bool:
        return self.phases[PHASE_STRUCTURE] is True and not self.errors

    def issues_of(self, kind: type) -> list[ValidationIssue]:
        return [i for i in self.issues if isinstance(i, kind)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "passed": self.passed,
            "termCount": self.term_count,
            "categories": list(self.categories),
            "corpusAvailable": self.corpus_available,
            "phases": dict(self.phases),
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
        }

    def format_human(self) -> str:
        """Plain-text summary: counts, numbered errors, numbered warnings."""
        lines = [
            f"File: {self.source}",
            f"Terms: {self.term_count}",
            f"Categories: {', '.join(self.categories)}",
            "",
        ]
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for number, issue in enumerate(self.errors, 1):
                lines.append(f"  {number}. {issue}")
            lines.append("")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for number, issue in enumerate(self.warnings, 1):
                lines.append(f"  {number}. {issue}")
            lines.append("")

        if not self.passed:
            lines.append("VALIDATION FAILED")
        elif self.warnings:
            lines.append(
                f"VALIDATION PASSED - No errors ({len(self.warnings)} warning(s))"
            )
        else:
            lines.append("VALIDATION PASSED - No errors or warnings!")
        return "\n".join(lines)


class BatchValidationPipeline:
    """Runs every validation phase over one batch.

    Parameters
    ----------
    config : EngineConfig, optional
        Paths and thresholds.  Defaults to ``EngineConfig()``.
    corpus : Corpus, optional
        Pre-loaded corpus.  When omitted it is loaded from
        ``config.corpus_path`` on each run.
    """

    def __init__(self, config: Optional[EngineConfig] = None, corpus: Optional[Corpus] = None):
        self.config = config or EngineConfig()
        self._corpus = corpus
        self.structural = StructuralValidator(self.config.schema_path)
        self.semantic = SemanticRuleChecker(
            truncation_threshold=self.config.truncation_threshold,
            advisory_min_length=self.config.advisory_min_length,
        )

    def load_corpus(self) -> Corpus:
        if self._corpus is not None:
            return self._corpus
        return CorpusAccessor(self.config.corpus_path).load()

    def validate_file(self, path) -> ValidationReport:
        """Load and validate the batch file at *path*.

        A missing or undecodable file yields a failed report with a single
        ``StructuralError`` rather than an exception.
        """
        try:
            payload = load_batch_file(path)
        except BatchLoadError as exc:
            logger.error("%s", exc)
            report = ValidationReport(source=str(path))
            report.issues.append(StructuralError(
                message=f"Failed to load file: {exc.reason}",
                path=str(path),
                validation_pass="load",
            ))
            report.phases[PHASE_STRUCTURE] = False
            return report
        return self.validate_payload(payload, source=str(path))

    def validate_payload(self, payload: Any, source: str = "<payload>") -> ValidationReport:
        """Validate an already-decoded batch payload."""
        report = ValidationReport(source=source)

        # ----- Phase 1: structure (fail-fast) -----
        logger.debug("Validating structure of %s", source)
        structural = self.structural.validate(payload)
        report.issues.extend(structural.errors)
        report.phases[PHASE_STRUCTURE] = structural.passed
        if not structural.passed:
            logger.info(
                "%s failed structural validation with %d error(s)",
                source, len(structural.errors),
            )
            return report

        batch = structural.batch
        report.term_count = len(batch.terms)
        report.categories = [c.value for c in batch.categories]

        # ----- Phase 2: semantic rules -----
        semantic = self.semantic.check(batch)
        report.issues.extend(semantic)
        report.phases[PHASE_SEMANTIC] = not any(i.blocking for i in semantic)

        # ----- Phase 3: corpus context -----
        corpus = self.load_corpus()
        report.corpus_available = corpus.available
        report.phases[PHASE_CORPUS] = True
        if corpus.warning is not None:
            report.issues.append(corpus.warning)

        # ----- Phase 4: cross-references -----
        resolver = CrossReferenceResolver(corpus, strict=self.config.strict_global_ids)
        references = resolver.check(batch)
        report.issues.extend(references)
        report.phases[PHASE_CROSS_REFERENCE] = not any(i.blocking for i in references)

        # ----- Phase 5: quiz readiness -----
        auditor = QuizReadinessAuditor(corpus, minimum=self.config.min_terms_per_category)
        report.issues.extend(auditor.audit(batch))
        report.phases[PHASE_QUIZ_READINESS] = True

        logger.info(
            "%s: %s (%d error(s), %d warning(s))",
            source, "passed" if report.passed else "failed",
            len(report.errors), len(report.warnings),
        )
        return report
