"""
glossary_engine/issues.py -- Report records produced by the validation phases.

Every phase returns a list of ``ValidationIssue`` subclasses.  Only
issues with ``Severity.ERROR`` reject a batch; everything else is
advisory and is surfaced alongside the verdict.

    StructuralError       schema/shape/pattern/enum violation (blocking)
    CrossReferenceError   relationship target does not resolve (blocking)
    IdCollisionWarning    batch id already present in the corpus
    SemanticWarning       content-quality advisory
    QuizReadinessWarning  category below the quiz distractor minimum
    CorpusWarning         corpus unavailable, checks running degraded
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationIssue:
    """A single finding from one validation phase."""
    message: str
    path: str = ""
    severity: Severity = Severity.ERROR

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def blocking(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict:
        data = asdict(self)
        data["severity"] = self.severity.value
        data["kind"] = self.kind
        return data

    def __str__(self) -> str:
        if self.path:
            return f"[{self.path}] {self.message}"
        return self.message


@dataclass
class StructuralError(ValidationIssue):
    # "schema", "model", "agreement" or "load"
    validation_pass: str = ""


@dataclass
class CrossReferenceError(ValidationIssue):
    term_id: str = ""
    missing_target: str = ""


@dataclass
class IdCollisionWarning(ValidationIssue):
    term_id: str = ""
    severity: Severity = Severity.WARNING


@dataclass
class SemanticWarning(ValidationIssue):
    rule: str = ""
    term_id: str = ""
    section: str = ""
    severity: Severity = Severity.WARNING


@dataclass
class QuizReadinessWarning(ValidationIssue):
    category: str = ""
    count: int = 0
    needed: int = 0
    new_category: bool = False
    severity: Severity = Severity.WARNING

    @property
    def urgency(self) -> str:
        return "high" if self.new_category else "normal"


@dataclass
class CorpusWarning(ValidationIssue):
    severity: Severity = Severity.WARNING
