"""
glossary_engine -- Validation and manifest reconciliation for glossary batches.

Modules:
    models                Pydantic records and closed enumerations.
    structural_validator  JSON Schema + model passes over a batch payload.
    semantic_checker      Content-quality advisories.
    corpus                Read-only access to the published terms.
    cross_reference       Relationship target resolution.
    quiz_readiness        Category population advisories.
    manifest              Idempotent manifest upsert and ordering.
    pipeline              Runs the phases and builds a ValidationReport.
    cli                   ``glossary-batch validate|update-manifest``.
"""

from glossary_engine.config import EngineConfig
from glossary_engine.manifest import ManifestMerger, MergeResult
from glossary_engine.pipeline import BatchValidationPipeline, ValidationReport

__version__ = "1.0.0"

__all__ = [
    "BatchValidationPipeline",
    "EngineConfig",
    "ManifestMerger",
    "MergeResult",
    "ValidationReport",
]
