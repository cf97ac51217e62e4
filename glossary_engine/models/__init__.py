"""
glossary_engine/models/ -- Pydantic v2 models for glossary batches.

Submodules:
    glossary    Term, Batch and Manifest records plus the closed enumerations.
    validators  Plain-text (markup) detection shared by the model and the
                semantic sweep.
"""

from glossary_engine.models.glossary import (
    Batch,
    Category,
    Manifest,
    ManifestEntry,
    Relationship,
    RelationshipType,
    Section,
    SectionName,
    Sections,
    Term,
)

__all__ = [
    "Batch",
    "Category",
    "Manifest",
    "ManifestEntry",
    "Relationship",
    "RelationshipType",
    "Section",
    "SectionName",
    "Sections",
    "Term",
]
