"""
glossary_engine/models/glossary.py -- Pydantic v2 models for glossary batches.

These models are the imperative half of the structural check: the JSON
Schema in ``schemas/batch.schema.json`` states the same contract
declaratively, and the structural validator runs both.

Key design decisions:
    - Every model is a closed record (``extra='forbid'``) so unknown
      fields anywhere in a term or batch are rejected.
    - Categories, section names and relationship types are ``Enum``
      classes, so an unknown value fails at the type boundary.
    - Wire names are camelCase; Python attributes are snake_case and
      mapped through aliases.  Validation only accepts the wire names.
    - Optional members must be omitted, never ``null``.

Usage::

    from glossary_engine.models.glossary import Batch

    batch = Batch.model_validate(json.load(fh))
    batch.term_ids       # -> ["flight-level", ...]
    batch.categories     # -> [Category.NAVIGATION, ...]
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from glossary_engine.models.validators import describe_markup, find_markup

KEBAB_CASE_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"
TAG_PATTERN = r"^[a-z0-9-]+$"
ISO_TIMESTAMP_PATTERN = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{3})?Z$"


# ------------------------------------------------------------------
# Closed enumerations
# ------------------------------------------------------------------

class Category(str, Enum):
    """The 26 glossary categories.  Values are case-sensitive."""

    NAVIGATION = "Navigation"
    WEATHER = "Weather"
    COMMUNICATION = "Communication"
    SAFETY = "Safety"
    PERFORMANCE = "Performance"
    FLIGHT_CONTROLS = "Flight Controls"
    NAVIGATION_SYSTEMS = "Navigation Systems"
    EQUIPMENT = "Equipment"
    PROCEDURES = "Procedures"
    ELECTRICAL_SYSTEMS = "Electrical Systems"
    ELECTRICAL = "Electrical"
    PNEUMATIC_SYSTEMS = "Pneumatic Systems"
    ENVIRONMENTAL_SYSTEMS = "Environmental Systems"
    ICE_PROTECTION_SYSTEMS = "Ice Protection Systems"
    CARGO_SYSTEMS = "Cargo Systems"
    HYDRAULIC_SYSTEMS = "Hydraulic Systems"
    COMMUNICATION_SYSTEMS = "Communication Systems"
    LIGHTING_SYSTEMS = "Lighting Systems"
    CABIN_SYSTEMS = "Cabin Systems"
    FIRE_PROTECTION_SYSTEMS = "Fire Protection Systems"
    FLIGHT_INSTRUMENTS = "Flight Instruments"
    ENGINE_SYSTEMS = "Engine Systems"
    SYSTEM_CONTROLS = "System Controls"
    SAFETY_EQUIPMENT = "Safety Equipment"
    COMMUNICATIONS = "Communications"
    LANDING_GEAR = "Landing Gear"


class RelationshipType(str, Enum):
    # Not symmetric: broader A->B does not imply narrower B->A.
    BROADER = "broader"
    NARROWER = "narrower"
    RELATED = "related"
    SEE_ALSO = "seeAlso"


class SectionName(str, Enum):
    WHAT_IT_IS = "whatItIs"
    LOCATION = "location"
    HOW_IT_WORKS = "howItWorks"
    WHAT_YOU_SHOULD_DO = "whatYouShouldDo"
    TROUBLESHOOTING = "troubleshooting"


def _reject_null(value):
    if value is None:
        raise ValueError("must be omitted rather than set to null")
    return value


# ------------------------------------------------------------------
# Batch content
# ------------------------------------------------------------------

class GlossaryModel(BaseModel):
    """Base for every glossary record: closed, validated by wire name."""

    model_config = ConfigDict(extra="forbid")

    def to_json_dict(self) -> dict:
        """Serialize using wire names, omitting absent optional members."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Section(GlossaryModel):
    content: str = Field(min_length=10, max_length=2000)

    @field_validator("content")
    @classmethod
    def _plain_text_only(cls, value: str) -> str:
        found = find_markup(value)
        if found:
            raise ValueError(
                "Content must be plain text only - no markdown or HTML "
                f"formatting allowed (found {describe_markup(found)})"
            )
        return value


class Sections(GlossaryModel):
    what_it_is: Section = Field(alias="whatItIs")
    location: Optional[Section] = None
    how_it_works: Optional[Section] = Field(default=None, alias="howItWorks")
    what_you_should_do: Optional[Section] = Field(default=None, alias="whatYouShouldDo")
    troubleshooting: Optional[Section] = None

    _null_check = field_validator(
        "location", "how_it_works", "what_you_should_do", "troubleshooting",
        mode="before",
    )(_reject_null)

    def present(self) -> list[tuple[SectionName, Section]]:
        """Return ``(name, section)`` pairs for every section that is set."""
        pairs = [
            (SectionName.WHAT_IT_IS, self.what_it_is),
            (SectionName.LOCATION, self.location),
            (SectionName.HOW_IT_WORKS, self.how_it_works),
            (SectionName.WHAT_YOU_SHOULD_DO, self.what_you_should_do),
            (SectionName.TROUBLESHOOTING, self.troubleshooting),
        ]
        return [(name, section) for name, section in pairs if section is not None]


class Relationship(GlossaryModel):
    term_id: str = Field(
        alias="termId", min_length=1, max_length=100, pattern=KEBAB_CASE_PATTERN,
    )
    type: RelationshipType
    description: Optional[str] = Field(default=None, min_length=10, max_length=500)

    _null_check = field_validator("description", mode="before")(_reject_null)


Synonym = Annotated[str, Field(min_length=1, max_length=100)]
Tag = Annotated[str, Field(min_length=1, max_length=50, pattern=TAG_PATTERN)]


class Term(GlossaryModel):
    id: str = Field(min_length=1, max_length=100, pattern=KEBAB_CASE_PATTERN)
    title: str = Field(min_length=1, max_length=200)
    category: Category
    sections: Sections
    synonyms: list[Synonym] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)
    created_at: str = Field(alias="createdAt", pattern=ISO_TIMESTAMP_PATTERN)
    updated_at: str = Field(alias="updatedAt", pattern=ISO_TIMESTAMP_PATTERN)


class Batch(GlossaryModel):
    terms: list[Term] = Field(min_length=1)

    @field_validator("terms")
    @classmethod
    def _unique_ids(cls, terms: list[Term]) -> list[Term]:
        duplicates = duplicate_ids(term.id for term in terms)
        if duplicates:
            raise ValueError(
                "All term IDs must be unique within a batch "
                f"(duplicated: {', '.join(duplicates)})"
            )
        return terms

    @property
    def term_ids(self) -> list[str]:
        return [term.id for term in self.terms]

    @property
    def categories(self) -> list[Category]:
        """Distinct categories in order of first appearance."""
        return list(dict.fromkeys(term.category for term in self.terms))


# ------------------------------------------------------------------
# Manifest
# ------------------------------------------------------------------

class ManifestEntry(GlossaryModel):
    id: str = Field(min_length=1)
    path: str = Field(min_length=1)
    created_at: str = Field(alias="createdAt", pattern=ISO_TIMESTAMP_PATTERN)
    term_count: int = Field(alias="termCount", ge=1, strict=True)
    categories: list[Category]


class Manifest(GlossaryModel):
    batches: list[ManifestEntry] = Field(default_factory=list)

    @field_validator("batches")
    @classmethod
    def _unique_entry_ids(cls, batches: list[ManifestEntry]) -> list[ManifestEntry]:
        duplicates = duplicate_ids(entry.id for entry in batches)
        if duplicates:
            raise ValueError(
                f"Manifest contains duplicate batch ids: {', '.join(duplicates)}"
            )
        return batches

    def find(self, batch_id: str) -> int:
        """Return the index of the entry with *batch_id*, or -1."""
        for index, entry in enumerate(self.batches):
            if entry.id == batch_id:
                return index
        return -1


def duplicate_ids(ids) -> list[str]:
    """Return ids that occur more than once, in order of first repeat."""
    seen: set[str] = set()
    repeated: list[str] = []
    for item in ids:
        if item in seen and item not in repeated:
            repeated.append(item)
        seen.add(item)
    return repeated
