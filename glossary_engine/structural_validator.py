"""
glossary_engine/structural_validator.py -- Two-pass structural validation.

A batch must decode into the glossary contract before anything else
looks at it.  The contract is checked twice:

    Pass 1 (schema):  the bundled JSON Schema, via ``jsonschema``.
    Pass 2 (model):   the pydantic ``Batch`` model.

Both passes collect every violation instead of stopping at the first.
The two are written independently against the same contract; if one
accepts what the other rejects, that disagreement is reported as an
additional ``StructuralError`` so drift between the documented schema
and the enforcing code is caught the first time a batch trips over it.

Usage::

    from glossary_engine.structural_validator import StructuralValidator

    sv = StructuralValidator()
    result = sv.validate(payload)
    # result.passed  -> True/False
    # result.batch   -> Batch (only when passed)
    # result.errors  -> [StructuralError, ...]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator, validators
from jsonschema.exceptions import ValidationError as SchemaValidationError
from pydantic import ValidationError

from glossary_engine.config import DEFAULT_SCHEMA_PATH
from glossary_engine.issues import StructuralError
from glossary_engine.models.glossary import Batch
from glossary_engine.utils import clean_schema_for_validation, read_json

logger = logging.getLogger(__name__)

PASS_SCHEMA = "schema"
PASS_MODEL = "model"
PASS_AGREEMENT = "agreement"


# ------------------------------------------------------------------
# JSON Schema extension
# ------------------------------------------------------------------

def _unique_item_properties(validator, properties, instance, schema):
    """``uniqueItemProperties``: array items must not share these property values."""
    if not validator.is_type(instance, "array"):
        return
    for prop in properties:
        first_seen: dict[Any, int] = {}
        for index, item in enumerate(instance):
            if not validator.is_type(item, "object") or prop not in item:
                continue
            value = item[prop]
            if not isinstance(value, (str, int, float, bool)):
                continue
            if value in first_seen:
                yield SchemaValidationError(
                    f"{value!r} is already used by item {first_seen[value]}; "
                    f"'{prop}' must be unique within the array",
                    path=(index, prop),
                )
            else:
                first_seen[value] = index


BatchSchemaValidator = validators.extend(
    Draft202012Validator,
    validators={"uniqueItemProperties": _unique_item_properties},
)


# ------------------------------------------------------------------
# Result
# ------------------------------------------------------------------

@dataclass
class StructuralResult:
    """Outcome of both structural passes over one payload."""
    passed: bool
    errors: list[StructuralError] = field(default_factory=list)
    batch: Optional[Batch] = None
    schema_passed: bool = False
    model_passed: bool = False

    @property
    def passes_agree(self) -> bool:
        return self.schema_passed == self.model_passed


# ------------------------------------------------------------------
# StructuralValidator
# ------------------------------------------------------------------

class StructuralValidator:
    """Validates a decoded batch payload against the glossary contract.

    Parameters
    ----------
    schema_path : str or pathlib.Path, optional
        JSON Schema to use for the declarative pass.  Defaults to the
        schema bundled with the package.
    """

    def __init__(self, schema_path=None):
        self.schema_path = Path(schema_path or DEFAULT_SCHEMA_PATH)
        raw_schema = read_json(self.schema_path)
        self.schema = clean_schema_for_validation(raw_schema)
        BatchSchemaValidator.check_schema(self.schema)
        self._validator = BatchSchemaValidator(self.schema)

    def validate(self, payload: Any) -> StructuralResult:
        """Run both passes over *payload* and reconcile their verdicts."""
        schema_errors = self.check_schema(payload)
        model_errors, batch = self.check_model(payload)

        schema_passed = not schema_errors
        model_passed = not model_errors
        errors = schema_errors + model_errors

        if schema_passed != model_passed:
            accepted_by = PASS_SCHEMA if schema_passed else PASS_MODEL
            rejected_by = PASS_MODEL if schema_passed else PASS_SCHEMA
            logger.warning(
                "Structural passes disagree: accepted by %s, rejected by %s",
                accepted_by, rejected_by,
            )
            errors.append(StructuralError(
                message=(
                    f"Validation passes disagree: the {accepted_by} pass accepted "
                    f"this batch but the {rejected_by} pass rejected it. The JSON "
                    f"Schema and the model have drifted apart."
                ),
                path="/",
                validation_pass=PASS_AGREEMENT,
            ))

        passed = not errors
        logger.debug(
            "Structural validation: schema=%s model=%s errors=%d",
            schema_passed, model_passed, len(errors),
        )
        return StructuralResult(
            passed=passed,
            errors=errors,
            batch=batch if passed else None,
            schema_passed=schema_passed,
            model_passed=model_passed,
        )

    def check_schema(self, payload: Any) -> list[StructuralError]:
        """Pass 1: validate *payload* against the JSON Schema."""
        return [
            StructuralError(
                message=_humanize_schema_error(error),
                path=_pointer(error.absolute_path),
                validation_pass=PASS_SCHEMA,
            )
            for error in self._validator.iter_errors(payload)
        ]

    def check_model(self, payload: Any) -> tuple[list[StructuralError], Optional[Batch]]:
        """Pass 2: validate *payload* with the pydantic ``Batch`` model."""
        try:
            batch = Batch.model_validate(payload)
        except ValidationError as exc:
            errors = [
                StructuralError(
                    message=_humanize_pydantic_error(err),
                    path=_pointer(err.get("loc", ())),
                    validation_pass=PASS_MODEL,
                )
                for err in exc.errors()
            ]
            return errors, None
        return [], batch


# ------------------------------------------------------------------
# Error humanization
# ------------------------------------------------------------------

def _pointer(parts) -> str:
    """Render a location sequence as a JSON-pointer style path."""
    parts = [str(part) for part in parts if part != "__root__"]
    return "/" + "/".join(parts) if parts else "/"


def _humanize_schema_error(error: SchemaValidationError) -> str:
    """Convert a ``jsonschema`` error into plain English."""
    path = _pointer(error.absolute_path)
    msg = error.message
    keyword = error.validator

    if keyword == "required":
        return f"Missing required field at '{path}': {msg}"
    if keyword == "additionalProperties":
        return f"Unknown field at '{path}': {msg}"
    if keyword == "type":
        return f"Wrong data type at '{path}': {msg}"
    if keyword == "enum":
        return f"Invalid value at '{path}': {msg}"
    if keyword == "pattern":
        return f"Invalid format at '{path}': {msg}"
    if keyword in ("minLength", "maxLength", "minItems", "maxItems"):
        return f"Size out of bounds at '{path}': {msg}"
    if keyword == "not":
        pattern = error.validator_value.get("pattern", "?")
        return (
            f"Content at '{path}' must be plain text only - it matches the "
            f"markup pattern /{pattern}/"
        )
    if keyword == "uniqueItemProperties":
        return f"Duplicate term id at '{path}': {msg}"
    return f"Issue at '{path}': {msg}"


def _humanize_pydantic_error(err: dict) -> str:
    """Convert a single pydantic error dict to a human-friendly message.

    Pydantic error dicts look like::

        {
            "type": "string_pattern_mismatch",
            "loc": ("terms", 0, "id"),
            "msg": "String should match pattern '^[a-z0-9]+(-[a-z0-9]+)*$'",
            "input": "Flight_Level",
        }
    """
    loc = err.get("loc", ())
    msg = err.get("msg", "Validation error")
    err_type = err.get("type", "")
    field_path = _pointer(loc)

    if err_type == "missing":
        return f"The field '{field_path}' is required but was not provided."
    if err_type == "extra_forbidden":
        return f"The field '{field_path}' is not allowed here."
    if err_type in ("enum", "literal_error"):
        return f"The field '{field_path}' has an invalid value. {msg}."
    if err_type == "value_error":
        # pydantic prefixes messages raised from validators with "Value error, "
        detail = msg.split(", ", 1)[1] if msg.startswith("Value error, ") else msg
        return f"The field '{field_path}' is invalid: {detail}."
    if err_type.endswith("_type"):
        return f"The field '{field_path}' has the wrong type. {msg}."
    return f"Field '{field_path}': {msg}."
