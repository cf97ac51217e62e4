"""
Shared helpers for the glossary engine.

JSON I/O, schema cleaning and timestamp handling used by the validator,
the corpus accessor and the manifest merger.

All JSON writes use atomic temp-file-then-os.replace() so that readers
never see a partially-written manifest.
"""

import json
import logging
import os
import re
import tempfile
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JSON I/O (atomic writes)
# ---------------------------------------------------------------------------

def read_json(path):
    """Read and parse a JSON file, letting I/O and decode errors propagate.

    Parameters
    ----------
    path : str or pathlib.Path
        Path to the JSON file.

    Raises
    ------
    FileNotFoundError, OSError, UnicodeDecodeError, json.JSONDecodeError
    """
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def safe_write_json(path, data, *, indent=2):
    """Atomically write *data* as pretty-printed JSON to *path*.

    The document ends with a trailing newline.  A temporary file in the
    same directory is written first and then moved over the target with
    ``os.replace()``.  Parent directories are created if they do not exist.

    Parameters
    ----------
    path : str or pathlib.Path
        Path to the target JSON file.
    data
        JSON-serialisable object to write.
    indent : int, optional
        JSON indentation level (default 2).
    """
    path = os.path.abspath(str(path))
    parent = os.path.dirname(path)
    os.makedirs(parent, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=indent, ensure_ascii=False)
            fh.write("\n")
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


# ---------------------------------------------------------------------------
# Schema cleaning (strips custom annotations for jsonschema validation)
# ---------------------------------------------------------------------------

_SCHEMA_SKIP_KEYS = {"$id", "$comment"}


def clean_schema_for_validation(schema):
    """Return a copy of *schema* without ``$id`` and ``x-`` annotations.

    The bundled schema documents cross-references and advisory limits
    with ``x-`` keywords.  They carry no validation meaning, so they are
    removed recursively before the schema is compiled.

    Parameters
    ----------
    schema : dict
        The raw JSON Schema.

    Returns
    -------
    dict
        A cleaned copy safe to hand to a ``jsonschema`` validator.
    """
    clean = {}
    for key, value in schema.items():
        if key in _SCHEMA_SKIP_KEYS or key.startswith("x-"):
            continue
        clean[key] = _clean_value(value)
    return clean


def _clean_value(value):
    if isinstance(value, dict):
        return clean_schema_for_validation(value)
    if isinstance(value, list):
        return [_clean_value(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

_DATE_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format *moment* as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    millis = moment.microsecond // 1000
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 UTC timestamp such as ``2025-01-01T00:00:00Z``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def date_from_name(name: str) -> datetime | None:
    """Return midnight UTC of the ``YYYY-MM-DD`` prefix of *name*, if any.

    Batch files follow a ``2025-10-30-batch-001`` naming convention.
    Returns ``None`` when *name* has no valid date prefix.
    """
    match = _DATE_PREFIX_RE.match(name)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None
