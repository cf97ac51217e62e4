"""
glossary_engine/batch_file.py -- Reading batch artifacts from disk.

Batch files are named by convention ``<YYYY-MM-DD>-batch-<NNN>.json``;
the file name without its ``.json`` suffix doubles as the batch id in
the manifest.
"""

import json
import logging
from pathlib import Path

from glossary_engine.errors import BatchLoadError
from glossary_engine.utils import read_json

logger = logging.getLogger(__name__)


def batch_id_from_path(path) -> str:
    """Return the batch id for a batch file: its name without ``.json``.

    Only a ``.json`` suffix is removed; ``notes.txt`` stays ``notes.txt``.
    """
    name = Path(path).name
    if name.endswith(".json"):
        return name[: -len(".json")]
    return name


def load_batch_file(path):
    """Read and decode a batch file.

    Returns the raw decoded payload; shape checks are the structural
    validator's job.

    Raises
    ------
    BatchLoadError
        If the file is missing, unreadable, or not valid JSON.
    """
    path = Path(path)
    if not path.is_file():
        raise BatchLoadError(path, "file not found")
    try:
        payload = read_json(path)
    except json.JSONDecodeError as exc:
        raise BatchLoadError(path, f"invalid JSON ({exc})") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise BatchLoadError(path, str(exc)) from exc
    logger.debug("Loaded batch file %s", path)
    return payload
