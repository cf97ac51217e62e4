"""
glossary_engine/models/validators.py -- Plain-text (markup) detection.

Glossary content is rendered verbatim by downstream consumers, so any
Markdown that slips into a section shows up as literal asterisks and
brackets.  The patterns here are used twice:

    - by the ``Section`` model, where markup is a hard structural error
    - by the semantic sweep, which re-scans accepted batches

The JSON Schema in ``schemas/batch.schema.json`` carries its own copy of
these expressions as ``not``/``pattern`` constraints.  Keep the three in
step; the structural validator reports it when they disagree.

Usage::

    from glossary_engine.models.validators import find_markup

    find_markup("Use **bold** here")   # -> ["bold"]
"""

from __future__ import annotations

import re

# (name, human label, compiled pattern).  Order matters only for
# reporting: the first match is used in error messages.
MARKUP_PATTERNS: list[tuple[str, str, re.Pattern]] = [
    ("bold", "bold (**text**)", re.compile(r"\*\*.*?\*\*")),
    ("italic", "italic (*text*)", re.compile(r"\*.*?\*")),
    ("italic-underscore", "italic (_text_)", re.compile(r"_.*?_")),
    ("heading", "headers (#)", re.compile(r"#{1,6}\s")),
    ("link", "links ([text](url))", re.compile(r"\[.*?\]\(.*?\)")),
    ("image", "images (![alt](url))", re.compile(r"!\[.*?\]\(.*?\)")),
    ("code-block", "code blocks (```)", re.compile(r"```[\s\S]*?```")),
    ("inline-code", "inline code (`code`)", re.compile(r"`.*?`")),
]

MARKUP_LABELS = {name: label for name, label, _ in MARKUP_PATTERNS}


def find_markup(text: str) -> list[str]:
    """Return the names of every markup pattern found in *text*."""
    return [name for name, _, pattern in MARKUP_PATTERNS if pattern.search(text)]


def contains_markup(text: str) -> bool:
    """Return ``True`` if *text* contains any markup sequence."""
    return any(pattern.search(text) for _, _, pattern in MARKUP_PATTERNS)


def describe_markup(names: list[str]) -> str:
    """Join markup pattern names into a readable list of labels."""
    return ", ".join(MARKUP_LABELS.get(name, name) for name in names)
