"""
glossary_engine/errors.py -- Exceptions raised by the engine.

These are raised, not reported.  Validation findings (structural errors,
dangling references, advisories) are report records and live in
``glossary_engine.issues`` instead.
"""


class GlossaryEngineError(Exception):
    """Base class for every exception the engine raises."""


class BatchLoadError(GlossaryEngineError):
    """A batch file is missing, unreadable, or not valid JSON."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to load batch file '{self.path}': {reason}")


class ManifestError(GlossaryEngineError):
    """The manifest could not be read, validated, or updated."""


class ConfigError(GlossaryEngineError):
    """An engine configuration value is invalid."""
