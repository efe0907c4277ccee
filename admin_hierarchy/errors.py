"""
Exceptions raised by the merge pipeline.

Read and parse failures are recoverable for per-province and per-city
documents; the builder downgrades them to an empty child set. The same
failures on the root document or on the reloaded output end the run.
"""


class HierarchyError(Exception):
    """Base class for merge pipeline errors."""


class DocumentReadError(HierarchyError):
    """A document is missing or cannot be read."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class DocumentParseError(HierarchyError):
    """A document is not well-formed JSON or lacks the expected structure."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot parse {path}: {reason}")


class MalformedCodeError(HierarchyError, ValueError):
    """An administrative code is shorter than the requested prefix."""

    def __init__(self, code, length: int):
        self.code = code
        self.length = length
        super().__init__(f"Code {code!r} is too short for a {length}-character prefix")


class ConfigError(HierarchyError):
    """Invalid merge configuration."""
