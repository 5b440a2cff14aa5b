#!/usr/bin/env python3
"""
Exception types raised by langxml.

Every error carries a human-readable message; the underlying cause, when
there is one, is chained with ``raise ... from err`` so callers can inspect
``__cause__``. Nothing here is retried automatically.
"""


class LangXmlError(Exception):
    """Base class for all langxml errors."""


class ParseError(LangXmlError, ValueError):
    """Input text is not a well-formed document of the expected family."""


class LocatorResolutionFailure(LangXmlError, LookupError):
    """A record's locator no longer points at a node in the tree."""

    def __init__(self, path, message: str = None):
        self.path = path
        super().__init__(message or f"Locator did not resolve: {path}")


class UnknownInputFormat(LangXmlError, ValueError):
    """Content could not be matched to any registered format."""


class ProgressFormatError(LangXmlError, ValueError):
    """Progress JSON is malformed or missing its translations mapping."""


class ConfigError(LangXmlError, ValueError):
    """Layout configuration file has the wrong shape."""
