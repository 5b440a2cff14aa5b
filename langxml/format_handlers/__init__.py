#!/usr/bin/env python3
"""
Format handlers for localization documents.

Supported formats:
- Language XML: Stationeers-style <Language> documents (full support)
- RESX: .NET name/value resources (records and metadata only)
"""

from .base import (
    FormatHandler,
    FormatRegistry,
    ParsedDocument,
    ReconstructStats,
    parse_xml,
    serialize,
    text_content,
)
from .language_xml import LanguageXmlHandler
from .resx import ResxHandler

# Register handlers (order matters for content sniffing)
FormatRegistry.register(LanguageXmlHandler)
FormatRegistry.register(ResxHandler)

__all__ = [
    'FormatHandler',
    'FormatRegistry',
    'ParsedDocument',
    'ReconstructStats',
    'LanguageXmlHandler',
    'ResxHandler',
    'parse_xml',
    'serialize',
    'text_content',
]
