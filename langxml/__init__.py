"""
langxml - round-trip translation toolkit for language XML files

Extracts every translatable string from a Stationeers-style language file
into flat records, lets each one be edited and accepted independently, and
writes the result back either as the original document with only text
replaced, or as the five-file export set (main/help/keys/tips/tooltips).

Quick start:
    langxml init --input english.xml
    langxml set --input english.xml --progress english_progress.json \
        --key 'Things|Lamp_Value' --text 'Lâmpada'
    langxml export --input english.xml --progress english_progress.json
"""

__version__ = "1.0.0"

from .errors import (
    ConfigError,
    LangXmlError,
    LocatorResolutionFailure,
    ParseError,
    ProgressFormatError,
    UnknownInputFormat,
)
from .records import Metadata, Record, accept, output_text, update
from .session import TranslationProject

__all__ = [
    "ConfigError",
    "LangXmlError",
    "LocatorResolutionFailure",
    "ParseError",
    "ProgressFormatError",
    "UnknownInputFormat",
    "Metadata",
    "Record",
    "accept",
    "output_text",
    "update",
    "TranslationProject",
]
