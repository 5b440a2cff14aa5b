#!/usr/bin/env python3
"""
Base classes for format handlers.

FormatHandler is the abstract base class that all format-specific handlers
must implement. ParsedDocument is what every handler's parse() returns: the
live tree, its header metadata and the flat list of Records extracted from it.

Reconstruction is shared by all handlers: the tree is deep-copied, every
record's locator is resolved against the copy and the node text replaced,
then the copy is serialized. The loaded tree itself is never touched.
"""

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional
from xml.etree import ElementTree as ET

from ..errors import LocatorResolutionFailure, ParseError, UnknownInputFormat
from ..locator import locate
from ..records import Metadata, Record, output_text

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'


@dataclass
class ParsedDocument:
    """
    Result of parsing one source document.

    Attributes:
        root: Root element of the loaded tree (treat as read-only)
        metadata: Header values found in the document
        records: Extracted records, in document order
        namespaces: (prefix, uri) declarations seen while parsing
        format_name: Name of the handler that produced this document
    """
    root: ET.Element
    metadata: Metadata
    records: tuple[Record, ...]
    namespaces: tuple[tuple[str, str], ...] = ()
    format_name: str = ""

    def sections(self) -> list[str]:
        """Distinct record sections, in first-seen order."""
        return list(dict.fromkeys(r.section for r in self.records))


@dataclass
class ReconstructStats:
    """Counters from the last reconstruct() call."""
    patched: int = 0
    unchanged: int = 0
    skipped: list[str] = field(default_factory=list)


class _DocumentBuilder:
    """
    Parser target that keeps comments and processing instructions in the
    tree and records prefixed namespace declarations as they are seen.
    """

    def __init__(self):
        self.builder = ET.TreeBuilder(insert_comments=True, insert_pis=True)
        self.declared: dict[str, str] = {}

    def start_ns(self, prefix, uri):
        if prefix:
            self.declared.setdefault(prefix, uri)

    def start(self, tag, attrs):
        return self.builder.start(tag, attrs)

    def end(self, tag):
        return self.builder.end(tag)

    def data(self, data):
        self.builder.data(data)

    def comment(self, text):
        return self.builder.comment(text)

    def pi(self, target, text=None):
        return self.builder.pi(target, text)

    def close(self):
        return self.builder.close()


def parse_xml(content) -> tuple[ET.Element, tuple[tuple[str, str], ...]]:
    """
    Parse XML text and collect its prefixed namespace declarations.

    Comments and processing instructions inside the root element are kept
    as tree nodes so reserialization does not lose them.

    Args:
        content: XML as str, or bytes in UTF-8

    Returns:
        (root element, ((prefix, uri), ...))

    Raises:
        ParseError: on undecodable or malformed input
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Input is not valid UTF-8: {e}") from e
    content = content.lstrip("\ufeff")

    target = _DocumentBuilder()
    parser = ET.XMLParser(target=target)
    try:
        parser.feed(content)
        root = parser.close()
    except ET.ParseError as e:
        raise ParseError(f"Invalid XML: {e}") from e

    return root, tuple(target.declared.items())


def text_content(elem: ET.Element) -> str:
    """All text inside an element, inline children included."""
    return "".join(elem.itertext())


def replace_text(elem: ET.Element, text: str) -> bool:
    """
    Make ``text`` the element's only content.

    Leaves the element untouched when its text content already equals
    ``text``, so unedited nodes keep any inline markup.

    Returns:
        True if the element was modified
    """
    if text_content(elem) == text:
        return False
    for child in list(elem):
        elem.remove(child)
    elem.text = text
    return True


def serialize(root: ET.Element, namespaces: Iterable[tuple[str, str]] = ()) -> str:
    """
    Serialize a tree with the fixed XML declaration.

    Namespace declarations that ElementTree would drop because nothing in
    the tree uses them are written back as literal root attributes.
    """
    used = _used_namespace_uris(root)
    # Shallow stand-in for the root so added attributes stay off the input tree
    out = ET.Element(root.tag, dict(root.attrib))
    out.text, out.tail = root.text, root.tail
    out.extend(root)
    for prefix, uri in namespaces:
        if uri in used:
            ET.register_namespace(prefix, uri)
        elif f"xmlns:{prefix}" not in out.attrib:
            out.set(f"xmlns:{prefix}", uri)
    return XML_DECLARATION + ET.tostring(out, encoding="unicode")


def _used_namespace_uris(root: ET.Element) -> set[str]:
    used = set()
    for elem in root.iter():
        for name in (elem.tag, *elem.attrib):
            if isinstance(name, str) and name.startswith("{"):
                used.add(name[1:].split("}", 1)[0])
    return used


class FormatHandler(ABC):
    """
    Abstract base class for format-specific handlers.

    Each handler turns raw text into a ParsedDocument and knows how to write
    header metadata back into a tree of its format. Record text patching and
    serialization are common to all formats and live here.
    """

    def __init__(self):
        self.last_stats = ReconstructStats()

    @property
    @abstractmethod
    def name(self) -> str:
        """Short format name used by the registry."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        """List of file extensions this handler supports (without dot)."""
        pass

    @property
    def description(self) -> str:
        """Human-readable description for format listings."""
        return self.name

    @abstractmethod
    def parse(self, content) -> ParsedDocument:
        """
        Parse format-specific content.

        Args:
            content: Raw file content (str, or UTF-8 bytes)

        Returns:
            ParsedDocument with tree, metadata and records

        Raises:
            ParseError: if the content is not well-formed
        """
        pass

    @abstractmethod
    def apply_metadata(self, root: ET.Element, metadata: Metadata) -> None:
        """Write header metadata into ``root`` in place."""
        pass

    def sniff(self, root: ET.Element) -> bool:
        """Whether a parsed tree looks like this handler's format."""
        return False

    def reconstruct(
        self,
        document: ParsedDocument,
        records: Iterable[Record],
        metadata: Optional[Metadata] = None,
    ) -> str:
        """
        Rebuild the document with each record's current text.

        Records whose locator no longer resolves are skipped and logged;
        the rest of the batch is still applied.

        Args:
            document: Document the records were parsed from
            records: Records carrying the text to write
            metadata: Optional header values to upsert as well

        Returns:
            Serialized document
        """
        clone = copy.deepcopy(document.root)
        stats = ReconstructStats()
        children = {}

        for record in records:
            if record.locator is None:
                continue
            try:
                node = locate(clone, record.locator, children)
            except LocatorResolutionFailure as e:
                logger.warning("Skipping record %s: %s", record.id, e)
                stats.skipped.append(record.id)
                continue
            if replace_text(node, output_text(record)):
                children.pop(node, None)
                stats.patched += 1
            else:
                stats.unchanged += 1

        if metadata is not None:
            self.apply_metadata(clone, metadata)

        self.last_stats = stats
        return serialize(clone, document.namespaces)

    def update_metadata(self, document: ParsedDocument, metadata: Metadata) -> str:
        """Return the document with only its header metadata patched."""
        clone = copy.deepcopy(document.root)
        self.apply_metadata(clone, metadata)
        return serialize(clone, document.namespaces)

    def serialize(self, document: ParsedDocument) -> str:
        """Serialize the loaded tree as-is."""
        return serialize(document.root, document.namespaces)


class FormatRegistry:
    """Registry of available format handlers."""

    _handlers: dict[str, type[FormatHandler]] = {}
    _extension_map: dict[str, str] = {}  # extension -> handler name

    @classmethod
    def register(cls, handler_class: type[FormatHandler]) -> None:
        """Register a format handler class."""
        # Create instance to get properties
        handler = handler_class()
        cls._handlers[handler.name.lower()] = handler_class
        for ext in handler.file_extensions:
            cls._extension_map.setdefault(ext.lower(), handler.name.lower())

    @classmethod
    def get_handler(cls, name: str, **kwargs) -> FormatHandler:
        """Get handler instance by name."""
        name_lower = name.lower()
        if name_lower not in cls._handlers:
            available = ', '.join(cls._handlers.keys())
            raise UnknownInputFormat(f"Unknown format: {name}. Available: {available}")
        return cls._handlers[name_lower](**kwargs)

    @classmethod
    def get_handler_for_extension(cls, extension: str, **kwargs) -> FormatHandler:
        """Get handler instance by file extension."""
        ext = extension.lower().lstrip('.')
        if ext not in cls._extension_map:
            available = ', '.join(cls._extension_map.keys())
            raise UnknownInputFormat(f"Unknown extension: .{ext}. Supported: {available}")
        return cls.get_handler(cls._extension_map[ext], **kwargs)

    @classmethod
    def detect_format(cls, filepath: str, content=None, **kwargs) -> FormatHandler:
        """
        Auto-detect format from file path and optionally content.

        A known extension wins. Otherwise the content is parsed as XML and
        each handler is asked whether the tree looks like its format.

        Args:
            filepath: Path to the file (only the suffix is used)
            content: Optional file content for content-based detection

        Returns:
            Appropriate FormatHandler instance

        Raises:
            UnknownInputFormat: if neither extension nor content identify a format
        """
        ext = Path(filepath).suffix.lower().lstrip('.')
        if ext in cls._extension_map:
            return cls.get_handler_for_extension(ext, **kwargs)

        if content is None:
            raise UnknownInputFormat(f"Cannot detect format of {filepath}: unknown extension")

        try:
            root, _ = parse_xml(content)
        except ParseError as e:
            raise UnknownInputFormat(
                f"Cannot detect format of {filepath}: content is not XML"
            ) from e

        for handler_class in cls._handlers.values():
            handler = handler_class(**kwargs)
            if handler.sniff(root):
                return handler

        raise UnknownInputFormat(
            f"Cannot detect format of {filepath}: unrecognized root <{root.tag}>"
        )

    @classmethod
    def list_formats(cls) -> list[dict[str, Any]]:
        """List all registered formats with their extensions."""
        result = []
        for name, handler_class in cls._handlers.items():
            handler = handler_class()
            result.append({
                'name': handler.name,
                'extensions': handler.file_extensions,
                'description': handler.description,
            })
        return result
