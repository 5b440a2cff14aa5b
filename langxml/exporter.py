#!/usr/bin/env python3
"""
Multi-file export of language documents.

Builds the five documents the game loads for one language from records
grouped by intrinsic section, then packs them into one ZIP archive:

    <lang>.xml           every section, in the fixed main order
    <lang>_help.xml      HelpPage, one StationpediaPage per record key
    <lang>_keys.xml      Keys, key/value records
    <lang>_tips.xml      GameTip, plain <String> list
    <lang>_tooltips.xml  ScreenSpaceToolTips, key/value records

All documents go through build_section_document(); the per-file
differences are the DocumentSpec rows in EXPORT_DOCUMENTS.
"""

import io
import logging
import zipfile
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence
from xml.etree import ElementTree as ET

from .config import DEFAULT_CONFIG, LayoutConfig
from .format_handlers.base import XML_DECLARATION
from .records import Metadata, Record, output_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentSpec:
    """
    Shape of one exported document.

    Attributes:
        name: Logical document name ("main", "help", ...)
        suffix: File name suffix after the language slug
        header: Metadata attributes written as header elements
        sections: Sections to include; None means the configured main order
        fixed_pages: Help pages always present at the top of the help section
    """
    name: str
    suffix: str
    header: tuple[str, ...]
    sections: Optional[tuple[str, ...]] = None
    fixed_pages: tuple[str, ...] = ()


EXPORT_DOCUMENTS = (
    DocumentSpec("main", "", ("name", "code", "font")),
    DocumentSpec("help", "_help", ("code",), ("HelpPage",), fixed_pages=("Home", "Search")),
    DocumentSpec("keys", "_keys", ("code",), ("Keys",)),
    DocumentSpec("tips", "_tips", ("code",), ("GameTip",)),
    DocumentSpec("tooltips", "_tooltips", ("name", "code", "font"), ("ScreenSpaceToolTips",)),
)


def build_record_node(
    tag: str,
    key: str,
    fields: Iterable[tuple[str, str]],
    key_tag: str = "Key",
) -> ET.Element:
    """
    Build one keyed record element: <tag><Key>key</Key><Field>text</Field>...</tag>.

    Every keyed record in every exported document is built here.
    """
    record = ET.Element(tag)
    ET.SubElement(record, key_tag).text = key
    for field_name, text in fields:
        ET.SubElement(record, field_name).text = text
    return record


def merge_records(records: Iterable[Record]) -> list[tuple[str, str, list[tuple[str, str]]]]:
    """
    Fold per-field records back into source records.

    Records sharing a record_key become one entry; order is first
    appearance. Records without a field are treated as a Value field.

    Returns:
        List of (kind, key, [(field, text), ...])
    """
    merged: dict[str, tuple[str, str, list[tuple[str, str]]]] = {}
    for record in records:
        key = record.record_key or record.key
        if key not in merged:
            merged[key] = (record.kind, key, [])
        merged[key][2].append((record.field or "Value", output_text(record)))
    return list(merged.values())


def build_keyed_section(
    section: str,
    records: Sequence[Record],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> ET.Element:
    """Section of keyed records (Record, RecordThing, RecordReagent, ...)."""
    wrapper = ET.Element(section)
    for kind, key, fields in merge_records(records):
        wrapper.append(build_record_node(kind, key, fields, config.key_tag))
    return wrapper


def build_help_section(
    section: str,
    records: Sequence[Record],
    config: LayoutConfig = DEFAULT_CONFIG,
    fixed_pages: Sequence[str] = (),
) -> ET.Element:
    """
    Help section: one page per record key, with Title and Text sub-fields.

    A missing title falls back to the key, a missing text to a single space.
    """
    title_field, text_field = config.page_fields
    pages = merge_records(records)
    existing = {key for _, key, _ in pages}

    wrapper = ET.Element(section)
    for key in fixed_pages:
        if key not in existing:
            wrapper.append(build_record_node(
                config.page_tag, key, [(title_field, key), (text_field, " ")], config.key_tag
            ))
    for _, key, fields in pages:
        values = dict(fields)
        wrapper.append(build_record_node(
            config.page_tag,
            key,
            [
                (title_field, values.get(title_field) or key),
                (text_field, values.get(text_field) or " "),
            ],
            config.key_tag,
        ))
    return wrapper


def build_tips_section(
    section: str,
    records: Sequence[Record],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> ET.Element:
    """Plain string list; keys are dropped and input order kept."""
    wrapper = ET.Element(section)
    for record in records:
        ET.SubElement(wrapper, config.tip_tag).text = output_text(record)
    return wrapper


def build_section(
    section: str,
    records: Sequence[Record],
    config: LayoutConfig = DEFAULT_CONFIG,
    fixed_pages: Sequence[str] = (),
) -> ET.Element:
    """Build a section with the shape its name calls for."""
    if section == config.help_section:
        return build_help_section(section, records, config, fixed_pages)
    if section in config.tip_sections:
        return build_tips_section(section, records, config)
    return build_keyed_section(section, records, config)


def build_section_document(
    metadata: Metadata,
    header: Sequence[str],
    sections: Iterable[ET.Element],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> str:
    """
    Assemble a full <Language> document.

    Args:
        metadata: Header values
        header: Metadata attributes to emit, in order ("name", "code", "font")
        sections: Section elements, appended in the given order
        config: Layout (root tag, namespace declarations)

    Returns:
        Serialized XML with the fixed declaration
    """
    root = ET.Element(config.root_tag)
    for prefix, uri in config.namespaces:
        root.set(f"xmlns:{prefix}", uri)

    tags = dict(Metadata.ELEMENTS)
    for attr in header:
        value = getattr(metadata, attr)
        if value:
            ET.SubElement(root, tags[attr]).text = value

    root.extend(sections)
    ET.indent(root, space="  ")
    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def language_slug(metadata: Metadata) -> str:
    """File name stem derived from the language display name."""
    return (metadata.name or "language").strip().lower().replace(" ", "-")


def archive_name(metadata: Metadata) -> str:
    """Deterministic archive name: <lang>_<code or 'all'>.zip."""
    return f"{language_slug(metadata)}_{metadata.code or 'all'}.zip"


def export_documents(
    metadata: Metadata,
    buckets: Mapping[str, Sequence[Record]],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> dict[str, str]:
    """
    Build every document in EXPORT_DOCUMENTS.

    Args:
        metadata: Header values
        buckets: Records grouped by intrinsic section (see group_by_section)
        config: Layout configuration

    Returns:
        Ordered mapping of file name -> XML text
    """
    slug = language_slug(metadata)
    documents = {}
    for doc in EXPORT_DOCUMENTS:
        section_names = doc.sections if doc.sections is not None else config.main_order
        sections = [
            build_section(name, buckets.get(name, []), config, doc.fixed_pages)
            for name in section_names
        ]
        documents[f"{slug}{doc.suffix}.xml"] = build_section_document(
            metadata, doc.header, sections, config
        )

    unexported = set(buckets) - set(config.main_order)
    if unexported:
        logger.warning("Sections not in main order, left out of export: %s", sorted(unexported))
    return documents


def package_archive(documents: Mapping[str, str]) -> bytes:
    """Pack documents into an in-memory ZIP archive, in mapping order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for filename, content in documents.items():
            zf.writestr(filename, content.encode("utf-8"))
    return buffer.getvalue()
