#!/usr/bin/env python3
"""
Language XML format handler.

Handles Stationeers-style language files:

```xml
<?xml version="1.0" encoding="utf-8"?>
<Language xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
          xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <Name>English</Name>
  <Code>EN</Code>
  <Font>font_english</Font>
  <Things>
    <RecordThing>
      <Key>Lamp</Key>
      <Value>Lamp</Value>
      <Description>A light source.</Description>
    </RecordThing>
  </Things>
  <GameTip>
    <String>Remember to breathe.</String>
  </GameTip>
  <HelpPage>
    <StationpediaPage>
      <Key>Atmospherics</Key>
      <Title>Atmospherics</Title>
      <Text>Gas behaves...</Text>
    </StationpediaPage>
  </HelpPage>
</Language>
```

Keyed sections are read through the schema table in LayoutConfig. GameTip
(a flat list of unkeyed strings) and HelpPage (pages with Title and Text
sharing one Key) are handled separately.
"""

import logging
from collections import Counter
from typing import Optional
from xml.etree import ElementTree as ET

from ..config import DEFAULT_CONFIG, LayoutConfig
from ..locator import compute_path, parent_map
from ..records import Metadata, Record
from .base import FormatHandler, ParsedDocument, parse_xml, replace_text, text_content

logger = logging.getLogger(__name__)


class LanguageXmlHandler(FormatHandler):
    """Handler for <Language> localization documents."""

    def __init__(self, config: LayoutConfig = DEFAULT_CONFIG):
        super().__init__()
        self.config = config

    @property
    def name(self) -> str:
        return "language"

    @property
    def file_extensions(self) -> list[str]:
        return ["xml"]

    @property
    def description(self) -> str:
        return "Stationeers language XML (<Language> root)"

    def sniff(self, root: ET.Element) -> bool:
        return root.tag == self.config.root_tag

    def parse(self, content) -> ParsedDocument:
        """
        Parse language XML into records.

        Args:
            content: Raw XML file content

        Returns:
            ParsedDocument; records ordered by schema section, then document
            order, then tips, then help pages
        """
        root, namespaces = parse_xml(content)
        builder = _RecordBuilder(root)

        for section in self.config.schema_sections():
            section_el = root.find(section)
            if section_el is None:
                continue
            self._parse_keyed_section(builder, section, section_el)

        tips_el = self._find_tip_section(root)
        if tips_el is not None:
            self._parse_tips(builder, tips_el)

        help_el = root.find(self.config.help_section)
        if help_el is not None:
            self._parse_help_pages(builder, help_el)

        records = tuple(builder.records)
        logger.debug(
            "Parsed %d records: %s",
            len(records),
            dict(Counter(r.section for r in records)),
        )
        return ParsedDocument(
            root=root,
            metadata=self._read_metadata(root),
            records=records,
            namespaces=namespaces,
            format_name=self.name,
        )

    def _read_metadata(self, root: ET.Element) -> Metadata:
        values = {}
        for attr, tag in Metadata.ELEMENTS:
            elem = root.find(tag)
            if elem is not None:
                values[attr] = text_content(elem)
        return Metadata(**values)

    def _parse_keyed_section(self, builder, section: str, section_el: ET.Element) -> None:
        key_tag = self.config.key_tag
        for record_el in section_el:
            fields = self.config.fields_for(section, record_el.tag)
            if fields is None:
                continue
            base_key = _child_text(record_el, key_tag).strip()
            if not base_key:
                continue
            for field_name in fields:
                field_el = record_el.find(field_name)
                if field_el is None:
                    continue
                builder.add(
                    node=field_el,
                    key=f"{base_key}_{field_name}",
                    record_key=base_key,
                    section=section,
                    kind=record_el.tag,
                    field=field_name,
                )

    def _find_tip_section(self, root: ET.Element) -> Optional[ET.Element]:
        for tag in self.config.tip_sections:
            elem = root.find(tag)
            if elem is not None:
                return elem
        return None

    def _parse_tips(self, builder, tips_el: ET.Element) -> None:
        section = self.config.tip_section
        for i, string_el in enumerate(tips_el.iter(self.config.tip_tag), start=1):
            builder.add(
                node=string_el,
                key=f"{section}_{i}",
                record_key=None,
                section=section,
                kind=string_el.tag,
                field=None,
            )

    def _parse_help_pages(self, builder, help_el: ET.Element) -> None:
        section = self.config.help_section
        for i, page_el in enumerate(help_el.iter(self.config.page_tag), start=1):
            base_key = _child_text(page_el, self.config.key_tag).strip() or f"Help_{i}"
            for field_name in self.config.page_fields:
                field_el = page_el.find(field_name)
                if field_el is None:
                    continue
                builder.add(
                    node=field_el,
                    key=f"{base_key}_{field_name}",
                    record_key=base_key,
                    section=section,
                    kind=page_el.tag,
                    field=field_name,
                )

    def apply_metadata(self, root: ET.Element, metadata: Metadata) -> None:
        """
        Upsert Name/Code/Font header elements.

        Existing elements get their text replaced where they are. A missing
        one is created in front of the first child that is not an earlier
        header element, so it always lands before the root's other children
        and Name, Code, Font keep their relative order. Fields absent from
        ``metadata`` are never removed.
        """
        header_tags = [tag for _, tag in Metadata.ELEMENTS]
        for rank, (attr, tag) in enumerate(Metadata.ELEMENTS):
            value = getattr(metadata, attr)
            if not value:
                continue
            elem = root.find(tag)
            if elem is not None:
                replace_text(elem, value)
                continue
            earlier = header_tags[:rank]
            insert_at = next(
                (i for i, child in enumerate(root) if child.tag not in earlier),
                len(root),
            )
            elem = ET.Element(tag)
            elem.text = value
            # Match the indentation of the surrounding children
            elem.tail = root.text if root.text and not root.text.strip() else None
            if insert_at == len(root) and insert_at:
                # New last child takes over the closing-tag whitespace
                elem.tail, root[-1].tail = root[-1].tail, elem.tail
            root.insert(insert_at, elem)


class _RecordBuilder:
    """Accumulates records for one parse, assigning ids and locators."""

    def __init__(self, root: ET.Element):
        self.root = root
        self.parents = parent_map(root)
        self.positions: dict = {}
        self.records: list[Record] = []
        self._seen: Counter = Counter()

    def add(self, node, key, record_key, section, kind, field) -> None:
        base_id = f"{section}|{key}"
        self._seen[base_id] += 1
        count = self._seen[base_id]
        self.records.append(Record(
            id=base_id if count == 1 else f"{base_id}#{count}",
            key=key,
            original=text_content(node),
            section=section,
            kind=kind,
            field=field,
            record_key=record_key,
            locator=compute_path(self.root, node, self.parents, self.positions),
        ))


def _child_text(elem: ET.Element, tag: str) -> str:
    child = elem.find(tag)
    return text_content(child) if child is not None else ""
