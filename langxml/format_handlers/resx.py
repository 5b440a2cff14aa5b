#!/usr/bin/env python3
"""
.NET .resx resource format handler.

Reduced-capability path for flat name/value resources:

```xml
<root>
  <data name="Language" xml:space="preserve"><value>Português</value></data>
  <data name="Code"><value>PB</value></data>
  <data name="Greeting"><value>Hello</value><comment>Title screen</comment></data>
</root>
```

Reserved names (Language, Code, Font) become document metadata; every other
<data> element maps to one record keyed by its name. There are no sections
or sub-fields.
"""

from xml.etree import ElementTree as ET

from ..locator import compute_path, parent_map
from ..records import Metadata, Record
from .base import FormatHandler, ParsedDocument, parse_xml, replace_text, text_content


class ResxHandler(FormatHandler):
    """Handler for .resx resource files."""

    SECTION = "resx"
    RESERVED = {"Language": "name", "Code": "code", "Font": "font"}

    def __init__(self, config=None):
        # Layout config does not apply to resx; accepted for registry symmetry
        super().__init__()

    @property
    def name(self) -> str:
        return "resx"

    @property
    def file_extensions(self) -> list[str]:
        return ["resx"]

    @property
    def description(self) -> str:
        return ".NET resource file (name/value pairs)"

    def sniff(self, root: ET.Element) -> bool:
        return root.find(".//data") is not None

    def parse(self, content) -> ParsedDocument:
        """
        Parse .resx content into records.

        Args:
            content: Raw .resx file content

        Returns:
            ParsedDocument with one record per non-reserved <data> entry
        """
        root, namespaces = parse_xml(content)
        parents = parent_map(root)
        positions: dict = {}

        records = []
        metadata = {}
        for data_el in root.iter("data"):
            name = data_el.get("name", "")
            value_el = data_el.find("value")
            value = text_content(value_el) if value_el is not None else ""

            if name in self.RESERVED:
                metadata[self.RESERVED[name]] = value
                continue
            if not name or value_el is None:
                continue

            records.append(Record(
                id=f"{self.SECTION}|{name}",
                key=name,
                original=value,
                section=self.SECTION,
                kind=data_el.tag,
                field=None,
                record_key=name,
                locator=compute_path(root, value_el, parents, positions),
            ))

        return ParsedDocument(
            root=root,
            metadata=Metadata(**metadata),
            records=tuple(records),
            namespaces=namespaces,
            format_name=self.name,
        )

    def apply_metadata(self, root: ET.Element, metadata: Metadata) -> None:
        """Rewrite the value of reserved <data> entries that already exist."""
        for data_el in root.iter("data"):
            attr = self.RESERVED.get(data_el.get("name", ""))
            if attr is None:
                continue
            value = getattr(metadata, attr)
            value_el = data_el.find("value")
            if value and value_el is not None:
                replace_text(value_el, value)
