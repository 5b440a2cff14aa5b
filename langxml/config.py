#!/usr/bin/env python3
"""
Layout configuration for language XML documents.

Holds the schema table the parser walks, the fixed section order of the main
export document, and the key-pattern rules used for category filtering.
Defaults describe the Stationeers language files; a YAML file can override
any part of them:

```yaml
schema:
  - {section: Things, record: RecordThing, fields: [Value, Description]}
main_order: [Reagents, Things, GameTip]
categories:
  - {name: tips, patterns: ["^GameTip"]}
  - {name: other, patterns: [".*"]}
```
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError


@dataclass(frozen=True)
class RecordSchema:
    """One row of the schema table: which fields of which record tag to extract."""
    section: str
    record_tag: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class CategoryRule:
    """Named bucket with the key patterns that select it."""
    name: str
    patterns: tuple[re.Pattern, ...]

    def matches(self, key: str) -> bool:
        return any(p.search(key) for p in self.patterns)


def rule(name: str, *patterns: str) -> CategoryRule:
    """Build a CategoryRule from raw regex strings."""
    return CategoryRule(name, tuple(re.compile(p) for p in patterns))


# Matches every key; keep it last so nothing is silently dropped.
CATCH_ALL = rule("other", r".*")

_VALUE_ONLY_SECTIONS = [
    "ScreenSpaceToolTips",
    "Keys",
    "Gases",
    "Actions",
    "Slots",
    "Interactables",
    "Interface",
    "Colors",
    "Mineables",
    "GameStrings",
]

DEFAULT_SCHEMA = (
    RecordSchema("Reagents", "RecordReagent", ("Value", "Unit")),
    RecordSchema("Reagents", "Record", ("Value",)),
    RecordSchema("Things", "RecordThing", ("Value", "Description")),
    RecordSchema("Things", "Record", ("Value", "Description")),
) + tuple(RecordSchema(s, "Record", ("Value",)) for s in _VALUE_ONLY_SECTIONS)

# Compatibility contract: the game reads main-file sections in this order.
DEFAULT_MAIN_ORDER = (
    "Reagents",
    "Gases",
    "Actions",
    "Things",
    "Slots",
    "Interactables",
    "Interface",
    "Colors",
    "Keys",
    "Mineables",
    "ScreenSpaceToolTips",
    "HelpPage",
    "ThingPageOverride",
    "HomePageButtonsOverride",
    "GameStrings",
    "GameTip",
)

DEFAULT_CATEGORY_RULES = (
    rule("tooltips", r"^ScreenSpaceToolTip", r"^StatusIcon"),
    rule("tips", r"^GameTip"),
    rule("help", r"^Help_", r"^Stationpedia"),
    rule("reagents", r"^Reagent_"),
    rule("things", r"^Thing_", r"^Appliance", r"^Item", r"^Structure"),
    rule("ui", r"^UI_|^Ui_", r"^Window_", r"^Inventory"),
    CATCH_ALL,
)


@dataclass(frozen=True)
class LayoutConfig:
    """Everything the parser and exporter need to know about the schema."""
    schema: tuple[RecordSchema, ...] = DEFAULT_SCHEMA
    main_order: tuple[str, ...] = DEFAULT_MAIN_ORDER
    category_rules: tuple[CategoryRule, ...] = DEFAULT_CATEGORY_RULES
    tip_sections: tuple[str, ...] = ("GameTip", "GameTips")
    tip_tag: str = "String"
    help_section: str = "HelpPage"
    page_tag: str = "StationpediaPage"
    page_fields: tuple[str, ...] = ("Title", "Text")
    key_tag: str = "Key"
    root_tag: str = "Language"
    namespaces: tuple[tuple[str, str], ...] = (
        ("xsi", "http://www.w3.org/2001/XMLSchema-instance"),
        ("xsd", "http://www.w3.org/2001/XMLSchema"),
    )

    @property
    def tip_section(self) -> str:
        """Canonical name for the plain-string section."""
        return self.tip_sections[0]

    def schema_sections(self) -> list[str]:
        """Section tags in schema-table order, deduplicated."""
        return list(dict.fromkeys(s.section for s in self.schema))

    def fields_for(self, section: str, record_tag: str) -> Optional[tuple[str, ...]]:
        """Translatable fields declared for a record tag in a section."""
        for entry in self.schema:
            if entry.section == section and entry.record_tag == record_tag:
                return entry.fields
        return None


DEFAULT_CONFIG = LayoutConfig()


def load_config(path: Optional[str] = None) -> LayoutConfig:
    """
    Load a layout override file.

    Args:
        path: YAML file path; None returns the defaults

    Returns:
        LayoutConfig with overridden parts replaced
    """
    if path is None:
        return DEFAULT_CONFIG

    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")

    overrides: dict[str, Any] = {}
    if "schema" in data:
        overrides["schema"] = _parse_schema(data["schema"])
    if "main_order" in data:
        overrides["main_order"] = tuple(_string_list(data["main_order"], "main_order"))
    if "categories" in data:
        overrides["category_rules"] = _parse_categories(data["categories"])
    return LayoutConfig(**overrides)


def _string_list(value: Any, where: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{where}' must be a list of strings")
    return value


def _parse_schema(rows: Any) -> tuple[RecordSchema, ...]:
    if not isinstance(rows, list):
        raise ConfigError("'schema' must be a list")
    schema = []
    for i, row in enumerate(rows):
        if not isinstance(row, dict) or "section" not in row or "record" not in row:
            raise ConfigError(f"schema[{i}] needs 'section' and 'record'")
        fields = _string_list(row.get("fields", ["Value"]), f"schema[{i}].fields")
        schema.append(RecordSchema(str(row["section"]), str(row["record"]), tuple(fields)))
    return tuple(schema)


def _parse_categories(rows: Any) -> tuple[CategoryRule, ...]:
    if not isinstance(rows, list):
        raise ConfigError("'categories' must be a list")
    rules = []
    for i, row in enumerate(rows):
        if not isinstance(row, dict) or "name" not in row:
            raise ConfigError(f"categories[{i}] needs a 'name'")
        patterns = _string_list(row.get("patterns", []), f"categories[{i}].patterns")
        try:
            rules.append(rule(str(row["name"]), *patterns))
        except re.error as e:
            raise ConfigError(f"categories[{i}]: bad pattern: {e}") from e
    return tuple(rules)
