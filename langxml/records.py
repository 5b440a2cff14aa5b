#!/usr/bin/env python3
"""
Record model and state transitions.

A Record is one translatable text unit pulled out of a source document.
Records are immutable: update(), accept() and restore() return new records,
so a list of records can be swapped wholesale and readers never observe a
half-applied edit.

Status is derived from (original, draft, committed):

    saved      committed is set and draft == committed
    edited     draft is non-empty and differs from original
    unchanged  anything else
"""

from dataclasses import dataclass, replace
from typing import Optional

from .locator import Path

UNCHANGED = "unchanged"
EDITED = "edited"
SAVED = "saved"

STATUSES = (UNCHANGED, EDITED, SAVED)


@dataclass(frozen=True)
class Metadata:
    """Document-level header values (language display name, code, font)."""
    name: Optional[str] = None
    code: Optional[str] = None
    font: Optional[str] = None

    # Header element name for each field, in upsert order
    ELEMENTS = (("name", "Name"), ("code", "Code"), ("font", "Font"))

    def to_dict(self) -> dict:
        """Serialize with the keys used by progress files."""
        data = {"Language": self.name, "Code": self.code, "Font": self.font}
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Metadata":
        """Create from a progress-file metadata mapping."""
        data = data or {}
        return cls(
            name=data.get("Language"),
            code=data.get("Code"),
            font=data.get("Font"),
        )

    def merged(self, **overrides) -> "Metadata":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass(frozen=True)
class Record:
    """
    One editable text fragment.

    Attributes:
        id: Stable identifier within one parse ("<section>|<key>")
        key: Composite key (e.g. "Lamp_Value")
        original: Source text, never modified after parsing
        section: Intrinsic container the record came from (e.g. "Things")
        kind: Tag of the source record (e.g. "RecordThing", "String")
        field: Sub-field name inside the record, None if the node holds the text
        record_key: Base key shared by all fields of one source record
        locator: Path to the text node in the source tree
        draft: In-progress edit
        committed: Accepted value
    """
    id: str
    key: str
    original: str
    section: str
    kind: str
    field: Optional[str] = None
    record_key: Optional[str] = None
    locator: Optional[Path] = None
    draft: Optional[str] = None
    committed: Optional[str] = None

    @property
    def status(self) -> str:
        return compute_status(self.original, self.draft, self.committed)

    @property
    def progress_key(self) -> str:
        """Key used in progress files: "<section>|<key>"."""
        return f"{self.section}|{self.key}"


def compute_status(original: str, draft: Optional[str], committed: Optional[str]) -> str:
    """Derive the record status from its three text slots."""
    if committed is not None and draft == committed:
        return SAVED
    if draft and draft != original:
        return EDITED
    return UNCHANGED


def output_text(record: Record) -> str:
    """Text to emit for a record: committed, else draft, else original."""
    if record.committed is not None:
        return record.committed
    if record.draft is not None:
        return record.draft
    return record.original


def update(record: Record, text: str) -> Record:
    """Set the draft text."""
    return replace(record, draft=text)


def accept(record: Record) -> Record:
    """
    Commit the current draft.

    A record that was never edited commits an empty string.
    """
    return replace(record, committed=record.draft if record.draft is not None else "")


def restore(record: Record, text: str) -> Record:
    """Set draft and committed together (used when importing progress)."""
    return replace(record, draft=text, committed=text)
