#!/usr/bin/env python3
"""
Translation project state.

TranslationProject is the one object passed between pipeline stages: it
owns the loaded tree, the document metadata and the current record tuple.

Handles:
- Loading a source document (format detected from name or content)
- Applying edits and acceptances to single records
- Importing and exporting progress files
- Rebuilding the translated document and the multi-file export archive

Every mutation swaps in a new record tuple instead of editing the old one,
so anything holding a reference to ``records`` keeps a consistent snapshot.
The project assumes one writer at a time.
"""

import logging
from pathlib import Path
from typing import Optional

from . import progress
from .categorize import categorize, group_by_section, progress_stats, search
from .config import DEFAULT_CONFIG, LayoutConfig
from .exporter import archive_name, export_documents, language_slug, package_archive
from .format_handlers import FormatHandler, FormatRegistry, ParsedDocument
from .records import Metadata, Record, accept, update

logger = logging.getLogger(__name__)


class TranslationProject:
    """
    Holds one loaded document and the records being translated.

    Attributes:
        config: Layout configuration used for parsing and export
        handler: Format handler of the loaded document
        document: Parsed source (tree is never modified)
        records: Current records, replaced wholesale on every change
        metadata: Header values, possibly overridden by the user
        source_name: File name the document was loaded from
    """

    def __init__(self, config: LayoutConfig = DEFAULT_CONFIG):
        self.config = config
        self.handler: Optional[FormatHandler] = None
        self.document: Optional[ParsedDocument] = None
        self.records: tuple[Record, ...] = ()
        self.metadata = Metadata()
        self.source_name = ""

    @classmethod
    def from_files(
        cls,
        input_file: str,
        progress_file: Optional[str] = None,
        config: LayoutConfig = DEFAULT_CONFIG,
        format_type: Optional[str] = None,
    ) -> "TranslationProject":
        """
        Load a source document and, if it exists, its progress file.

        Args:
            input_file: Source document path
            progress_file: Optional progress JSON path (ignored if missing)
            config: Layout configuration
            format_type: Format name (auto-detected if not provided)
        """
        project = cls(config)
        input_path = Path(input_file)
        project.load_document(
            input_path.read_text(encoding="utf-8"),
            filename=input_path.name,
            format_type=format_type,
        )
        if progress_file and Path(progress_file).exists():
            project.load_progress(Path(progress_file).read_text(encoding="utf-8"))
        return project

    # Loading

    def load_document(self, content, filename: str = "", format_type: Optional[str] = None) -> int:
        """
        Parse a source document, replacing everything previously loaded.

        Nothing is replaced if parsing fails.

        Returns:
            Number of records extracted
        """
        if format_type:
            handler = FormatRegistry.get_handler(format_type, config=self.config)
        else:
            handler = FormatRegistry.detect_format(filename or "<text>", content, config=self.config)

        document = handler.parse(content)

        self.handler = handler
        self.document = document
        self.records = document.records
        self.metadata = document.metadata
        self.source_name = filename
        logger.debug("Loaded %s (%s): %d records", filename or "<text>", handler.name, len(self.records))
        return len(self.records)

    def load_progress(self, content: str) -> int:
        """
        Restore saved translations from progress JSON.

        Returns:
            Number of records restored
        """
        self._require_document()
        data = progress.loads(content)
        records, restored = progress.apply_progress(self.records, data)
        self.records = tuple(records)
        return restored

    def open_file(self, path: str) -> dict:
        """
        Load a file of either kind, sniffing progress JSON vs. source document.

        Returns:
            {"kind": "progress" | "document", "count": int}
        """
        file_path = Path(path)
        content = file_path.read_text(encoding="utf-8")
        if progress.looks_like_progress(content):
            return {"kind": "progress", "count": self.load_progress(content)}
        return {"kind": "document", "count": self.load_document(content, filename=file_path.name)}

    # Editing

    def get_record(self, ref: str) -> Record:
        """
        Find a record by id or by "<section>|<key>".

        Raises:
            KeyError: if nothing matches
        """
        for record in self.records:
            if record.id == ref or record.progress_key == ref:
                return record
        raise KeyError(f"No record with id or key {ref!r}")

    def update_record(self, ref: str, text: str) -> Record:
        """Set the draft text of one record."""
        return self._swap(update(self.get_record(ref), text))

    def accept_record(self, ref: str) -> Record:
        """Commit the draft of one record."""
        return self._swap(accept(self.get_record(ref)))

    def set_metadata(self, **overrides) -> Metadata:
        """Override header values (name, code, font); None values are ignored."""
        self.metadata = self.metadata.merged(**overrides)
        return self.metadata

    def _swap(self, new: Record) -> Record:
        self.records = tuple(new if r.id == new.id else r for r in self.records)
        return new

    # Views

    def sections(self) -> dict[str, list[Record]]:
        """Records grouped by intrinsic section."""
        return group_by_section(self.records)

    def categories(self, rules=None) -> dict[str, list[Record]]:
        """Records bucketed by key-pattern rules."""
        return categorize(self.records, rules if rules is not None else self.config.category_rules)

    def search(self, term: str) -> list[Record]:
        return search(self.records, term)

    def stats(self) -> dict:
        return progress_stats(self.records)

    # Output

    def progress_json(self) -> str:
        """Current committed text as progress JSON."""
        return progress.dumps(self.records, self.metadata)

    def save_progress(self, path: str) -> Path:
        out = Path(path)
        out.write_text(self.progress_json(), encoding="utf-8")
        logger.info("Wrote progress to %s", out)
        return out

    def translated_document(self, with_metadata: bool = True) -> str:
        """Source document with every record's current text applied."""
        self._require_document()
        return self.handler.reconstruct(
            self.document,
            self.records,
            self.metadata if with_metadata else None,
        )

    def metadata_document(self) -> str:
        """Source document with only the header metadata patched."""
        self._require_document()
        return self.handler.update_metadata(self.document, self.metadata)

    def export_documents(self) -> dict[str, str]:
        """The five-document export set, keyed by file name."""
        self._require_document()
        return export_documents(self.metadata, self.sections(), self.config)

    def export_archive(self) -> tuple[str, bytes]:
        """
        Build the export archive.

        Returns:
            (archive file name, ZIP bytes)
        """
        return archive_name(self.metadata), package_archive(self.export_documents())

    def translated_file_name(self) -> str:
        """Default output name: <stem>_translated<ext>, or <lang>.xml."""
        if self.source_name:
            path = Path(self.source_name)
            return f"{path.stem}_translated{path.suffix or '.xml'}"
        return f"{language_slug(self.metadata)}.xml"

    def progress_file_name(self) -> str:
        """Default progress name: <stem>_progress.json."""
        if self.source_name:
            return f"{Path(self.source_name).stem}_progress.json"
        return f"{language_slug(self.metadata)}-translation-progress.json"

    def get_status(self) -> dict:
        """Summary of the loaded project."""
        self._require_document()
        stats = self.stats()
        return {
            "status": "ok",
            "format": self.handler.name,
            "source": self.source_name,
            "metadata": self.metadata.to_dict(),
            "progress": stats,
            "sections": {name: len(items) for name, items in self.sections().items()},
            "summary": f"{stats['saved']}/{stats['total']} records saved ({stats['percent']}%).",
        }

    def _require_document(self) -> None:
        if self.document is None:
            raise ValueError("No document loaded")
