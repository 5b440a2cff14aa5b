#!/usr/bin/env python3
"""
langxml - Language XML Translation CLI

Extracts translatable text from Stationeers-style language files, tracks
edits in a progress file, and writes the translated document or the full
multi-file export archive.

Commands:
    init     - Parse a source file and report what it contains
    status   - Show translation progress
    list     - List records (filter by section, category, status or text)
    set      - Translate one record and save it to the progress file
    merge    - Write the source document with translations applied
    export   - Write the five-document ZIP archive
    formats  - List supported formats

Example Workflow:
    1. langxml init --input english.xml
       → Returns: record counts per section

    2. langxml set --input english.xml --progress english_progress.json \\
           --key 'Things|Lamp_Value' --text 'Lâmpada'
       → Returns: updated record + progress stats

    3. langxml export --input english.xml --progress english_progress.json \\
           --name 'Português' --code PB
       → Returns: archive path + file list
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import load_config
from .format_handlers import FormatRegistry
from .records import STATUSES, Record
from .session import TranslationProject

logger = logging.getLogger(__name__)


def _record_dict(record: Record) -> dict:
    return {
        "id": record.id,
        "key": record.key,
        "section": record.section,
        "field": record.field,
        "status": record.status,
        "original": record.original,
        "committed": record.committed,
    }


def _load_project(args) -> TranslationProject:
    return TranslationProject.from_files(
        args.input,
        progress_file=getattr(args, "progress", None),
        config=load_config(args.config),
        format_type=args.format if args.format != "auto" else None,
    )


def _metadata_overrides(args) -> dict:
    return {"name": args.name, "code": args.code, "font": args.font}


def cmd_init(args) -> dict:
    """Parse a source file and report its contents."""
    project = _load_project(args)
    status = project.get_status()
    progress_file = args.progress or str(Path(args.input).parent / project.progress_file_name())
    status["progress_file"] = progress_file
    status["next_action"] = {
        "command": f"langxml list --input {args.input} --progress {progress_file}",
        "description": "List records to translate",
    }
    return status


def cmd_status(args) -> dict:
    """Get translation progress."""
    return _load_project(args).get_status()


def cmd_list(args) -> dict:
    """List records, optionally filtered."""
    project = _load_project(args)

    if args.section:
        records = project.sections().get(args.section, [])
    elif args.category:
        categories = project.categories()
        if args.category not in categories:
            available = ", ".join(categories)
            raise ValueError(f"Unknown category: {args.category}. Available: {available}")
        records = categories[args.category]
    else:
        records = list(project.records)

    if args.search:
        selected = {r.id for r in records}
        records = [r for r in project.search(args.search) if r.id in selected]
    if args.status:
        records = [r for r in records if r.status == args.status]

    return {
        "status": "ok",
        "count": len(records),
        "records": [_record_dict(r) for r in records],
    }


def cmd_set(args) -> dict:
    """Translate one record, accept it, and rewrite the progress file."""
    project = _load_project(args)
    project.update_record(args.key, args.text)
    record = project.accept_record(args.key)
    project.save_progress(args.progress)
    stats = project.stats()
    return {
        "status": "ok",
        "record": _record_dict(record),
        "progress": stats,
        "progress_file": args.progress,
        "summary": f"Saved {record.progress_key}. {stats['saved']}/{stats['total']} records saved.",
    }


def cmd_merge(args) -> dict:
    """Write the translated source document."""
    project = _load_project(args)
    project.set_metadata(**_metadata_overrides(args))

    if args.metadata_only:
        content = project.metadata_document()
    else:
        content = project.translated_document()

    output = Path(args.output) if args.output else Path(args.input).parent / project.translated_file_name()
    output.write_text(content, encoding="utf-8")
    logger.info("Wrote %s", output)

    skipped = project.handler.last_stats.skipped
    return {
        "status": "ok",
        "output_file": str(output),
        "stats": {
            "total_records": len(project.records),
            "patched": project.handler.last_stats.patched,
            "skipped": len(skipped),
        },
        "summary": f"Translated document written to {output.name}",
    }


def cmd_export(args) -> dict:
    """Write the multi-file export archive."""
    project = _load_project(args)
    project.set_metadata(**_metadata_overrides(args))

    documents = project.export_documents()
    name, data = project.export_archive()

    output_dir = Path(args.output_dir) if args.output_dir else Path(args.input).parent
    output_dir.mkdir(parents=True, exist_ok=True)
    output = output_dir / name
    output.write_bytes(data)
    logger.info("Wrote %s", output)

    return {
        "status": "ok",
        "output_file": str(output),
        "files": list(documents),
        "summary": f"Export archive written to {output.name} ({len(documents)} files)",
    }


def cmd_formats(args) -> dict:
    """List supported formats."""
    formats = FormatRegistry.list_formats()
    return {
        "status": "ok",
        "formats": formats,
        "summary": f"{len(formats)} formats supported: {', '.join(f['name'] for f in formats)}",
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="langxml",
        description="langxml - Language XML Translation CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Inspect a source file
  langxml init --input english.xml

  # Translate one record (QUOTE the key, it contains '|')
  langxml set -i english.xml -p english_progress.json -k 'Things|Lamp_Value' -t 'Lâmpada'

  # List unfinished tooltips
  langxml list -i english.xml -p english_progress.json --category tooltips --status unchanged

  # Write translated english.xml with a new header
  langxml merge -i english.xml -p english_progress.json --name 'Português' --code PB

  # Write the five-file archive
  langxml export -i english.xml -p english_progress.json --output-dir dist
        """,
    )
    parser.add_argument("--config", help="YAML layout override file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_input(sub, progress_required=False):
        sub.add_argument("--input", "-i", required=True, help="Source document")
        sub.add_argument("--progress", "-p", required=progress_required, help="Progress JSON file")
        sub.add_argument("--format", "-f", default="auto",
                         choices=["auto", "language", "resx"],
                         help="Input format (default: auto-detect)")

    def add_metadata(sub):
        sub.add_argument("--name", help="Language display name")
        sub.add_argument("--code", help="Language code")
        sub.add_argument("--font", help="Font name")

    init_parser = subparsers.add_parser("init", help="Parse a source file")
    add_input(init_parser)

    status_parser = subparsers.add_parser("status", help="Show translation progress")
    add_input(status_parser)

    list_parser = subparsers.add_parser("list", help="List records")
    add_input(list_parser)
    group = list_parser.add_mutually_exclusive_group()
    group.add_argument("--section", help="Only records from this source section")
    group.add_argument("--category", help="Only records in this key category")
    list_parser.add_argument("--search", help="Text contained in key, original or saved text")
    list_parser.add_argument("--status", choices=STATUSES, help="Only records with this status")

    set_parser = subparsers.add_parser("set", help="Translate and save one record")
    add_input(set_parser, progress_required=True)
    set_parser.add_argument("--key", "-k", required=True, help="Record id or 'Section|Key'")
    set_parser.add_argument("--text", "-t", required=True, help="Translated text")

    merge_parser = subparsers.add_parser("merge", help="Write translated source document")
    add_input(merge_parser)
    add_metadata(merge_parser)
    merge_parser.add_argument("--output", "-o", help="Output file (default: <stem>_translated.xml)")
    merge_parser.add_argument("--metadata-only", action="store_true",
                              help="Patch only the Name/Code/Font header")

    export_parser = subparsers.add_parser("export", help="Write multi-file export archive")
    add_input(export_parser)
    add_metadata(export_parser)
    export_parser.add_argument("--output-dir", "-o", help="Directory for the archive")

    subparsers.add_parser("formats", help="List supported formats")

    return parser


COMMANDS = {
    "init": cmd_init,
    "status": cmd_status,
    "list": cmd_list,
    "set": cmd_set,
    "merge": cmd_merge,
    "export": cmd_export,
    "formats": cmd_formats,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        result = COMMANDS[args.command](args)
        print(json.dumps(result, indent=2, ensure_ascii=False))
    except Exception as e:
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }, ensure_ascii=False), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
