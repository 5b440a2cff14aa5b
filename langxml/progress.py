#!/usr/bin/env python3
"""
Translation progress files.

Saved work is exchanged as JSON:

```json
{
  "metadata": {"Language": "Português", "Code": "PB"},
  "timestamp": "2026-10-19T12:00:00+00:00",
  "translations": {"Things|Lamp_Value": "Lâmpada"}
}
```

Only committed (saved) text is written. Loading a progress file against
records parsed from the same source restores each matching record to
"saved"; everything else is left alone.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from .errors import ProgressFormatError
from .records import Metadata, Record, restore

logger = logging.getLogger(__name__)


def build_progress(
    records: Sequence[Record],
    metadata: Optional[Metadata] = None,
    timestamp: Optional[str] = None,
) -> dict:
    """
    Collect committed text into a progress document.

    Args:
        records: Current records
        metadata: Header values to embed
        timestamp: ISO timestamp; defaults to now (UTC)

    Returns:
        Progress dictionary ready for json.dumps()
    """
    translations = {
        r.progress_key: r.committed
        for r in records
        if r.committed
    }
    return {
        "metadata": (metadata or Metadata()).to_dict(),
        "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
        "translations": translations,
    }


def dumps(records: Sequence[Record], metadata: Optional[Metadata] = None) -> str:
    """Serialize progress as pretty-printed JSON."""
    return json.dumps(build_progress(records, metadata), indent=2, ensure_ascii=False)


def loads(text: str) -> dict:
    """
    Parse and validate progress JSON.

    Raises:
        ProgressFormatError: if the text is not JSON or lacks a translations mapping
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProgressFormatError(f"Invalid progress JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProgressFormatError("Progress file must contain a JSON object")
    if "translations" not in data:
        raise ProgressFormatError("Progress file has no 'translations' mapping")
    if not isinstance(data["translations"], dict):
        raise ProgressFormatError("'translations' must be an object of \"section|key\": text")
    return data


def apply_progress(records: Sequence[Record], data: dict) -> tuple[list[Record], int]:
    """
    Restore saved text onto records, matched by "<section>|<key>".

    Args:
        records: Freshly parsed records
        data: Validated progress dictionary (see loads())

    Returns:
        (new record list, number of records restored)
    """
    translations = data.get("translations", {})
    restored = 0
    result = []
    for record in records:
        text = translations.get(record.progress_key)
        if isinstance(text, str) and text:
            result.append(restore(record, text))
            restored += 1
        else:
            result.append(record)

    known = {r.progress_key for r in records}
    unknown = [k for k in translations if k not in known]
    if unknown:
        logger.warning(
            "%d progress entries did not match any record (e.g. %s)",
            len(unknown), unknown[0],
        )
    return result, restored


def looks_like_progress(content: str) -> bool:
    """Whether content is a JSON object carrying a "translations" mapping."""
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        return False
    return isinstance(data, dict) and isinstance(data.get("translations"), dict)
