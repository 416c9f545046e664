"""
Utilities for handling archive paths and filename templates.
"""

import hashlib
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from pathvalidate import sanitize_filename

if TYPE_CHECKING:
    from tadpoles_cli.models.event import Event

# Placeholders recognized in the directory and filename templates.
CHILD = "%child%"
YEAR = "%YYYY%"
MONTH = "%MM%"
DAY = "%DD%"
KEY_MD5 = "%keymd5%"
KEY = "%imgkey%"

PLACEHOLDERS = (CHILD, YEAR, MONTH, DAY, KEY_MD5, KEY)


def expand(template: str, fields: Mapping[str, Optional[str]]) -> str:
    """
    Substitutes every placeholder that has a value in `fields`.

    This is literal find-and-replace: placeholders without a value (missing or
    None) are left in the output untouched.
    """
    result = template
    for placeholder, value in fields.items():
        if value is None:
            continue
        result = result.replace(placeholder, value)
    return result


def content_hash(attachment_key: str) -> str:
    """Deterministic hash of an attachment key, stable across runs."""
    return hashlib.md5(attachment_key.encode("utf-8")).hexdigest()  # noqa: S324


def split_event_date(event_date: str) -> Dict[str, Optional[str]]:
    """Splits a 'YYYY-MM-DD' date into its template fields."""
    parts = event_date.split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return {YEAR: None, MONTH: None, DAY: None}
    year, month, day = parts
    return {YEAR: year, MONTH: month, DAY: day}


def build_fields(event: "Event", attachment_key: str) -> Dict[str, Optional[str]]:
    """Builds the placeholder map for one attachment of an event."""
    fields: Dict[str, Optional[str]] = {
        CHILD: sanitize_filename(event.parent_member_display) or "Unknown",
        KEY_MD5: content_hash(attachment_key),
        KEY: sanitize_filename(attachment_key),
    }
    fields.update(split_event_date(event.event_date))
    return fields


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


class PathFormatter:
    """
    Expands the configured directory and filename templates for attachments.
    """

    def __init__(self, dir_template: str, file_template: str) -> None:
        self.dir_template = dir_template
        self.file_template = file_template

    def format_base(self, event: "Event", attachment_key: str) -> Path:
        """
        Returns the archive path of an attachment without its extension.
        """
        fields = build_fields(event, attachment_key)
        directory = Path(expand(self.dir_template, fields))
        return directory / expand(self.file_template, fields)
