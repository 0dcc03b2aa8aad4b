"""
CSV Export Serializer

Pure functions turning a session header and a ledger snapshot into the
semicolon-delimited stock-count export and its file name. Nothing here reads
the clock; the date and week are already frozen into the header.
"""

import re
from typing import Iterable

from ..value_objects.count_item import CountItem
from ..value_objects.export import CsvExport, SessionHeader

CSV_DELIMITER = ";"
CSV_HEADER = CSV_DELIMITER.join(["Dato", "Uke", "Lager", "Artikkelnummer", "Antall", "Kommentar"])
FILENAME_PREFIX = "lagerkontroll"

_WHITESPACE_RUN = re.compile(r"\s+")
_NON_SLUG_CHARS = re.compile(r"[^a-z0-9-]")


def escape_csv_field(text: str) -> str:
    """Quote a field containing a delimiter, a quote or a newline"""
    if not text:
        return ""
    if CSV_DELIMITER in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def sanitize_warehouse_label(label: str) -> str:
    """Lowercase, collapse whitespace runs to '-', drop anything outside [a-z0-9-]"""
    slug = _WHITESPACE_RUN.sub("-", label.lower())
    return _NON_SLUG_CHARS.sub("", slug)


def build_filename(header: SessionHeader) -> str:
    label = header.warehouse_name or header.warehouse_id
    return f"{FILENAME_PREFIX}-uke{header.week_number}-{sanitize_warehouse_label(label)}.csv"


def build_row(header: SessionHeader, item: CountItem) -> str:
    return CSV_DELIMITER.join([
        header.iso_date,
        str(header.week_number),
        header.warehouse_id,
        item.article_number,
        item.quantity,
        escape_csv_field(item.comment),
    ])


def serialize_session(header: SessionHeader, items: Iterable[CountItem]) -> CsvExport:
    """
    Serialize a session snapshot

    Args:
        header: Date, week and warehouse of the session
        items: Ledger snapshot in insertion order

    Returns:
        CsvExport with newline-joined content (no trailing newline) and file name
    """
    rows = [build_row(header, item) for item in items]
    return CsvExport(
        content="\n".join([CSV_HEADER, *rows]),
        filename=build_filename(header),
        item_count=len(rows),
    )
