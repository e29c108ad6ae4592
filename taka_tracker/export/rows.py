"""
Export

Flattens transactions into labelled rows and renders them as CSV text.
Writing the file (or offering it as a download) is left to the caller.

CSV quoting follows the csv module's minimal quoting: a field is quoted
when it contains the delimiter, a quote character or a line break, and
embedded quotes are doubled. Notes with commas or newlines therefore
survive a round trip through any spreadsheet program.
"""

import csv
import datetime as dt
import io
from typing import Iterable

from taka_tracker.models.preferences import Language
from taka_tracker.models.reports import ExportRow
from taka_tracker.models.transaction import Transaction
from taka_tracker.models.vocabulary import category_label, payment_label, type_label


EXPORT_HEADERS = ("Date", "Type", "Category", "Amount", "Payment", "Note")


def export_rows(
    transactions: Iterable[Transaction],
    language: Language = Language.BN,
) -> list[ExportRow]:
    """One row per transaction, in the order given."""
    return [
        ExportRow(
            date=t.date.isoformat(),
            type_label=type_label(t.type),
            category_label=category_label(t.category, language),
            amount=str(t.amount),
            payment_label=payment_label(t.payment_method, language),
            note=t.note,
        )
        for t in transactions
    ]


def render_csv(rows: Iterable[ExportRow], include_header: bool = True) -> str:
    """Render rows as CSV text with "\\n" line endings."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    if include_header:
        writer.writerow(EXPORT_HEADERS)
    for row in rows:
        writer.writerow(row.as_list())
    return buffer.getvalue()


def export_filename(app_name: str, day: dt.date) -> str:
    """File name for an export made on a given day."""
    return f"{app_name}_export_{day.isoformat()}.csv"
