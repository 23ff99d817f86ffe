"""CSV export of the lead table."""

import csv
import io
from datetime import date
from typing import Iterable, List, Optional, Tuple

from leadpulse.models import Record
from leadpulse.views.stats import utc_today

# (header, Record attribute)
EXPORT_COLUMNS: List[Tuple[str, str]] = [
    ("First Name", "first_name"),
    ("Last Name", "last_name"),
    ("Phone", "phone"),
    ("Email", "email"),
    ("Status", "status"),
    ("Call Outcome", "call_outcome"),
    ("Call Duration", "call_duration"),
    ("Last Call Date", "last_call_date"),
    ("Address", "address"),
    ("City", "city"),
    ("State", "state"),
    ("Electric Bill", "electric_bill"),
    ("Utility Company", "utility_company"),
    ("Notes", "notes"),
]


def render_csv(records: Iterable[Record]) -> str:
    """Every cell quoted, embedded quotes doubled, rows joined by newlines."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([header for header, _ in EXPORT_COLUMNS])
    for record in records:
        writer.writerow([getattr(record, attr) for _, attr in EXPORT_COLUMNS])
    return buffer.getvalue().rstrip("\n")


def export_filename(today: Optional[date] = None) -> str:
    return f"leads-{(today or utc_today()).isoformat()}.csv"
