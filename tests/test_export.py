"""
Tests for CSV export.
"""

import csv
import io
from datetime import date

from leadpulse.views import EXPORT_COLUMNS, export_filename, render_csv


class TestRenderCsv:
    """Test CSV rendering."""

    def test_header_only_for_empty_table(self):
        output = render_csv([])
        assert output == ",".join(f'"{header}"' for header, _ in EXPORT_COLUMNS)

    def test_every_cell_quoted(self, make_record):
        output = render_csv([make_record("r1", call_duration=95)])
        row = output.split("\n")[1]
        assert row.startswith('"Jane","Doe",')
        assert '"95"' in row

    def test_commas_and_quotes_survive_parsing(self, make_record):
        """A standard CSV reader recovers the original values."""
        record = make_record(
            "r1",
            first_name='Ann "AJ"',
            last_name="Lee",
            address="12 Oak St, Apt 4",
            notes='said "call back, maybe" twice',
        )

        rows = list(csv.reader(io.StringIO(render_csv([record]))))

        assert rows[0] == [header for header, _ in EXPORT_COLUMNS]
        values = dict(zip(rows[0], rows[1]))
        assert values["First Name"] == 'Ann "AJ"'
        assert values["Address"] == "12 Oak St, Apt 4"
        assert values["Notes"] == 'said "call back, maybe" twice'

    def test_rows_follow_input_order(self, make_record):
        records = [make_record("r1", first_name="B"), make_record("r2", first_name="A")]
        rows = list(csv.reader(io.StringIO(render_csv(records))))
        assert [row[0] for row in rows[1:]] == ["B", "A"]

    def test_no_trailing_newline(self, make_record):
        assert not render_csv([make_record()]).endswith("\n")

    def test_filename(self):
        assert export_filename(date(2025, 6, 10)) == "leads-2025-06-10.csv"
