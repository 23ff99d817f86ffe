"""Derived views over a snapshot: leads table, KPI stats, CSV export."""

from .leads import (
    LeadQuery,
    build_lead_view,
    filter_records,
    sort_records,
    paginate,
    filter_options,
    find_record,
)
from .stats import compute_stats, daily_series
from .export import render_csv, export_filename, EXPORT_COLUMNS

__all__ = [
    "LeadQuery",
    "build_lead_view",
    "filter_records",
    "sort_records",
    "paginate",
    "filter_options",
    "find_record",
    "compute_stats",
    "daily_series",
    "render_csv",
    "export_filename",
    "EXPORT_COLUMNS",
]
