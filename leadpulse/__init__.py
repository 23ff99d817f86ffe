"""
LeadPulse

A read-through cache and change-notification layer for an outbound
call-center lead table:
1. Polls the upstream record store and keeps an in-memory snapshot
2. Diffs successive snapshots and pushes change events to live dashboards
3. Serves filtered/paginated lead views and aggregate analytics
4. Forwards edits upstream and invalidates the snapshot
"""

__version__ = "0.1.0"
