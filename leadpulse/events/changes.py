"""
Change Detection

Diffs two snapshots by record id and derives the notifications the
dashboard shows as toasts:

- NEW_LEAD: id not present before
- STATUS_CHANGE: status differs (plus APPOINTMENT_BOOKED on a move to Booked)
- NEW_CALL: same status, different last call date

At most one category per record; the status check wins. Records that
disappear are not reported.
"""

from typing import List

from leadpulse.models import ChangeEvent, ChangeType, Snapshot, STATUS_BOOKED


def detect_changes(old: Snapshot, new: Snapshot) -> List[ChangeEvent]:
    """Events for every record of `new` that differs from `old`, in `new` order."""
    previous = {record.id: record for record in old.records}
    events: List[ChangeEvent] = []

    for record in new.records:
        before = previous.get(record.id)
        name = record.full_name

        if before is None:
            events.append(ChangeEvent(ChangeType.NEW_LEAD, {"name": name}))
        elif before.status != record.status:
            events.append(ChangeEvent(
                ChangeType.STATUS_CHANGE,
                {"name": name, "oldStatus": before.status, "newStatus": record.status},
            ))
            if record.status == STATUS_BOOKED:
                events.append(ChangeEvent(ChangeType.APPOINTMENT_BOOKED, {"name": name}))
        elif before.last_call_date != record.last_call_date:
            events.append(ChangeEvent(
                ChangeType.NEW_CALL,
                {"name": name, "outcome": record.call_outcome},
            ))

    return events
