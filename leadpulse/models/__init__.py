"""
LeadPulse - Data Models

Shared data models used across the system.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Mapping, Optional, Tuple, Union


Number = Union[int, float]

# Status values the dashboard treats specially
STATUS_BOOKED = "Booked"
STATUS_READY = "Ready to Call"
STATUS_RETRY = "Needs Retry"
STATUS_CALLBACK = "Callback Requested"
STATUS_CALLING = "Currently Calling"

UNKNOWN_AGENT = "Unknown"


@dataclass(frozen=True)
class Record:
    """
    One normalized lead row.

    Instances are never mutated once a snapshot holds them. A refresh
    builds new Record objects for the whole table.
    """
    id: str
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    status: str = ""
    call_outcome: str = ""
    last_call_date: str = ""
    recording_url: str = ""
    transcript: str = ""
    notes: str = ""
    call_duration: Number = 0
    attempt_count: Number = 0
    electric_bill: Any = ""
    roof_age: Any = ""
    utility_company: str = ""
    calendar_link: str = ""
    calculated_date: str = ""
    retell_call_id: str = ""
    agent_id: str = ""
    agent_name: str = UNKNOWN_AGENT
    created_date: str = ""
    last_modified: str = ""
    days_since_contact: Any = ""
    source: str = ""
    rep: str = ""
    probed_duration: Number = 0
    fields: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def needs_probe(self) -> bool:
        """True when there is a recording but no positive duration."""
        return bool(self.recording_url) and not self.probed_duration > 0

    def to_dict(self) -> Dict[str, Any]:
        """Render the camelCase shape consumed by the dashboard."""
        payload = {alias: getattr(self, attr) for alias, attr in FIELD_ALIASES.items()}
        payload["fields"] = dict(self.fields)
        return payload


# camelCase API name -> Record attribute
FIELD_ALIASES: Dict[str, str] = {
    "id": "id",
    "firstName": "first_name",
    "lastName": "last_name",
    "phone": "phone",
    "email": "email",
    "address": "address",
    "city": "city",
    "state": "state",
    "zip": "zip",
    "status": "status",
    "callOutcome": "call_outcome",
    "lastCallDate": "last_call_date",
    "recordingUrl": "recording_url",
    "transcript": "transcript",
    "notes": "notes",
    "callDuration": "call_duration",
    "attemptCount": "attempt_count",
    "electricBill": "electric_bill",
    "roofAge": "roof_age",
    "utilityCompany": "utility_company",
    "calendarLink": "calendar_link",
    "calculatedDate": "calculated_date",
    "retellCallId": "retell_call_id",
    "agentId": "agent_id",
    "agentName": "agent_name",
    "createdDate": "created_date",
    "lastModified": "last_modified",
    "daysSinceContact": "days_since_contact",
    "source": "source",
    "rep": "rep",
    "probedDuration": "probed_duration",
}


@dataclass(frozen=True)
class Snapshot:
    """Complete point-in-time copy of the lead table."""
    records: Tuple[Record, ...]
    raw: Tuple[Dict[str, Any], ...] = ()
    captured_at: float = 0.0
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __len__(self) -> int:
        return len(self.records)

    def get(self, record_id: str) -> Optional[Record]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None


class ChangeType(str, Enum):
    """Kinds of change derived from diffing two snapshots."""
    NEW_LEAD = "new_lead"
    STATUS_CHANGE = "status_change"
    APPOINTMENT_BOOKED = "appointment_booked"
    NEW_CALL = "new_call"


@dataclass(frozen=True)
class ChangeEvent:
    """A change notification pushed to live dashboards."""
    type: ChangeType
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "data": dict(self.data)}


__all__ = [
    "Number",
    "Record",
    "Snapshot",
    "ChangeType",
    "ChangeEvent",
    "FIELD_ALIASES",
    "STATUS_BOOKED",
    "STATUS_READY",
    "STATUS_RETRY",
    "STATUS_CALLBACK",
    "STATUS_CALLING",
    "UNKNOWN_AGENT",
]
