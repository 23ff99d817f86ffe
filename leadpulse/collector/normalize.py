"""
Record normalization.

Maps raw Airtable field names onto the typed Record shape. Missing text
fields become "", missing numbers become 0.
"""

from typing import Any, Dict, Mapping

from leadpulse.models import Record, UNKNOWN_AGENT


# Voice agent id -> display name
AGENT_NAMES: Dict[str, str] = {
    "agent_1e091e25b84ea5d6b51088aaed": "Rebate Program",
    "agent_458529f65d305930d071f2a93e": "Reduced Energy",
}

# Airtable column -> Record attribute, for plain text columns
TEXT_FIELDS: Dict[str, str] = {
    "First Name": "first_name",
    "Last Name": "last_name",
    "Phone": "phone",
    "Email": "email",
    "Address": "address",
    "City": "city",
    "State": "state",
    "Zip": "zip",
    "Status": "status",
    "Call Outcome": "call_outcome",
    "Last Call Date": "last_call_date",
    "Transcript": "transcript",
    "Notes": "notes",
    "Electric Bill": "electric_bill",
    "Utility Company": "utility_company",
    "Calendar Link": "calendar_link",
    "Calculated Date": "calculated_date",
    "Retell Call ID": "retell_call_id",
    "Agent ID": "agent_id",
    "Created Date": "created_date",
    "Last Modified": "last_modified",
    "Source": "source",
    "Rep": "rep",
}

NUMBER_FIELDS: Dict[str, str] = {
    "Call Duration": "call_duration",
    "Attempt Count": "attempt_count",
}

# Columns where a present zero is meaningful, "" only when absent
OPTIONAL_FIELDS: Dict[str, str] = {
    "Roof Age (Years)": "roof_age",
    "Days Since Contact": "days_since_contact",
}


def resolve_agent_name(agent_id: str) -> str:
    """Display name for an agent id, falling back to the id, then "Unknown"."""
    return AGENT_NAMES.get(agent_id) or agent_id or UNKNOWN_AGENT


def explicit_duration(value: Any) -> float:
    """The upstream duration if it is a positive number, else 0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return value
    return 0


def normalize_record(raw: Mapping[str, Any]) -> Record:
    """
    Build a Record from one raw upstream record.

    Args:
        raw: {"id": "rec...", "fields": {...}} as returned by the list call

    Returns:
        Record with probed_duration set from the explicit duration only.
        Probing fills in the rest later.
    """
    fields = dict(raw.get("fields") or {})
    values: Dict[str, Any] = {}

    for column, attr in TEXT_FIELDS.items():
        values[attr] = fields.get(column) or ""
    for column, attr in NUMBER_FIELDS.items():
        values[attr] = fields.get(column) or 0
    for column, attr in OPTIONAL_FIELDS.items():
        value = fields.get(column)
        values[attr] = "" if value is None else value

    values["recording_url"] = fields.get("Latest Recording") or fields.get("Recording URLs") or ""
    values["agent_name"] = resolve_agent_name(values["agent_id"])
    values["probed_duration"] = explicit_duration(values["call_duration"])

    return Record(id=raw["id"], fields=fields, **values)
