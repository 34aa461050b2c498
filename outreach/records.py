"""
Builders turning validated request fields into patient column values.
"""

from typing import Any, Dict

from outreach.validation import ValidatedCounters, ValidatedPatient


MINUTES_PER_HOUR = 60


def pref_time(hours: int, minutes: int) -> int:
    """Preferred contact time as minutes since midnight."""
    return hours * MINUTES_PER_HOUR + minutes


def build_new_patient(patient: ValidatedPatient) -> Dict[str, Any]:
    return {
        "first_name": patient.first_name,
        "last_name": patient.last_name,
        "language": patient.language,
        "phone_number": patient.phone_number,
        "reports": [],
        "response_count": 0,
        "messages_sent": 0,
        "coach_id": patient.coach_id,
        "coach_name": patient.coach_name,
        "enabled": patient.enabled,
        "pref_time": pref_time(patient.hours, patient.minutes),
    }


def build_counters_replacement(counters: ValidatedCounters) -> Dict[str, Any]:
    """
    Replacement values for /increaseResponseCount.

    Counters are copied from the request as-is; nothing is incremented.
    Counters missing from the request are left out so the stored values
    stay untouched.
    """
    values = {
        "first_name": counters.first_name,
        "last_name": counters.last_name,
        "language": counters.language,
        "phone_number": counters.phone_number,
        "reports": [],
    }
    if counters.response_count is not None:
        values["response_count"] = counters.response_count
    if counters.messages_sent is not None:
        values["messages_sent"] = counters.messages_sent
    return values
