"""
Validation rules for patient requests.

Each rule either returns a normalized value or raises
PatientValidationError with the message clients display. The rules are
applied in a fixed order and the first failure wins.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from outreach.errors import PatientValidationError
from outreach.schemas import PatientCreateRequest, PatientCountersRequest


INVALID_PHONE_NUMBER = "Unable to add patient: invalid phone number"
PATIENT_EXISTS = "Unable to add patient: patient already exists for given phone number"
MISSING_FIRST_NAME = "Unable to add patient: must include first name"
MISSING_LAST_NAME = "Unable to add patient: must include last name"
MISSING_LANGUAGE = "Unable to add patient: must include language"
MISSING_COACH = "Unable to add patient: select a coach from the dropdown"
INVALID_MESSAGE_TIME = "Unable to add patient: invalid message time"

PHONE_NUMBER_DIGITS = 10

_NON_DIGIT = re.compile(r"[^0-9]")
_MESSAGE_TIME = re.compile(r"([0-9]{1,2}):([0-9]{1,2})")


@dataclass(frozen=True)
class ValidatedPatient:
    phone_number: str
    first_name: str
    last_name: str
    language: str
    coach_id: str
    coach_name: Optional[str]
    enabled: bool
    hours: int
    minutes: int


@dataclass(frozen=True)
class ValidatedCounters:
    phone_number: str
    first_name: str
    last_name: str
    language: str
    response_count: Optional[int]
    messages_sent: Optional[int]


def normalize_phone_number(phone_number: Optional[str]) -> str:
    """Strip non-digit characters and require exactly ten digits."""
    if not phone_number:
        raise PatientValidationError(INVALID_PHONE_NUMBER)
    digits = _NON_DIGIT.sub("", phone_number)
    if len(digits) != PHONE_NUMBER_DIGITS:
        raise PatientValidationError(INVALID_PHONE_NUMBER)
    return digits


def ensure_phone_number_free(phone_number: str, phone_exists: Callable[[str], bool]) -> None:
    if phone_exists(phone_number):
        raise PatientValidationError(PATIENT_EXISTS)


def require_text(value: Optional[str], msg: str) -> str:
    if not value:
        raise PatientValidationError(msg)
    return value


def parse_message_time(msg_time: Optional[str]) -> Tuple[int, int]:
    """
    Parse an "HH:MM" string into (hours, minutes).

    Each part is one or two ASCII digits; hours must fall in 0-23 and
    minutes in 0-59.
    """
    if not msg_time:
        raise PatientValidationError(INVALID_MESSAGE_TIME)
    match = _MESSAGE_TIME.fullmatch(msg_time)
    if match is None:
        raise PatientValidationError(INVALID_MESSAGE_TIME)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise PatientValidationError(INVALID_MESSAGE_TIME)
    return hours, minutes


def validate_new_patient(
    body: PatientCreateRequest,
    phone_exists: Callable[[str], bool]
) -> ValidatedPatient:
    """
    Run all seven registration rules against a /add request body.

    Args:
        body: Parsed request body
        phone_exists: Lookup answering whether a normalized phone number
            already belongs to a patient

    Raises:
        PatientValidationError: on the first failing rule
    """
    phone_number = normalize_phone_number(body.phone_number)
    ensure_phone_number_free(phone_number, phone_exists)
    first_name = require_text(body.first_name, MISSING_FIRST_NAME)
    last_name = require_text(body.last_name, MISSING_LAST_NAME)
    language = require_text(body.language, MISSING_LANGUAGE)
    coach_id = require_text(body.coach_id, MISSING_COACH)
    hours, minutes = parse_message_time(body.msg_time)

    return ValidatedPatient(
        phone_number=phone_number,
        first_name=first_name,
        last_name=last_name,
        language=language,
        coach_id=coach_id,
        coach_name=body.coach_name,
        enabled=body.is_enabled,
        hours=hours,
        minutes=minutes,
    )


def validate_counters_update(body: PatientCountersRequest) -> ValidatedCounters:
    """Run the phone and name rules against an /increaseResponseCount body."""
    phone_number = normalize_phone_number(body.phone_number)
    first_name = require_text(body.first_name, MISSING_FIRST_NAME)
    last_name = require_text(body.last_name, MISSING_LAST_NAME)
    language = require_text(body.language, MISSING_LANGUAGE)

    return ValidatedCounters(
        phone_number=phone_number,
        first_name=first_name,
        last_name=last_name,
        language=language,
        response_count=body.response_count,
        messages_sent=body.messages_sent,
    )
