"""
Tests for the validation rules and the patient record builder.
"""

import pytest

from outreach.errors import PatientValidationError
from outreach.records import build_counters_replacement, build_new_patient, pref_time
from outreach.schemas import PatientCountersRequest, PatientCreateRequest
from outreach.validation import (
    INVALID_MESSAGE_TIME,
    INVALID_PHONE_NUMBER,
    MISSING_COACH,
    PATIENT_EXISTS,
    normalize_phone_number,
    parse_message_time,
    validate_counters_update,
    validate_new_patient,
)


def create_request(**overrides) -> PatientCreateRequest:
    body = {
        "phoneNumber": "1234567890",
        "firstName": "A",
        "lastName": "B",
        "language": "en",
        "coachId": "c1",
        "msgTime": "08:30",
    }
    body.update(overrides)
    return PatientCreateRequest.model_validate(body)


def never_exists(phone_number: str) -> bool:
    return False


class TestPhoneNumber:

    @pytest.mark.parametrize("raw,expected", [
        ("1234567890", "1234567890"),
        ("(123) 456-7890", "1234567890"),
        ("+1 234.567.890", "1234567890"),
    ])
    def test_normalized(self, raw, expected):
        assert normalize_phone_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "12345", "123456789012", "phone"])
    def test_rejected(self, raw):
        with pytest.raises(PatientValidationError) as exc:
            normalize_phone_number(raw)
        assert exc.value.msg == INVALID_PHONE_NUMBER


class TestMessageTime:

    @pytest.mark.parametrize("raw,expected", [
        ("08:30", (8, 30)),
        ("0:0", (0, 0)),
        ("23:59", (23, 59)),
    ])
    def test_parsed(self, raw, expected):
        assert parse_message_time(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "24:00", "12:60", "1:2:3", "12", " 8:30", "٣:30"])
    def test_rejected(self, raw):
        with pytest.raises(PatientValidationError) as exc:
            parse_message_time(raw)
        assert exc.value.msg == INVALID_MESSAGE_TIME


class TestValidateNewPatient:

    def test_valid(self):
        patient = validate_new_patient(create_request(phoneNumber="123-456-7890"), never_exists)

        assert patient.phone_number == "1234567890"
        assert (patient.hours, patient.minutes) == (8, 30)
        assert patient.enabled is True

    def test_lookup_receives_normalized_number(self):
        seen = []

        def lookup(phone_number):
            seen.append(phone_number)
            return False

        validate_new_patient(create_request(phoneNumber="(123) 456-7890"), lookup)

        assert seen == ["1234567890"]

    def test_existing_phone_number(self):
        with pytest.raises(PatientValidationError) as exc:
            validate_new_patient(create_request(), lambda phone: True)
        assert exc.value.msg == PATIENT_EXISTS

    def test_lookup_skipped_for_invalid_phone(self):
        def lookup(phone_number):
            raise AssertionError("lookup should not run")

        with pytest.raises(PatientValidationError):
            validate_new_patient(create_request(phoneNumber="1"), lookup)

    def test_coach_required(self):
        with pytest.raises(PatientValidationError) as exc:
            validate_new_patient(create_request(coachId=None), never_exists)
        assert exc.value.msg == MISSING_COACH


class TestRecordBuilder:

    def test_pref_time(self):
        assert pref_time(8, 30) == 510
        assert pref_time(23, 59) == 1439

    def test_new_patient_record(self):
        record = build_new_patient(validate_new_patient(create_request(isEnabled=False), never_exists))

        assert record["pref_time"] == 510
        assert record["response_count"] == 0
        assert record["messages_sent"] == 0
        assert record["reports"] == []
        assert record["enabled"] is False
        assert record["coach_id"] == "c1"

    def test_counters_copied_not_incremented(self):
        body = PatientCountersRequest.model_validate({
            "phoneNumber": "1234567890",
            "firstName": "A",
            "lastName": "B",
            "language": "en",
            "responseCount": 3,
            "messagesSent": 7,
        })

        values = build_counters_replacement(validate_counters_update(body))

        assert values["response_count"] == 3
        assert values["messages_sent"] == 7
        assert values["reports"] == []

    def test_missing_counters_left_out(self):
        body = PatientCountersRequest.model_validate({
            "phoneNumber": "1234567890",
            "firstName": "A",
            "lastName": "B",
            "language": "en",
        })

        values = build_counters_replacement(validate_counters_update(body))

        assert "response_count" not in values
        assert "messages_sent" not in values
