"""
Pydantic schemas for request/response validation.

Request models only check JSON shape and types (a malformed body gets a
422 from FastAPI). The field rules with client-facing messages live in
validation.py. Response models expose the camelCase document fields.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Pydantic Request Models
# =============================================================================

class PatientCreateRequest(BaseModel):
    """Body of POST /add."""
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    language: Optional[str] = None
    coach_id: Optional[str] = Field(None, alias="coachId")
    coach_name: Optional[str] = Field(None, alias="coachName")
    is_enabled: bool = Field(True, alias="isEnabled")
    msg_time: Optional[str] = Field(
        None,
        alias="msgTime",
        description="Preferred message time as HH:MM"
    )

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "phoneNumber": "(123) 456-7890",
                    "firstName": "Ada",
                    "lastName": "Byron",
                    "language": "english",
                    "coachId": "c1",
                    "coachName": "Grace",
                    "isEnabled": True,
                    "msgTime": "08:30"
                }
            ]
        }
    }


class PatientCountersRequest(BaseModel):
    """Body of PUT /increaseResponseCount/{id}."""
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    language: Optional[str] = None
    response_count: Optional[int] = Field(None, ge=0, alias="responseCount")
    messages_sent: Optional[int] = Field(None, ge=0, alias="messagesSent")

    model_config = {"populate_by_name": True}


class PatientStatusRequest(BaseModel):
    """Body of POST /status."""
    id: str = Field(..., min_length=1)
    status: bool


class TemplateCreateRequest(BaseModel):
    """Body of POST /newTemplate. `image` is accepted but not stored."""
    language: Optional[str] = None
    message_txt: Optional[str] = Field(None, alias="messageTxt")
    type: Optional[str] = None
    image: Optional[Any] = None

    model_config = {"populate_by_name": True}


class TemplateDeleteRequest(BaseModel):
    id: str = Field(..., min_length=1)


# =============================================================================
# Pydantic Response Models
# =============================================================================

class SuccessResponse(BaseModel):
    success: bool = True


class CountersUpdatedResponse(BaseModel):
    # "sucess" is the key existing clients read
    msg: str = "Patient response count updated successfully!"
    sucess: bool = True


class ValidationErrorResponse(BaseModel):
    msg: str = Field(..., description="Reason the request was rejected")


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class HealthResponse(BaseModel):
    status: str
    reason: Optional[str] = None


class PatientResponse(BaseModel):
    id: str = Field(..., alias="_id")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    language: str
    phone_number: str = Field(..., alias="phoneNumber")
    coach_id: Optional[str] = Field(None, alias="coachID")
    coach_name: Optional[str] = Field(None, alias="coachName")
    enabled: bool
    pref_time: Optional[int] = Field(None, alias="prefTime")
    response_count: int = Field(..., ge=0, alias="responseCount")
    messages_sent: int = Field(..., ge=0, alias="messagesSent")
    reports: List[Any] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, patient) -> "PatientResponse":
        return cls(
            id=patient.id,
            first_name=patient.first_name,
            last_name=patient.last_name,
            language=patient.language,
            phone_number=patient.phone_number,
            coach_id=patient.coach_id,
            coach_name=patient.coach_name,
            enabled=patient.enabled,
            pref_time=patient.pref_time,
            response_count=patient.response_count,
            messages_sent=patient.messages_sent,
            reports=patient.reports or [],
        )


class OutcomeResponse(BaseModel):
    id: str = Field(..., alias="_id")
    patient_id: str = Field(..., alias="patientID")
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    date: datetime
    response: Optional[str] = None
    value: Optional[float] = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, outcome) -> "OutcomeResponse":
        return cls(
            id=outcome.id,
            patient_id=outcome.patient_id,
            phone_number=outcome.phone_number,
            date=outcome.date,
            response=outcome.response,
            value=outcome.value,
        )


class MessageResponse(BaseModel):
    id: str = Field(..., alias="_id")
    patient_id: str = Field(..., alias="patientID")
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    message: str
    sender: str
    date: datetime
    sent: bool

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, message) -> "MessageResponse":
        return cls(
            id=message.id,
            patient_id=message.patient_id,
            phone_number=message.phone_number,
            message=message.message,
            sender=message.sender,
            date=message.date,
            sent=message.sent,
        )


class TemplateResponse(BaseModel):
    id: str = Field(..., alias="_id")
    language: Optional[str] = None
    text: str
    type: Optional[str] = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, template) -> "TemplateResponse":
        return cls(
            id=template.id,
            language=template.language,
            text=template.text,
            type=template.type,
        )
