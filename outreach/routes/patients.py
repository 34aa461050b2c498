import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from outreach.auth import require_auth
from outreach.errors import PatientValidationError, StoreError, error_response
from outreach.metrics import record_registration_outcome
from outreach.logging_utils import log_patient_data
from outreach.records import build_counters_replacement, build_new_patient
from outreach.storage import (
    create_patient,
    get_db,
    get_patient,
    get_patient_messages,
    get_patient_outcomes,
    phone_number_exists,
    set_patient_enabled,
    update_patient,
)
from outreach.validation import PATIENT_EXISTS, validate_counters_update, validate_new_patient
from outreach.schemas import (
    CountersUpdatedResponse,
    ErrorResponse,
    MessageResponse,
    OutcomeResponse,
    PatientCountersRequest,
    PatientCreateRequest,
    PatientResponse,
    PatientStatusRequest,
    SuccessResponse,
    ValidationErrorResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["patients"], dependencies=[Depends(require_auth)])

STATUS_CHANGED = "Patiet Status Changed!"


def _rejected(msg: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"msg": msg})


@router.post(
    "/add",
    response_model=SuccessResponse,
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation failed"},
        500: {"model": ErrorResponse, "description": "Store error"},
    }
)
def add_patient(
    body: PatientCreateRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Register a patient.

    Rules run in order (phone format, phone uniqueness, first name, last
    name, language, coach, message time); the first failure is returned
    as 400 {"msg": ...}.
    """
    logger.info("Patient registration received")

    try:
        patient = validate_new_patient(body, lambda phone: phone_number_exists(db, phone))
    except PatientValidationError as e:
        logger.info(f"Patient registration rejected: {e.msg}")
        result = "duplicate" if e.msg == PATIENT_EXISTS else "validation_error"
        record_registration_outcome(result)
        log_patient_data(request, result=result)
        return _rejected(e.msg)
    except StoreError as e:
        record_registration_outcome("error")
        log_patient_data(request, result="error")
        return error_response(str(e))

    created, is_duplicate = create_patient(db, build_new_patient(patient))

    if is_duplicate:
        # Lost a race with a concurrent registration for the same number
        record_registration_outcome("duplicate")
        log_patient_data(request, result="duplicate")
        return _rejected(PATIENT_EXISTS)

    if created is None:
        record_registration_outcome("error")
        log_patient_data(request, result="error")
        return error_response("Unable to add patient")

    record_registration_outcome("created")
    log_patient_data(request, patient_id=created.id, result="created")
    return SuccessResponse(success=True)


@router.put(
    "/increaseResponseCount/{id}",
    response_model=CountersUpdatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation failed"},
        500: {"model": ErrorResponse, "description": "Store error"},
    }
)
def increase_response_count(
    id: str,
    body: PatientCountersRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Overwrite a patient's details and counters with the values sent.

    Counters are replaced, not incremented. Responds 201 even when no
    patient has the given id.
    """
    try:
        counters = validate_counters_update(body)
    except PatientValidationError as e:
        logger.info(f"Counter update for {id} rejected: {e.msg}")
        return _rejected(e.msg)

    success, is_duplicate = update_patient(db, id, build_counters_replacement(counters))
    if is_duplicate:
        log_patient_data(request, patient_id=id, result="duplicate")
        return _rejected(PATIENT_EXISTS)
    if not success:
        log_patient_data(request, patient_id=id, result="error")
        return error_response("Unable to update patient")

    log_patient_data(request, patient_id=id, result="updated")

    return CountersUpdatedResponse()


@router.get(
    "/getPatientOutcomes/{patientID}",
    response_model=list[OutcomeResponse],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
def patient_outcomes(patientID: str, db: Session = Depends(get_db)):
    """Outcomes for a patient, newest first."""
    try:
        outcomes = get_patient_outcomes(db, patientID)
    except StoreError as e:
        return error_response(str(e))

    if not outcomes:
        return error_response("No outcomes found!", status.HTTP_404_NOT_FOUND)

    return [OutcomeResponse.from_record(outcome) for outcome in outcomes]


@router.get(
    "/getPatient/{patientID}",
    response_model=PatientResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
def patient_by_id(patientID: str, db: Session = Depends(get_db)):
    try:
        patient = get_patient(db, patientID)
    except StoreError as e:
        return error_response(str(e))

    if patient is None:
        return error_response("No patient found!", status.HTTP_404_NOT_FOUND)

    return PatientResponse.from_record(patient)


@router.get(
    "/getPatientMessages/{patientID}",
    response_model=list[MessageResponse],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
def patient_messages(patientID: str, db: Session = Depends(get_db)):
    try:
        messages = get_patient_messages(db, patientID)
    except StoreError as e:
        return error_response(str(e))

    if not messages:
        return error_response("No messages found!", status.HTTP_404_NOT_FOUND)

    return [MessageResponse.from_record(message) for message in messages]


@router.post(
    "/status",
    response_model=str,
    responses={500: {"model": ErrorResponse}}
)
def patient_status(body: PatientStatusRequest, request: Request, db: Session = Depends(get_db)):
    """Enable or disable outreach for a patient. Unknown ids still get 200."""
    if not set_patient_enabled(db, body.id, body.status):
        return error_response("Unable to change patient status")

    log_patient_data(request, patient_id=body.id, result="enabled" if body.status else "disabled")
    return STATUS_CHANGED
