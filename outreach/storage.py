import logging
from datetime import datetime
from typing import Any, Dict, Generator, List, Optional, Tuple

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from outreach.config import settings
from outreach.errors import StoreError

logger = logging.getLogger(__name__)

TABLES = ("patients", "outcomes", "messages", "message_templates")


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across FastAPI's threadpool workers
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    """
    Create all tables. Called from the application lifespan before
    any request is served.
    """
    logger.debug(f"Initializing database with URL: {settings.DATABASE_URL}")
    try:
        from outreach import models  # noqa: F401 registers tables on Base.metadata

        Base.metadata.create_all(bind=engine)
        logger.info("Database connection established")
    except Exception as e:
        logger.error(f"Database connection error, make sure the database is reachable: {e}")
        raise


def close_db() -> None:
    """Release pooled connections on shutdown."""
    engine.dispose()
    logger.info("Database connections closed")


def get_db() -> Generator[Session, None, None]:
    """
    Dependency yielding a session per request; closed after the response.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_health() -> bool:
    """
    Return True when the database is reachable and every collection
    table exists.
    """
    logger.debug("Checking database health...")
    try:
        inspector = inspect(engine)
        missing = [name for name in TABLES if not inspector.has_table(name)]
        if missing:
            logger.error(f"Database schema not applied, missing tables: {missing}")
            return False
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False


# =============================================================================
# Patient Repository Functions
# =============================================================================

def find_patient_by_phone(db: Session, phone_number: str):
    from outreach.models import Patient

    return db.query(Patient).filter(Patient.phone_number == phone_number).first()


def phone_number_exists(db: Session, phone_number: str) -> bool:
    """
    Raises:
        StoreError: if the lookup fails
    """
    try:
        return find_patient_by_phone(db, phone_number) is not None
    except SQLAlchemyError as e:
        logger.error(f"Failed to look up phone number: {e}")
        raise StoreError(str(e)) from e


def create_patient(db: Session, values: Dict[str, Any]) -> Tuple[Optional[Any], bool]:
    """
    Insert a new patient.

    The unique constraint on phone_number settles races between two
    registrations that both passed the existence check.

    Returns:
        Tuple of (patient, is_duplicate)
        - (Patient, False): created
        - (None, True): phone number already registered
        - (None, False): store error
    """
    from outreach.models import Patient

    logger.info(f"Creating patient for phone number ending {values['phone_number'][-4:]}")
    try:
        patient = Patient(**values)
        db.add(patient)
        db.commit()
        db.refresh(patient)
        logger.info(f"Patient created: {patient.id}")
        return patient, False
    except IntegrityError:
        db.rollback()
        logger.info("Duplicate phone number rejected by unique constraint")
        return None, True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create patient: {e}")
        return None, False


def get_patient(db: Session, patient_id: str):
    """
    Look up a patient by id.

    Returns:
        Patient if found, None otherwise

    Raises:
        StoreError: if the query fails
    """
    from outreach.models import Patient

    try:
        return db.get(Patient, patient_id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load patient {patient_id}: {e}")
        raise StoreError(str(e)) from e


def update_patient(db: Session, patient_id: str, values: Dict[str, Any]) -> Tuple[bool, bool]:
    """
    Overwrite the given fields of a patient. An unknown id matches nothing
    and still counts as success.

    Returns:
        Tuple of (success, is_duplicate)
    """
    from outreach.models import Patient

    try:
        matched = (
            db.query(Patient)
            .filter(Patient.id == patient_id)
            .update(values, synchronize_session=False)
        )
        db.commit()
        logger.info(f"Patient {patient_id} updated, matched={matched}")
        return True, False
    except IntegrityError:
        db.rollback()
        logger.info(f"Update of patient {patient_id} collides with another phone number")
        return False, True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update patient {patient_id}: {e}")
        return False, False


def set_patient_enabled(db: Session, patient_id: str, enabled: bool) -> bool:
    success, _ = update_patient(db, patient_id, {"enabled": enabled})
    return success


# =============================================================================
# Outcome and Message Repository Functions
# =============================================================================

def create_outcome(
    db: Session,
    patient_id: str,
    phone_number: str,
    date: datetime,
    response: Optional[str] = None,
    value: Optional[float] = None
):
    from outreach.models import Outcome

    outcome = Outcome(
        patient_id=patient_id,
        phone_number=phone_number,
        date=date,
        response=response,
        value=value,
    )
    db.add(outcome)
    db.commit()
    db.refresh(outcome)
    return outcome


def get_patient_outcomes(db: Session, patient_id: str) -> List[Any]:
    """
    Outcomes recorded for a patient, newest first.

    Raises:
        StoreError: if the query fails
    """
    from outreach.models import Outcome

    try:
        return (
            db.query(Outcome)
            .filter(Outcome.patient_id == patient_id)
            .order_by(Outcome.date.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load outcomes for patient {patient_id}: {e}")
        raise StoreError(str(e)) from e


def create_message(
    db: Session,
    patient_id: str,
    phone_number: str,
    message: str,
    sender: str,
    date: datetime,
    sent: bool = False
):
    from outreach.models import Message

    record = Message(
        patient_id=patient_id,
        phone_number=phone_number,
        message=message,
        sender=sender,
        date=date,
        sent=sent,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def get_patient_messages(db: Session, patient_id: str) -> List[Any]:
    """
    Messages exchanged with a patient, in the order they were stored.

    Raises:
        StoreError: if the query fails
    """
    from outreach.models import Message

    try:
        return (
            db.query(Message)
            .filter(Message.patient_id == patient_id)
            .order_by(Message.date.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load messages for patient {patient_id}: {e}")
        raise StoreError(str(e)) from e


# =============================================================================
# Message Template Repository Functions
# =============================================================================

def create_template(db: Session, language: Optional[str], text: str, type: Optional[str]):
    """
    Insert a message template.

    Returns:
        The stored MessageTemplate, or None on store error
    """
    from outreach.models import MessageTemplate

    try:
        template = MessageTemplate(language=language, text=text, type=type)
        db.add(template)
        db.commit()
        db.refresh(template)
        logger.info(f"Template created: {template.id}")
        return template
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create template: {e}")
        return None


def delete_template(db: Session, template_id: str) -> bool:
    """Delete a template by id. Deleting an unknown id is not an error."""
    from outreach.models import MessageTemplate

    try:
        deleted = (
            db.query(MessageTemplate)
            .filter(MessageTemplate.id == template_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        logger.info(f"Template {template_id} delete, removed={deleted}")
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete template {template_id}: {e}")
        return False


def get_templates(db: Session) -> List[Any]:
    """
    Raises:
        StoreError: if the query fails
    """
    from outreach.models import MessageTemplate

    try:
        return db.query(MessageTemplate).all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to list templates: {e}")
        raise StoreError(str(e)) from e
