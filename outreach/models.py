"""
SQLAlchemy ORM models for the outreach collections.

Ids are generated 24-character hex strings so clients keep receiving
document-style identifiers. For request/response schemas, see schemas.py.
"""

import secrets

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text

from outreach.storage import Base


def generate_id() -> str:
    return secrets.token_hex(12)


class Patient(Base):
    """
    Table: patients
    Unique: phone_number (normalized, ten digits)
    """
    __tablename__ = "patients"

    id = Column(String(24), primary_key=True, default=generate_id)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    language = Column(String, nullable=False)
    phone_number = Column(String(10), nullable=False, unique=True, index=True)
    coach_id = Column(String, nullable=True)
    coach_name = Column(String, nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)
    pref_time = Column(Integer, nullable=True)  # minutes since midnight
    response_count = Column(Integer, nullable=False, default=0)
    messages_sent = Column(Integer, nullable=False, default=0)
    reports = Column(JSON, nullable=False, default=list)


class Outcome(Base):
    __tablename__ = "outcomes"

    id = Column(String(24), primary_key=True, default=generate_id)
    patient_id = Column(String(24), ForeignKey("patients.id"), nullable=False, index=True)
    phone_number = Column(String(10), nullable=True)
    date = Column(DateTime, nullable=False, index=True)
    response = Column(Text, nullable=True)
    value = Column(Float, nullable=True)


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(24), primary_key=True, default=generate_id)
    patient_id = Column(String(24), ForeignKey("patients.id"), nullable=False, index=True)
    phone_number = Column(String(10), nullable=True)
    message = Column(Text, nullable=False)
    sender = Column(String, nullable=False)
    date = Column(DateTime, nullable=False)
    sent = Column(Boolean, nullable=False, default=False)


class MessageTemplate(Base):
    __tablename__ = "message_templates"

    id = Column(String(24), primary_key=True, default=generate_id)
    language = Column(String, nullable=True)
    text = Column(Text, nullable=False)
    type = Column(String, nullable=True)
