"""SQLAlchemy database models"""
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Date, DateTime, Float, ForeignKey,
    Enum, Index, UniqueConstraint
)
from sqlalchemy.sql import func

from casetrack.db.session import Base


class CaseStatus(str, PyEnum):
    """Lifecycle status of a case"""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"


class CaseType(str, PyEnum):
    """Classification of a case"""
    CRIMINAL = "CRIMINAL"
    CIVIL = "CIVIL"
    FAMILY = "FAMILY"
    PROPERTY = "PROPERTY"
    CYBERCRIME = "CYBERCRIME"
    FINANCIAL_FRAUD = "FINANCIAL_FRAUD"
    MURDER = "MURDER"
    ROBBERY = "ROBBERY"
    ASSAULT = "ASSAULT"
    DOMESTIC_VIOLENCE = "DOMESTIC_VIOLENCE"
    TRAFFIC_VIOLATION = "TRAFFIC_VIOLATION"
    NARCOTICS = "NARCOTICS"
    CORRUPTION = "CORRUPTION"
    TERRORISM = "TERRORISM"
    WHITE_COLLAR = "WHITE_COLLAR"
    ENVIRONMENTAL = "ENVIRONMENTAL"
    INTELLECTUAL_PROPERTY = "INTELLECTUAL_PROPERTY"
    LABOR_DISPUTE = "LABOR_DISPUTE"
    CONSTITUTIONAL = "CONSTITUTIONAL"
    PUBLIC_INTEREST = "PUBLIC_INTEREST"


class DocumentType(str, PyEnum):
    FIR = "FIR"
    ADJUNCTION = "ADJUNCTION"
    SENTENCE = "SENTENCE"
    OTHER = "OTHER"


class PersonGender(str, PyEnum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class AuthorityType(str, PyEnum):
    """Investigating bodies and courts"""
    POLICE = "POLICE"
    HIGH_COURT = "HIGH COURT"
    SUPREME_COURT = "SUPREME COURT"
    CBI = "CBI"
    NATIONAL_CRIMINAL_RECORD_BUREAU = "NATIONAL CRIMINAL RECORD BUREAU"
    NON_GOVERNMENTAL_ORGANIZATION = "NON GOVERNMENTAL ORGANIZATION"
    DISTRICT_COURT = "DISTRICT COURT"
    SPECIAL_COURT = "SPECIAL COURT"


class ProceedingType(str, PyEnum):
    INVESTIGATION = "INVESTIGATION"
    PRELIMINARY_HEARING = "PRELIMINARY_HEARING"
    GRAND_JURY = "GRAND_JURY"
    MEDIATION = "MEDIATION"
    ARBITRATION = "ARBITRATION"
    SETTLEMENT_CONFERENCE = "SETTLEMENT_CONFERENCE"
    TRIAL = "TRIAL"
    BENCH_TRIAL = "BENCH_TRIAL"
    JURY_TRIAL = "JURY_TRIAL"
    HEARING = "HEARING"
    MOTION_HEARING = "MOTION_HEARING"
    APPEAL = "APPEAL"
    SUPREME_COURT_REVIEW = "SUPREME_COURT_REVIEW"
    SENTENCING = "SENTENCING"
    POST_CONVICTION_REVIEW = "POST_CONVICTION_REVIEW"
    PAROLE_HEARING = "PAROLE_HEARING"
    PROBATION_HEARING = "PROBATION_HEARING"
    INJUNCTION_HEARING = "INJUNCTION_HEARING"


class ProceedingStatus(str, PyEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"


class SentenceType(str, PyEnum):
    PRISON = "PRISON"
    LIFE_IMPRISONMENT = "LIFE_IMPRISONMENT"
    DEATH_PENALTY = "DEATH_PENALTY"
    HOUSE_ARREST = "HOUSE_ARREST"
    PROBATION = "PROBATION"
    PAROLE = "PAROLE"
    COMMUNITY_SERVICE = "COMMUNITY_SERVICE"
    FINE = "FINE"
    RESTITUTION = "RESTITUTION"
    SUSPENDED_SENTENCE = "SUSPENDED_SENTENCE"
    DEFERRED_SENTENCE = "DEFERRED_SENTENCE"
    REHABILITATION = "REHABILITATION"
    BANISHMENT = "BANISHMENT"
    CORPORAL_PUNISHMENT = "CORPORAL_PUNISHMENT"
    MILITARY_SERVICE = "MILITARY_SERVICE"
    OTHER = "OTHER"


class ComplianceStatus(str, PyEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    VIOLATED = "VIOLATED"
    COMMUTED = "COMMUTED"
    REVOKED = "REVOKED"
    EXPIRED = "EXPIRED"


class SupervisionLevel(str, PyEnum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    MAXIMUM = "MAXIMUM"


class RehabilitationStatus(str, PyEnum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class AppealStatus(str, PyEnum):
    NONE = "NONE"
    FILED = "FILED"
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    UNDER_REVIEW = "UNDER_REVIEW"


def enum_type(enum_cls) -> Enum:
    """Store the enum *value* (e.g. "HIGH COURT") in a plain VARCHAR column"""
    return Enum(
        enum_cls,
        name=enum_cls.__name__.lower(),
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=64,
        validate_strings=True,
    )


class Case(Base):
    """Root aggregate; every owned row points back here through case_id"""
    __tablename__ = "cases"

    id = Column(Integer, primary_key=True, index=True)
    case_name = Column(String(255), nullable=False, index=True)
    case_type = Column(enum_type(CaseType), nullable=False, index=True)
    case_status = Column(enum_type(CaseStatus), nullable=False, index=True)
    case_description = Column(Text, nullable=False)
    case_date_filed = Column(Date, nullable=False, index=True)
    case_date_closed = Column(Date, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class Person(Base):
    """A real-world person, shared across roles and cases"""
    __tablename__ = "people"

    id = Column(Integer, primary_key=True, index=True)
    person_name = Column(String(255), nullable=False, index=True)
    aadhaar_number = Column(String(14), unique=True, nullable=True)  # natural key, ####-####-####
    phone_number = Column(String(32), nullable=True)
    person_address = Column(Text, nullable=False)
    person_gender = Column(enum_type(PersonGender), nullable=False)
    person_dob = Column(Date, nullable=False)


class Document(Base):
    """Report, transcript or filing; deduplicated by (name, content url)"""
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    # Denormalized owner: the case that first referenced the document
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=True, index=True)
    document_name = Column(String(255), nullable=False)
    document_type = Column(enum_type(DocumentType), nullable=False)
    document_date = Column(Date, nullable=False)
    document_content_url = Column(String(1024), nullable=False)

    __table_args__ = (
        UniqueConstraint("document_name", "document_content_url", name="uq_documents_name_url"),
    )


class Authority(Base):
    """Investigating authority or court, shared across cases"""
    __tablename__ = "authorities"

    id = Column(Integer, primary_key=True, index=True)
    global_id = Column(String(128), unique=True, nullable=False)
    authority_name = Column(String(255), nullable=False)
    authority_type = Column(enum_type(AuthorityType), nullable=False)


class Incident(Base):
    __tablename__ = "incidents"

    id = Column(Integer, primary_key=True, index=True)
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=False, index=True)
    incident_date_from = Column(Date, nullable=False)
    incident_date_to = Column(Date, nullable=False)
    incident_location = Column(String(255), nullable=False)
    incident_status = Column(String(64), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    incident_report_id = Column(Integer, ForeignKey("documents.id"), nullable=True)


class IncidentVictim(Base):
    __tablename__ = "incident_victims"

    incident_id = Column(Integer, ForeignKey("incidents.id"), primary_key=True)
    person_id = Column(Integer, ForeignKey("people.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)  # index in the submitted list
    comments = Column(Text, nullable=True)


class IncidentWitness(Base):
    __tablename__ = "incident_witnesses"

    incident_id = Column(Integer, ForeignKey("incidents.id"), primary_key=True)
    person_id = Column(Integer, ForeignKey("people.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)
    comments = Column(Text, nullable=True)


class Evidence(Base):
    __tablename__ = "evidences"

    id = Column(Integer, primary_key=True, index=True)
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=False, index=True)
    evidence_name = Column(String(255), nullable=False)
    evidence_description = Column(Text, nullable=False)
    evidence_date_found = Column(Date, nullable=False)
    evidence_location = Column(String(255), nullable=False)


class Sentence(Base):
    __tablename__ = "sentences"

    id = Column(Integer, primary_key=True, index=True)
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=False, index=True)
    sentence_date = Column(Date, nullable=False)
    sentence_type = Column(enum_type(SentenceType), nullable=False)
    sentence_duration = Column(Integer, nullable=False)  # in days


class SentencePerson(Base):
    """Sentenced person plus the state of their compliance with the sentence"""
    __tablename__ = "sentence_people"

    sentence_id = Column(Integer, ForeignKey("sentences.id"), primary_key=True)
    person_id = Column(Integer, ForeignKey("people.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)
    compliance_status = Column(enum_type(ComplianceStatus), nullable=False)
    compliance_notes = Column(Text, nullable=True)
    supervision_level = Column(enum_type(SupervisionLevel), nullable=False)
    rehabilitation_status = Column(enum_type(RehabilitationStatus), nullable=False)
    appeal_status = Column(enum_type(AppealStatus), nullable=False)


class InvestigatingAuthority(Base):
    """Link between a case and an authority investigating it over a period"""
    __tablename__ = "investigating_authorities"

    id = Column(Integer, primary_key=True, index=True)
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=False, index=True)
    authority_id = Column(Integer, ForeignKey("authorities.id"), nullable=False, index=True)
    date_from = Column(Date, nullable=False)
    date_to = Column(Date, nullable=True)


class Proceeding(Base):
    __tablename__ = "proceedings"

    id = Column(Integer, primary_key=True, index=True)
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=False, index=True)
    proceeding_type = Column(enum_type(ProceedingType), nullable=False)
    proceeding_status = Column(enum_type(ProceedingStatus), nullable=False)
    date_started = Column(Date, nullable=False)
    date_ended = Column(Date, nullable=True)
    proceeding_notes = Column(Text, nullable=True)
    presiding_officers = Column(Text, nullable=False)
    court_authority_id = Column(Integer, ForeignKey("authorities.id"), nullable=True)
    judge_id = Column(Integer, ForeignKey("people.id"), nullable=True, index=True)
    transcript_id = Column(Integer, ForeignKey("documents.id"), nullable=True)


class ProceedingOtherDocument(Base):
    __tablename__ = "proceeding_other_documents"

    proceeding_id = Column(Integer, ForeignKey("proceedings.id"), primary_key=True)
    document_id = Column(Integer, ForeignKey("documents.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)


class ProceedingPlaintiff(Base):
    __tablename__ = "proceeding_plaintiffs"

    proceeding_id = Column(Integer, ForeignKey("proceedings.id"), primary_key=True)
    person_id = Column(Integer, ForeignKey("people.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)


class ProceedingDefendant(Base):
    __tablename__ = "proceeding_defendants"

    proceeding_id = Column(Integer, ForeignKey("proceedings.id"), primary_key=True)
    person_id = Column(Integer, ForeignKey("people.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)


class ProceedingPlaintiffAdvocate(Base):
    __tablename__ = "proceeding_plaintiff_advocates"

    proceeding_id = Column(Integer, ForeignKey("proceedings.id"), primary_key=True)
    person_id = Column(Integer, ForeignKey("people.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)


class ProceedingDefendantAdvocate(Base):
    __tablename__ = "proceeding_defendant_advocates"

    proceeding_id = Column(Integer, ForeignKey("proceedings.id"), primary_key=True)
    person_id = Column(Integer, ForeignKey("people.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)


class AdminToken(Base):
    """Shared-secret tokens that unlock the admin write endpoints"""
    __tablename__ = "admin_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(255), unique=True, nullable=False)
    description = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    last_used_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_admin_tokens_token_active", "token", "is_active"),
    )
