"""Case document schemas

The inbound case document is a nested JSON object. These models define its
recognized shape: unknown keys are dropped, enumerated fields only accept
their closed value sets, and every row-identified item may carry the `id`
the read endpoint returned for it.
"""
from datetime import date
from typing import Annotated, Any, List, Optional, TypeVar

from pydantic import (
    AnyUrl, BaseModel, BeforeValidator, AfterValidator, Field, StringConstraints,
    TypeAdapter, ValidationError,
)

from casetrack.db.models import (
    AppealStatus, AuthorityType, CaseStatus, CaseType, ComplianceStatus, DocumentType,
    PersonGender, ProceedingStatus, ProceedingType, RehabilitationStatus, SentenceType,
    SupervisionLevel,
)

AADHAAR_PATTERN = r"^\d{4}-\d{4}-\d{4}$"

_URL_ADAPTER = TypeAdapter(AnyUrl)

T = TypeVar("T")


def _date_part(value: Any) -> Any:
    """Accept full ISO timestamps ("2024-03-01T00:00:00.000Z") for date fields"""
    if isinstance(value, str) and len(value) > 10 and value[10] == "T":
        return value[:10]
    return value


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


def _check_uri(value: str) -> str:
    # Validate as a URI but keep the caller's exact string; it is half of the
    # document natural key and must round-trip unchanged.
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        raise ValueError("Input should be a valid URI")
    return value


NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]
# Bounded to the width of the column the value is stored in
Name = Annotated[str, StringConstraints(min_length=1, max_length=255)]
ShortLabel = Annotated[str, StringConstraints(min_length=1, max_length=64)]
GlobalId = Annotated[str, StringConstraints(min_length=1, max_length=128)]
PhoneNumber = Annotated[str, StringConstraints(max_length=32)]
AadhaarNumber = Annotated[str, StringConstraints(pattern=AADHAAR_PATTERN)]
IsoDate = Annotated[date, BeforeValidator(_date_part)]
ContentUrl = Annotated[str, StringConstraints(max_length=1024), AfterValidator(_check_uri)]
ItemList = Annotated[List[T], BeforeValidator(_none_as_empty)]


class PersonIn(BaseModel):
    """A person embedded anywhere in the document (victim, judge, advocate, ...)"""
    id: Optional[int] = None
    person_name: Name
    aadhaar_number: Optional[AadhaarNumber] = None
    phone_number: Optional[PhoneNumber] = None
    person_address: NonEmptyStr
    person_gender: PersonGender
    person_dob: IsoDate


class DocumentIn(BaseModel):
    id: Optional[int] = None
    document_name: Name
    document_type: DocumentType
    document_date: IsoDate
    document_content_url: ContentUrl


class AuthorityIn(BaseModel):
    id: Optional[int] = None
    authority_name: Name
    authority_type: AuthorityType
    global_id: GlobalId


class IncidentPersonIn(BaseModel):
    """Victim or witness of an incident"""
    person: PersonIn
    comments: Optional[str] = None


class IncidentIn(BaseModel):
    id: Optional[int] = None
    incident_date_from: IsoDate
    incident_date_to: IsoDate
    incident_location: Name
    incident_status: ShortLabel
    latitude: float
    longitude: float
    victims: ItemList[IncidentPersonIn] = Field(default_factory=list)
    witnesses: ItemList[IncidentPersonIn] = Field(default_factory=list)
    report: Optional[DocumentIn] = None


class EvidenceIn(BaseModel):
    id: Optional[int] = None
    evidence_name: Name
    evidence_description: NonEmptyStr
    evidence_date_found: IsoDate
    evidence_location: Name


class SentencedPersonIn(BaseModel):
    person: PersonIn
    compliance_status: ComplianceStatus
    compliance_notes: Optional[str] = None
    supervision_level: SupervisionLevel
    rehabilitation_status: RehabilitationStatus
    appeal_status: AppealStatus


class SentenceIn(BaseModel):
    id: Optional[int] = None
    sentence_date: IsoDate
    sentence_type: SentenceType
    sentence_duration: int = Field(ge=0)
    sentenced_people: ItemList[SentencedPersonIn] = Field(default_factory=list)


class InvestigatingAuthorityIn(BaseModel):
    authority: AuthorityIn
    date_from: IsoDate
    date_to: Optional[IsoDate] = None


class ProceedingIn(BaseModel):
    id: Optional[int] = None
    proceeding_type: ProceedingType
    proceeding_status: ProceedingStatus
    date_started: IsoDate
    date_ended: Optional[IsoDate] = None
    court_authority: Optional[AuthorityIn] = None
    presiding_officers: NonEmptyStr
    proceeding_notes: Optional[str] = None
    judge: Optional[PersonIn] = None
    transcript: Optional[DocumentIn] = None
    other_documents: ItemList[DocumentIn] = Field(default_factory=list)
    plaintiffs: ItemList[PersonIn] = Field(default_factory=list)
    plaintiff_advocates: ItemList[PersonIn] = Field(default_factory=list)
    defendants: ItemList[PersonIn] = Field(default_factory=list)
    defendant_advocates: ItemList[PersonIn] = Field(default_factory=list)


class CaseDocument(BaseModel):
    """Root of the admin case document"""
    case_name: Name
    case_status: CaseStatus
    case_type: CaseType
    case_description: NonEmptyStr
    case_date_filed: IsoDate
    case_date_closed: Optional[IsoDate] = None

    incidents: ItemList[IncidentIn] = Field(default_factory=list)
    evidences: ItemList[EvidenceIn] = Field(default_factory=list)
    sentences: ItemList[SentenceIn] = Field(default_factory=list)
    investigating_authorities: ItemList[InvestigatingAuthorityIn] = Field(default_factory=list)
    proceedings: ItemList[ProceedingIn] = Field(default_factory=list)


class CaseWriteResponse(BaseModel):
    """Response for create/update"""
    message: str
    case_id: int


class MessageResponse(BaseModel):
    message: str


class TokenCheckResponse(BaseModel):
    message: str
    isValid: bool
