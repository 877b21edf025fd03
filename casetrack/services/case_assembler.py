"""Assembles the full nested case document from normalized rows"""
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.core.exceptions import CaseNotFoundError
from casetrack.db.models import (
    Authority, Case, Document, Evidence, Incident, IncidentVictim, IncidentWitness,
    InvestigatingAuthority, Person, Proceeding, ProceedingDefendant,
    ProceedingDefendantAdvocate, ProceedingOtherDocument, ProceedingPlaintiff,
    ProceedingPlaintiffAdvocate, Sentence, SentencePerson,
)


def _value(member) -> Optional[str]:
    return member.value if member is not None else None


def serialize_person(person: Optional[Person]) -> Optional[Dict[str, Any]]:
    if person is None:
        return None
    return {
        "id": person.id,
        "person_name": person.person_name,
        "aadhaar_number": person.aadhaar_number,
        "phone_number": person.phone_number,
        "person_address": person.person_address,
        "person_gender": _value(person.person_gender),
        "person_dob": person.person_dob,
    }


def serialize_document(document: Optional[Document]) -> Optional[Dict[str, Any]]:
    if document is None:
        return None
    return {
        "id": document.id,
        "document_name": document.document_name,
        "document_type": _value(document.document_type),
        "document_date": document.document_date,
        "document_content_url": document.document_content_url,
    }


def serialize_authority(authority: Optional[Authority]) -> Optional[Dict[str, Any]]:
    if authority is None:
        return None
    return {
        "id": authority.id,
        "authority_name": authority.authority_name,
        "authority_type": _value(authority.authority_type),
        "global_id": authority.global_id,
    }


def serialize_case_summary(case: Case) -> Dict[str, Any]:
    return {
        "id": case.id,
        "case_name": case.case_name,
        "case_status": _value(case.case_status),
        "case_type": _value(case.case_type),
        "case_description": case.case_description,
        "case_date_filed": case.case_date_filed,
        "case_date_closed": case.case_date_closed,
    }


class CaseReadAssembler:
    """
    Reads one case and everything attached to it.

    The output has the same shape the admin endpoints accept, with every row
    carrying its `id`, so a client can edit the result and submit it back as
    an update. Owned rows are ordered by id and association lists by the
    position they were submitted in.

    Every query runs on the one session it was given. Without a snapshot
    isolation level a concurrent write can land between two of the queries.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _all(self, query) -> List[Any]:
        # Core writes bypass the identity map; always refresh loaded objects.
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return result.all()

    async def assemble(self, case_id: int) -> Dict[str, Any]:
        """
        Build the case document for `case_id`.

        Raises:
            CaseNotFoundError: if the case does not exist
        """
        rows = await self._all(select(Case).where(Case.id == case_id))
        if not rows:
            raise CaseNotFoundError(case_id)

        document = serialize_case_summary(rows[0][0])
        document["incidents"] = await self._incidents(case_id)
        document["evidences"] = await self._evidences(case_id)
        document["sentences"] = await self._sentences(case_id)
        document["investigating_authorities"] = await self._investigating_authorities(case_id)
        document["proceedings"] = await self._proceedings(case_id)
        return document

    async def _incidents(self, case_id: int) -> List[Dict[str, Any]]:
        rows = await self._all(
            select(Incident, Document)
            .outerjoin(Document, Incident.incident_report_id == Document.id)
            .where(Incident.case_id == case_id)
            .order_by(Incident.id)
        )

        incidents = []
        for incident, report in rows:
            incidents.append({
                "id": incident.id,
                "incident_date_from": incident.incident_date_from,
                "incident_date_to": incident.incident_date_to,
                "incident_location": incident.incident_location,
                "incident_status": incident.incident_status,
                "latitude": incident.latitude,
                "longitude": incident.longitude,
                "victims": await self._incident_people(IncidentVictim, incident.id),
                "witnesses": await self._incident_people(IncidentWitness, incident.id),
                "report": serialize_document(report),
            })
        return incidents

    async def _incident_people(self, link, incident_id: int) -> List[Dict[str, Any]]:
        rows = await self._all(
            select(Person, link.comments)
            .join(link, link.person_id == Person.id)
            .where(link.incident_id == incident_id)
            .order_by(link.position, Person.id)
        )
        return [{"person": serialize_person(person), "comments": comments} for person, comments in rows]

    async def _evidences(self, case_id: int) -> List[Dict[str, Any]]:
        rows = await self._all(
            select(Evidence).where(Evidence.case_id == case_id).order_by(Evidence.id)
        )
        return [
            {
                "id": evidence.id,
                "evidence_name": evidence.evidence_name,
                "evidence_description": evidence.evidence_description,
                "evidence_date_found": evidence.evidence_date_found,
                "evidence_location": evidence.evidence_location,
            }
            for (evidence,) in rows
        ]

    async def _sentences(self, case_id: int) -> List[Dict[str, Any]]:
        rows = await self._all(
            select(Sentence).where(Sentence.case_id == case_id).order_by(Sentence.id)
        )

        sentences = []
        for (sentence,) in rows:
            people = await self._all(
                select(Person, SentencePerson)
                .join(SentencePerson, SentencePerson.person_id == Person.id)
                .where(SentencePerson.sentence_id == sentence.id)
                .order_by(SentencePerson.position, Person.id)
            )
            sentences.append({
                "id": sentence.id,
                "sentence_date": sentence.sentence_date,
                "sentence_type": _value(sentence.sentence_type),
                "sentence_duration": sentence.sentence_duration,
                "sentenced_people": [
                    {
                        "person": serialize_person(person),
                        "compliance_status": _value(link.compliance_status),
                        "compliance_notes": link.compliance_notes,
                        "supervision_level": _value(link.supervision_level),
                        "rehabilitation_status": _value(link.rehabilitation_status),
                        "appeal_status": _value(link.appeal_status),
                    }
                    for person, link in people
                ],
            })
        return sentences

    async def _investigating_authorities(self, case_id: int) -> List[Dict[str, Any]]:
        rows = await self._all(
            select(InvestigatingAuthority, Authority)
            .join(Authority, InvestigatingAuthority.authority_id == Authority.id)
            .where(InvestigatingAuthority.case_id == case_id)
            .order_by(InvestigatingAuthority.id)
        )
        return [
            {
                "authority": serialize_authority(authority),
                "date_from": link.date_from,
                "date_to": link.date_to,
            }
            for link, authority in rows
        ]

    async def _proceedings(self, case_id: int) -> List[Dict[str, Any]]:
        rows = await self._all(
            select(Proceeding, Authority, Person, Document)
            .outerjoin(Authority, Proceeding.court_authority_id == Authority.id)
            .outerjoin(Person, Proceeding.judge_id == Person.id)
            .outerjoin(Document, Proceeding.transcript_id == Document.id)
            .where(Proceeding.case_id == case_id)
            .order_by(Proceeding.id)
        )

        proceedings = []
        for proceeding, court, judge, transcript in rows:
            other_documents = await self._all(
                select(Document)
                .join(ProceedingOtherDocument, ProceedingOtherDocument.document_id == Document.id)
                .where(ProceedingOtherDocument.proceeding_id == proceeding.id)
                .order_by(ProceedingOtherDocument.position, Document.id)
            )
            proceedings.append({
                "id": proceeding.id,
                "proceeding_type": _value(proceeding.proceeding_type),
                "proceeding_status": _value(proceeding.proceeding_status),
                "date_started": proceeding.date_started,
                "date_ended": proceeding.date_ended,
                "court_authority": serialize_authority(court),
                "presiding_officers": proceeding.presiding_officers,
                "proceeding_notes": proceeding.proceeding_notes,
                "judge": serialize_person(judge),
                "transcript": serialize_document(transcript),
                "other_documents": [serialize_document(doc) for (doc,) in other_documents],
                "plaintiffs": await self._proceeding_people(ProceedingPlaintiff, proceeding.id),
                "plaintiff_advocates": await self._proceeding_people(ProceedingPlaintiffAdvocate, proceeding.id),
                "defendants": await self._proceeding_people(ProceedingDefendant, proceeding.id),
                "defendant_advocates": await self._proceeding_people(ProceedingDefendantAdvocate, proceeding.id),
            })
        return proceedings

    async def _proceeding_people(self, link, proceeding_id: int) -> List[Dict[str, Any]]:
        rows = await self._all(
            select(Person)
            .join(link, link.person_id == Person.id)
            .where(link.proceeding_id == proceeding_id)
            .order_by(link.position, Person.id)
        )
        return [serialize_person(person) for (person,) in rows]
