"""Transactional create, update and delete of whole case aggregates"""
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Iterable, Optional, Set, TypeVar

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.api.v1.schemas.cases import (
    CaseDocument, EvidenceIn, IncidentIn, IncidentPersonIn, InvestigatingAuthorityIn,
    PersonIn, ProceedingIn, SentenceIn,
)
from casetrack.core.exceptions import CaseNotFoundError, CaseStorageError
from casetrack.db.models import (
    Case, Evidence, Incident, IncidentVictim, IncidentWitness, InvestigatingAuthority,
    Proceeding, ProceedingDefendant, ProceedingDefendantAdvocate, ProceedingOtherDocument,
    ProceedingPlaintiff, ProceedingPlaintiffAdvocate, Sentence, SentencePerson,
)
from casetrack.services.case_validator import validate_case_document
from casetrack.services.entity_resolver import EntityResolver
from casetrack.services.reconciliation import (
    CASE_DELETE_PLAN, INCIDENT_DEPENDENTS, PROCEEDING_DEPENDENTS, SENTENCE_DEPENDENTS,
    linked_keys, reconcile_links, release_case_documents, sync_rows,
)

logger = structlog.get_logger()

T = TypeVar("T")

CASE_FIELDS = (
    "case_name", "case_status", "case_type", "case_description",
    "case_date_filed", "case_date_closed",
)

# Proceeding person lists and the association table each one is stored in
PROCEEDING_PARTIES = (
    ("plaintiffs", ProceedingPlaintiff),
    ("plaintiff_advocates", ProceedingPlaintiffAdvocate),
    ("defendants", ProceedingDefendant),
    ("defendant_advocates", ProceedingDefendantAdvocate),
)


class CaseSyncService:
    """
    Writes a validated case document to storage as one transaction.

    Create inserts the case row and every nested entity. Update replaces the
    stored aggregate with the submitted one: rows the document still names by
    id are updated, rows it no longer names are deleted, everything else is
    inserted. Delete removes the case and everything it owns while leaving
    shared people and authorities alone.

    Every operation validates before its first write and either commits all of
    its statements or none of them.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.resolver = EntityResolver(db)

    async def create_case(self, raw: Any) -> int:
        """Validate and store a new case; returns the new case id"""
        document = validate_case_document(raw)

        async with self._transaction("creating"):
            result = await self.db.execute(
                insert(Case.__table__).values(**self._case_values(document))
            )
            case_id = result.inserted_primary_key[0]
            counts = await self._sync_children(case_id, document)

        logger.info("Case created", case_id=case_id, **counts)
        return case_id

    async def update_case(self, case_id: int, raw: Any) -> int:
        """
        Replace the stored state of `case_id` with the submitted document.

        Raises:
            CaseValidationError: before anything is written
            CaseNotFoundError: if the case does not exist
            CaseStorageError: if a statement fails; nothing is changed
        """
        document = validate_case_document(raw)

        async with self._transaction("updating"):
            await self._ensure_case_exists(case_id)
            cases = Case.__table__
            await self.db.execute(
                update(cases).where(cases.c.id == case_id).values(**self._case_values(document))
            )
            counts = await self._sync_children(case_id, document)

        logger.info("Case updated", case_id=case_id, **counts)
        return case_id

    async def delete_case(self, case_id: int) -> None:
        """Delete a case, its owned rows and links, and the documents no other case uses"""
        async with self._transaction("deleting"):
            await self._ensure_case_exists(case_id)
            for step in CASE_DELETE_PLAN:
                table = step.model.__table__
                await self.db.execute(delete(table).where(step.where(case_id)))
            await release_case_documents(self.db, case_id)
            cases = Case.__table__
            await self.db.execute(delete(cases).where(cases.c.id == case_id))

        logger.info("Case deleted", case_id=case_id)

    @asynccontextmanager
    async def _transaction(self, operation: str):
        try:
            yield
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Case write rolled back", operation=operation, error=str(e))
            raise CaseStorageError(operation, str(e)) from e
        except Exception:
            await self.db.rollback()
            raise

    async def _ensure_case_exists(self, case_id: int) -> None:
        result = await self.db.execute(select(Case.id).where(Case.id == case_id))
        if result.scalar_one_or_none() is None:
            raise CaseNotFoundError(case_id)

    @staticmethod
    def _case_values(document: CaseDocument) -> Dict[str, Any]:
        return {name: getattr(document, name) for name in CASE_FIELDS}

    async def _sync_children(self, case_id: int, document: CaseDocument) -> Dict[str, Dict[str, int]]:
        """Reconcile every owned collection of the case; returns per-collection counts"""
        counts: Dict[str, Dict[str, int]] = {}

        incidents = await sync_rows(
            self.db, Incident, "case_id", case_id, document.incidents,
            lambda item: self._incident_values(case_id, item),
            INCIDENT_DEPENDENTS,
        )
        for item, incident_id in incidents.rows:
            await self._sync_incident_people(incident_id, item)
        counts["incidents"] = incidents.summary()

        evidences = await sync_rows(
            self.db, Evidence, "case_id", case_id, document.evidences, self._evidence_values,
        )
        counts["evidences"] = evidences.summary()

        sentences = await sync_rows(
            self.db, Sentence, "case_id", case_id, document.sentences, self._sentence_values,
            SENTENCE_DEPENDENTS,
        )
        for item, sentence_id in sentences.rows:
            await self._sync_sentenced_people(sentence_id, item)
        counts["sentences"] = sentences.summary()

        counts["investigating_authorities"] = await self._replace_investigating_authorities(
            case_id, document.investigating_authorities
        )

        proceedings = await sync_rows(
            self.db, Proceeding, "case_id", case_id, document.proceedings,
            lambda item: self._proceeding_values(case_id, item),
            PROCEEDING_DEPENDENTS,
        )
        for item, proceeding_id in proceedings.rows:
            await self._sync_proceeding_links(case_id, proceeding_id, item)
        counts["proceedings"] = proceedings.summary()

        return counts

    async def _incident_values(self, case_id: int, item: IncidentIn) -> Dict[str, Any]:
        return {
            "incident_date_from": item.incident_date_from,
            "incident_date_to": item.incident_date_to,
            "incident_location": item.incident_location,
            "incident_status": item.incident_status,
            "latitude": item.latitude,
            "longitude": item.longitude,
            "incident_report_id": await self.resolver.resolve_document(item.report, case_id),
        }

    async def _evidence_values(self, item: EvidenceIn) -> Dict[str, Any]:
        return {
            "evidence_name": item.evidence_name,
            "evidence_description": item.evidence_description,
            "evidence_date_found": item.evidence_date_found,
            "evidence_location": item.evidence_location,
        }

    async def _sentence_values(self, item: SentenceIn) -> Dict[str, Any]:
        return {
            "sentence_date": item.sentence_date,
            "sentence_type": item.sentence_type,
            "sentence_duration": item.sentence_duration,
        }

    async def _current_judge(self, case_id: int, proceeding_id: Optional[int]) -> Set[int]:
        if proceeding_id is None:
            return set()
        result = await self.db.execute(
            select(Proceeding.judge_id).where(
                Proceeding.id == proceeding_id,
                Proceeding.case_id == case_id,
                Proceeding.judge_id.is_not(None),
            )
        )
        return set(result.scalars().all())

    async def _proceeding_values(self, case_id: int, item: ProceedingIn) -> Dict[str, Any]:
        return {
            "proceeding_type": item.proceeding_type,
            "proceeding_status": item.proceeding_status,
            "date_started": item.date_started,
            "date_ended": item.date_ended,
            "proceeding_notes": item.proceeding_notes,
            "presiding_officers": item.presiding_officers,
            "court_authority_id": await self.resolver.resolve_authority(item.court_authority),
            "judge_id": await self.resolver.resolve_person(
                item.judge, await self._current_judge(case_id, item.id)
            ),
            "transcript_id": await self.resolver.resolve_document(item.transcript, case_id),
        }

    async def _link_people(
        self,
        model: Any,
        parent_column: str,
        parent_id: int,
        entries: Iterable[T],
        person_of: Callable[[T], PersonIn],
        attrs_of: Optional[Callable[[T], Dict[str, Any]]] = None,
    ) -> None:
        """
        Resolve each entry's person and make them the parent's `model` links.

        Only people already linked to this parent may be updated through their
        `id`. A person listed twice keeps the last entry's attributes.
        """
        linked = await linked_keys(self.db, model, parent_column, parent_id, "person_id")
        desired: Dict[int, Dict[str, Any]] = {}
        for entry in entries:
            person_id = await self.resolver.resolve_person(person_of(entry), linked)
            desired[person_id] = attrs_of(entry) if attrs_of else {}
        await reconcile_links(self.db, model, parent_column, parent_id, "person_id", desired)

    async def _sync_incident_people(self, incident_id: int, item: IncidentIn) -> None:
        for entries, model in ((item.victims, IncidentVictim), (item.witnesses, IncidentWitness)):
            await self._link_people(
                model, "incident_id", incident_id, entries,
                lambda entry: entry.person,
                _incident_person_attrs,
            )

    async def _sync_sentenced_people(self, sentence_id: int, item: SentenceIn) -> None:
        await self._link_people(
            SentencePerson, "sentence_id", sentence_id, item.sentenced_people,
            lambda entry: entry.person,
            lambda entry: {
                "compliance_status": entry.compliance_status,
                "compliance_notes": entry.compliance_notes,
                "supervision_level": entry.supervision_level,
                "rehabilitation_status": entry.rehabilitation_status,
                "appeal_status": entry.appeal_status,
            },
        )

    async def _sync_proceeding_links(self, case_id: int, proceeding_id: int, item: ProceedingIn) -> None:
        documents: Dict[int, Dict[str, Any]] = {}
        for other in item.other_documents:
            documents[await self.resolver.resolve_document(other, case_id)] = {}
        await reconcile_links(
            self.db, ProceedingOtherDocument, "proceeding_id", proceeding_id, "document_id", documents
        )

        for attribute, model in PROCEEDING_PARTIES:
            await self._link_people(
                model, "proceeding_id", proceeding_id, getattr(item, attribute), lambda person: person
            )

    async def _replace_investigating_authorities(
        self, case_id: int, items: Iterable[InvestigatingAuthorityIn]
    ) -> Dict[str, int]:
        # The link carries no client-visible id, so the set is rewritten wholesale.
        table = InvestigatingAuthority.__table__
        result = await self.db.execute(delete(table).where(table.c.case_id == case_id))
        deleted = result.rowcount or 0

        inserted = 0
        for item in items:
            authority_id = await self.resolver.resolve_authority(item.authority)
            await self.db.execute(
                insert(table).values(
                    case_id=case_id,
                    authority_id=authority_id,
                    date_from=item.date_from,
                    date_to=item.date_to,
                )
            )
            inserted += 1

        return {"inserted": inserted, "updated": 0, "deleted": deleted}


def _incident_person_attrs(entry: IncidentPersonIn) -> Dict[str, Any]:
    return {"comments": entry.comments}
