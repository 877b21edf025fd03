"""Read-only queries behind the public case, people and analytics endpoints"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import Integer, String, cast, exists, func, literal_column, null, or_, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.db.models import (
    Authority, Case, CaseStatus, CaseType, Document, Evidence, Incident, IncidentVictim,
    IncidentWitness, InvestigatingAuthority, Person, Proceeding, ProceedingDefendant,
    ProceedingDefendantAdvocate, ProceedingPlaintiff, ProceedingPlaintiffAdvocate,
    Sentence, SentencePerson,
)
from casetrack.services.case_assembler import serialize_case_summary, serialize_person

TRENDING_LIMIT = 3
LOCATION_LIMIT = 20

PROCEEDING_ROLES = (
    ("PLAINTIFF", ProceedingPlaintiff),
    ("PLAINTIFF_ADVOCATE", ProceedingPlaintiffAdvocate),
    ("DEFENDANT", ProceedingDefendant),
    ("DEFENDANT_ADVOCATE", ProceedingDefendantAdvocate),
)

# Same-day activity ties go to the higher rank
PROCEEDING_RANK = 3
EVIDENCE_RANK = 2
INCIDENT_RANK = 1


def _news(rank: int, label: str, place: Optional[str]) -> str:
    """One line describing a case's latest activity"""
    if rank == PROCEEDING_RANK:
        return f"New proceeding of type {label} started"
    if rank == EVIDENCE_RANK:
        return f'New evidence "{label}" discovered at {place}'
    return f"New incident reported at {label}"


def _case_people():
    """(case_id, person_id) for every role a person can hold in a case"""
    selects = [
        select(Incident.case_id, IncidentVictim.person_id)
        .select_from(Incident).join(IncidentVictim, IncidentVictim.incident_id == Incident.id),
        select(Incident.case_id, IncidentWitness.person_id)
        .select_from(Incident).join(IncidentWitness, IncidentWitness.incident_id == Incident.id),
        select(Proceeding.case_id, Proceeding.judge_id.label("person_id"))
        .where(Proceeding.judge_id.is_not(None)),
        select(Sentence.case_id, SentencePerson.person_id)
        .select_from(Sentence).join(SentencePerson, SentencePerson.sentence_id == Sentence.id),
    ]
    for _, link in PROCEEDING_ROLES:
        selects.append(
            select(Proceeding.case_id, link.person_id)
            .select_from(Proceeding).join(link, link.proceeding_id == Proceeding.id)
        )
    return union_all(*selects).subquery("case_people")


class CaseQueryService:
    """Search and aggregate views over stored cases"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_cases(
        self,
        search: Optional[str] = None,
        case_type: Optional[CaseType] = None,
        status: Optional[CaseStatus] = None,
        date_after: Optional[date] = None,
        date_before: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """
        List case summaries, newest filing first.

        `search` is a case-insensitive substring match against the case's own
        text fields, its investigating authorities, proceeding types, document
        names, evidence, incident locations and the names of everyone linked
        to it in any role.
        """
        query = select(Case)

        search = (search or "").strip()
        if search:
            query = query.where(self._search_condition(f"%{search}%"))
        if case_type is not None:
            query = query.where(Case.case_type == case_type)
        if status is not None:
            query = query.where(Case.case_status == status)
        if date_after is not None:
            query = query.where(Case.case_date_filed >= date_after)
        if date_before is not None:
            query = query.where(Case.case_date_filed <= date_before)

        result = await self.db.execute(query.order_by(Case.case_date_filed.desc(), Case.id.desc()))
        return [serialize_case_summary(case) for case in result.scalars().all()]

    @staticmethod
    def _search_condition(pattern: str):
        case_people = _case_people()
        return or_(
            Case.case_name.ilike(pattern),
            cast(Case.case_type, String).ilike(pattern),
            cast(Case.case_status, String).ilike(pattern),
            Case.case_description.ilike(pattern),
            exists(
                select(InvestigatingAuthority.id)
                .join(Authority, InvestigatingAuthority.authority_id == Authority.id)
                .where(InvestigatingAuthority.case_id == Case.id, Authority.authority_name.ilike(pattern))
            ),
            exists(
                select(Proceeding.id)
                .where(Proceeding.case_id == Case.id, cast(Proceeding.proceeding_type, String).ilike(pattern))
            ),
            exists(
                select(Document.id)
                .where(Document.case_id == Case.id, Document.document_name.ilike(pattern))
            ),
            exists(
                select(Evidence.id).where(
                    Evidence.case_id == Case.id,
                    or_(Evidence.evidence_name.ilike(pattern), Evidence.evidence_description.ilike(pattern)),
                )
            ),
            exists(
                select(Incident.id)
                .where(Incident.case_id == Case.id, Incident.incident_location.ilike(pattern))
            ),
            exists(
                select(Person.id)
                .join(case_people, case_people.c.person_id == Person.id)
                .where(case_people.c.case_id == Case.id, Person.person_name.ilike(pattern))
            ),
        )

    async def list_people(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        """List people ordered by name, each with every case role they hold"""
        query = select(Person)
        search = (search or "").strip()
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                Person.person_name.ilike(pattern),
                Person.aadhaar_number.ilike(pattern),
                Person.phone_number.ilike(pattern),
                Person.person_address.ilike(pattern),
            ))

        result = await self.db.execute(query.order_by(Person.person_name, Person.id))
        people = {}
        for person in result.scalars().all():
            entry = serialize_person(person)
            entry["case_associations"] = []
            people[person.id] = entry

        if people:
            for person_id, association in await self._associations(list(people)):
                people[person_id]["case_associations"].append(association)

        return list(people.values())

    async def _associations(self, person_ids: List[int]) -> List[Tuple[int, Dict[str, Any]]]:
        associations = []

        for role, link in (("VICTIM", IncidentVictim), ("WITNESS", IncidentWitness)):
            result = await self.db.execute(
                select(link.person_id, Case.id, Case.case_name, link.incident_id, link.comments)
                .join(Incident, link.incident_id == Incident.id)
                .join(Case, Incident.case_id == Case.id)
                .where(link.person_id.in_(person_ids))
                .order_by(Case.id, link.incident_id)
            )
            for person_id, case_id, case_name, incident_id, comments in result.all():
                associations.append((person_id, {
                    "role": role, "case_id": case_id, "case_name": case_name,
                    "incident_id": incident_id, "comments": comments,
                }))

        result = await self.db.execute(
            select(Proceeding.judge_id, Case.id, Case.case_name, Proceeding.id)
            .join(Case, Proceeding.case_id == Case.id)
            .where(Proceeding.judge_id.in_(person_ids))
            .order_by(Case.id, Proceeding.id)
        )
        for person_id, case_id, case_name, proceeding_id in result.all():
            associations.append((person_id, {
                "role": "JUDGE", "case_id": case_id, "case_name": case_name,
                "proceeding_id": proceeding_id,
            }))

        for role, link in PROCEEDING_ROLES:
            result = await self.db.execute(
                select(link.person_id, Case.id, Case.case_name, link.proceeding_id)
                .join(Proceeding, link.proceeding_id == Proceeding.id)
                .join(Case, Proceeding.case_id == Case.id)
                .where(link.person_id.in_(person_ids))
                .order_by(Case.id, link.proceeding_id)
            )
            for person_id, case_id, case_name, proceeding_id in result.all():
                associations.append((person_id, {
                    "role": role, "case_id": case_id, "case_name": case_name,
                    "proceeding_id": proceeding_id,
                }))

        result = await self.db.execute(
            select(SentencePerson, Case.id, Case.case_name)
            .join(Sentence, SentencePerson.sentence_id == Sentence.id)
            .join(Case, Sentence.case_id == Case.id)
            .where(SentencePerson.person_id.in_(person_ids))
            .order_by(Case.id, SentencePerson.sentence_id)
        )
        for link, case_id, case_name in result.all():
            associations.append((link.person_id, {
                "role": "SENTENCED", "case_id": case_id, "case_name": case_name,
                "sentence_id": link.sentence_id,
                "compliance_status": link.compliance_status.value,
                "supervision_level": link.supervision_level.value,
                "rehabilitation_status": link.rehabilitation_status.value,
                "appeal_status": link.appeal_status.value,
            }))

        return associations

    @staticmethod
    def _latest_activity():
        """
        Subquery of each case's latest proceeding start, evidence find or
        incident start: (case_id, activity_date, rank, label, place).
        """
        activities = union_all(
            select(
                Proceeding.case_id,
                Proceeding.date_started.label("activity_date"),
                literal_column(str(PROCEEDING_RANK), Integer).label("rank"),
                cast(Proceeding.proceeding_type, String).label("label"),
                cast(null(), String).label("place"),
            ),
            select(
                Evidence.case_id,
                Evidence.evidence_date_found,
                literal_column(str(EVIDENCE_RANK), Integer),
                Evidence.evidence_name,
                Evidence.evidence_location,
            ),
            select(
                Incident.case_id,
                Incident.incident_date_from,
                literal_column(str(INCIDENT_RANK), Integer),
                Incident.incident_location,
                cast(null(), String),
            ),
        ).subquery("activities")

        ranked = select(
            activities,
            func.row_number().over(
                partition_by=activities.c.case_id,
                order_by=(activities.c.activity_date.desc(), activities.c.rank.desc()),
            ).label("row_number"),
        ).subquery("ranked_activities")

        return select(ranked).where(ranked.c.row_number == 1).subquery("latest_activity")

    async def trending_cases(self) -> List[Dict[str, Any]]:
        """The cases with the most recent activity, each with a line describing it"""
        latest = self._latest_activity()
        result = await self.db.execute(
            select(Case.id, Case.case_name, latest.c.activity_date, latest.c.rank, latest.c.label, latest.c.place)
            .outerjoin(latest, latest.c.case_id == Case.id)
            .order_by(
                latest.c.activity_date.is_(None),
                latest.c.activity_date.desc(),
                latest.c.rank.desc(),
                Case.id.desc(),
            )
            .limit(TRENDING_LIMIT)
        )

        return [
            {
                "case_id": case_id,
                "case_name": case_name,
                "relevant_date": activity_date,
                "news": _news(rank, label, place) if rank is not None else None,
            }
            for case_id, case_name, activity_date, rank, label, place in result.all()
        ]

    async def location_cases(self) -> List[Dict[str, Any]]:
        """Cases whose latest incident has coordinates, most recently active first"""
        ranked_incidents = select(
            Incident,
            func.row_number().over(
                partition_by=Incident.case_id,
                order_by=(Incident.incident_date_from.desc(), Incident.id.desc()),
            ).label("row_number"),
        ).subquery("ranked_incidents")
        latest_incident = (
            select(ranked_incidents)
            .where(ranked_incidents.c.row_number == 1, ranked_incidents.c.latitude.is_not(None))
            .subquery("latest_incident")
        )
        latest = self._latest_activity()

        result = await self.db.execute(
            select(
                Case.id, Case.case_name, Case.case_type,
                latest_incident.c.incident_location, latest_incident.c.latitude,
                latest_incident.c.longitude, latest.c.activity_date,
            )
            .join(latest_incident, latest_incident.c.case_id == Case.id)
            .join(latest, latest.c.case_id == Case.id)
            .order_by(latest.c.activity_date.desc(), Case.id.desc())
            .limit(LOCATION_LIMIT)
        )

        return [
            {
                "case_id": case_id,
                "case_name": case_name,
                "case_type": case_type.value,
                "incident_location": location,
                "latitude": latitude,
                "longitude": longitude,
                "latest_activity_date": activity_date,
            }
            for case_id, case_name, case_type, location, latitude, longitude, activity_date in result.all()
        ]

    async def case_type_statistics(self) -> List[Dict[str, Any]]:
        """Every case type, including ones without cases, with its cases' filing dates"""
        result = await self.db.execute(
            select(Case.id, Case.case_type, Case.case_date_filed).order_by(Case.id)
        )
        by_type: Dict[CaseType, List[Dict[str, Any]]] = {case_type: [] for case_type in CaseType}
        for case_id, case_type, date_filed in result.all():
            by_type[case_type].append({"case_id": case_id, "date_filed": date_filed})

        return [
            {"case_type": case_type.value, "cases": cases}
            for case_type, cases in by_type.items()
        ]
