"""
Set reconciliation for a case's owned rows and association links.

A case update carries the complete desired state of every collection. The
routines here diff that state against what is stored for one parent row and
issue the deletes, updates and inserts that make storage match it. They only
execute statements on the session they are given; committing is the caller's
job.
"""
from dataclasses import dataclass, field
from typing import (
    Any, Awaitable, Callable, Dict, Hashable, List, Optional, Sequence, Set, Tuple, TypeVar,
)

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.db.models import (
    Document, Evidence, Incident, IncidentVictim, IncidentWitness, InvestigatingAuthority,
    Proceeding, ProceedingDefendant, ProceedingDefendantAdvocate, ProceedingOtherDocument,
    ProceedingPlaintiff, ProceedingPlaintiffAdvocate, Sentence, SentencePerson,
)

T = TypeVar("T")


@dataclass(frozen=True)
class ChildLink:
    """An association table whose `column` references a parent row id"""
    model: Any
    column: str


INCIDENT_DEPENDENTS = (
    ChildLink(IncidentVictim, "incident_id"),
    ChildLink(IncidentWitness, "incident_id"),
)

SENTENCE_DEPENDENTS = (
    ChildLink(SentencePerson, "sentence_id"),
)

PROCEEDING_DEPENDENTS = (
    ChildLink(ProceedingOtherDocument, "proceeding_id"),
    ChildLink(ProceedingPlaintiff, "proceeding_id"),
    ChildLink(ProceedingPlaintiffAdvocate, "proceeding_id"),
    ChildLink(ProceedingDefendant, "proceeding_id"),
    ChildLink(ProceedingDefendantAdvocate, "proceeding_id"),
)


@dataclass(frozen=True)
class DeleteStep:
    """
    One statement of the case delete plan.

    Without `parent` the step deletes `model` rows whose `case_id` is the case.
    With `parent` it deletes `model` rows whose `via` column points at a
    `parent` row owned by the case.
    """
    model: Any
    parent: Optional[Any] = None
    via: Optional[str] = None

    def where(self, case_id: int):
        table = self.model.__table__
        if self.parent is None:
            return table.c.case_id == case_id
        parent_table = self.parent.__table__
        return table.c[self.via].in_(
            select(parent_table.c.id).where(parent_table.c.case_id == case_id)
        )


def _dependents_of(parent: Any, links: Sequence[ChildLink]) -> Tuple[DeleteStep, ...]:
    return tuple(DeleteStep(link.model, parent=parent, via=link.column) for link in links)


# Children before parents; documents and the case row are handled after this plan.
CASE_DELETE_PLAN: Tuple[DeleteStep, ...] = (
    DeleteStep(InvestigatingAuthority),
    DeleteStep(Evidence),
    *_dependents_of(Proceeding, PROCEEDING_DEPENDENTS),
    DeleteStep(Proceeding),
    *_dependents_of(Incident, INCIDENT_DEPENDENTS),
    DeleteStep(Incident),
    *_dependents_of(Sentence, SENTENCE_DEPENDENTS),
    DeleteStep(Sentence),
)


@dataclass
class LinkDiff:
    """Keys touched while reconciling one parent's links"""
    inserted: List[Hashable] = field(default_factory=list)
    updated: List[Hashable] = field(default_factory=list)
    deleted: Set[Hashable] = field(default_factory=set)


@dataclass
class RowSync:
    """Outcome of reconciling one owned collection of a case"""
    rows: List[Tuple[Any, int]] = field(default_factory=list)
    inserted: List[int] = field(default_factory=list)
    updated: List[int] = field(default_factory=list)
    deleted: Set[int] = field(default_factory=set)

    def summary(self) -> Dict[str, int]:
        return {
            "inserted": len(self.inserted),
            "updated": len(self.updated),
            "deleted": len(self.deleted),
        }


async def linked_keys(
    db: AsyncSession,
    model: Any,
    parent_column: str,
    parent_id: Optional[int],
    key_column: str,
) -> Set[Hashable]:
    """Keys currently linked to one parent through `model`"""
    if parent_id is None:
        return set()
    table = model.__table__
    result = await db.execute(select(table.c[key_column]).where(table.c[parent_column] == parent_id))
    return set(result.scalars().all())


async def reconcile_links(
    db: AsyncSession,
    model: Any,
    parent_column: str,
    parent_id: int,
    key_column: str,
    desired: Dict[Hashable, Dict[str, Any]],
) -> LinkDiff:
    """
    Make the `model` links of one parent equal to `desired`.

    `desired` maps the link key (a person or document id) to the link's extra
    attributes. Stored keys missing from it are deleted, keys present on both
    sides get their attributes overwritten, new keys are inserted. Every link
    stores its index in `desired` as `position` so reads keep the submitted order.
    """
    table = model.__table__
    parent_col = table.c[parent_column]
    key_col = table.c[key_column]

    existing = await linked_keys(db, model, parent_column, parent_id, key_column)

    diff = LinkDiff(deleted=existing - set(desired))
    if diff.deleted:
        await db.execute(
            delete(table).where(parent_col == parent_id, key_col.in_(sorted(diff.deleted)))
        )

    for position, (key, attrs) in enumerate(desired.items()):
        values = {**attrs, "position": position}
        if key in existing:
            await db.execute(
                update(table).where(parent_col == parent_id, key_col == key).values(**values)
            )
            diff.updated.append(key)
        else:
            await db.execute(
                insert(table).values({parent_column: parent_id, key_column: key, **values})
            )
            diff.inserted.append(key)

    return diff


async def delete_rows(
    db: AsyncSession,
    model: Any,
    ids: Set[int],
    dependents: Sequence[ChildLink] = (),
) -> None:
    """Delete rows by id together with the association rows that reference them"""
    if not ids:
        return
    for link in dependents:
        link_table = link.model.__table__
        await db.execute(delete(link_table).where(link_table.c[link.column].in_(sorted(ids))))
    table = model.__table__
    await db.execute(delete(table).where(table.c.id.in_(sorted(ids))))


async def sync_rows(
    db: AsyncSession,
    model: Any,
    parent_column: str,
    parent_id: int,
    items: Sequence[T],
    build_values: Callable[[T], Awaitable[Dict[str, Any]]],
    dependents: Sequence[ChildLink] = (),
) -> RowSync:
    """
    Reconcile the `model` rows owned by one parent against `items`.

    An item whose `id` names a row currently owned by the parent updates that
    row. Any other item (no id, a foreign id, a repeated id) is inserted as a
    new row. Owned rows no item claimed are deleted with their dependents.

    Returns the (item, row id) pairs in input order so callers can reconcile
    each row's own links.
    """
    table = model.__table__
    result = await db.execute(select(table.c.id).where(table.c[parent_column] == parent_id))
    existing = set(result.scalars().all())

    claimed: Set[int] = set()
    for item in items:
        item_id = getattr(item, "id", None)
        if item_id in existing:
            claimed.add(item_id)

    sync = RowSync(deleted=existing - claimed)
    await delete_rows(db, model, sync.deleted, dependents)

    seen: Set[int] = set()
    for item in items:
        values = await build_values(item)
        item_id = getattr(item, "id", None)

        if item_id in claimed and item_id not in seen:
            seen.add(item_id)
            await db.execute(update(table).where(table.c.id == item_id).values(**values))
            sync.updated.append(item_id)
            sync.rows.append((item, item_id))
            continue

        result = await db.execute(insert(table).values({parent_column: parent_id, **values}))
        row_id = result.inserted_primary_key[0]
        sync.inserted.append(row_id)
        sync.rows.append((item, row_id))

    return sync


async def release_case_documents(db: AsyncSession, case_id: int) -> None:
    """
    Remove the documents owned by a case whose rows are already deleted.

    Documents still referenced by another case's incident or proceeding are
    kept and lose their owner instead.
    """
    documents = Document.__table__
    incidents = Incident.__table__
    proceedings = Proceeding.__table__
    other_documents = ProceedingOtherDocument.__table__

    still_referenced = or_(
        documents.c.id.in_(
            select(incidents.c.incident_report_id).where(incidents.c.incident_report_id.is_not(None))
        ),
        documents.c.id.in_(
            select(proceedings.c.transcript_id).where(proceedings.c.transcript_id.is_not(None))
        ),
        documents.c.id.in_(select(other_documents.c.document_id)),
    )

    await db.execute(
        update(documents)
        .where(documents.c.case_id == case_id, still_referenced)
        .values(case_id=None)
    )
    await db.execute(delete(documents).where(documents.c.case_id == case_id))
