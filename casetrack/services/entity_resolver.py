"""Find-or-create for people, documents and authorities shared across cases"""
import logging
from typing import Any, Collection, Dict, Optional, Sequence

from sqlalchemy import Table, func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.api.v1.schemas.cases import AuthorityIn, DocumentIn, PersonIn
from casetrack.db.models import Authority, Document, Person

logger = logging.getLogger(__name__)

PERSON_MUTABLE_FIELDS = ("person_name", "phone_number", "person_address", "person_gender", "person_dob")
DOCUMENT_MUTABLE_FIELDS = ("document_type", "document_date")
AUTHORITY_MUTABLE_FIELDS = ("authority_name", "authority_type")

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class EntityResolver:
    """
    Resolve embedded people, documents and authorities to row ids.

    Each entity has a natural key (aadhaar number; document name + content URL;
    authority global id). A match has its mutable fields overwritten in place,
    otherwise a new row is inserted. On PostgreSQL and SQLite this is a single
    INSERT ... ON CONFLICT DO UPDATE against the unique constraint, so two
    concurrent submissions of the same key converge on one row.

    Runs inside the caller's transaction and never commits.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_person(
        self, person: Optional[PersonIn], linked_ids: Collection[int] = ()
    ) -> Optional[int]:
        """
        Resolve a person to a `people.id`.

        Precedence:
            1. aadhaar number present: upsert on aadhaar
            2. `id` in `linked_ids`, the people already linked to the row
               being written: update that person's mutable fields
            3. otherwise insert a new person

        Any other `id` is ignored, so a document can never rewrite a person
        it does not already reference.
        """
        if person is None:
            return None

        values = {field: getattr(person, field) for field in PERSON_MUTABLE_FIELDS}
        table = Person.__table__

        if person.aadhaar_number:
            return await self._upsert(
                table,
                {**values, "aadhaar_number": person.aadhaar_number},
                key_columns=("aadhaar_number",),
                update_columns=PERSON_MUTABLE_FIELDS,
            )

        if person.id is not None:
            if person.id in linked_ids:
                await self.db.execute(
                    update(table).where(table.c.id == person.id).values(**values)
                )
                return person.id
            logger.debug(f"Person {person.id} is not linked here, inserting a new row")

        result = await self.db.execute(insert(table).values(**values))
        return result.inserted_primary_key[0]

    async def resolve_document(self, document: Optional[DocumentIn], case_id: int) -> Optional[int]:
        """Resolve a document by (name, content URL); new documents are owned by `case_id`"""
        if document is None:
            return None

        return await self._upsert(
            Document.__table__,
            {
                "case_id": case_id,
                "document_name": document.document_name,
                "document_type": document.document_type,
                "document_date": document.document_date,
                "document_content_url": document.document_content_url,
            },
            key_columns=("document_name", "document_content_url"),
            update_columns=DOCUMENT_MUTABLE_FIELDS,
            adopt_columns=("case_id",),
        )

    async def resolve_authority(self, authority: Optional[AuthorityIn]) -> Optional[int]:
        """Resolve an authority by its global id"""
        if authority is None:
            return None

        return await self._upsert(
            Authority.__table__,
            {
                "global_id": authority.global_id,
                "authority_name": authority.authority_name,
                "authority_type": authority.authority_type,
            },
            key_columns=("global_id",),
            update_columns=AUTHORITY_MUTABLE_FIELDS,
        )

    async def _upsert(
        self,
        table: Table,
        values: Dict[str, Any],
        key_columns: Sequence[str],
        update_columns: Sequence[str],
        adopt_columns: Sequence[str] = (),
    ) -> int:
        """
        Insert `values`, or update `update_columns` of the row matching `key_columns`.

        `adopt_columns` are only filled in on an existing row when it has none
        (a document whose owning case was deleted is adopted by the next case).
        """
        dialect = self.db.get_bind().dialect.name
        dialect_insert = _UPSERT_INSERTS.get(dialect)
        if dialect_insert is None:
            return await self._lookup_then_write(table, values, key_columns, update_columns, adopt_columns)

        stmt = dialect_insert(table).values(**values)
        set_ = {column: stmt.excluded[column] for column in update_columns}
        for column in adopt_columns:
            set_[column] = func.coalesce(table.c[column], stmt.excluded[column])

        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c[column] for column in key_columns],
            set_=set_,
        ).returning(table.c.id)

        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def _lookup_then_write(
        self,
        table: Table,
        values: Dict[str, Any],
        key_columns: Sequence[str],
        update_columns: Sequence[str],
        adopt_columns: Sequence[str],
    ) -> int:
        # Dialects without ON CONFLICT support; concurrent creates of one key can race here.
        result = await self.db.execute(
            select(table.c.id).where(*[table.c[column] == values[column] for column in key_columns])
        )
        existing_id = result.scalar_one_or_none()

        if existing_id is None:
            result = await self.db.execute(insert(table).values(**values))
            return result.inserted_primary_key[0]

        changes = {column: values[column] for column in update_columns}
        for column in adopt_columns:
            changes[column] = func.coalesce(table.c[column], values[column])
        await self.db.execute(update(table).where(table.c.id == existing_id).values(**changes))
        return existing_id
