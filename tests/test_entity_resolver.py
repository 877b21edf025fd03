"""Test natural-key resolution of people, documents and authorities"""
from datetime import date

import pytest
from sqlalchemy import func, insert, select

from casetrack.api.v1.schemas.cases import AuthorityIn, DocumentIn, PersonIn
from casetrack.db.models import Authority, Case, Document, Person
from casetrack.services.entity_resolver import EntityResolver

from tests.case_documents import authority, document, person


async def count(db, model, *conditions):
    result = await db.execute(select(func.count()).select_from(model).where(*conditions))
    return result.scalar_one()


async def new_case_id(db):
    result = await db.execute(
        insert(Case.__table__).values(
            case_name="Resolver case",
            case_status="PENDING",
            case_type="CIVIL",
            case_description="Holds documents",
            case_date_filed=date(2024, 1, 1),
        )
    )
    return result.inserted_primary_key[0]


@pytest.mark.asyncio
async def test_same_aadhaar_resolves_to_one_person(db):
    """Test resolving a person twice by aadhaar is idempotent and updates in place"""
    resolver = EntityResolver(db)

    first = await resolver.resolve_person(PersonIn(**person("Ravi Kumar", "4444-5555-6666")))
    second = await resolver.resolve_person(
        PersonIn(**person("Ravi K. Kumar", "4444-5555-6666", phone_number="+91-90000-00001"))
    )
    await db.commit()

    assert first == second
    assert await count(db, Person, Person.aadhaar_number == "4444-5555-6666") == 1

    stored = (await db.execute(select(Person).where(Person.id == first))).scalar_one()
    assert stored.person_name == "Ravi K. Kumar"
    assert stored.phone_number == "+91-90000-00001"


@pytest.mark.asyncio
async def test_people_without_aadhaar_are_always_new(db):
    resolver = EntityResolver(db)

    first = await resolver.resolve_person(PersonIn(**person("Anita Singh")))
    second = await resolver.resolve_person(PersonIn(**person("Anita Singh")))

    assert first != second
    assert await count(db, Person) == 2


@pytest.mark.asyncio
async def test_linked_id_without_aadhaar_updates_that_person(db):
    resolver = EntityResolver(db)
    person_id = await resolver.resolve_person(PersonIn(**person("Meera Nair")))

    resolved = await resolver.resolve_person(
        PersonIn(id=person_id, **person("Meera N. Nair", person_address="4 Lake View, Kochi")),
        linked_ids={person_id},
    )

    assert resolved == person_id
    assert await count(db, Person) == 1
    stored = (await db.execute(select(Person.person_address).where(Person.id == person_id))).scalar_one()
    assert stored == "4 Lake View, Kochi"


@pytest.mark.asyncio
async def test_id_of_unlinked_person_is_not_overwritten(db):
    """Test an existing person's id only counts when they are linked to the row being written"""
    resolver = EntityResolver(db)
    person_id = await resolver.resolve_person(PersonIn(**person("Anita Singh")))

    resolved = await resolver.resolve_person(PersonIn(id=person_id, **person("Someone Else")))

    assert resolved != person_id
    assert await count(db, Person) == 2
    name = (await db.execute(select(Person.person_name).where(Person.id == person_id))).scalar_one()
    assert name == "Anita Singh"


@pytest.mark.asyncio
async def test_unknown_id_inserts_new_person(db):
    resolver = EntityResolver(db)

    resolved = await resolver.resolve_person(PersonIn(id=999, **person("Nobody Known")))

    assert resolved != 999
    assert await count(db, Person) == 1


@pytest.mark.asyncio
async def test_absent_entities_resolve_to_none(db):
    resolver = EntityResolver(db)

    assert await resolver.resolve_person(None) is None
    assert await resolver.resolve_document(None, case_id=1) is None
    assert await resolver.resolve_authority(None) is None


@pytest.mark.asyncio
async def test_document_deduplicated_by_name_and_url(db):
    """Test a document is keyed by name plus content URL and keeps its first owner"""
    resolver = EntityResolver(db)
    first_case = await new_case_id(db)
    second_case = await new_case_id(db)
    fir = document("FIR 117/2024", "https://records.example.org/fir/117-2024.pdf")

    first = await resolver.resolve_document(DocumentIn(**fir), first_case)
    second = await resolver.resolve_document(
        DocumentIn(**{**fir, "document_type": "OTHER"}), second_case
    )
    other_url = await resolver.resolve_document(
        DocumentIn(**{**fir, "document_content_url": "https://records.example.org/fir/117-v2.pdf"}),
        second_case,
    )

    assert first == second
    assert other_url != first

    stored = (await db.execute(select(Document).where(Document.id == first))).scalar_one()
    assert stored.case_id == first_case
    assert stored.document_type.value == "OTHER"


@pytest.mark.asyncio
async def test_authority_resolved_by_global_id(db):
    resolver = EntityResolver(db)

    first = await resolver.resolve_authority(AuthorityIn(**authority("DL-POLICE-01")))
    second = await resolver.resolve_authority(
        AuthorityIn(**authority("DL-POLICE-01", name="Delhi Police (Crime Branch)"))
    )

    assert first == second
    assert await count(db, Authority) == 1
    name = (await db.execute(select(Authority.authority_name).where(Authority.id == first))).scalar_one()
    assert name == "Delhi Police (Crime Branch)"
