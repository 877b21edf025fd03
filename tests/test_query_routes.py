"""Test public case search, people directory and analytics endpoints"""
import pytest
import pytest_asyncio

from casetrack.db.models import CaseType
from casetrack.services.case_sync_service import CaseSyncService

from tests.case_documents import evidence, incident, make_case, person


@pytest_asyncio.fixture
async def seeded(db):
    """Three cases with distinct activity dates"""
    service = CaseSyncService(db)
    assault = await service.create_case(make_case())
    fraud = await service.create_case(make_case(
        case_name="State v. Sunil Verma",
        case_type="FINANCIAL_FRAUD",
        case_status="PENDING",
        case_description="Shell company invoices",
        case_date_filed="2023-05-02",
        incidents=[incident(
            "Nariman Point, Mumbai",
            incident_date_from="2023-04-01",
            incident_date_to="2023-04-30",
            latitude=18.9256,
            longitude=72.8242,
            victims=[{"person": person("Harbour Traders Ltd"), "comments": None}],
        )],
        evidences=[evidence("Ledger", evidence_date_found="2024-08-15", evidence_location="Andheri office")],
        sentences=[],
        proceedings=[],
        investigating_authorities=[],
    ))
    dormant = await service.create_case(make_case(
        case_name="Boundary wall dispute",
        case_type="PROPERTY",
        case_status="CLOSED",
        case_description="Neighbours disagree on a survey line",
        case_date_filed="2022-11-20",
        incidents=[],
        evidences=[],
        sentences=[],
        proceedings=[],
        investigating_authorities=[],
    ))
    return {"assault": assault, "fraud": fraud, "dormant": dormant}


@pytest.mark.asyncio
async def test_list_cases_newest_first(client, seeded):
    response = await client.get("/api/v1/cases")

    assert response.status_code == 200
    ids = [case["id"] for case in response.json()["cases"]]
    assert ids == [seeded["assault"], seeded["fraud"], seeded["dormant"]]


@pytest.mark.asyncio
async def test_search_matches_linked_people_and_entities(client, seeded):
    """Test search reaches victims, evidence and authorities, case-insensitively"""
    for term, expected in (
        ("meera", {seeded["assault"]}),
        ("harbour traders", {seeded["fraud"]}),
        ("ledger", {seeded["fraud"]}),
        ("delhi police", {seeded["assault"]}),
        ("trial", {seeded["assault"]}),
        ("survey line", {seeded["dormant"]}),
        ("no such thing", set()),
    ):
        response = await client.get("/api/v1/cases", params={"search": term})
        assert {case["id"] for case in response.json()["cases"]} == expected, term


@pytest.mark.asyncio
async def test_filters_combine(client, seeded):
    response = await client.get(
        "/api/v1/cases",
        params={"type": "FINANCIAL_FRAUD", "status": "PENDING", "date_after": "2023-01-01"},
    )
    assert [case["id"] for case in response.json()["cases"]] == [seeded["fraud"]]

    response = await client.get("/api/v1/cases", params={"date_before": "2023-01-01"})
    assert [case["id"] for case in response.json()["cases"]] == [seeded["dormant"]]


@pytest.mark.asyncio
async def test_persons_carry_case_roles(client, seeded):
    response = await client.get("/api/v1/persons", params={"search": "vikram"})

    assert response.status_code == 200
    people = response.json()["people"]
    assert [p["person_name"] for p in people] == ["Vikram Rao"]

    roles = {(a["role"], a["case_id"]) for a in people[0]["case_associations"]}
    assert roles == {("SENTENCED", seeded["assault"]), ("DEFENDANT", seeded["assault"])}

    sentenced = next(a for a in people[0]["case_associations"] if a["role"] == "SENTENCED")
    assert sentenced["appeal_status"] == "FILED"


@pytest.mark.asyncio
async def test_persons_ordered_by_name(client, seeded):
    names = [p["person_name"] for p in (await client.get("/api/v1/persons")).json()["people"]]
    assert names == sorted(names)


@pytest.mark.asyncio
async def test_trending_cases(client, seeded):
    """Test cases rank by their latest proceeding, evidence or incident"""
    response = await client.get("/api/v1/analytics/trending")

    trending = response.json()["trending_cases"]
    assert [case["case_id"] for case in trending] == [seeded["fraud"], seeded["assault"], seeded["dormant"]]
    assert trending[0]["news"] == 'New evidence "Ledger" discovered at Andheri office'
    assert trending[0]["relevant_date"] == "2024-08-15"
    assert trending[1]["news"] == "New proceeding of type TRIAL started"
    assert trending[2]["news"] is None


@pytest.mark.asyncio
async def test_location_cases(client, seeded):
    response = await client.get("/api/v1/analytics/location")

    located = response.json()["location_cases"]
    assert [case["case_id"] for case in located] == [seeded["fraud"], seeded["assault"]]
    assert located[0]["incident_location"] == "Nariman Point, Mumbai"
    assert located[0]["latitude"] == 18.9256


@pytest.mark.asyncio
async def test_type_statistics_list_every_type(client, seeded):
    response = await client.get("/api/v1/analytics/types")

    statistics = {row["case_type"]: row["cases"] for row in response.json()["type_statistics"]}
    assert list(statistics) == [case_type.value for case_type in CaseType]
    assert statistics["ASSAULT"] == [{"case_id": seeded["assault"], "date_filed": "2024-01-10"}]
    assert statistics["MURDER"] == []


@pytest.mark.asyncio
async def test_invalid_type_filter_is_rejected(client):
    response = await client.get("/api/v1/cases", params={"type": "PICKPOCKETING"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_trending_prefers_proceeding_on_same_day_and_keeps_top_three(client, db, seeded):
    base = make_case()
    proceeding = {**base["proceedings"][0], "date_started": "2025-02-01"}
    busy = await CaseSyncService(db).create_case(make_case(
        case_name="Busy case",
        incidents=[incident(incident_date_from="2025-02-01", incident_date_to="2025-02-01")],
        evidences=[evidence("Phone records", evidence_date_found="2025-02-01")],
        proceedings=[proceeding],
    ))

    trending = (await client.get("/api/v1/analytics/trending")).json()["trending_cases"]

    assert [case["case_id"] for case in trending] == [busy, seeded["fraud"], seeded["assault"]]
    assert trending[0]["news"] == "New proceeding of type TRIAL started"
    assert trending[0]["relevant_date"] == "2025-02-01"
