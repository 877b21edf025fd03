"""Test admin case endpoints and the token gate"""
import pytest
from sqlalchemy import select

from casetrack.db.models import AdminToken

from tests.case_documents import make_case, strip_ids


@pytest.mark.asyncio
async def test_write_requires_token(client):
    response = await client.post("/api/v1/admin/cases", json={"case": make_case()})

    assert response.status_code == 401
    assert response.json() == {"message": "Admin token is required as a query parameter"}


@pytest.mark.asyncio
async def test_write_rejects_unknown_token(client, admin_token):
    response = await client.post(
        "/api/v1/admin/cases", params={"admin_token": "wrong"}, json={"case": make_case()}
    )

    assert response.status_code == 403
    assert response.json() == {"message": "Invalid or inactive admin token"}


@pytest.mark.asyncio
async def test_write_rejects_inactive_token(client, session_factory):
    async with session_factory() as session:
        session.add(AdminToken(token="retired", is_active=False))
        await session.commit()

    response = await client.delete("/api/v1/admin/cases/1", params={"admin_token": "retired"})

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_update_delete_case(client, admin_token):
    """Test the full admin lifecycle of one case over HTTP"""
    auth = {"admin_token": admin_token}

    response = await client.post("/api/v1/admin/cases", params=auth, json={"case": make_case()})
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Case created successfully"
    case_id = body["case_id"]

    response = await client.get(f"/api/v1/cases/{case_id}")
    assert response.status_code == 200
    stored = response.json()["case"]
    assert strip_ids(stored) == make_case()

    stored["case_status"] = "CLOSED"
    stored["case_date_closed"] = "2024-12-20"
    response = await client.put(f"/api/v1/admin/cases/{case_id}", params=auth, json={"case": stored})
    assert response.status_code == 200
    assert response.json() == {"message": "Case updated successfully", "case_id": case_id}

    updated = (await client.get(f"/api/v1/cases/{case_id}")).json()["case"]
    assert updated["case_status"] == "CLOSED"
    assert updated["case_date_closed"] == "2024-12-20"

    response = await client.delete(f"/api/v1/admin/cases/{case_id}", params=auth)
    assert response.status_code == 200
    assert response.json() == {"message": "Case and all related records deleted successfully"}

    response = await client.get(f"/api/v1/cases/{case_id}")
    assert response.status_code == 404
    assert response.json() == {"message": "Case not found"}


@pytest.mark.asyncio
async def test_validation_errors_are_listed(client, admin_token):
    response = await client.post(
        "/api/v1/admin/cases",
        params={"admin_token": admin_token},
        json={"case": make_case(case_name="", case_status="UNKNOWN")},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation error"
    assert {error["field"] for error in body["errors"]} == {"case_name", "case_status"}


@pytest.mark.asyncio
async def test_missing_case_key_is_a_validation_error(client, admin_token):
    response = await client.post(
        "/api/v1/admin/cases", params={"admin_token": admin_token}, json=make_case()
    )

    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "case", "message": "Case data must be a JSON object"}]


@pytest.mark.asyncio
async def test_update_and_delete_missing_case(client, admin_token):
    auth = {"admin_token": admin_token}

    response = await client.put("/api/v1/admin/cases/999", params=auth, json={"case": make_case()})
    assert response.status_code == 404

    response = await client.delete("/api/v1/admin/cases/999", params=auth)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_verify_token(client, admin_token, session_factory):
    """Test token check answers for valid, unknown and missing tokens"""
    response = await client.get("/api/v1/admin/verify-token", params={"admin_token": admin_token})
    assert response.status_code == 200
    assert response.json() == {"message": "Token is valid", "isValid": True}

    async with session_factory() as session:
        token = (await session.execute(select(AdminToken).where(AdminToken.token == admin_token))).scalar_one()
        assert token.last_used_at is not None

    response = await client.get("/api/v1/admin/verify-token", params={"admin_token": "wrong"})
    assert response.status_code == 200
    assert response.json()["isValid"] is False

    response = await client.get("/api/v1/admin/verify-token")
    assert response.status_code == 401
    assert response.json()["isValid"] is False
