"""
End-to-end tests for the HTTP API over the in-memory backend.

Covers the response envelope, request validation, authentication, role
enforcement and ISP ownership.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from conftest import (
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    AZERTELECOM_EMAIL,
    BAKTELECOM_EMAIL,
    FIBER_PREMIUM_ID,
    ISP_PASSWORD,
    TEST_JWT_SECRET,
    VDSL_ID,
    RecordingNotifier,
)
from core.config import Settings
from repositories import seed

LEAD_BODY = {
    "fullName": "Aysel Mammadova",
    "phone": "+994501234567",
    "email": "aysel@example.com",
    "cityId": seed.BAKU_ID,
    "districtId": seed.NASIMI_ID,
    "tariffId": FIBER_PREMIUM_ID,
}


def _login(client: TestClient, email: str, password: str) -> dict:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["tokens"]


def _auth(client: TestClient, email: str, password: str) -> dict:
    return {"Authorization": f"Bearer {_login(client, email, password)['accessToken']}"}


@pytest.fixture
def admin_headers(client: TestClient) -> dict:
    return _auth(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def azertelecom_headers(client: TestClient) -> dict:
    return _auth(client, AZERTELECOM_EMAIL, ISP_PASSWORD)


@pytest.fixture
def baktelecom_headers(client: TestClient) -> dict:
    return _auth(client, BAKTELECOM_EMAIL, ISP_PASSWORD)


def _create_lead(client: TestClient, **overrides) -> dict:
    response = client.post("/api/v1/leads", json={**LEAD_BODY, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["data"]["lead"]


def _assert_error(response, status_code: int, code: str) -> dict:
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["statusCode"] == status_code
    return body["error"]


# ============================================================================
# Public endpoints
# ============================================================================

def test_root_and_health(client: TestClient) -> None:
    assert client.get("/").json()["message"] == "NetTap API"

    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "healthy"
    assert data["database"] == {"type": "memory", "status": "connected"}
    assert data["config"] == {"valid": True, "errors": []}


def test_health_degraded_on_invalid_config(container) -> None:
    settings = Settings(jwt_secret=TEST_JWT_SECRET, database_type="supabase")
    app = create_app(settings, container=container, notifier=RecordingNotifier())

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["data"]["status"] == "degraded"
    assert body["data"]["config"]["valid"] is False


def test_search_tariffs_envelope(client: TestClient) -> None:
    response = client.get("/api/v1/tariffs")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["total"] == 4
    first = body["data"]["tariffs"][0]
    assert first["id"] == FIBER_PREMIUM_ID
    assert first["priceMonthly"] == "25.00"
    assert first["campaignScore"] == 45
    assert first["speedPriceRatio"] == 4.0
    assert first["campaigns"]["freeModem"] is True
    assert first["isp"]["name"] == "AzerTelecom"


def test_search_tariffs_with_filters_and_sort(client: TestClient) -> None:
    response = client.get(
        "/api/v1/tariffs",
        params={
            "cityId": seed.BAKU_ID,
            "districtIds": f"{seed.NASIMI_ID},{seed.SABUNCHU_ID}",
            "freeModem": "true",
            "sortBy": "price",
        },
    )

    assert response.status_code == 200
    names = [t["name"] for t in response.json()["data"]["tariffs"]]
    assert names == ["VDSL 30", "4.5G Unlimited", "Fiber Premium 100"]


def test_search_tariffs_by_technology(client: TestClient) -> None:
    response = client.get("/api/v1/tariffs", params={"technologies": "vdsl,4.5g"})

    assert {t["technology"] for t in response.json()["data"]["tariffs"]} == {"vdsl", "4.5g"}


def test_search_tariffs_rejects_district_outside_city(client: TestClient) -> None:
    response = client.get(
        "/api/v1/tariffs", params={"cityId": seed.BAKU_ID, "districtIds": seed.KAPAZ_ID}
    )

    error = _assert_error(response, 400, "VALIDATION_ERROR")
    assert error["details"]["districtIds"] == [seed.KAPAZ_ID]


@pytest.mark.parametrize(
    "params",
    [
        {"technologies": "fiber,carrier-pigeon"},
        {"minSpeedMbps": "0"},
        {"maxPriceMonthly": "-5"},
        {"maxContractLength": "-1"},
        {"sortBy": "popularity"},
    ],
)
def test_search_tariffs_rejects_bad_query(client: TestClient, params: dict) -> None:
    _assert_error(client.get("/api/v1/tariffs", params=params), 400, "VALIDATION_ERROR")


def test_get_tariff(client: TestClient) -> None:
    response = client.get(f"/api/v1/tariffs/{VDSL_ID}")

    assert response.json()["data"]["tariff"]["isp"]["name"] == "Baktelecom"
    _assert_error(client.get("/api/v1/tariffs/missing"), 404, "NOT_FOUND")


def test_create_lead(client: TestClient, notifier: RecordingNotifier) -> None:
    lead = _create_lead(client, phone="0501234567")

    assert lead["status"] == "new"
    assert lead["source"] == "comparison"
    assert lead["version"] == 1
    assert lead["tariffSnapshot"]["tariffName"] == "Fiber Premium 100"
    assert lead["tariffSnapshot"]["priceMonthly"] == "25.00"
    assert notifier.names() == ["created"]


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"phone": "+994401234567"}, "phone"),
        ({"fullName": "A"}, "fullName"),
        ({"email": "not-an-email"}, "email"),
        ({"address": "x" * 501}, "address"),
    ],
)
def test_create_lead_validation(client: TestClient, overrides: dict, field: str) -> None:
    error = _assert_error(client.post("/api/v1/leads", json={**LEAD_BODY, **overrides}), 400, "VALIDATION_ERROR")

    assert any(detail["field"].endswith(field) for detail in error["details"])


def test_create_lead_for_tariff_not_in_district(client: TestClient) -> None:
    response = client.post(
        "/api/v1/leads", json={**LEAD_BODY, "districtId": seed.YASAMAL_ID, "tariffId": VDSL_ID}
    )

    _assert_error(response, 400, "VALIDATION_ERROR")


def test_filters(client: TestClient) -> None:
    data = client.get("/api/v1/filters").json()["data"]

    assert len(data["cities"]) == 3
    assert len(data["districts"]) == 6
    assert "4.5g" in data["technologies"]
    assert [r["label"] for r in data["speedRanges"]][0] == "Up to 25 Mbps"
    assert len(data["priceRanges"]) == 4


def test_city_districts(client: TestClient) -> None:
    response = client.get(f"/api/v1/filters/cities/{seed.GANJA_ID}/districts")

    assert {d["nameEn"] for d in response.json()["data"]["districts"]} == {"Kapaz", "Nizami"}
    _assert_error(client.get("/api/v1/filters/cities/missing/districts"), 404, "NOT_FOUND")


# ============================================================================
# Auth
# ============================================================================

def test_login_and_refresh(client: TestClient) -> None:
    response = client.post(
        "/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    data = response.json()["data"]

    assert data["user"]["role"] == "admin"
    assert "passwordHash" not in data["user"]
    assert data["tokens"]["tokenType"] == "Bearer"

    refreshed = client.post(
        "/api/v1/auth/refresh", json={"refreshToken": data["tokens"]["refreshToken"]}
    )
    assert refreshed.status_code == 200
    assert refreshed.json()["data"]["tokens"]["accessToken"]


def test_login_with_wrong_password(client: TestClient) -> None:
    response = client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": "nope"})

    error = _assert_error(response, 401, "UNAUTHORIZED")
    assert error["message"] == "Invalid email or password"


def test_refresh_token_cannot_authorize_requests(client: TestClient) -> None:
    tokens = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)

    response = client.get(
        "/api/v1/admin/leads", headers={"Authorization": f"Bearer {tokens['refreshToken']}"}
    )

    _assert_error(response, 401, "UNAUTHORIZED")


# ============================================================================
# Admin and ISP
# ============================================================================

def test_admin_leads_requires_token(client: TestClient) -> None:
    error = _assert_error(client.get("/api/v1/admin/leads"), 401, "UNAUTHORIZED")

    assert error["message"] == "Missing authorization token"


def test_admin_leads_rejects_isp(client: TestClient, azertelecom_headers: dict) -> None:
    error = _assert_error(
        client.get("/api/v1/admin/leads", headers=azertelecom_headers), 403, "FORBIDDEN"
    )

    assert error["message"] == "Insufficient permissions"


def test_admin_list_leads_paginates(client: TestClient, admin_headers: dict) -> None:
    for _ in range(3):
        _create_lead(client)

    response = client.get("/api/v1/admin/leads", params={"page": 2, "limit": 2}, headers=admin_headers)

    body = response.json()
    assert len(body["data"]["leads"]) == 1
    assert body["meta"] == {"page": 2, "limit": 2, "total": 3}
    _assert_error(
        client.get("/api/v1/admin/leads", params={"limit": 101}, headers=admin_headers),
        400,
        "VALIDATION_ERROR",
    )


def test_admin_list_leads_by_status(client: TestClient, admin_headers: dict) -> None:
    lead = _create_lead(client)
    _create_lead(client)
    client.patch(f"/api/v1/admin/leads/{lead['id']}", json={"status": "contacted"}, headers=admin_headers)

    response = client.get("/api/v1/admin/leads", params={"status": "contacted"}, headers=admin_headers)

    assert [item["id"] for item in response.json()["data"]["leads"]] == [lead["id"]]
    assert response.json()["meta"]["total"] == 1


def test_admin_updates_status(client: TestClient, admin_headers: dict, notifier: RecordingNotifier) -> None:
    lead = _create_lead(client)

    response = client.patch(
        f"/api/v1/admin/leads/{lead['id']}",
        json={"status": "contacted", "notes": "Called, interested"},
        headers=admin_headers,
    )

    updated = response.json()["data"]["lead"]
    assert updated["status"] == "contacted"
    assert updated["notes"] == "Called, interested"
    assert updated["version"] == 2
    assert notifier.names() == ["created", "status"]


def test_admin_invalid_transition(client: TestClient, admin_headers: dict) -> None:
    lead = _create_lead(client)

    response = client.patch(
        f"/api/v1/admin/leads/{lead['id']}", json={"status": "converted"}, headers=admin_headers
    )

    error = _assert_error(response, 400, "VALIDATION_ERROR")
    assert error["details"]["currentStatus"] == "new"


def test_admin_get_missing_lead(client: TestClient, admin_headers: dict) -> None:
    _assert_error(client.get("/api/v1/admin/leads/missing", headers=admin_headers), 404, "NOT_FOUND")


def test_assign_and_isp_ownership(
    client: TestClient,
    admin_headers: dict,
    azertelecom_headers: dict,
    baktelecom_headers: dict,
) -> None:
    lead = _create_lead(client)
    lead_url = f"/api/v1/admin/leads/{lead['id']}"

    # Unassigned leads belong to no ISP
    _assert_error(client.get(lead_url, headers=azertelecom_headers), 403, "FORBIDDEN")

    response = client.post(
        "/api/v1/admin/assign-isp",
        json={"leadId": lead["id"], "ispId": seed.AZERTELECOM_ID},
        headers=admin_headers,
    )
    assigned = response.json()["data"]["lead"]
    assert assigned["status"] == "assigned_to_isp"
    assert assigned["assignedIspId"] == seed.AZERTELECOM_ID

    assert client.get(lead_url, headers=azertelecom_headers).status_code == 200
    _assert_error(client.get(lead_url, headers=baktelecom_headers), 403, "FORBIDDEN")
    _assert_error(
        client.patch(lead_url, json={"status": "in_progress"}, headers=baktelecom_headers),
        403,
        "FORBIDDEN",
    )

    progressed = client.patch(lead_url, json={"status": "in_progress"}, headers=azertelecom_headers)
    assert progressed.json()["data"]["lead"]["status"] == "in_progress"

    mine = client.get("/api/v1/isp/leads", headers=azertelecom_headers).json()
    assert [item["id"] for item in mine["data"]["leads"]] == [lead["id"]]
    assert mine["meta"]["total"] == 1
    assert client.get("/api/v1/isp/leads", headers=baktelecom_headers).json()["data"]["leads"] == []


def test_assign_only_for_admin(client: TestClient, azertelecom_headers: dict) -> None:
    lead = _create_lead(client)

    response = client.post(
        "/api/v1/admin/assign-isp",
        json={"leadId": lead["id"], "ispId": seed.AZERTELECOM_ID},
        headers=azertelecom_headers,
    )

    _assert_error(response, 403, "FORBIDDEN")


def test_reassign_conflict(client: TestClient, admin_headers: dict) -> None:
    lead = _create_lead(client)
    client.post(
        "/api/v1/admin/assign-isp",
        json={"leadId": lead["id"], "ispId": seed.AZERTELECOM_ID},
        headers=admin_headers,
    )

    response = client.post(
        "/api/v1/admin/assign-isp",
        json={"leadId": lead["id"], "ispId": seed.BAKTELECOM_ID},
        headers=admin_headers,
    )

    _assert_error(response, 409, "CONFLICT")


def test_isp_leads_rejects_admin(client: TestClient, admin_headers: dict) -> None:
    _assert_error(client.get("/api/v1/isp/leads", headers=admin_headers), 403, "FORBIDDEN")


def test_unexpected_errors_are_hidden(settings: Settings, container) -> None:
    app = create_app(settings, container=container, notifier=RecordingNotifier())

    with TestClient(app, raise_server_exceptions=False) as client:
        def explode(*args, **kwargs):
            raise RuntimeError("database password is hunter2")

        app.state.tariff_service.search = explode
        response = client.get("/api/v1/tariffs")

    error = _assert_error(response, 500, "INTERNAL_SERVER_ERROR")
    assert error["message"] == "An unexpected error occurred"
    assert "hunter2" not in response.text
