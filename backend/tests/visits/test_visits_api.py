from datetime import date

import pytest
from sqlalchemy import func, select

from mobile_clinic.core.errors import DuplicateQueueEntry
from mobile_clinic.models.visit import Visit
from mobile_clinic.services import visits as visits_service


@pytest.fixture
def patient(api_client, auth_headers, location_id):
    res = api_client.post(
        "/patients",
        json={"english_name": "Sokha", "location_id": location_id, "sex": "Female"},
        headers=auth_headers,
    )
    assert res.status_code == 201, res.text
    return res.json()


def test_resolve_visit_is_idempotent(api_client, auth_headers, patient, db_session):
    body = {"patient_id": patient["id"], "visit_date": "2026-04-02", "queue_no": "12b"}
    first = api_client.post("/visits", json=body, headers=auth_headers)
    assert first.status_code == 201, first.text

    second = api_client.post("/visits", json={**body, "queue_no": " 12B "}, headers=auth_headers)
    assert second.status_code == 200, second.text
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["location_id"] == patient["location_id"]

    assert db_session.scalar(select(func.count()).select_from(Visit)) == 1
    refreshed = api_client.get(f"/patients/{patient['id']}", headers=auth_headers).json()
    assert refreshed["patient"]["queue_no"] == "12B"


def test_resolve_visit_requires_queue_number(api_client, auth_headers, patient):
    res = api_client.post("/visits", json={"patient_id": patient["id"]}, headers=auth_headers)
    assert res.status_code == 400, res.text
    assert res.json()["kind"] == "validation_error"


def test_resolve_visit_unknown_patient(api_client, auth_headers):
    res = api_client.post("/visits", json={"patient_id": 999, "queue_no": "1"}, headers=auth_headers)
    assert res.status_code == 404, res.text


def test_racing_insert_reports_duplicate(db_session, patient, monkeypatch):
    visit, created = visits_service.resolve_visit(
        db_session,
        patient_id=patient["id"],
        location_id=patient["location_id"],
        raw_queue_no="9",
        visit_date=date(2026, 4, 2),
    )
    db_session.commit()
    assert created is True

    # Simulate a second request whose lookup ran before the first insert committed.
    monkeypatch.setattr(visits_service, "find_visit", lambda *args, **kwargs: None)
    with pytest.raises(DuplicateQueueEntry):
        visits_service.resolve_visit(
            db_session,
            patient_id=patient["id"],
            location_id=patient["location_id"],
            raw_queue_no="9",
            visit_date=date(2026, 4, 2),
        )
    assert db_session.scalar(select(func.count()).select_from(Visit)) == 1


def test_set_queue_number_mirrors_onto_patient(api_client, auth_headers, patient):
    visit = api_client.post(
        "/visits", json={"patient_id": patient["id"], "queue_no": "1", "visit_date": "2026-04-02"},
        headers=auth_headers,
    ).json()

    res = api_client.put(f"/visits/{visit['id']}", json={"queue_no": "4c"}, headers=auth_headers)
    assert res.status_code == 200, res.text
    assert res.json()["queue_no"] == "4C"

    detail = api_client.get(f"/patients/{patient['id']}", headers=auth_headers).json()
    assert detail["patient"]["queue_no"] == "4C"


def test_set_queue_number_conflict_and_validation(api_client, auth_headers, patient, location_id):
    other = api_client.post(
        "/patients", json={"english_name": "Vanna", "location_id": location_id}, headers=auth_headers
    ).json()
    api_client.post(
        "/visits", json={"patient_id": other["id"], "queue_no": "5", "visit_date": "2026-04-02"},
        headers=auth_headers,
    )
    visit = api_client.post(
        "/visits", json={"patient_id": patient["id"], "queue_no": "6", "visit_date": "2026-04-02"},
        headers=auth_headers,
    ).json()

    conflict = api_client.put(f"/visits/{visit['id']}", json={"queue_no": "5"}, headers=auth_headers)
    assert conflict.status_code == 409, conflict.text
    assert conflict.json()["kind"] == "duplicate_queue_entry"

    invalid = api_client.put(f"/visits/{visit['id']}", json={"queue_no": "x5"}, headers=auth_headers)
    assert invalid.status_code == 400

    missing = api_client.put("/visits/9999", json={"queue_no": "5"}, headers=auth_headers)
    assert missing.status_code == 404

    detail = api_client.get(f"/patients/{patient['id']}", headers=auth_headers).json()
    assert detail["patient"]["queue_no"] == "6"


def test_queue_listing_sorts_tokens_as_text(api_client, auth_headers, location_id):
    for name, token in [("Zed", "2"), ("Amy", "10"), ("Bo", "1"), ("Cy", "2A")]:
        patient = api_client.post(
            "/patients", json={"english_name": name, "location_id": location_id}, headers=auth_headers
        ).json()
        api_client.post(
            "/visits",
            json={"patient_id": patient["id"], "queue_no": token, "visit_date": "2026-04-03"},
            headers=auth_headers,
        )

    res = api_client.get(
        "/visits/by-location-and-date",
        params={"location_id": location_id, "visit_date": "2026-04-03"},
        headers=auth_headers,
    )
    assert res.status_code == 200, res.text
    assert [entry["queue_no"] for entry in res.json()] == ["1", "10", "2", "2A"]
    assert res.json()[0]["english_name"] == "Bo"
    assert res.json()[0]["location_name"] == "Poipet"


def test_visit_detail_carries_records_and_etag(api_client, auth_headers, register):
    created = register(
        name="Alice",
        queue_no="3",
        vitals={"height": 140, "weight": 40},
    ).json()
    visit_id = created["visit"]["id"]

    res = api_client.get(f"/visits/{visit_id}", headers=auth_headers)
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["vitals"]["height"] == 140
    assert body["hef"] is None
    assert body["physiotherapy"] is None
    assert body["referrals"] == []
    etag = res.headers["etag"]

    cached = api_client.get(f"/visits/{visit_id}", headers={**auth_headers, "If-None-Match": etag})
    assert cached.status_code == 304

    api_client.put(f"/hef/{visit_id}", json={"know_of_hef": True, "has_hef": True}, headers=auth_headers)
    changed = api_client.get(f"/visits/{visit_id}", headers={**auth_headers, "If-None-Match": etag})
    assert changed.status_code == 200
    assert changed.headers["etag"] != etag


def test_overlong_queue_number_is_rejected(api_client, auth_headers, patient, register):
    res = api_client.post(
        "/visits", json={"patient_id": patient["id"], "queue_no": "1" * 17}, headers=auth_headers
    )
    assert res.status_code == 400, res.text
    assert res.json()["kind"] == "validation_error"

    registered = register(queue_no="2" * 17)
    assert registered.status_code == 400, registered.text
