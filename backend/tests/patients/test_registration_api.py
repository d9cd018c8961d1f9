from sqlalchemy import func, select

from mobile_clinic.models.clinical import Vitals
from mobile_clinic.models.patient import Patient
from mobile_clinic.models.visit import Visit


def test_register_normalizes_queue_and_mirrors_on_patient(register):
    res = register(
        name="Alice",
        queue_no="2a",
        vitals={"height": 150.5, "weight": 48.0, "bp_systolic": 110},
        hef={"know_of_hef": True, "has_hef": False},
    )
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["patient"]["queue_no"] == "2A"
    assert body["visit"]["queue_no"] == "2A"
    assert body["visit"]["visit_date"] == "2026-03-01"
    assert body["visit"]["location_id"] == body["patient"]["location_id"]
    assert body["vitals"]["height"] == 150.5
    assert body["vitals"]["visit_id"] == body["visit"]["id"]
    assert body["hef"]["know_of_hef"] is True
    assert body["patient"]["location_name"] == "Poipet"


def test_register_patient_without_visit(register, api_client, location_id, auth_headers):
    res = api_client.post(
        "/registration",
        json={"patient": {"english_name": "Bopha", "location_id": location_id}},
        headers=auth_headers,
    )
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["visit"] is None
    assert body["patient"]["queue_no"] is None


def test_vitals_without_visit_is_rejected(api_client, location_id, auth_headers, db_session):
    res = api_client.post(
        "/registration",
        json={
            "patient": {"english_name": "Chan", "location_id": location_id},
            "vitals": {"height": 120, "weight": 30},
        },
        headers=auth_headers,
    )
    assert res.status_code == 400, res.text
    assert res.json()["kind"] == "validation_error"
    assert db_session.scalar(select(func.count()).select_from(Patient)) == 0


def test_queue_conflict_rolls_back_the_new_patient(register, db_session):
    first = register(name="Alice", queue_no="7")
    assert first.status_code == 201, first.text

    second = register(name="Dara", queue_no=" 7 ")
    assert second.status_code == 409, second.text
    assert second.json()["kind"] == "duplicate_queue_entry"
    assert second.json()["detail"] == "Duplicate queue number for this location and date"

    names = db_session.scalars(select(Patient.english_name)).all()
    assert names == ["Alice"]
    assert db_session.scalar(select(func.count()).select_from(Visit)) == 1


def test_invalid_queue_token_fails_registration(register, db_session):
    res = register(name="Eang", queue_no="A2")
    assert res.status_code == 400, res.text
    assert res.json()["errors"][0]["loc"] == ["queue_no"]
    assert db_session.scalar(select(func.count()).select_from(Patient)) == 0


def test_blank_queue_token_fails_registration(register):
    res = register(name="Eang", queue_no="   ")
    assert res.status_code == 400, res.text


def test_composite_update_retargets_same_day_visit(register, api_client, auth_headers, db_session):
    created = register(name="Alice", queue_no="3").json()
    patient_id = created["patient"]["id"]
    visit_id = created["visit"]["id"]

    res = api_client.put(
        f"/registration/{patient_id}",
        json={
            "patient": {"phone_number": "012 345 678"},
            "visit": {"queue_no": "3b", "visit_date": "2026-03-01"},
            "vitals": {"height": 151, "weight": 49},
        },
        headers=auth_headers,
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["visit"]["id"] == visit_id
    assert body["visit"]["queue_no"] == "3B"
    assert body["patient"]["queue_no"] == "3B"
    assert body["patient"]["english_name"] == "Alice"
    assert body["patient"]["phone_number"] == "012 345 678"
    assert body["vitals"]["weight"] == 49
    assert db_session.scalar(select(func.count()).select_from(Visit)) == 1
    assert db_session.scalar(select(func.count()).select_from(Vitals)) == 1


def test_composite_update_on_new_day_creates_visit(register, api_client, auth_headers):
    created = register(name="Alice", queue_no="3").json()
    patient_id = created["patient"]["id"]

    res = api_client.put(
        f"/registration/{patient_id}",
        json={"visit": {"queue_no": "1", "visit_date": "2026-03-02"}},
        headers=auth_headers,
    )
    assert res.status_code == 200, res.text
    assert res.json()["visit"]["id"] != created["visit"]["id"]

    visits = api_client.get(f"/patients/{patient_id}/visits", headers=auth_headers).json()
    assert [visit["visit_date"] for visit in visits] == ["2026-03-02", "2026-03-01"]


def test_composite_update_conflict_keeps_previous_state(register, api_client, auth_headers):
    register(name="Alice", queue_no="4")
    bopha = register(name="Bopha", queue_no="5").json()

    res = api_client.put(
        f"/registration/{bopha['patient']['id']}",
        json={
            "patient": {"english_name": "Bopha Renamed"},
            "visit": {"queue_no": "4", "visit_date": "2026-03-01"},
        },
        headers=auth_headers,
    )
    assert res.status_code == 409, res.text

    detail = api_client.get(f"/patients/{bopha['patient']['id']}", headers=auth_headers).json()
    assert detail["patient"]["english_name"] == "Bopha"
    assert detail["patient"]["queue_no"] == "5"
    assert detail["visits"][0]["queue_no"] == "5"


def test_delete_registration(register, api_client, auth_headers):
    created = register().json()
    patient_id = created["patient"]["id"]

    res = api_client.delete(f"/registration/{patient_id}", headers=auth_headers)
    assert res.status_code == 200, res.text
    assert res.json()["patient_id"] == patient_id

    missing = api_client.get(f"/patients/{patient_id}", headers=auth_headers)
    assert missing.status_code == 404
