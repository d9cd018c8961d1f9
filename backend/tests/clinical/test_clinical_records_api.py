from sqlalchemy import func, select

from mobile_clinic.models.clinical import Painpoint, Vitals


def test_vitals_upsert_replaces_single_row(register, api_client, auth_headers, db_session):
    visit_id = register().json()["visit"]["id"]

    first = api_client.post(
        f"/vitals/{visit_id}", json={"height": 150, "weight": 50, "notes": "first"}, headers=auth_headers
    )
    assert first.status_code == 200, first.text

    second = api_client.put(
        f"/vitals/{visit_id}", json={"height": 151, "weight": 52}, headers=auth_headers
    )
    assert second.status_code == 200, second.text
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["weight"] == 52
    assert second.json()["notes"] is None

    assert db_session.scalar(select(func.count()).select_from(Vitals)) == 1
    current = api_client.get(f"/vitals/{visit_id}", headers=auth_headers).json()
    assert current["height"] == 151


def test_vitals_validation(register, api_client, auth_headers):
    visit_id = register().json()["visit"]["id"]

    negative = api_client.post(f"/vitals/{visit_id}", json={"height": -1, "weight": 50}, headers=auth_headers)
    assert negative.status_code == 400, negative.text
    assert negative.json()["kind"] == "validation_error"

    missing = api_client.post(f"/vitals/{visit_id}", json={"height": 120}, headers=auth_headers)
    assert missing.status_code == 400


def test_record_for_unknown_visit(api_client, auth_headers):
    res = api_client.put("/history/4040", json={"past": "none"}, headers=auth_headers)
    assert res.status_code == 404, res.text
    assert api_client.get("/history/4040", headers=auth_headers).status_code == 404


def test_absent_record_reads_as_null(register, api_client, auth_headers):
    visit_id = register().json()["visit"]["id"]
    res = api_client.get(f"/seva/{visit_id}", headers=auth_headers)
    assert res.status_code == 200
    assert res.json() is None


def test_text_records_round_trip(register, api_client, auth_headers):
    visit_id = register().json()["visit"]["id"]
    payloads = {
        "visual_acuity": {"left_with_pinhole": "6/9", "right_without_pinhole": "6/18"},
        "presenting_complaint": {"history": "Headache 3 days", "drug_allergies": "None known"},
        "history": {"past": "Asthma", "social": "Farmer"},
        "consultation": {"notes": "Rest", "prescription": "Paracetamol", "require_referral": True},
        "seva": {"diagnosis": "Cataract", "date_of_referral": "2026-03-05"},
        "hef": {"know_of_hef": False, "has_hef": False, "notes": "Explained HEF"},
    }
    for kind, payload in payloads.items():
        res = api_client.put(f"/{kind}/{visit_id}", json=payload, headers=auth_headers)
        assert res.status_code == 200, (kind, res.text)
        stored = api_client.get(f"/{kind}/{visit_id}", headers=auth_headers).json()
        for field, value in payload.items():
            assert stored[field] == value, (kind, field)


def test_patient_record_listing_filters_by_visit_date(register, api_client, auth_headers):
    created = register(queue_no="1", visit_date="2026-03-01").json()
    patient_id = created["patient"]["id"]
    later = api_client.put(
        f"/registration/{patient_id}",
        json={"visit": {"queue_no": "8", "visit_date": "2026-03-09"}},
        headers=auth_headers,
    ).json()

    api_client.put(f"/consultation/{created['visit']['id']}", json={"notes": "early"}, headers=auth_headers)
    api_client.put(f"/consultation/{later['visit']['id']}", json={"notes": "late"}, headers=auth_headers)

    everything = api_client.get(f"/patients/{patient_id}/consultation", headers=auth_headers).json()
    assert [record["notes"] for record in everything] == ["late", "early"]

    filtered = api_client.get(
        f"/patients/{patient_id}/consultation", params={"visit_date": "2026-03-01"}, headers=auth_headers
    ).json()
    assert [record["notes"] for record in filtered] == ["early"]


def test_physiotherapy_replaces_painpoints(register, api_client, auth_headers, db_session):
    visit_id = register().json()["visit"]["id"]

    first = api_client.post(
        f"/physiotherapy/{visit_id}",
        json={"notes": "Lower back", "painpoints": [{"xCoord": 0.1, "yCoord": 0.2}, {"x_coord": 0.3, "y_coord": 0.4}]},
        headers=auth_headers,
    )
    assert first.status_code == 200, first.text
    assert len(first.json()["painpoints"]) == 2

    second = api_client.put(
        f"/physiotherapy/{visit_id}",
        json={"notes": "Shoulder", "painpoints": [{"xCoord": 0.9, "yCoord": 0.8}]},
        headers=auth_headers,
    )
    assert second.status_code == 200, second.text
    body = second.json()
    assert body["id"] == first.json()["id"]
    assert body["notes"] == "Shoulder"
    assert [(p["x_coord"], p["y_coord"]) for p in body["painpoints"]] == [(0.9, 0.8)]
    assert db_session.scalar(select(func.count()).select_from(Painpoint)) == 1

    cleared = api_client.put(f"/physiotherapy/{visit_id}", json={"notes": "Done"}, headers=auth_headers)
    assert cleared.json()["painpoints"] == []
    assert db_session.scalar(select(func.count()).select_from(Painpoint)) == 0


def test_patient_detail_flags_recorded_forms(register, api_client, auth_headers):
    created = register(vitals={"height": 100, "weight": 20}).json()
    visit_id = created["visit"]["id"]
    api_client.put(f"/consultation/{visit_id}", json={"notes": "ok"}, headers=auth_headers)

    detail = api_client.get(f"/patients/{created['patient']['id']}", headers=auth_headers).json()
    summary = detail["visits"][0]
    assert summary["visit_id"] == visit_id
    assert summary["has_vitals"] is True
    assert summary["has_consultation"] is True
    assert summary["has_seva"] is False
    assert summary["has_physiotherapy"] is False
    assert summary["location_name"] == "Poipet"


def test_pinhole_readings_longer_than_column_are_rejected(register, api_client, auth_headers):
    visit_id = register().json()["visit"]["id"]
    for kind, field in [("visual_acuity", "left_with_pinhole"), ("seva", "right_without_pinhole_new")]:
        res = api_client.put(f"/{kind}/{visit_id}", json={field: "6/" + "9" * 19}, headers=auth_headers)
        assert res.status_code == 400, (kind, res.text)
        assert res.json()["kind"] == "validation_error"
