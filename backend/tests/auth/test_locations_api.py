def test_default_locations_are_seeded(api_client):
    res = api_client.get("/locations")
    assert res.status_code == 200, res.text
    names = [location["name"] for location in res.json()]
    assert names == sorted(["Poipet", "Mongkol Borey", "Sisophon"])


def test_location_create_duplicate_and_reactivate(api_client, auth_headers):
    created = api_client.post("/locations", json={"name": "Battambang"}, headers=auth_headers)
    assert created.status_code == 201, created.text
    location_id = created.json()["id"]

    duplicate = api_client.post("/locations", json={"name": "Battambang"}, headers=auth_headers)
    assert duplicate.status_code == 409, duplicate.text
    assert duplicate.json()["kind"] == "duplicate_name"

    removed = api_client.delete(f"/locations/{location_id}", headers=auth_headers)
    assert removed.status_code == 200, removed.text
    names = [location["name"] for location in api_client.get("/locations").json()]
    assert "Battambang" not in names

    revived = api_client.post("/locations", json={"name": "Battambang"}, headers=auth_headers)
    assert revived.status_code == 201, revived.text
    assert revived.json()["id"] == location_id
    assert revived.json()["is_active"] is True


def test_unknown_location_delete_is_404(api_client, auth_headers):
    res = api_client.delete("/locations/9999", headers=auth_headers)
    assert res.status_code == 404
    assert res.json()["kind"] == "not_found"


def test_health(api_client):
    assert api_client.get("/health").json() == {"status": "ok"}
