"""Integration tests for the staff endpoints via TestClient."""


def headers_for(actor_id, name, role):
    return {"X-Actor-Id": actor_id, "X-Actor-Name": name, "X-Actor-Role": role}


def _create(client, headers, name="Meena", role="Staff"):
    return client.post("/staff", json={"name": name, "role": role, "phone": "+91 90000 44444"}, headers=headers)


def test_admin_creates_staff(client, as_admin):
    response = _create(client, as_admin)
    assert response.status_code == 201

    [member] = client.get("/staff", headers=as_admin).json()
    assert member["staff_id"] == response.json()["staff_id"]
    assert member["has_push_token"] is False


def test_staff_cannot_manage_staff(client, as_staff):
    assert _create(client, as_staff).status_code == 403


def test_invalid_role_is_a_bad_request(client, as_admin):
    assert _create(client, as_admin, role="Driver").status_code == 400


def test_update(client, as_admin):
    staff_id = _create(client, as_admin).json()["staff_id"]
    response = client.put(f"/staff/{staff_id}", json={"role": "Executive"}, headers=as_admin)
    assert response.json()["role"] == "Executive"


def test_member_registers_own_push_token(client, as_admin):
    staff_id = _create(client, as_admin).json()["staff_id"]
    own = headers_for(staff_id, "Meena", "Staff")

    response = client.put(f"/staff/{staff_id}/push-token", json={"push_token": "device-meena"}, headers=own)
    assert response.json() == {"status": "ok"}
    [member] = client.get("/staff", headers=as_admin).json()
    assert member["has_push_token"] is True

    client.delete(f"/staff/{staff_id}/push-token", headers=own)
    [member] = client.get("/staff", headers=as_admin).json()
    assert member["has_push_token"] is False


def test_member_cannot_register_token_for_someone_else(client, as_admin, as_staff):
    staff_id = _create(client, as_admin).json()["staff_id"]
    response = client.put(f"/staff/{staff_id}/push-token", json={"push_token": "x"}, headers=as_staff)
    assert response.status_code == 403


def test_delete(client, as_admin):
    staff_id = _create(client, as_admin).json()["staff_id"]
    assert client.delete(f"/staff/{staff_id}", headers=as_admin).json() == {"status": "deleted"}
    assert client.get("/staff", headers=as_admin).json() == []
