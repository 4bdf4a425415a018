import pytest


pytestmark = pytest.mark.api

EMPLOYEE_PAYLOAD = {
    "name": "Bob Stone",
    "employee_number": "E-200",
    "department": "Science",
    "position": "Teacher",
    "contact_info": "bob@school.test",
    "start_date": "2023-09-01",
}


def _leave_payload(employee_id: str, **overrides) -> dict:
    payload = {
        "employee_id": employee_id,
        "leave_type": "ANNUAL",
        "start_date": "2026-04-01",
        "end_date": "2026-04-03",
        "reason": "Family trip",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def admin(bearer):
    return bearer("root", roles=["ADMIN"])


@pytest.fixture
def manager(bearer):
    return bearer("maria", roles=["MANAGER"])


@pytest.fixture
def employee_account(client):
    """An EMPLOYEE account linked to its own employee record."""
    response = client.post(
        "/auth/register",
        json={"identifier": "ed", "password": "secret1", "name": "Ed Park", "employee_number": "E-300"},
    )
    body = response.json()
    return {"Authorization": f"Bearer {body['access_token']}"}, body["employee_id"]


class TestEmployees:
    def test_listing_requires_authentication(self, client):
        response = client.get("/employees")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_employee_cannot_create(self, client, employee_account):
        headers, _ = employee_account

        assert client.post("/employees", json=EMPLOYEE_PAYLOAD, headers=headers).status_code == 403

    def test_manager_creates_and_everyone_reads(self, client, manager, employee_account):
        headers, _ = employee_account

        created = client.post("/employees", json=EMPLOYEE_PAYLOAD, headers=manager)
        assert created.status_code == 201
        employee_id = created.json()["id"]

        fetched = client.get(f"/employees/{employee_id}", headers=headers)
        assert fetched.status_code == 200
        assert fetched.json()["employee_number"] == "E-200"
        numbers = {e["employee_number"] for e in client.get("/employees", headers=headers).json()}
        assert numbers == {"E-200", "E-300"}

    def test_duplicate_number_conflicts(self, client, admin):
        client.post("/employees", json=EMPLOYEE_PAYLOAD, headers=admin)

        assert client.post("/employees", json=EMPLOYEE_PAYLOAD, headers=admin).status_code == 409

    def test_future_start_date_is_rejected(self, client, admin):
        payload = {**EMPLOYEE_PAYLOAD, "start_date": "2999-01-01"}

        assert client.post("/employees", json=payload, headers=admin).status_code == 400

    def test_update_and_missing_employee(self, client, manager):
        employee_id = client.post("/employees", json=EMPLOYEE_PAYLOAD, headers=manager).json()["id"]

        updated = client.put(
            f"/employees/{employee_id}",
            json={**EMPLOYEE_PAYLOAD, "position": "Head of Science"},
            headers=manager,
        )
        assert updated.status_code == 200
        assert updated.json()["position"] == "Head of Science"

        assert client.get("/employees/emp-missing", headers=manager).status_code == 404
        assert client.put("/employees/emp-missing", json=EMPLOYEE_PAYLOAD, headers=manager).status_code == 404

    def test_only_admin_deletes(self, client, admin, manager):
        employee_id = client.post("/employees", json=EMPLOYEE_PAYLOAD, headers=admin).json()["id"]

        assert client.delete(f"/employees/{employee_id}", headers=manager).status_code == 403
        assert client.delete(f"/employees/{employee_id}", headers=admin).status_code == 204
        assert client.get(f"/employees/{employee_id}", headers=admin).status_code == 404

    def test_delete_cascades_to_leave_and_unlinks_account(self, client, admin, employee_account):
        headers, employee_id = employee_account
        client.post("/leave-requests", json=_leave_payload(employee_id), headers=headers)

        assert client.delete(f"/employees/{employee_id}", headers=admin).status_code == 204

        assert client.get("/leave-requests", headers=admin).json() == []
        me = client.get("/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["employee_id"] is None


class TestLeaveRequests:
    def test_employee_files_own_request(self, client, employee_account):
        headers, employee_id = employee_account

        response = client.post("/leave-requests", json=_leave_payload(employee_id), headers=headers)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["employee_id"] == employee_id
        own = client.get(f"/leave-requests/employee/{employee_id}", headers=headers).json()
        assert [r["request_id"] for r in own] == [body["request_id"]]

    def test_employee_cannot_file_for_someone_else(self, client, admin, employee_account):
        headers, _ = employee_account
        other_id = client.post("/employees", json=EMPLOYEE_PAYLOAD, headers=admin).json()["id"]

        response = client.post("/leave-requests", json=_leave_payload(other_id), headers=headers)

        assert response.status_code == 403

    def test_employee_cannot_list_someone_elses_requests(self, client, admin, employee_account):
        headers, employee_id = employee_account
        other_id = client.post("/employees", json=EMPLOYEE_PAYLOAD, headers=admin).json()["id"]

        assert client.get(f"/leave-requests/employee/{other_id}", headers=headers).status_code == 403
        assert client.get(f"/leave-requests/employee/{employee_id}", headers=headers).status_code == 200
        assert client.get(f"/leave-requests/employee/{other_id}", headers=admin).status_code == 200

    def test_manager_files_for_anyone(self, client, manager, employee_account):
        _, employee_id = employee_account

        assert client.post("/leave-requests", json=_leave_payload(employee_id), headers=manager).status_code == 201

    def test_unknown_employee(self, client, manager):
        response = client.post("/leave-requests", json=_leave_payload("emp-missing"), headers=manager)

        assert response.status_code == 404
        assert client.get("/leave-requests/employee/emp-missing", headers=manager).status_code == 404

    def test_end_before_start_is_rejected(self, client, employee_account):
        headers, employee_id = employee_account
        payload = _leave_payload(employee_id, start_date="2026-04-05", end_date="2026-04-01")

        assert client.post("/leave-requests", json=payload, headers=headers).status_code == 400

    def test_listing_all_requests_is_for_staff(self, client, manager, employee_account):
        headers, employee_id = employee_account
        client.post("/leave-requests", json=_leave_payload(employee_id), headers=headers)

        assert client.get("/leave-requests", headers=headers).status_code == 403
        listing = client.get("/leave-requests", headers=manager)
        assert listing.status_code == 200
        assert len(listing.json()) == 1

    def test_decision_and_status_filter(self, client, manager, employee_account):
        headers, employee_id = employee_account
        request_id = client.post("/leave-requests", json=_leave_payload(employee_id), headers=headers).json()[
            "request_id"
        ]
        client.post("/leave-requests", json=_leave_payload(employee_id, reason="Dentist"), headers=headers)

        assert (
            client.put(f"/leave-requests/{request_id}/status", json={"status": "APPROVED"}, headers=headers).status_code
            == 403
        )
        decided = client.put(f"/leave-requests/{request_id}/status", json={"status": "APPROVED"}, headers=manager)
        assert decided.status_code == 200
        assert decided.json()["status"] == "APPROVED"

        approved = client.get("/leave-requests", params={"status": "APPROVED"}, headers=manager).json()
        pending = client.get("/leave-requests", params={"status": "PENDING"}, headers=manager).json()
        assert [r["request_id"] for r in approved] == [request_id]
        assert [r["reason"] for r in pending] == ["Dentist"]

        missing = client.put("/leave-requests/leave-missing/status", json={"status": "REJECTED"}, headers=manager)
        assert missing.status_code == 404

    def test_only_pending_requests_can_be_withdrawn(self, client, manager, employee_account):
        headers, employee_id = employee_account
        first = client.post("/leave-requests", json=_leave_payload(employee_id), headers=headers).json()["request_id"]
        second = client.post("/leave-requests", json=_leave_payload(employee_id), headers=headers).json()["request_id"]
        client.put(f"/leave-requests/{first}/status", json={"status": "REJECTED"}, headers=manager)

        assert client.delete(f"/leave-requests/{first}", headers=headers).status_code == 409
        assert client.delete(f"/leave-requests/{second}", headers=headers).status_code == 204
        assert client.delete(f"/leave-requests/{second}", headers=headers).status_code == 404

    def test_employee_cannot_withdraw_someone_elses_request(self, client, manager, bearer, employee_account):
        _, employee_id = employee_account
        request_id = client.post("/leave-requests", json=_leave_payload(employee_id), headers=manager).json()[
            "request_id"
        ]
        stranger = bearer("sam")

        assert client.delete(f"/leave-requests/{request_id}", headers=stranger).status_code == 403
