from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

PARISHES = "/api/v1/parishes"


def parish_payload(under, name: str = "Kidus Gabriel", **overrides) -> dict:
    payload = {
        "name": name,
        "address": {"region": "Amhara", "zone": "North Gondar"},
        "contactPerson": {"name": "Aba Yohannes", "phone": "+251911000000", "role": "Priest"},
        "under": str(under),
    }
    payload.update(overrides)
    return payload


class TestCreateParish:
    def test_admin_creates(self, client: TestClient, admin_headers, wereda):
        response = client.post(
            PARISHES, json=parish_payload(wereda.id), headers=admin_headers
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Kidus Gabriel"
        assert data["under"] == str(wereda.id)
        assert data["address"] == {
            "region": "Amhara",
            "zone": "North Gondar",
            "woreda": None,
            "kebele": None,
        }
        assert data["contactPerson"]["phone"] == "+251911000000"

    def test_wereda_admin_creates_in_own_unit(
        self, client: TestClient, wereda, make_wereda_admin, headers_for
    ):
        response = client.post(
            PARISHES,
            json=parish_payload(wereda.id),
            headers=headers_for(make_wereda_admin(wereda)),
        )
        assert response.status_code == 201

    def test_wereda_admin_other_unit(
        self, client: TestClient, wereda, make_wereda, make_wereda_admin, headers_for
    ):
        other = make_wereda()
        response = client.post(
            PARISHES,
            json=parish_payload(other.id),
            headers=headers_for(make_wereda_admin(wereda)),
        )
        assert response.status_code == 403

    def test_unknown_wereda(self, client: TestClient, admin_headers):
        response = client.post(
            PARISHES, json=parish_payload(uuid4()), headers=admin_headers
        )
        assert response.status_code == 400
        body = response.json()
        assert body["data"]["code"] == "invalid_reference"
        assert body["message"] == "Invalid WeredaUnit ID."

    def test_bad_contact_phone(self, client: TestClient, admin_headers, wereda):
        payload = parish_payload(
            wereda.id, contactPerson={"name": "Aba Yohannes", "phone": "12-34"}
        )
        response = client.post(PARISHES, json=payload, headers=admin_headers)
        assert response.status_code == 400

    def test_duplicate_name(self, client: TestClient, admin_headers, wereda, parish):
        response = client.post(
            PARISHES, json=parish_payload(wereda.id, name=parish.name), headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["data"]["code"] == "duplicate"


class TestGetParish:
    def test_get(self, client: TestClient, admin_headers, parish):
        response = client.get(f"{PARISHES}/{parish.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Debre Berhan Selassie"

    def test_not_found(self, client: TestClient, admin_headers):
        response = client.get(f"{PARISHES}/{uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    def test_out_of_scope(
        self, client: TestClient, parish, make_wereda, make_wereda_admin, headers_for
    ):
        outsider = make_wereda_admin(make_wereda())
        response = client.get(f"{PARISHES}/{parish.id}", headers=headers_for(outsider))
        assert response.status_code == 403


class TestListParishes:
    def test_wereda_admin_sees_own_unit_only(
        self, client: TestClient, wereda, make_wereda, make_parish, make_wereda_admin, headers_for
    ):
        make_parish(wereda, name="Kidus Mikael")
        make_parish(make_wereda(), name="Kidus Giorgis")

        response = client.get(PARISHES, headers=headers_for(make_wereda_admin(wereda)))
        assert response.status_code == 200
        data = response.json()["data"]
        assert [p["name"] for p in data["parishes"]] == ["Kidus Mikael"]
        assert data["pagination"]["total"] == 1

    def test_admin_filters_by_unit(
        self, client: TestClient, admin_headers, wereda, make_wereda, make_parish
    ):
        make_parish(wereda, name="Kidus Mikael")
        make_parish(make_wereda(), name="Kidus Giorgis")

        response = client.get(
            PARISHES, params={"under": str(wereda.id)}, headers=admin_headers
        )
        assert [p["name"] for p in response.json()["data"]["parishes"]] == ["Kidus Mikael"]

    def test_invalid_under_filter(self, client: TestClient, admin_headers):
        response = client.get(PARISHES, params={"under": "bogus"}, headers=admin_headers)
        assert response.status_code == 400

    def test_search_by_name(self, client: TestClient, admin_headers, wereda, make_parish):
        make_parish(wereda, name="Kidus Mikael")
        make_parish(wereda, name="Medhane Alem")

        response = client.get(PARISHES, params={"name": "mika"}, headers=admin_headers)
        assert [p["name"] for p in response.json()["data"]["parishes"]] == ["Kidus Mikael"]


class TestParishesByWereda:
    def test_by_wereda(self, client: TestClient, admin_headers, wereda, make_parish):
        make_parish(wereda, name="Kidus Mikael")
        make_parish(wereda, name="Abune Aregawi")

        response = client.get(f"{PARISHES}/by-wereda/{wereda.id}", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["wereda"] == str(wereda.id)
        assert data["count"] == 2
        assert [p["name"] for p in data["parishes"]] == ["Abune Aregawi", "Kidus Mikael"]

    def test_unknown_wereda(self, client: TestClient, admin_headers):
        response = client.get(f"{PARISHES}/by-wereda/{uuid4()}", headers=admin_headers)
        assert response.status_code == 404


class TestUpdateParish:
    def test_patch_contact(self, client: TestClient, admin_headers, parish):
        response = client.patch(
            f"{PARISHES}/{parish.id}",
            json={"contactPerson": {"name": "Kes Tesfaye"}},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["contactPerson"]["name"] == "Kes Tesfaye"
        assert data["name"] == "Debre Berhan Selassie"

    def test_empty_patch_is_noop(self, client: TestClient, admin_headers, parish):
        before = client.get(f"{PARISHES}/{parish.id}", headers=admin_headers).json()["data"]
        response = client.patch(f"{PARISHES}/{parish.id}", json={}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"] == before

    def test_wereda_admin_cannot_move_parish_out(
        self, client: TestClient, wereda, parish, make_wereda, make_wereda_admin, headers_for
    ):
        other = make_wereda()
        response = client.patch(
            f"{PARISHES}/{parish.id}",
            json={"under": str(other.id)},
            headers=headers_for(make_wereda_admin(wereda)),
        )
        assert response.status_code == 403

    def test_admin_moves_parish(self, client: TestClient, admin_headers, parish, make_wereda):
        other = make_wereda()
        response = client.put(
            f"{PARISHES}/{parish.id}", json={"under": str(other.id)}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["under"] == str(other.id)

    def test_move_to_unknown_wereda(self, client: TestClient, admin_headers, parish):
        response = client.patch(
            f"{PARISHES}/{parish.id}", json={"under": str(uuid4())}, headers=admin_headers
        )
        assert response.status_code == 400
