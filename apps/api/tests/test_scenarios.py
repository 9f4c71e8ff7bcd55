"""End-to-end flows across several resources."""

from __future__ import annotations

from fastapi.testclient import TestClient

API = "/api/v1"


def login(client: TestClient, username: str, password: str) -> dict[str, str]:
    response = client.post(
        f"{API}/auth/login", json={"username": username, "password": password}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['data']['accessToken']}"}


class TestRegistryFlow:
    def test_wereda_to_death(self, client: TestClient, admin_user):
        headers = login(client, "admin", "adminpass123")

        wereda = client.post(
            f"{API}/weredas",
            json={
                "name": "Bahir Dar Zuria",
                "address": {
                    "region": "Amhara",
                    "zone": "West Gojjam",
                    "woreda": "Bahir Dar Zuria",
                    "kebele": "02",
                },
            },
            headers=headers,
        ).json()["data"]

        parish = client.post(
            f"{API}/parishes",
            json={
                "name": "Kidus Giorgis",
                "address": {"region": "Amhara"},
                "under": wereda["id"],
            },
            headers=headers,
        ).json()["data"]
        assert parish["under"] == wereda["id"]

        member = client.post(
            f"{API}/members",
            json={
                "firstName": "Tekle",
                "gender": "Male",
                "dateOfBirth": "1940-07-07",
                "parish": parish["id"],
            },
            headers=headers,
        ).json()["data"]
        assert member["liveStatus"] == "Active"

        death = client.post(
            f"{API}/deaths",
            json={"member": member["id"], "dateOfDeath": "2021-11-11", "graveLocation": parish["id"]},
            headers=headers,
        )
        assert death.status_code == 201

        member = client.get(f"{API}/members/{member['id']}", headers=headers).json()["data"]
        assert member["liveStatus"] == "Deceased"
        assert member["death"] == death.json()["data"]["id"]

        again = client.post(
            f"{API}/deaths",
            json={"member": member["id"], "dateOfDeath": "2021-11-12"},
            headers=headers,
        )
        assert again.status_code == 400
        assert again.json()["success"] is False

    def test_pagination_window(self, client: TestClient, admin_headers, parish, make_member):
        for n in range(12):
            make_member(parish, first_name=f"Member {n:02d}")

        response = client.get(
            f"{API}/members", params={"page": 2, "limit": 5}, headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert [m["firstName"] for m in data["members"]] == [
            f"Member {n:02d}" for n in range(5, 10)
        ]
        assert data["pagination"] == {"page": 2, "limit": 5, "total": 12, "totalPages": 3}

    def test_wereda_admin_cannot_read_other_unit(
        self, client: TestClient, make_wereda, make_parish, make_wereda_admin
    ):
        unit_a = make_wereda(name="Unit A")
        unit_b = make_wereda(name="Unit B")
        make_parish(unit_b, name="Parish B")
        make_wereda_admin(unit_a, username="admin-a")

        headers = login(client, "admin-a", "weredapass123")

        response = client.get(
            f"{API}/parishes", params={"under": str(unit_b.id)}, headers=headers
        )
        assert response.status_code == 403

        response = client.get(f"{API}/parishes/by-wereda/{unit_b.id}", headers=headers)
        assert response.status_code == 403

    def test_empty_update_is_noop(self, client: TestClient, admin_headers, member):
        path = f"{API}/members/{member.id}"
        before = client.get(path, headers=admin_headers).json()["data"]

        response = client.patch(path, json={}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"] == before
