from __future__ import annotations

from datetime import date
from uuid import uuid4

from fastapi.testclient import TestClient

from church_registry.common.models import BaptismRecord

BAPTISMS = "/api/v1/baptisms"


def baptism_payload(member_row, parish_row, **overrides) -> dict:
    payload = {
        "member": str(member_row.id),
        "baptismDate": "1990-03-01",
        "parish": str(parish_row.id),
        "parentContact": {"name": "Almaz Bekele", "phone": "0911000000"},
    }
    payload.update(overrides)
    return payload


def add_baptism(db, member, parish, on=date(1990, 3, 1), baptized_by=None) -> BaptismRecord:
    baptism = BaptismRecord(
        member_id=member.id,
        baptism_date=on,
        parish_id=parish.id,
        baptized_by_id=baptized_by.id if baptized_by else None,
        parent_name="Almaz Bekele",
    )
    db.add(baptism)
    db.commit()
    db.refresh(baptism)
    return baptism


class TestCreateBaptism:
    def test_create(self, client: TestClient, admin_headers, member, parish, make_member):
        priest = make_member(parish, first_name="Kes Haile", role="Priest")
        response = client.post(
            BAPTISMS,
            json=baptism_payload(member, parish, baptizedBy=str(priest.id)),
            headers=admin_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["member"] == str(member.id)
        assert data["baptizedBy"] == str(priest.id)
        assert data["parentContact"] == {"name": "Almaz Bekele", "phone": "0911000000"}
        assert response.json()["message"] == "Baptism record created successfully"

    def test_parent_name_required(self, client: TestClient, admin_headers, member, parish):
        response = client.post(
            BAPTISMS,
            json=baptism_payload(member, parish, parentContact={"phone": "0911000000"}),
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_unknown_member(self, client: TestClient, admin_headers, member, parish):
        response = client.post(
            BAPTISMS,
            json=baptism_payload(member, parish, member=str(uuid4())),
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid Member ID."

    def test_unknown_officiant(self, client: TestClient, admin_headers, member, parish):
        response = client.post(
            BAPTISMS,
            json=baptism_payload(member, parish, baptizedBy=str(uuid4())),
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["data"]["details"]["field"] == "baptizedBy"

    def test_second_baptism_rejected(
        self, client: TestClient, db, admin_headers, member, parish
    ):
        add_baptism(db, member, parish)
        response = client.post(
            BAPTISMS, json=baptism_payload(member, parish), headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Baptism record already exists for this member."

    def test_wereda_admin_foreign_parish(
        self, client: TestClient, wereda, member, make_wereda, make_parish,
        make_wereda_admin, headers_for,
    ):
        foreign = make_parish(make_wereda())
        response = client.post(
            BAPTISMS,
            json=baptism_payload(member, foreign),
            headers=headers_for(make_wereda_admin(wereda)),
        )
        assert response.status_code == 403


class TestGetBaptism:
    def test_get(self, client: TestClient, db, admin_headers, member, parish):
        baptism = add_baptism(db, member, parish)
        response = client.get(f"{BAPTISMS}/{baptism.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["baptismDate"] == "1990-03-01"

    def test_not_found(self, client: TestClient, admin_headers):
        assert client.get(f"{BAPTISMS}/{uuid4()}", headers=admin_headers).status_code == 404

    def test_out_of_scope(
        self, client: TestClient, db, member, parish, make_wereda, make_wereda_admin, headers_for
    ):
        baptism = add_baptism(db, member, parish)
        outsider = make_wereda_admin(make_wereda())
        response = client.get(f"{BAPTISMS}/{baptism.id}", headers=headers_for(outsider))
        assert response.status_code == 403


class TestListBaptisms:
    def test_date_range(self, client: TestClient, db, admin_headers, parish, make_member):
        add_baptism(db, make_member(parish, first_name="A"), parish, on=date(2000, 1, 1))
        add_baptism(db, make_member(parish, first_name="B"), parish, on=date(2010, 6, 15))
        add_baptism(db, make_member(parish, first_name="C"), parish, on=date(2020, 12, 31))

        response = client.get(
            BAPTISMS,
            params={"startDate": "2010-06-15", "endDate": "2020-12-31"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        dates = [b["baptismDate"] for b in response.json()["data"]["baptisms"]]
        assert dates == ["2020-12-31", "2010-06-15"]

    def test_inverted_range(self, client: TestClient, admin_headers):
        response = client.get(
            BAPTISMS,
            params={"startDate": "2020-01-01", "endDate": "2010-01-01"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_filter_by_officiant(self, client: TestClient, db, admin_headers, parish, make_member):
        priest = make_member(parish, first_name="Kes", role="Priest")
        add_baptism(db, make_member(parish, first_name="A"), parish, baptized_by=priest)
        add_baptism(db, make_member(parish, first_name="B"), parish)

        response = client.get(
            BAPTISMS, params={"baptizedBy": str(priest.id)}, headers=admin_headers
        )
        assert response.json()["data"]["pagination"]["total"] == 1

    def test_wereda_admin_scoped(
        self, client: TestClient, db, wereda, parish, make_wereda, make_parish,
        make_member, make_wereda_admin, headers_for,
    ):
        foreign = make_parish(make_wereda())
        add_baptism(db, make_member(parish, first_name="A"), parish)
        add_baptism(db, make_member(foreign, first_name="B"), foreign)

        response = client.get(BAPTISMS, headers=headers_for(make_wereda_admin(wereda)))
        assert response.json()["data"]["pagination"]["total"] == 1

    def test_wereda_admin_foreign_member_filter(
        self, client: TestClient, db, wereda, make_wereda, make_parish,
        make_member, make_wereda_admin, headers_for,
    ):
        foreign = make_parish(make_wereda())
        outsider = make_member(foreign, first_name="B")
        add_baptism(db, outsider, foreign)

        response = client.get(
            BAPTISMS,
            params={"member": str(outsider.id)},
            headers=headers_for(make_wereda_admin(wereda)),
        )
        assert response.status_code == 403

    def test_wereda_admin_foreign_officiant_filter(
        self, client: TestClient, db, wereda, parish, make_wereda, make_parish,
        make_member, make_wereda_admin, headers_for,
    ):
        foreign = make_parish(make_wereda())
        priest = make_member(foreign, first_name="Kes", role="Priest")
        add_baptism(db, make_member(foreign, first_name="B"), foreign, baptized_by=priest)

        response = client.get(
            BAPTISMS,
            params={"baptizedBy": str(priest.id)},
            headers=headers_for(make_wereda_admin(wereda)),
        )
        assert response.status_code == 403

    def test_wereda_admin_own_member_filter(
        self, client: TestClient, db, wereda, member, parish,
        make_wereda_admin, headers_for,
    ):
        add_baptism(db, member, parish)

        response = client.get(
            BAPTISMS,
            params={"member": str(member.id)},
            headers=headers_for(make_wereda_admin(wereda)),
        )
        assert response.status_code == 200
        assert response.json()["data"]["pagination"]["total"] == 1


class TestUpdateBaptism:
    def test_patch_parent_phone(self, client: TestClient, db, admin_headers, member, parish):
        baptism = add_baptism(db, member, parish)
        response = client.patch(
            f"{BAPTISMS}/{baptism.id}",
            json={"parentContact": {"phone": "0922000000"}},
            headers=admin_headers,
        )
        assert response.status_code == 200
        contact = response.json()["data"]["parentContact"]
        assert contact == {"name": "Almaz Bekele", "phone": "0922000000"}

    def test_clear_officiant(self, client: TestClient, db, admin_headers, member, parish, make_member):
        priest = make_member(parish, first_name="Kes", role="Priest")
        baptism = add_baptism(db, member, parish, baptized_by=priest)
        response = client.patch(
            f"{BAPTISMS}/{baptism.id}", json={"baptizedBy": None}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["baptizedBy"] is None

    def test_reassign_to_baptized_member(
        self, client: TestClient, db, admin_headers, member, parish, make_member
    ):
        other = make_member(parish, first_name="Dawit")
        add_baptism(db, other, parish)
        baptism = add_baptism(db, member, parish)

        response = client.patch(
            f"{BAPTISMS}/{baptism.id}", json={"member": str(other.id)}, headers=admin_headers
        )
        assert response.status_code == 400
