"""Tests for the FastAPI application endpoints."""
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from modules.operations.api import create_app


@pytest.fixture
def client(seeded, catalog, config):
    """Test client over a seeded in-memory service."""
    with TestClient(create_app(seeded, catalog, config)) as c:
        yield c


@pytest.fixture
def ist(seeded):
    project = seeded.get_project("ops-pkg-ist")
    return project.id, project.groups[0].id


class TestHealthEndpoint:

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["service"] == "departure-operations"
        assert data["storage"] == "InMemoryProjectRepository"


class TestDepartures:

    def test_admin_sees_pending(self, client):
        resp = client.get("/departures", params={"role": "administrator", "today": "2026-03-01"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 3
        assert [d["countdown"]["label"] for d in data["departures"]] == ["J-4", "J-9", "J-44"]

    def test_sales_agent_sees_validated_only(self, client, ist):
        project_id, group_id = ist
        client.post(f"/projects/{project_id}/groups/{group_id}/validate", params={"today": "2026-02-20"})
        data = client.get("/departures", params={"role": "sales_agent", "today": "2026-03-01"}).json()
        assert [d["group_id"] for d in data["departures"]] == [group_id]
        assert data["departures"][0]["status"] == "validated"

    def test_bad_date(self, client):
        assert client.get("/departures", params={"today": "yesterday"}).status_code == 422


class TestGroupDetail:

    def test_detail(self, client, ist):
        project_id, group_id = ist
        resp = client.get(f"/projects/{project_id}/groups/{group_id}", params={"today": "2026-03-01"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["group"]["id"] == group_id
        assert data["manifest"]["passenger_count"] == 4
        assert len(data["checklist"]) == 8
        assert data["most_urgent"] == "departure"
        assert data["timeline"]["min_date"] == "2026-01-01"

    def test_unknown_group(self, client):
        assert client.get("/projects/ops-pkg-ist/groups/grp-missing").status_code == 404


class TestEdits:

    def test_patch_milestone(self, client, ist):
        project_id, group_id = ist
        resp = client.patch(
            f"/projects/{project_id}/groups/{group_id}/milestones/air_deposit",
            json={"total_amount": 1_000_000, "percentage": 30},
        )
        assert resp.status_code == 200
        milestone = resp.json()["group"]["air_deposit"]
        assert milestone["amount_to_pay"] == 300_000
        assert milestone["amount_source"] == "derived"

    def test_negative_amount_rejected(self, client, ist):
        project_id, group_id = ist
        resp = client.patch(
            f"/projects/{project_id}/groups/{group_id}/milestones/air_deposit",
            json={"total_amount": -10},
        )
        assert resp.status_code == 422

    def test_unknown_milestone(self, client, ist):
        project_id, group_id = ist
        resp = client.patch(f"/projects/{project_id}/groups/{group_id}/milestones/hotel", json={})
        assert resp.status_code == 404

    def test_patch_group(self, client, ist):
        project_id, group_id = ist
        resp = client.patch(
            f"/projects/{project_id}/groups/{group_id}",
            json={"guide_name": "Yacine", "names_deadline": "2026-03-01"},
        )
        assert resp.status_code == 200
        group = resp.json()["group"]
        assert group["guide_name"] == "Yacine"
        assert group["names_deadline"] == "2026-03-01"

    def test_departure_after_return_rejected(self, client, ist):
        project_id, group_id = ist
        url = f"/projects/{project_id}/groups/{group_id}"
        resp = client.patch(url, json={"departure_date": "2026-04-01"})
        assert resp.status_code == 422
        detail = client.get(url, params={"today": "2026-03-01"})
        assert detail.status_code == 200
        assert detail.json()["group"]["departure_date"] == "2026-03-10"

    def test_patch_notes(self, client, ist):
        project_id, _ = ist
        resp = client.patch(f"/projects/{project_id}", json={"notes": "Visa run on the 5th"})
        assert resp.status_code == 200
        assert resp.json()["notes"] == "Visa run on the 5th"

    def test_patch_notes_unknown_project(self, client):
        assert client.patch("/projects/ops-nope", json={"notes": "x"}).status_code == 404

    def test_patch_notes_rejects_other_fields(self, client, ist):
        project_id, _ = ist
        assert client.patch(f"/projects/{project_id}", json={"package_id": "pkg-x"}).status_code == 422

    def test_patch_status_rejected(self, client, ist):
        project_id, group_id = ist
        resp = client.patch(f"/projects/{project_id}/groups/{group_id}", json={"status": "validated"})
        assert resp.status_code == 422

    def test_patch_unknown_project(self, client):
        resp = client.patch("/projects/ops-nope/groups/grp-x", json={"guide_name": "X"})
        assert resp.status_code == 404

    def test_validate_twice_conflicts(self, client, ist):
        project_id, group_id = ist
        url = f"/projects/{project_id}/groups/{group_id}/validate"
        assert client.post(url, params={"today": "2026-02-20"}).status_code == 200
        assert client.post(url, params={"today": "2026-02-21"}).status_code == 409


class ReadOnlyCatalog:
    """Catalog source that is not an InMemoryCatalog."""

    def __init__(self, packages, bookings):
        self.packages = {p.id: p for p in packages}
        self.bookings = bookings

    def get_package(self, package_id):
        return self.packages.get(package_id)

    def list_packages(self):
        return list(self.packages.values())

    def bookings_for(self, package_id):
        return [b for b in self.bookings if b.package_id == package_id]


class TestCatalogSource:

    def test_any_catalog_source(self, seeded, catalog, config, ist):
        source = ReadOnlyCatalog(catalog.list_packages(), catalog.bookings_for("pkg-ist"))
        project_id, group_id = ist
        with TestClient(create_app(seeded, source, config)) as c:
            resp = c.get("/departures", params={"role": "administrator", "today": "2026-03-01"})
            assert resp.json()["count"] == 3
            detail = c.get(f"/projects/{project_id}/groups/{group_id}", params={"today": "2026-03-01"})
            assert detail.status_code == 200
            assert detail.json()["package"]["id"] == "pkg-ist"
